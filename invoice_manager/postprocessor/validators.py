"""
Data Validators Module.

This module provides validation for:
    - The decoded extraction response (shape and basic field types)
    - Single field edits on invoices, products and customers

Field validators return (is_valid, message) tuples; the response validator
raises MalformedResponseError.

Author: ML Engineering Team
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config import get_config
from invoice_manager.schema import NUMBER, RECORD_KINDS, STRING, field_specs
from invoice_manager.utils.exceptions import MalformedResponseError
from invoice_manager.utils.helpers import to_number
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

VALID = (True, "Valid")


class ResponseValidator:
    """
    Checks a decoded extraction response before any record is trusted.

    The response must be an object holding the three collections as lists
    of objects. Fields that are present must carry a basic type compatible
    with the schema: string fields accept text, numbers or null; number
    fields accept numbers, strings or null. Booleans, lists and objects are
    rejected everywhere. Unknown keys are ignored.

    Example:
        >>> ResponseValidator().validate({"invoices": [], "products": [], "customers": []})
    """

    def validate(self, payload: Any) -> Dict[str, List[dict]]:
        """
        Validate a decoded response.

        Args:
            payload: Result of json.loads on the model output.

        Returns:
            The three collections keyed by kind.

        Raises:
            MalformedResponseError: On the first mismatch found.
        """
        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"expected a JSON object, got {type(payload).__name__}"
            )

        collections = {}
        for kind in RECORD_KINDS:
            if kind not in payload:
                raise MalformedResponseError(f"missing top-level key '{kind}'", kind)

            items = payload[kind]
            if not isinstance(items, list):
                raise MalformedResponseError(f"'{kind}' must be a list", kind)

            specs = field_specs(kind)
            for index, item in enumerate(items):
                path = f"{kind}[{index}]"
                if not isinstance(item, dict):
                    raise MalformedResponseError("record must be an object", path)

                for key, value in item.items():
                    spec = specs.get(key)
                    if spec is not None and not self._type_matches(spec.kind, value):
                        raise MalformedResponseError(
                            f"expected {spec.kind}, got {type(value).__name__}",
                            f"{path}.{key}"
                        )

            collections[kind] = items

        return collections

    @staticmethod
    def _type_matches(kind: str, value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, bool):
            return False
        if kind == STRING:
            return isinstance(value, (str, int, float))
        if kind == NUMBER:
            return isinstance(value, (int, float, str))
        return False


class FieldValidator:
    """
    Base class for single-field validation of grid edits.

    Subclasses map JSON field keys to check methods. Fields without a
    dedicated check are accepted.
    """

    def __init__(self) -> None:
        self.min_name_length = get_config("validation.min_name_length", 3)
        self.phone_digits = get_config("validation.phone_digits", 10)
        self.max_tax = get_config("validation.max_tax_percent", 100)
        # ASCII digits only, matched against the whole value
        self.date_pattern = re.compile(
            get_config("validation.date_pattern", r'^\d{4}-\d{2}-\d{2}$'),
            re.ASCII
        )
        logger.debug(f"{type(self).__name__} initialized")

    def validate_field(self, field: str, value: Any) -> Tuple[bool, str]:
        """
        Validate one field value.

        Args:
            field: JSON key of the field.
            value: New value as entered.

        Returns:
            Tuple of (is_valid, message).
        """
        check = self._checks().get(field)
        if check is None:
            return VALID
        return check(value)

    def _checks(self) -> Dict[str, Any]:
        return {}

    # Shared checks

    def validate_name(self, value: Any) -> Tuple[bool, str]:
        if value is None or len(str(value).strip()) < self.min_name_length:
            return False, f"Name must be at least {self.min_name_length} characters"
        return VALID

    def validate_number(self, label: str):
        def check(value: Any) -> Tuple[bool, str]:
            if to_number(value) is None:
                return False, f"{label} must be a number"
            return VALID
        return check

    def validate_non_negative(self, label: str):
        def check(value: Any) -> Tuple[bool, str]:
            number = to_number(value)
            if number is None or number < 0:
                return False, f"{label} must be non-negative"
            return VALID
        return check

    def validate_positive(self, label: str):
        def check(value: Any) -> Tuple[bool, str]:
            number = to_number(value)
            if number is None or number <= 0:
                return False, f"{label} must be greater than 0"
            return VALID
        return check


class InvoiceFieldValidator(FieldValidator):
    """
    Validates invoice edits.

    Product and customer names must refer to existing records; these lookups
    are the only cross-collection checks in the system.

    Example:
        >>> validator = InvoiceFieldValidator()
        >>> validator.validate_field("date", "2024-1-5")
        (False, 'Invalid date format (YYYY-MM-DD)')
    """

    REQUIRED_MESSAGE = "This field is required"

    def __init__(
        self,
        product_names: Optional[Iterable[str]] = None,
        customer_names: Optional[Iterable[str]] = None
    ) -> None:
        super().__init__()
        self.product_names = set(product_names or ())
        self.customer_names = set(customer_names or ())

    def _checks(self) -> Dict[str, Any]:
        return {
            'productName': self.validate_product_name,
            'customerName': self.validate_customer_name,
            'qty': self.validate_positive("Quantity"),
            'tax': self.validate_non_negative("Tax"),
            'totalAmount': self.validate_number("Total amount"),
            'date': self.validate_date,
        }

    def validate_field(self, field: str, value: Any) -> Tuple[bool, str]:
        check = self._checks().get(field)
        if check is not None:
            return check(value)
        if value is None or str(value).strip() == "":
            return False, self.REQUIRED_MESSAGE
        return VALID

    def validate_product_name(self, value: Any) -> Tuple[bool, str]:
        if value not in self.product_names:
            return False, "Product not found"
        return VALID

    def validate_customer_name(self, value: Any) -> Tuple[bool, str]:
        if value not in self.customer_names:
            return False, "Customer not found"
        return VALID

    def validate_date(self, value: Any) -> Tuple[bool, str]:
        if not isinstance(value, str) or not self.date_pattern.fullmatch(value):
            return False, "Invalid date format (YYYY-MM-DD)"
        return VALID


class ProductFieldValidator(FieldValidator):
    """
    Validates product edits.

    Example:
        >>> validator = ProductFieldValidator()
        >>> validator.validate_field("tax", 101)
        (False, 'Tax must be between 0 and 100')
    """

    def _checks(self) -> Dict[str, Any]:
        return {
            'name': self.validate_name,
            'quantity': self.validate_non_negative("Quantity"),
            'unitPrice': self.validate_positive("Price"),
            'tax': self.validate_tax,
            'discount': self.validate_non_negative("Discount"),
        }

    def validate_tax(self, value: Any) -> Tuple[bool, str]:
        number = to_number(value)
        if number is None or not 0 <= number <= self.max_tax:
            return False, f"Tax must be between 0 and {self.max_tax}"
        return VALID


class CustomerFieldValidator(FieldValidator):
    """
    Validates customer edits.

    Example:
        >>> validator = CustomerFieldValidator()
        >>> validator.validate_field("phoneNumber", "987654321")
        (False, 'Phone number must be 10 digits')
    """

    def _checks(self) -> Dict[str, Any]:
        return {
            'customerName': self.validate_name,
            'phoneNumber': self.validate_phone_number,
            'totalAmount': self.validate_non_negative("Total amount"),
        }

    def validate_phone_number(self, value: Any) -> Tuple[bool, str]:
        digits = self.phone_digits
        if value is None or not re.fullmatch(rf'[0-9]{{{digits}}}', str(value)):
            return False, f"Phone number must be {digits} digits"
        return VALID
