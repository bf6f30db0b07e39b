"""
Record Data Classes.

This module defines the three record types held by the record store.
Attributes are snake_case; dictionaries use the camelCase keys of the
extraction schema, so records round-trip between the model response, the
store and the presentation layer without a separate mapping.

Author: ML Engineering Team
"""

from dataclasses import dataclass, replace
from typing import Any, ClassVar, Dict, List, Optional

from invoice_manager.schema import NUMBER, RESPONSE_SCHEMA, STRING, FieldSpec
from invoice_manager.utils.helpers import to_number

ID_FIELD = FieldSpec("id", "id", STRING)


def to_text(value: Any) -> str:
    """
    Coerce a JSON scalar to a string field value.

    Whole floats lose their trailing ".0" so that phone numbers returned as
    numbers keep their digits.
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class RecordMixin:
    """Schema-driven conversion shared by all record types."""

    KIND: ClassVar[str] = ""

    @classmethod
    def specs(cls) -> Dict[str, FieldSpec]:
        """Field specs keyed by JSON key, record id first."""
        specs = {ID_FIELD.key: ID_FIELD}
        specs.update((spec.key, spec) for spec in RESPONSE_SCHEMA[cls.KIND])
        return specs

    @classmethod
    def coerce(cls, key: str, value: Any) -> Any:
        """Coerce a raw value for the field with the given JSON key."""
        spec = cls.specs()[key]
        if spec.kind == NUMBER:
            return to_number(value)
        return to_text(value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """
        Create a record from a dictionary with JSON keys.

        Unknown keys are ignored; missing keys keep their defaults.
        """
        values = {}
        for key, spec in cls.specs().items():
            if key in data:
                values[spec.attribute] = cls.coerce(key, data[key])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary with JSON keys (id first)."""
        return {
            key: getattr(self, spec.attribute)
            for key, spec in self.specs().items()
        }

    def get(self, key: str) -> Any:
        """Read a field by JSON key."""
        return getattr(self, self.specs()[key].attribute)

    def with_value(self, key: str, value: Any):
        """Return a copy with one field (by JSON key) coerced and replaced."""
        spec = self.specs()[key]
        return replace(self, **{spec.attribute: self.coerce(key, value)})

    @classmethod
    def field_keys(cls) -> List[str]:
        """JSON keys of all fields, id included."""
        return list(cls.specs())


@dataclass
class Invoice(RecordMixin):
    """
    One invoice line as extracted from a document.

    ``id`` is a row key synthesized by the post-processor; the model is never
    asked for it. Customer and product are referenced by name only.
    """
    KIND: ClassVar[str] = "invoices"

    id: str = ""
    serial_number: str = ""
    customer_name: str = ""
    product_name: str = ""
    qty: Optional[float] = None
    tax: Optional[float] = None
    total_amount: Optional[float] = None
    date: str = ""


@dataclass
class Product(RecordMixin):
    """A product with its pricing; ``tax`` is a percentage."""
    KIND: ClassVar[str] = "products"

    id: str = ""
    name: str = ""
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    tax: Optional[float] = None
    price_with_tax: Optional[float] = None
    discount: Optional[float] = None


@dataclass
class Customer(RecordMixin):
    """
    A customer. ``total_amount`` is derived from the invoices of the same
    extraction cycle and may drift afterwards through manual edits.
    """
    KIND: ClassVar[str] = "customers"

    id: str = ""
    customer_name: str = ""
    phone_number: str = ""
    total_amount: Optional[float] = None


RECORD_TYPES = {
    Invoice.KIND: Invoice,
    Product.KIND: Product,
    Customer.KIND: Customer,
}


def record_type(kind: str):
    """
    Look up the record class for a collection name.

    Raises:
        KeyError: If the kind is not one of invoices, products, customers.
    """
    try:
        return RECORD_TYPES[kind]
    except KeyError:
        raise KeyError(f"Unknown record kind: {kind}") from None


__all__ = ['Invoice', 'Product', 'Customer', 'RECORD_TYPES', 'record_type', 'to_text']
