"""
Record Editor Module.

Applies single-field edits coming from the presentation layer's grids to
the record store. Every edit is validated first; a rejected edit is
recorded as an error for its row and field and leaves the store untouched.

Follow-up updates performed after an accepted edit:
    - Invoice: changing productName, qty or tax recomputes totalAmount
      as qty * unitPrice + tax when the product exists
    - Product: renaming a product renames productName on the invoices
      that referenced the old name

Author: ML Engineering Team
"""

from dataclasses import replace
from typing import Any, Dict

from invoice_manager.postprocessor.validators import (
    CustomerFieldValidator,
    FieldValidator,
    InvoiceFieldValidator,
    ProductFieldValidator,
)
from invoice_manager.utils.logger import get_logger
from .records import Customer, Invoice, Product, record_type
from .store import RecordStore

# Initialize module logger
logger = get_logger(__name__)


class RecordEditor:
    """
    Validates and commits grid edits.

    Attributes:
        store: The record store being edited
        errors: Per kind, per record id, per field error messages

    Example:
        >>> editor = RecordEditor(store)
        >>> editor.commit("customers", "customer_1", "phoneNumber", "12345")
        False
        >>> editor.errors["customers"]["customer_1"]
        {'phoneNumber': 'Phone number must be 10 digits'}
    """

    EDITABLE_FIELDS = {
        Invoice.KIND: {'serialNumber', 'customerName', 'productName', 'qty', 'tax', 'totalAmount', 'date'},
        Product.KIND: {'name', 'quantity', 'unitPrice', 'tax', 'discount'},
        Customer.KIND: {'customerName', 'phoneNumber', 'totalAmount'},
    }

    INVOICE_TOTAL_INPUTS = {'productName', 'qty', 'tax'}

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self.errors: Dict[str, Dict[str, Dict[str, str]]] = {
            kind: {} for kind in self.EDITABLE_FIELDS
        }

    def commit(self, kind: str, record_id: str, field: str, value: Any) -> bool:
        """
        Validate and apply one field edit.

        Args:
            kind: Collection name.
            record_id: Id of the edited record.
            field: JSON key of the edited field.
            value: New value as entered in the grid.

        Returns:
            True if the store was updated, False if the edit was rejected
            or the record does not exist.

        Raises:
            ValueError: If the field is not editable for this kind.
        """
        record_type(kind)
        if field not in self.EDITABLE_FIELDS[kind]:
            raise ValueError(f"Field '{field}' of {kind} is not editable")

        record = self.store.get(kind, record_id)
        if record is None:
            logger.debug(f"Ignored edit for unknown {kind} id: {record_id}")
            return False

        is_valid, message = self._validator(kind).validate_field(field, value)
        if not is_valid:
            self._set_error(kind, record_id, field, message)
            logger.info(f"Rejected {kind} edit {record_id}.{field}: {message}")
            return False

        updated = record.with_value(field, value)

        if kind == Invoice.KIND and field in self.INVOICE_TOTAL_INPUTS:
            updated = self._recompute_invoice_total(updated)

        self.store.update(kind, updated)

        if kind == Product.KIND and field == 'name' and updated.name != record.name:
            self._rename_product_references(record.name, updated.name)

        self._clear_error(kind, record_id, field)
        return True

    def errors_for(self, kind: str, record_id: str) -> Dict[str, str]:
        """Return a copy of the errors recorded for one row."""
        return dict(self.errors[kind].get(record_id, {}))

    def has_errors(self, kind: str) -> bool:
        """Whether any row of a collection has an unresolved error."""
        return bool(self.errors[kind])

    def reset_errors(self, kind: str) -> None:
        """Drop every recorded error of a collection (e.g. after clear-all)."""
        self.errors[kind] = {}

    def _validator(self, kind: str) -> FieldValidator:
        if kind == Invoice.KIND:
            return InvoiceFieldValidator(
                product_names=[p.name for p in self.store.products],
                customer_names=[c.customer_name for c in self.store.customers]
            )
        if kind == Product.KIND:
            return ProductFieldValidator()
        return CustomerFieldValidator()

    def _recompute_invoice_total(self, invoice: Invoice) -> Invoice:
        product = next(
            (p for p in self.store.products if p.name == invoice.product_name),
            None
        )
        if product is None or product.unit_price is None or invoice.qty is None:
            return invoice

        total = invoice.qty * product.unit_price + (invoice.tax or 0.0)
        logger.debug(f"Recomputed total for invoice {invoice.id}: {total}")
        return replace(invoice, total_amount=total)

    def _rename_product_references(self, old_name: str, new_name: str) -> None:
        renamed = 0
        for invoice in self.store.invoices:
            if invoice.product_name == old_name:
                self.store.update_invoice(replace(invoice, product_name=new_name))
                renamed += 1
        if renamed:
            logger.info(f"Renamed product '{old_name}' to '{new_name}' on {renamed} invoice(s)")

    def _set_error(self, kind: str, record_id: str, field: str, message: str) -> None:
        self.errors[kind].setdefault(record_id, {})[field] = message

    def _clear_error(self, kind: str, record_id: str, field: str) -> None:
        row_errors = self.errors[kind].get(record_id)
        if row_errors is None:
            return
        row_errors.pop(field, None)
        if not row_errors:
            del self.errors[kind][record_id]
