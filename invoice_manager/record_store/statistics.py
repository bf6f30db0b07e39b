"""
Aggregate statistics shown above the invoice, product and customer grids.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict

from .store import RecordStore


@dataclass
class StoreStatistics:
    """Summary figures per collection; missing numbers count as zero."""
    invoice_count: int = 0
    invoice_total_amount: float = 0.0
    product_count: int = 0
    inventory_value: float = 0.0
    average_unit_price: float = 0.0
    customer_count: int = 0
    customer_total_amount: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize(store: RecordStore) -> StoreStatistics:
    """
    Compute the grid statistics for the current store contents.

    Inventory value is the sum of unitPrice * quantity; the average unit
    price divides by the number of products, priced or not.
    """
    invoices = store.invoices
    products = store.products
    customers = store.customers

    unit_prices = [p.unit_price or 0.0 for p in products]

    return StoreStatistics(
        invoice_count=len(invoices),
        invoice_total_amount=sum(i.total_amount or 0.0 for i in invoices),
        product_count=len(products),
        inventory_value=sum((p.unit_price or 0.0) * (p.quantity or 0.0) for p in products),
        average_unit_price=sum(unit_prices) / len(products) if products else 0.0,
        customer_count=len(customers),
        customer_total_amount=sum(c.total_amount or 0.0 for c in customers),
    )
