"""
Record Store Module.

In-memory holder of the three record collections (invoices, products,
customers). The store is created by the application root and handed to
every consumer; it is the single source of truth for the presentation
layer.

Operations per collection:
    - add: replace or append all (see MERGE_MODES)
    - update: replace one record matched by id; unknown ids are ignored
    - clear: empty one collection
    - list: copies of the current records

Author: ML Engineering Team
"""

import copy
import threading
from typing import Callable, Dict, Iterable, List, Optional

from config import get_config
from invoice_manager.schema import RECORD_KINDS
from invoice_manager.utils.logger import get_logger
from .records import Customer, Invoice, Product, record_type

# Initialize module logger
logger = get_logger(__name__)

Listener = Callable[[str], None]


class RecordStore:
    """
    Session-lifetime store for extracted records.

    Each mutation is guarded by a re-entrant lock. The adds issued by one
    extraction cycle are independent calls, so a listener may observe
    invoices already updated while products and customers are still stale.

    Attributes:
        merge_mode: 'replace' or 'append', applied by add().

    Example:
        >>> store = RecordStore()
        >>> store.add_invoices(batch.invoices)
        >>> store.update_product(edited_product)
        >>> store.clear_customers()
    """

    MERGE_MODES = ('replace', 'append')

    def __init__(self, merge_mode: Optional[str] = None) -> None:
        """
        Initialize an empty store.

        Args:
            merge_mode: 'replace' (each add replaces the collection) or
                        'append' (each add extends it). If None, uses config.

        Raises:
            ValueError: If merge_mode is not supported.
        """
        self.merge_mode = merge_mode or get_config("store.merge_mode", "replace")
        if self.merge_mode not in self.MERGE_MODES:
            raise ValueError(
                f"Unsupported merge mode '{self.merge_mode}', "
                f"expected one of {self.MERGE_MODES}"
            )

        self._collections: Dict[str, list] = {kind: [] for kind in RECORD_KINDS}
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

        logger.debug(f"RecordStore initialized (merge_mode={self.merge_mode})")

    # ------------------------------------------------------------------
    # Generic operations
    # ------------------------------------------------------------------

    def add(self, kind: str, records: Iterable) -> None:
        """
        Replace or extend a collection with new records.

        Args:
            kind: Collection name.
            records: Records of the collection's type.

        Raises:
            TypeError: If a record does not belong to the collection.
        """
        cls = record_type(kind)
        incoming = [self._checked(cls, record) for record in records]

        with self._lock:
            if self.merge_mode == 'replace':
                self._collections[kind] = incoming
            else:
                self._collections[kind].extend(incoming)
            total = len(self._collections[kind])

        verb = "Replaced with" if self.merge_mode == 'replace' else "Appended"
        logger.info(f"{verb} {len(incoming)} {kind} ({total} in store)")
        self._notify(kind)

    def update(self, kind: str, record) -> bool:
        """
        Replace the record with the same id.

        Args:
            kind: Collection name.
            record: Updated record.

        Returns:
            True if a record was replaced, False if the id is unknown
            (the collection is left untouched).
        """
        cls = record_type(kind)
        record = self._checked(cls, record)

        with self._lock:
            collection = self._collections[kind]
            positions = [i for i, existing in enumerate(collection) if existing.id == record.id]
            for position in positions:
                collection[position] = copy.copy(record)

        if not positions:
            logger.debug(f"Ignored update for unknown {kind} id: {record.id}")
            return False

        logger.debug(f"Updated {kind} record {record.id}")
        self._notify(kind)
        return True

    def clear(self, kind: str) -> None:
        """Empty one collection; the others are not affected."""
        record_type(kind)
        with self._lock:
            removed = len(self._collections[kind])
            self._collections[kind] = []

        logger.info(f"Cleared {removed} {kind}")
        self._notify(kind)

    def list(self, kind: str) -> list:
        """Return copies of every record in a collection."""
        record_type(kind)
        with self._lock:
            return [copy.copy(record) for record in self._collections[kind]]

    def get(self, kind: str, record_id: str):
        """Return a copy of the record with the given id, or None."""
        for record in self.list(kind):
            if record.id == record_id:
                return record
        return None

    def snapshot(self) -> Dict[str, List[dict]]:
        """Return every collection as lists of dictionaries."""
        with self._lock:
            return {
                kind: [record.to_dict() for record in records]
                for kind, records in self._collections.items()
            }

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the kind of every changed collection.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Per-collection convenience
    # ------------------------------------------------------------------

    @property
    def invoices(self) -> List[Invoice]:
        return self.list(Invoice.KIND)

    @property
    def products(self) -> List[Product]:
        return self.list(Product.KIND)

    @property
    def customers(self) -> List[Customer]:
        return self.list(Customer.KIND)

    def add_invoices(self, invoices: Iterable[Invoice]) -> None:
        self.add(Invoice.KIND, invoices)

    def add_products(self, products: Iterable[Product]) -> None:
        self.add(Product.KIND, products)

    def add_customers(self, customers: Iterable[Customer]) -> None:
        self.add(Customer.KIND, customers)

    def update_invoice(self, invoice: Invoice) -> bool:
        return self.update(Invoice.KIND, invoice)

    def update_product(self, product: Product) -> bool:
        return self.update(Product.KIND, product)

    def update_customer(self, customer: Customer) -> bool:
        return self.update(Customer.KIND, customer)

    def clear_invoices(self) -> None:
        self.clear(Invoice.KIND)

    def clear_products(self) -> None:
        self.clear(Product.KIND)

    def clear_customers(self) -> None:
        self.clear(Customer.KIND)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _checked(cls, record):
        if not isinstance(record, cls):
            raise TypeError(
                f"Expected {cls.__name__}, got {type(record).__name__}"
            )
        return copy.copy(record)

    def _notify(self, kind: str) -> None:
        for listener in list(self._listeners):
            listener(kind)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(records) for records in self._collections.values())

    def __repr__(self) -> str:
        with self._lock:
            counts = ", ".join(
                f"{kind}={len(records)}" for kind, records in self._collections.items()
            )
        return f"RecordStore({counts}, merge_mode='{self.merge_mode}')"
