"""
Main Post-Processor Module.

This module provides the PostProcessor class that turns the raw text
returned by the extraction model into typed record collections.

Operations:
    - Strip Markdown code fences
    - Parse JSON and validate its shape
    - Recompute per-customer totals from the invoices
    - Synthesize identifiers for records lacking one or repeating one

The post-processor never writes to the record store; the caller decides
what to do with the batch it returns.

Author: ML Engineering Team
"""

import json
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Set

from invoice_manager.record_store.records import Customer, Invoice, Product
from invoice_manager.utils.exceptions import MalformedResponseError
from invoice_manager.utils.helpers import strip_code_fences, to_number
from invoice_manager.utils.logger import get_logger
from .validators import ResponseValidator

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class ExtractionBatch:
    """
    Records produced by one extraction cycle, ready for the record store.

    Attributes:
        invoices: Invoice lines, each with a synthesized row id
        products: Products, each with an id
        customers: Customers with recomputed totals, each with an id
    """
    invoices: List[Invoice] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    customers: List[Customer] = field(default_factory=list)

    def counts(self) -> Dict[str, int]:
        """Number of records per collection."""
        return {
            Invoice.KIND: len(self.invoices),
            Product.KIND: len(self.products),
            Customer.KIND: len(self.customers),
        }

    def to_dict(self) -> Dict[str, List[dict]]:
        """Convert to dictionaries with JSON keys."""
        return {
            Invoice.KIND: [r.to_dict() for r in self.invoices],
            Product.KIND: [r.to_dict() for r in self.products],
            Customer.KIND: [r.to_dict() for r in self.customers],
        }


class PostProcessor:
    """
    Normalizes extraction model output into record collections.

    One instance lives for the whole session: it remembers every id it has
    seen or issued. Records without an id, or whose id was already used in
    the session, get a fresh one, so ids never repeat across extraction
    cycles.

    Example:
        >>> processor = PostProcessor()
        >>> batch = processor.process(raw_text)
        >>> store.add_invoices(batch.invoices)
    """

    ID_PREFIXES = {
        Invoice.KIND: "invoice",
        Product.KIND: "product",
        Customer.KIND: "customer",
    }

    def __init__(self, response_validator: Optional[ResponseValidator] = None) -> None:
        self.response_validator = response_validator or ResponseValidator()
        self._issued_ids: Set[str] = set()
        logger.info("PostProcessor initialized")

    def process(self, raw_text: str) -> ExtractionBatch:
        """
        Parse and normalize one model response.

        Args:
            raw_text: Text returned by the extraction model, possibly
                      wrapped in Markdown code fences.

        Returns:
            ExtractionBatch with typed records.

        Raises:
            MalformedResponseError: If the text is not JSON or does not
                match the response schema.
        """
        text = strip_code_fences(raw_text)

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"Response is not valid JSON: {e.msg} (position {e.pos})")
            raise MalformedResponseError(f"invalid JSON: {e.msg}") from e
        except ValueError as e:
            # Integer literals beyond the interpreter's digit limit
            logger.error(f"Response could not be decoded: {e}")
            raise MalformedResponseError(f"invalid JSON: {e}") from e

        collections = self.response_validator.validate(payload)

        invoices = [
            self._ensure_id(Invoice.from_dict(item))
            for item in collections[Invoice.KIND]
        ]
        products = [
            self._ensure_id(Product.from_dict(item))
            for item in collections[Product.KIND]
        ]

        totals = self.compute_customer_totals(invoices)
        customers = []
        for item in collections[Customer.KIND]:
            customer = self._ensure_id(Customer.from_dict(item))
            total = totals.get(customer.customer_name, 0.0)
            if customer.total_amount is not None and customer.total_amount != total:
                logger.debug(
                    f"Replacing extracted total {customer.total_amount} for "
                    f"'{customer.customer_name}' with invoice total {total}"
                )
            customers.append(replace(customer, total_amount=total))

        batch = ExtractionBatch(invoices=invoices, products=products, customers=customers)
        logger.info(
            "Post-processing complete: "
            + ", ".join(f"{count} {kind}" for kind, count in batch.counts().items())
        )
        return batch

    @staticmethod
    def compute_customer_totals(invoices: Iterable[Invoice]) -> Dict[str, float]:
        """
        Sum invoice totals per customer name.

        Names match exactly (case-sensitive). Totals that are not numeric
        count as zero.

        Example:
            >>> PostProcessor.compute_customer_totals([
            ...     Invoice(customer_name="A", total_amount=100),
            ...     Invoice(customer_name="A", total_amount=50),
            ... ])
            {'A': 150.0}
        """
        totals: Dict[str, float] = {}
        for invoice in invoices:
            amount = to_number(invoice.total_amount) or 0.0
            totals[invoice.customer_name] = totals.get(invoice.customer_name, 0.0) + amount
        return totals

    def _ensure_id(self, record):
        if record.id and record.id not in self._issued_ids:
            self._issued_ids.add(record.id)
            return record
        if record.id:
            logger.debug(f"Duplicate {record.KIND} id '{record.id}', issuing a new one")
        return replace(record, id=self.synthesize_id(record.KIND))

    def synthesize_id(self, kind: str) -> str:
        """
        Generate an identifier not issued before in this session.

        Example:
            >>> processor.synthesize_id("customers")
            'customer_3f9a1c2b7'
        """
        prefix = self.ID_PREFIXES[kind]
        while True:
            candidate = f"{prefix}_{uuid.uuid4().hex[:9]}"
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate
