"""
Extraction Pipeline Module.

One extraction cycle takes an uploaded document through every stage:

    1. Rasterize (InputHandler)       -> one image
    2. Extract (InvoiceExtractor)     -> model text
    3. Normalize (PostProcessor)      -> typed records
    4. Store (RecordStore)            -> three independent adds

The cycle always settles into a CycleResult; the store is only written
after normalization succeeded, so a failed cycle leaves it unchanged.

Author: ML Engineering Team
"""

import threading
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from invoice_manager.input_handler import InputHandler, UploadedFile
from invoice_manager.model_inference import InvoiceExtractor
from invoice_manager.postprocessor import PostProcessor
from invoice_manager.record_store import RecordStore
from invoice_manager.utils.exceptions import (
    ExtractionFailedError,
    InputError,
    MalformedResponseError,
    PipelineBusyError,
    UnsupportedFormatError,
)
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

# Error categories surfaced to the user
UNSUPPORTED_FORMAT = "unsupported_format"
EXTRACTION_FAILED = "extraction_failed"
MALFORMED_RESPONSE = "malformed_response"

MESSAGES = {
    None: "Data extracted and loaded successfully!",
    UNSUPPORTED_FORMAT: "Unsupported file format",
    EXTRACTION_FAILED: "Error processing file",
    MALFORMED_RESPONSE: "Failed to process AI response.",
}


@dataclass
class CycleResult:
    """
    Settled outcome of one extraction cycle.

    Attributes:
        success: Whether the store was updated
        message: User-facing notification text
        error_kind: None, or one of the three error categories
        error_detail: Underlying error text, for logs and debugging
        counts: Records written per collection (empty on failure)
        source_file: Name of the uploaded document
        processing_time: Seconds spent on the cycle
    """
    success: bool
    message: str
    error_kind: Optional[str] = None
    error_detail: Optional[str] = None
    counts: Dict[str, int] = field(default_factory=dict)
    source_file: str = ""
    processing_time: float = 0.0

    @classmethod
    def succeeded(cls, counts: Dict[str, int], **kwargs) -> 'CycleResult':
        return cls(success=True, message=MESSAGES[None], counts=counts, **kwargs)

    @classmethod
    def failed(cls, error_kind: str, error: Exception, **kwargs) -> 'CycleResult':
        return cls(
            success=False,
            message=MESSAGES[error_kind],
            error_kind=error_kind,
            error_detail=str(error),
            **kwargs
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ExtractionPipeline:
    """
    Runs extraction cycles against one record store.

    Only one cycle may be in flight at a time; is_processing is True while
    it runs and a second run() is rejected with PipelineBusyError.

    Example:
        >>> pipeline = ExtractionPipeline(store=RecordStore())
        >>> result = pipeline.run(UploadedFile("march.pdf", data, "application/pdf"))
        >>> result.message
        'Data extracted and loaded successfully!'
    """

    def __init__(
        self,
        input_handler: Optional[InputHandler] = None,
        extractor: Optional[InvoiceExtractor] = None,
        post_processor: Optional[PostProcessor] = None,
        store: Optional[RecordStore] = None
    ) -> None:
        self.input_handler = input_handler or InputHandler()
        self.extractor = extractor or InvoiceExtractor()
        self.post_processor = post_processor or PostProcessor()
        self.store = store if store is not None else RecordStore()
        self._busy = threading.Lock()

        logger.info("ExtractionPipeline initialized")

    @property
    def is_processing(self) -> bool:
        """True while an extraction cycle is running."""
        return self._busy.locked()

    def run(self, upload: UploadedFile) -> CycleResult:
        """
        Run one extraction cycle.

        Args:
            upload: The uploaded document.

        Returns:
            CycleResult describing success or the failure category.

        Raises:
            PipelineBusyError: If another cycle is still running.
        """
        if not self._busy.acquire(blocking=False):
            logger.warning(f"Rejected {upload.filename}: a cycle is already running")
            raise PipelineBusyError()

        try:
            return self._run_cycle(upload)
        finally:
            self._busy.release()

    def _run_cycle(self, upload: UploadedFile) -> CycleResult:
        start_time = time.time()
        logger.info(f"Starting extraction cycle: {upload.filename}")

        def elapsed() -> float:
            return time.time() - start_time

        try:
            image = self.input_handler.rasterize(upload)
            raw_text = self.extractor.extract(image)
            batch = self.post_processor.process(raw_text)

        except UnsupportedFormatError as e:
            logger.warning(str(e))
            return CycleResult.failed(
                UNSUPPORTED_FORMAT, e, source_file=upload.filename, processing_time=elapsed()
            )

        except (ExtractionFailedError, InputError) as e:
            logger.error(f"Error processing {upload.filename}: {e}")
            return CycleResult.failed(
                EXTRACTION_FAILED, e, source_file=upload.filename, processing_time=elapsed()
            )

        except MalformedResponseError as e:
            logger.error(f"Error processing AI response for {upload.filename}: {e}")
            return CycleResult.failed(
                MALFORMED_RESPONSE, e, source_file=upload.filename, processing_time=elapsed()
            )

        except Exception as e:
            logger.exception(f"Unexpected error processing {upload.filename}: {e}")
            return CycleResult.failed(
                EXTRACTION_FAILED, e, source_file=upload.filename, processing_time=elapsed()
            )

        self.store.add_invoices(batch.invoices)
        self.store.add_products(batch.products)
        self.store.add_customers(batch.customers)

        result = CycleResult.succeeded(
            batch.counts(), source_file=upload.filename, processing_time=elapsed()
        )
        logger.info(
            f"Extraction cycle complete for {upload.filename} "
            f"in {result.processing_time:.2f}s"
        )
        return result
