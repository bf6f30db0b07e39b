"""
Invoice Extractor Module.

This module provides the InvoiceExtractor class that sends one rasterized
invoice to a multimodal Gemini model and returns the model's raw text.

Approach:
    A single generate_content request carrying the fixed extraction
    instruction (built from the shared response schema) followed by the
    image as inline data. The reply is expected to be JSON, possibly
    wrapped in Markdown code fences.

No retries, no streaming: a failed request fails the extraction cycle.

Author: ML Engineering Team
"""

import base64
import time
from typing import Any, Dict, Optional

from google import genai
from google.genai import types

from config import ConfigurationManager, get_config
from invoice_manager.input_handler.handler import RasterImage
from invoice_manager.schema import EXTRACTION_PROMPT
from invoice_manager.utils.exceptions import ModelRequestError
from invoice_manager.utils.helpers import split_data_uri, strip_code_fences
from invoice_manager.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class InvoiceExtractor:
    """
    Multimodal extraction client.

    Attributes:
        model_name: Gemini model identifier
        prompt: Instruction sent ahead of the image
        client: google-genai client, created on first use unless injected

    Example:
        >>> extractor = InvoiceExtractor()
        >>> text = extractor.extract(raster_image)
        >>> text.startswith("{")
        True
    """

    DEFAULT_MODEL = "gemini-1.5-pro"

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Any = None
    ) -> None:
        """
        Initialize the invoice extractor.

        Args:
            model_name: Model identifier. If None, uses config (model.name).
            api_key: Credential. If None, read from the environment variable
                     named by model.api_key_env.
            client: Pre-built client exposing models.generate_content.
        """
        self.model_name = model_name or get_config("model.name", self.DEFAULT_MODEL)
        self.api_key_env = get_config("model.api_key_env", "GEMINI_API_KEY")
        self._api_key = api_key
        self.client = client
        self.prompt = EXTRACTION_PROMPT
        self.request_count = 0

        logger.info(f"InvoiceExtractor initialized with model: {self.model_name}")

    def _get_client(self) -> Any:
        """
        Return the client, creating it on first use.

        Raises:
            ModelRequestError: If no credential is configured or the client
                cannot be created.
        """
        if self.client is not None:
            return self.client

        api_key = self._api_key or ConfigurationManager().get_secret("model.api_key_env")
        if not api_key:
            raise ModelRequestError(
                self.model_name,
                f"No API key found. Set the {self.api_key_env} environment variable."
            )

        try:
            self.client = genai.Client(api_key=api_key)
        except Exception as e:
            raise ModelRequestError(self.model_name, f"Failed to create client: {e}") from e

        logger.debug("Created google-genai client")
        return self.client

    def build_contents(self, image: RasterImage) -> list:
        """
        Build the request contents: instruction first, then the inline image.

        The image travels as a data URI split into its media type and
        base64 payload.
        """
        media_type, payload = split_data_uri(image.to_data_uri())
        return [
            self.prompt,
            types.Part.from_bytes(
                data=base64.b64decode(payload),
                mime_type=media_type or image.media_type
            )
        ]

    def extract(self, image: RasterImage) -> str:
        """
        Ask the model to extract invoices, products and customers.

        Args:
            image: The single rasterized image of the upload.

        Returns:
            Response text with Markdown code-fence markers removed.

        Raises:
            ModelRequestError: If the request cannot be made or fails.
        """
        client = self._get_client()
        contents = self.build_contents(image)

        logger.info(
            f"Sending {image.media_type} image ({len(image.data)} bytes) "
            f"to {self.model_name}"
        )
        start_time = time.time()
        self.request_count += 1

        try:
            response = client.models.generate_content(
                model=self.model_name,
                contents=contents
            )
            raw_text = response.text
        except Exception as e:
            logger.error(f"Extraction request failed: {e}")
            raise ModelRequestError(self.model_name, str(e)) from e

        text = strip_code_fences(raw_text or "")
        logger.info(
            f"Received {len(text)} characters in "
            f"{time.time() - start_time:.2f}s"
        )
        return text

    def get_model_info(self) -> Dict[str, Any]:
        """
        Get information about the configured model.

        Returns:
            Dictionary with model details.
        """
        return {
            'model_name': self.model_name,
            'api_key_env': self.api_key_env,
            'client_ready': self.client is not None,
            'request_count': self.request_count
        }
