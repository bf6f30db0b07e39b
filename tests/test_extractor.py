"""Tests for the multimodal extraction client."""
import pytest

from invoice_manager.input_handler import RasterImage
from invoice_manager.model_inference import InvoiceExtractor
from invoice_manager.schema import EXTRACTION_PROMPT
from invoice_manager.utils.exceptions import ExtractionFailedError, ModelRequestError


@pytest.fixture
def image(png_bytes) -> RasterImage:
    return RasterImage(data=png_bytes, media_type="image/png", source_type="image")


def test_sends_prompt_then_inline_image(image, fake_client_factory) -> None:
    client = fake_client_factory(reply='{"invoices": [], "products": [], "customers": []}')
    extractor = InvoiceExtractor(client=client)

    extractor.extract(image)

    assert len(client.calls) == 1
    call = client.calls[0]
    assert call["model"] == "gemini-1.5-pro"
    prompt, part = call["contents"]
    assert prompt == EXTRACTION_PROMPT
    assert part.inline_data.mime_type == "image/png"
    assert part.inline_data.data == image.data


def test_strips_code_fences(image, fake_client_factory, fenced_reply) -> None:
    extractor = InvoiceExtractor(client=fake_client_factory(reply=fenced_reply))

    text = extractor.extract(image)

    assert text.startswith("{")
    assert text.endswith("}")
    assert "```" not in text


def test_empty_reply_becomes_empty_text(image, fake_client_factory) -> None:
    extractor = InvoiceExtractor(client=fake_client_factory(reply=None))
    assert extractor.extract(image) == ""


def test_request_failure_is_an_extraction_failure(image, fake_client_factory) -> None:
    extractor = InvoiceExtractor(client=fake_client_factory(reply=RuntimeError("503 UNAVAILABLE")))

    with pytest.raises(ModelRequestError) as exc_info:
        extractor.extract(image)

    assert isinstance(exc_info.value, ExtractionFailedError)
    assert "503 UNAVAILABLE" in str(exc_info.value)


def test_missing_credential_fails_without_a_client(image) -> None:
    extractor = InvoiceExtractor()

    with pytest.raises(ModelRequestError) as exc_info:
        extractor.extract(image)

    assert "GEMINI_API_KEY" in str(exc_info.value)
    assert extractor.client is None


def test_model_name_override(image, fake_client_factory) -> None:
    client = fake_client_factory(reply="{}")
    extractor = InvoiceExtractor(model_name="gemini-2.0-flash", client=client)

    extractor.extract(image)

    assert client.calls[0]["model"] == "gemini-2.0-flash"
    assert extractor.get_model_info()["request_count"] == 1


class BlockedResponse:
    """A reply whose text accessor raises, as for a safety-blocked candidate."""

    @property
    def text(self) -> str:
        raise ValueError("response was blocked")


def test_unreadable_response_text_is_an_extraction_failure(image, fake_client_factory) -> None:
    client = fake_client_factory()
    client.models.generate_content = lambda model, contents, **kwargs: BlockedResponse()
    extractor = InvoiceExtractor(client=client)

    with pytest.raises(ModelRequestError) as exc_info:
        extractor.extract(image)

    assert "response was blocked" in str(exc_info.value)
