"""Pytest configuration to make the local packages importable without installation."""
import io
import json
import logging
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Dict, List

import pytest
from PIL import Image

# Ensure repository root is on sys.path for module resolution
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import ConfigurationManager
from invoice_manager.utils.logger import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def fresh_config():
    """Reload settings.yaml for every test."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by the CLI so they never outlive a test's streams."""
    yield
    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    app_logger.handlers.clear()
    app_logger.propagate = True
    app_logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def no_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Never reach the real model from tests."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


def make_png(width: int = 40, height: int = 20, color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_factory():
    return make_png


@pytest.fixture
def sample_response() -> Dict[str, Any]:
    """A response with two invoices for A, one for B, and a customer C with none."""
    return {
        "invoices": [
            {"serialNumber": "INV-1", "customerName": "A", "productName": "Widget",
             "qty": 2, "tax": 0, "totalAmount": 100, "date": "2024-03-01"},
            {"serialNumber": "INV-2", "customerName": "A", "productName": "Gadget",
             "qty": 1, "tax": 5, "totalAmount": 50, "date": "2024-03-02"},
            {"serialNumber": "INV-3", "customerName": "B", "productName": "Widget",
             "qty": 1, "tax": 0, "totalAmount": 30, "date": "2024-03-03"},
        ],
        "products": [
            {"id": "p-1", "name": "Widget", "quantity": 3, "unitPrice": 50,
             "tax": 10, "priceWithTax": 55, "discount": 0},
            {"name": "Gadget", "quantity": 1, "unitPrice": 45,
             "tax": 5, "priceWithTax": 47.25, "discount": 0},
        ],
        "customers": [
            {"id": "c-1", "customerName": "A", "phoneNumber": "9876543210", "totalAmount": 999},
            {"customerName": "B", "phoneNumber": 9123456780},
            {"customerName": "C", "phoneNumber": "9000000000", "totalAmount": 12},
        ],
    }


class FakeGenaiClient:
    """Stands in for google.genai.Client; records every generate_content call."""

    def __init__(self, reply: Any = "", on_call: Callable[[], None] = None):
        self.reply = reply
        self.on_call = on_call
        self.calls: List[Dict[str, Any]] = []
        self.models = SimpleNamespace(generate_content=self._generate_content)

    def _generate_content(self, model: str, contents: list, **kwargs):
        self.calls.append({"model": model, "contents": contents, **kwargs})
        if self.on_call is not None:
            self.on_call()
        if isinstance(self.reply, Exception):
            raise self.reply
        return SimpleNamespace(text=self.reply)


@pytest.fixture
def fake_client_factory():
    return FakeGenaiClient


@pytest.fixture
def fenced_reply(sample_response) -> str:
    return "```json\n" + json.dumps(sample_response) + "\n```"
