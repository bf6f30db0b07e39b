"""Tests for single-field edit validation."""
import pytest

from invoice_manager.postprocessor.validators import (
    CustomerFieldValidator,
    InvoiceFieldValidator,
    ProductFieldValidator,
)


@pytest.fixture
def invoice_validator() -> InvoiceFieldValidator:
    return InvoiceFieldValidator(product_names=["Widget"], customer_names=["Acme Ltd"])


@pytest.mark.parametrize(
    "field, value, expected",
    [
        ("productName", "Widget", (True, "Valid")),
        ("productName", "widget", (False, "Product not found")),
        ("customerName", "Acme Ltd", (True, "Valid")),
        ("customerName", "Globex", (False, "Customer not found")),
        ("qty", "3", (True, "Valid")),
        ("qty", 0, (False, "Quantity must be greater than 0")),
        ("tax", 0, (True, "Valid")),
        ("tax", -1, (False, "Tax must be non-negative")),
        ("totalAmount", "abc", (False, "Total amount must be a number")),
        ("date", "2024-03-01", (True, "Valid")),
        ("date", "01/03/2024", (False, "Invalid date format (YYYY-MM-DD)")),
        ("date", "2024-01-05", (True, "Valid")),
        ("date", "2024-1-5", (False, "Invalid date format (YYYY-MM-DD)")),
        ("date", "2024-01-05\n", (False, "Invalid date format (YYYY-MM-DD)")),
        ("date", "\u0662\u0660\u0662\u0664-\u0660\u0661-\u0660\u0665", (False, "Invalid date format (YYYY-MM-DD)")),
        ("serialNumber", "INV-7", (True, "Valid")),
        ("serialNumber", "  ", (False, "This field is required")),
    ],
)
def test_invoice_fields(invoice_validator, field, value, expected) -> None:
    assert invoice_validator.validate_field(field, value) == expected


@pytest.mark.parametrize(
    "field, value, expected",
    [
        ("name", "Widget", (True, "Valid")),
        ("name", "ab", (False, "Name must be at least 3 characters")),
        ("quantity", 0, (True, "Valid")),
        ("quantity", -2, (False, "Quantity must be non-negative")),
        ("unitPrice", "12.50", (True, "Valid")),
        ("unitPrice", 0, (False, "Price must be greater than 0")),
        ("tax", 100, (True, "Valid")),
        ("tax", 101, (False, "Tax must be between 0 and 100")),
        ("tax", -1, (False, "Tax must be between 0 and 100")),
        ("discount", -5, (False, "Discount must be non-negative")),
    ],
)
def test_product_fields(field, value, expected) -> None:
    assert ProductFieldValidator().validate_field(field, value) == expected


@pytest.mark.parametrize(
    "field, value, expected",
    [
        ("customerName", "Acme Ltd", (True, "Valid")),
        ("customerName", "Al", (False, "Name must be at least 3 characters")),
        ("phoneNumber", "9876543210", (True, "Valid")),
        ("phoneNumber", 9876543210, (True, "Valid")),
        ("phoneNumber", "987654321", (False, "Phone number must be 10 digits")),
        ("phoneNumber", "98765-4321", (False, "Phone number must be 10 digits")),
        ("phoneNumber", "\u0669\u0668\u0667\u0666\u0665\u0664\u0663\u0662\u0661\u0660", (False, "Phone number must be 10 digits")),
        ("phoneNumber", "9876543210\n", (False, "Phone number must be 10 digits")),
        ("totalAmount", 0, (True, "Valid")),
        ("totalAmount", -1, (False, "Total amount must be non-negative")),
    ],
)
def test_customer_fields(field, value, expected) -> None:
    assert CustomerFieldValidator().validate_field(field, value) == expected
