"""
Extraction Response Schema.

Single definition of the JSON shape the extraction model is asked to return.
The instruction sent by the extractor and the checks run by the
post-processor are both generated from RESPONSE_SCHEMA, so renaming a field
here changes both sides at once.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

STRING = "string"
NUMBER = "number"


@dataclass(frozen=True)
class FieldSpec:
    """
    One field of an extracted record.

    Attributes:
        key: JSON key used by the model and in record dictionaries.
        attribute: Attribute name on the record dataclass.
        kind: JSON type, STRING or NUMBER.
    """
    key: str
    attribute: str
    kind: str


RESPONSE_SCHEMA: Dict[str, Tuple[FieldSpec, ...]] = {
    "invoices": (
        FieldSpec("serialNumber", "serial_number", STRING),
        FieldSpec("customerName", "customer_name", STRING),
        FieldSpec("productName", "product_name", STRING),
        FieldSpec("qty", "qty", NUMBER),
        FieldSpec("tax", "tax", NUMBER),
        FieldSpec("totalAmount", "total_amount", NUMBER),
        FieldSpec("date", "date", STRING),
    ),
    "products": (
        FieldSpec("id", "id", STRING),
        FieldSpec("name", "name", STRING),
        FieldSpec("quantity", "quantity", NUMBER),
        FieldSpec("unitPrice", "unit_price", NUMBER),
        FieldSpec("tax", "tax", NUMBER),
        FieldSpec("priceWithTax", "price_with_tax", NUMBER),
        FieldSpec("discount", "discount", NUMBER),
    ),
    "customers": (
        FieldSpec("id", "id", STRING),
        FieldSpec("customerName", "customer_name", STRING),
        FieldSpec("phoneNumber", "phone_number", STRING),
        FieldSpec("totalAmount", "total_amount", NUMBER),
    ),
}

RECORD_KINDS: Tuple[str, ...] = tuple(RESPONSE_SCHEMA)

PROMPT_PREAMBLE = (
    "Extract the invoice data from the provided image and return a JSON "
    "response with the following structure:"
)


def field_specs(kind: str) -> Dict[str, FieldSpec]:
    """Return the field specs of one record kind keyed by JSON key."""
    return {spec.key: spec for spec in RESPONSE_SCHEMA[kind]}


def describe_schema() -> str:
    """
    Render RESPONSE_SCHEMA as the literal JSON outline used in the prompt.

    Example:
        {
          "invoices": [{ "serialNumber": string, ... }],
          ...
        }
    """
    lines = []
    for kind, specs in RESPONSE_SCHEMA.items():
        fields = ", ".join(f'"{spec.key}": {spec.kind}' for spec in specs)
        lines.append(f'  "{kind}": [{{ {fields} }}]')
    return "{\n" + ",\n".join(lines) + "\n}"


def build_extraction_prompt() -> str:
    """Build the fixed instruction sent with every extraction request."""
    return f"{PROMPT_PREAMBLE}\n{describe_schema()}"


EXTRACTION_PROMPT = build_extraction_prompt()
