"""
Map the model's JSON answer onto the fixed invoice record shape.

The extraction prompt asks for one {"value", "confidence"} object per field
and a "Line Items" array. Anything missing or malformed degrades to an empty
string value and a zero confidence rather than failing the request.
"""

from typing import Any

from ..models.invoice import LineItem

# Record field -> keys the model may use for it (prompt key first)
FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "invoice_number": ("Invoice Number", "invoice_number", "invoiceNumber"),
    "date_issued": ("Date Issued", "date_issued", "dateIssued"),
    "vendor_name": ("Vendor Name", "vendor_name", "vendorName"),
    "total_amount": ("Total Amount", "total_amount", "totalAmount"),
    "tax": ("Tax", "tax"),
}
LINE_ITEM_KEYS = ("Line Items", "line_items", "lineItems")


def _lookup(parsed: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in parsed:
            return parsed[key]
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def normalize_line_items(raw_items: Any) -> list[LineItem]:
    if not isinstance(raw_items, list):
        return []

    items = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        unit_price = raw.get("unitPrice", raw.get("unit_price"))
        confidence = raw.get("confidence")
        items.append(
            LineItem(
                description=_as_text(raw.get("description")),
                quantity=_as_text(raw.get("quantity")),
                unit_price=_as_text(unit_price),
                confidence=confidence if isinstance(confidence, (str, int, float)) else None,
            )
        )
    return items


def normalize_invoice_fields(parsed: Any) -> dict:
    """
    Build the structured part of an invoice record from parsed model output.

    Args:
        parsed: Whatever extract_json returned (None when parsing failed)

    Returns:
        Dict with the five scalar fields, "line_items" and "confidences"
    """
    source = parsed if isinstance(parsed, dict) else {}

    fields: dict[str, Any] = {}
    confidences: dict[str, Any] = {}
    for name, keys in FIELD_KEYS.items():
        entry = _lookup(source, keys)
        if isinstance(entry, dict):
            fields[name] = _as_text(entry.get("value"))
            confidence = entry.get("confidence")
            confidences[name] = confidence if confidence not in (None, "") else 0
        else:
            fields[name] = ""
            confidences[name] = 0

    fields["line_items"] = normalize_line_items(_lookup(source, LINE_ITEM_KEYS))
    fields["confidences"] = confidences
    return fields
