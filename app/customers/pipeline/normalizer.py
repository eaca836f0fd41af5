"""
Row normalizer — raw spreadsheet row → candidate customer record.

Each logical field is read from an ordered list of column names; the first
column that is present and non-empty wins. Localized (Traditional Chinese)
headers take precedence over the canonical English ones.
"""
from __future__ import annotations

from typing import Any, Mapping

from app.customers.schemas import CustomerDraft

# ---------------------------------------------------------------------------
# Per-field column candidates
# ---------------------------------------------------------------------------

FIELD_COLUMNS: dict[str, list[str]] = {
    "customer_code": ["客戶代碼", "customer_code"],
    "tax_id": ["統編", "tax_id"],
    "recipient": ["收貨人", "recipient"],
    "address": ["地址", "address"],
    # no notes column → a phone column is kept as notes instead
    "notes": ["備註", "notes", "電話", "phone"],
}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    # whole-number cells come back from Excel as floats (e.g. tax ids)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def lookup(row: Mapping[str, Any], columns: list[str]) -> str:
    """Return the first present, non-empty value among *columns*, as text."""
    for column in columns:
        text = _as_text(row.get(column))
        if text:
            return text
    return ""


def normalize_row(row: Mapping[str, Any]) -> CustomerDraft:
    """Map one raw row into a candidate. Never fails; missing fields become ``""``."""
    values = {field: lookup(row, columns) for field, columns in FIELD_COLUMNS.items()}
    if not values["customer_code"] and values["tax_id"]:
        values["customer_code"] = values["tax_id"]
    return CustomerDraft(**values)


def normalize_rows(rows: list[Mapping[str, Any]]) -> list[CustomerDraft]:
    return [normalize_row(r) for r in rows]
