"""
Print summary — derived, read-only view of the entry list.
"""
from __future__ import annotations

import math
from datetime import date
from typing import Any, Optional

from app.config import settings
from app.receipts.schemas import PrintItem, PrintView, ReceiptEntry

PLACEHOLDER = "--"


def coerce_amount(value: Any) -> float:
    """Numeric value of an amount field; anything unparseable counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def format_amount(value: float) -> str:
    """Thousands separators, at most three decimals (``1234.5`` → ``1,234.5``)."""
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def print_height(display_height: int, scale: float = settings.PRINT_IMAGE_SCALE) -> int:
    # half-up rounding
    return int(math.floor(display_height * scale + 0.5))


def total_amount(entries: list[ReceiptEntry]) -> float:
    return sum(coerce_amount(e.amount) for e in entries)


def project(
    entries: list[ReceiptEntry],
    scale: float = settings.PRINT_IMAGE_SCALE,
    prepared_by: str = settings.REPORT_OWNER,
    today: Optional[date] = None,
) -> PrintView:
    items: list[PrintItem] = []
    for entry in entries:
        amount = coerce_amount(entry.amount)
        items.append(
            PrintItem(
                id=entry.id,
                image=entry.image,
                print_height=print_height(entry.image_height, scale),
                driver_name=entry.driver_name or PLACEHOLDER,
                note=entry.note or PLACEHOLDER,
                amount=amount,
                show_amount=amount > 0,
                amount_display=f"NT$ {format_amount(amount)}",
            )
        )

    total = total_amount(entries)
    today = today or date.today()
    return PrintView(
        prepared_on=f"{today.year}/{today.month}/{today.day}",
        prepared_by=prepared_by,
        items=items,
        total_count=len(entries),
        total_amount=total,
        total_amount_display=f"NT$ {format_amount(total)}",
    )
