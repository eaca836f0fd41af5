"""
In-memory, ordered store of receipt entries.

The list is never empty: it starts with one fresh entry and removing the last
entry replaces it with a fresh one. Every operation is synchronous and total.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from app.config import settings
from app.receipts.schemas import ReceiptEntry

logger = logging.getLogger(__name__)

_IMMUTABLE = {"id"}


class EntryStore:
    def __init__(
        self,
        height_min: int = settings.IMAGE_HEIGHT_MIN,
        height_max: int = settings.IMAGE_HEIGHT_MAX,
    ):
        self.height_min = height_min
        self.height_max = height_max
        self._entries: list[ReceiptEntry] = [ReceiptEntry()]

    def entries(self) -> list[ReceiptEntry]:
        return list(self._entries)

    def get(self, entry_id: str) -> Optional[ReceiptEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def add(self) -> ReceiptEntry:
        entry = ReceiptEntry()
        self._entries.append(entry)
        logger.info("Added entry %s (%d total)", entry.id, len(self._entries))
        return entry

    def update(self, entry_id: str, **fields: Any) -> Optional[ReceiptEntry]:
        """Replace the given fields of the matching entry; no-op if absent."""
        changes = {
            k: v for k, v in fields.items()
            if k in ReceiptEntry.model_fields and k not in _IMMUTABLE
        }
        if "image_height" in changes:
            changes["image_height"] = self._clamp_height(changes["image_height"])

        for idx, entry in enumerate(self._entries):
            if entry.id == entry_id:
                updated = entry.model_copy(update=changes)
                self._entries[idx] = updated
                return updated
        return None

    def remove(self, entry_id: str) -> None:
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) == len(self._entries):
            return
        self._entries = remaining or [ReceiptEntry()]
        logger.info("Removed entry %s (%d left)", entry_id, len(self._entries))

    def _clamp_height(self, value: Any) -> int:
        try:
            height = int(value)
        except (TypeError, ValueError):
            return settings.IMAGE_HEIGHT_DEFAULT
        return max(self.height_min, min(self.height_max, height))
