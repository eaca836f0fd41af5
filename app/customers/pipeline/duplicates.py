"""
In-file duplicate detection. Runs before any store access.
"""
from __future__ import annotations

from typing import Iterable


def find_batch_duplicates(codes: Iterable[str]) -> list[str]:
    """Distinct codes that occur more than once, in order of first repeat."""
    seen: set[str] = set()
    repeated: dict[str, None] = {}
    for code in codes:
        if code in seen:
            repeated[code] = None
        else:
            seen.add(code)
    return list(repeated)
