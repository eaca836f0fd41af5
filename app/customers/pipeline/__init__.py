"""
Customer bulk-import pipeline.

Orchestrates: read → normalize → validate → in-file duplicates →
persisted conflicts → one batch insert.

Both duplicate gates reject the whole batch; nothing is written unless every
candidate survives them.
"""
import logging
from typing import Any, Mapping

from app.customers.pipeline.conflicts import find_persisted_conflicts
from app.customers.pipeline.duplicates import find_batch_duplicates
from app.customers.pipeline.errors import (
    BatchDuplicateError,
    CustomerImportError,
    EmptyImportError,
    NoValidRowsError,
    PersistedConflictError,
    StoreError,
    UnreadableFileError,
)
from app.customers.pipeline.inserter import bulk_insert
from app.customers.pipeline.normalizer import normalize_rows
from app.customers.pipeline.reader import read_rows
from app.customers.pipeline.validator import filter_valid
from app.customers.store import CustomerStore

logger = logging.getLogger(__name__)

__all__ = [
    "BatchDuplicateError",
    "CustomerImportError",
    "EmptyImportError",
    "NoValidRowsError",
    "PersistedConflictError",
    "StoreError",
    "UnreadableFileError",
    "import_file",
    "import_rows",
]


def import_rows(rows: list[Mapping[str, Any]], store: CustomerStore) -> int:
    """Run the import on already-parsed rows. Returns the inserted count."""
    if not rows:
        raise EmptyImportError()

    logger.info("Import start — normalize %d rows", len(rows))
    candidates = normalize_rows(rows)

    valid = filter_valid(candidates)
    logger.info("Validated: %d kept, %d discarded", len(valid), len(candidates) - len(valid))
    if not valid:
        raise NoValidRowsError()

    codes = [c.customer_code for c in valid]
    duplicates = find_batch_duplicates(codes)
    if duplicates:
        logger.warning("Import rejected — duplicate codes in file: %s", duplicates)
        raise BatchDuplicateError(duplicates)

    conflicts = find_persisted_conflicts(store, codes)
    if conflicts:
        logger.warning("Import rejected — codes already on file: %s", conflicts)
        raise PersistedConflictError(conflicts)

    inserted = bulk_insert(store, valid)
    logger.info("Import done — %d customers inserted", inserted)
    return inserted


def import_file(filename: str, content: bytes, store: CustomerStore) -> int:
    """Read an uploaded spreadsheet and import its rows."""
    rows = read_rows(filename, content)
    return import_rows(rows, store)
