"""
Bulk inserter — the single write of an import.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from app.customers.pipeline.errors import StoreError
from app.customers.schemas import CustomerDraft
from app.customers.store import CustomerStore

logger = logging.getLogger(__name__)


def bulk_insert(store: CustomerStore, drafts: list[CustomerDraft]) -> int:
    """Submit *drafts* as one batch; relies on ``insert_many`` being all-or-nothing."""
    try:
        return store.insert_many(drafts)
    except SQLAlchemyError as e:
        logger.error("Batch insert of %d customers failed: %s", len(drafts), e)
        raise StoreError("insert") from e
