"""
Persisted-conflict gate — which candidate codes are already on file.
"""
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from app.customers.pipeline.errors import StoreError
from app.customers.store import CustomerStore

logger = logging.getLogger(__name__)


def find_persisted_conflicts(store: CustomerStore, codes: list[str]) -> list[str]:
    """One read against the store; returns the codes that already exist."""
    try:
        return store.existing_codes(codes)
    except SQLAlchemyError as e:
        logger.error("Conflict lookup failed for %d codes: %s", len(codes), e)
        raise StoreError("conflict_lookup", "無法確認客戶代碼，請檢查網路連線") from e
