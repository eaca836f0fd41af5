"""
Required-field rules shared by the import pipeline and the add-customer form.
"""
from __future__ import annotations

from typing import Optional

from app.customers.schemas import CustomerDraft

MISSING_RECIPIENT_OR_ADDRESS = "請填寫收貨人、地址"
MISSING_CODE_AND_TAX_ID = "請填寫客戶代碼或統編（至少填一個）"


def validation_error(draft: CustomerDraft) -> Optional[str]:
    """Return the user-facing reason *draft* is invalid, or ``None``."""
    if not draft.recipient or not draft.address:
        return MISSING_RECIPIENT_OR_ADDRESS
    if not draft.customer_code and not draft.tax_id:
        return MISSING_CODE_AND_TAX_ID
    return None


def is_valid(draft: CustomerDraft) -> bool:
    return validation_error(draft) is None


def filter_valid(drafts: list[CustomerDraft]) -> list[CustomerDraft]:
    """Order-preserving filter dropping every invalid candidate."""
    return [d for d in drafts if is_valid(d)]
