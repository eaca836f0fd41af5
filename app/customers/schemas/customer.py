"""
Customer schemas — form payloads, import candidates and API envelopes.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.config import settings


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class CustomerDraft(BaseModel):
    """A customer record before the store assigns ``id``/``created_at``.

    Used both for the add-customer form and for import candidates.
    """
    customer_code: str = Field(default="", description="客戶代碼, unique business key")
    recipient: str = Field(default="", description="收貨人")
    address: str = Field(default="", description="地址")
    tax_id: str = Field(default="", description="統編")
    notes: str = Field(default="", description="備註 (may hold a phone number)")


class CustomerUpdate(BaseModel):
    customer_code: Optional[str] = None
    recipient: Optional[str] = None
    address: Optional[str] = None
    tax_id: Optional[str] = None
    notes: Optional[str] = None


class Customer(CustomerDraft):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime


# ---------------------------------------------------------------------------
# API envelopes
# ---------------------------------------------------------------------------

class Notice(BaseModel):
    """Transient banner shown to the user; the view clears it after ``ttl_seconds``."""
    message: str
    type: str = Field(..., description="success | error")
    ttl_seconds: int = Field(default_factory=lambda: settings.MESSAGE_TTL_SECONDS)


class CustomerCreateResponse(BaseModel):
    customer: Customer
    notice: Notice


class SearchResponse(BaseModel):
    query: str
    results: list[Customer] = Field(default_factory=list)
    notice: Optional[Notice] = None


class ImportResponse(BaseModel):
    inserted: int
    notice: Notice


class DeleteResponse(BaseModel):
    id: int
    notice: Notice
