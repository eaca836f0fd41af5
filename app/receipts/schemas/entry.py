"""
簽收單 (delivery receipt) form schemas.
"""
from __future__ import annotations

import secrets
import time
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field, computed_field

from app.config import settings


def new_token() -> str:
    """Creation-time based, random-suffixed identifier."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}"


class OcrStatus(str, Enum):
    IDLE = ""
    RECOGNIZING = "recognizing"
    DONE = "done"
    EMPTY = "no text detected"
    FAILED = "failed"


OCR_STATUS_LABELS: dict[OcrStatus, str] = {
    OcrStatus.IDLE: "",
    OcrStatus.RECOGNIZING: "辨識中...",
    OcrStatus.DONE: "辨識完成",
    OcrStatus.EMPTY: "未偵測到文字",
    OcrStatus.FAILED: "辨識失敗，請重試",
}


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------

class ReceiptEntry(BaseModel):
    id: str = Field(default_factory=new_token)
    driver_name: str = ""
    amount: Union[float, str] = Field(default="", description="as typed; coerced to 0 when not numeric")
    note: str = ""
    image: str = Field(default="", description="data URL or empty")
    image_height: int = Field(default_factory=lambda: settings.IMAGE_HEIGHT_DEFAULT)
    ocr_text: str = ""
    ocr_status: OcrStatus = OcrStatus.IDLE
    ocr_token: str = Field(default="", description="token of the latest recognition request")

    @computed_field
    @property
    def ocr_status_label(self) -> str:
        return OCR_STATUS_LABELS[self.ocr_status]


class EntryUpdate(BaseModel):
    """User-editable fields of an entry."""
    driver_name: Optional[str] = None
    amount: Optional[Union[float, str]] = None
    note: Optional[str] = None
    image_height: Optional[int] = None


class PasteRequest(BaseModel):
    """A pasted clipboard image, already read as a data URL by the browser."""
    data_url: str


# ---------------------------------------------------------------------------
# Print summary
# ---------------------------------------------------------------------------

class PrintItem(BaseModel):
    id: str
    image: str = ""
    print_height: int
    driver_name: str
    note: str
    amount: float
    show_amount: bool
    amount_display: str


class PrintView(BaseModel):
    title: str = "簽收單補收款項明細"
    prepared_on: str
    prepared_by: str
    items: list[PrintItem] = Field(default_factory=list)
    total_count: int
    total_amount: float
    total_amount_display: str
