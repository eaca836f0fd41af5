from app.receipts.schemas.entry import (
    OCR_STATUS_LABELS,
    EntryUpdate,
    OcrStatus,
    PasteRequest,
    PrintItem,
    PrintView,
    ReceiptEntry,
    new_token,
)

__all__ = [
    "OCR_STATUS_LABELS",
    "EntryUpdate",
    "OcrStatus",
    "PasteRequest",
    "PrintItem",
    "PrintView",
    "ReceiptEntry",
    "new_token",
]
