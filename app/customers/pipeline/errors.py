"""
Import failures, one class per pipeline stage.

Every error aborts the whole import; nothing has been written when one is raised.
"""
from __future__ import annotations

from typing import Iterable


class CustomerImportError(Exception):
    stage = "import"
    message = "匯入失敗，請檢查檔案格式"

    def __init__(self, message: str | None = None, codes: Iterable[str] = ()):
        self.codes: list[str] = list(codes)
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"stage": self.stage, "message": self.message, "codes": self.codes}


class UnreadableFileError(CustomerImportError):
    stage = "read"
    message = "匯入失敗，請檢查檔案格式"


class EmptyImportError(CustomerImportError):
    stage = "read"
    message = "檔案內容為空或格式錯誤"


class NoValidRowsError(CustomerImportError):
    stage = "validate"
    message = "檔案內沒有有效的資料（收貨人、地址必填，客戶代碼或統編至少要有一個）"


class BatchDuplicateError(CustomerImportError):
    stage = "batch_duplicates"

    def __init__(self, codes: Iterable[str]):
        codes = list(codes)
        super().__init__(f"檔案內有重複的客戶代碼：{', '.join(codes)}", codes)


class PersistedConflictError(CustomerImportError):
    stage = "persisted_conflicts"

    def __init__(self, codes: Iterable[str]):
        codes = list(codes)
        super().__init__(f"以下客戶代碼已存在：{', '.join(codes)}", codes)


class StoreError(CustomerImportError):
    """The customer store could not be read or refused the write."""

    def __init__(self, stage: str, message: str = "匯入失敗，請稍後再試"):
        self.stage = stage
        super().__init__(message)
