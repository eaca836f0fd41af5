"""
Per-entry text recognition with stale-response discard.

Each trigger issues a fresh token and stores it on the entry. When the engine
call returns, its token is compared with the entry's token *as it is now*; a
mismatch means the request was superseded and the result is dropped without
touching the entry. The engine call itself is never interrupted.

Entry status: idle → recognizing → done | no text detected | failed.
A new trigger while recognizing simply supersedes the running request.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import pytesseract
from pydantic import BaseModel

from app.config import settings
from app.receipts.ingest import decode_data_url
from app.receipts.schemas import OcrStatus, new_token
from app.receipts.store import EntryStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class RecognitionResult(BaseModel):
    text: str = ""


class RecognitionEngine(Protocol):
    async def recognize(self, image: str, language: str) -> RecognitionResult:
        ...


class TesseractEngine:
    """Tesseract via pytesseract, run in a worker thread."""

    def __init__(self, tesseract_cmd: Optional[str] = None):
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def _recognize_sync(self, image: str, language: str) -> str:
        with decode_data_url(image) as img:
            return pytesseract.image_to_string(img, lang=language)

    async def recognize(self, image: str, language: str) -> RecognitionResult:
        text = await asyncio.to_thread(self._recognize_sync, image, language)
        return RecognitionResult(text=text)


# ---------------------------------------------------------------------------
# Token guard
# ---------------------------------------------------------------------------

class RecognitionTokenGuard:
    def __init__(self, store: EntryStore):
        self.store = store

    def issue(self, entry_id: str) -> Optional[str]:
        """Make a new request current for the entry; returns its token."""
        token = new_token()
        entry = self.store.update(
            entry_id,
            ocr_token=token,
            ocr_status=OcrStatus.RECOGNIZING,
            ocr_text="",
        )
        return token if entry is not None else None

    def is_current(self, entry_id: str, token: str) -> bool:
        entry = self.store.get(entry_id)
        return entry is not None and entry.ocr_token == token

    def apply(self, entry_id: str, token: str, **fields) -> bool:
        """Write *fields* only if *token* is still the entry's live token."""
        if not self.is_current(entry_id, token):
            logger.debug("Discarded stale recognition result for %s (token %s)", entry_id, token)
            return False
        self.store.update(entry_id, **fields)
        return True


# ---------------------------------------------------------------------------
# Invoker
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RecognitionJob:
    entry_id: str
    token: str
    image: str


class RecognitionInvoker:
    def __init__(
        self,
        store: EntryStore,
        engine: RecognitionEngine,
        language: str = settings.OCR_LANGUAGE,
    ):
        self.store = store
        self.engine = engine
        self.language = language
        self.guard = RecognitionTokenGuard(store)

    def start(self, entry_id: str) -> Optional[RecognitionJob]:
        """Issue a token for the entry's current image. ``None`` if there is nothing to recognize."""
        entry = self.store.get(entry_id)
        if entry is None or not entry.image:
            return None
        token = self.guard.issue(entry_id)
        if token is None:
            return None
        logger.info("Recognition start: entry=%s token=%s", entry_id, token)
        return RecognitionJob(entry_id=entry_id, token=token, image=entry.image)

    async def complete(self, job: RecognitionJob) -> bool:
        """Await the engine and apply its outcome. Returns whether it was applied."""
        try:
            result = await self.engine.recognize(job.image, self.language)
        except Exception:
            logger.exception("Recognition failed: entry=%s token=%s", job.entry_id, job.token)
            return self.guard.apply(
                job.entry_id, job.token, ocr_status=OcrStatus.FAILED, ocr_text=""
            )

        text = (result.text or "").strip()
        status = OcrStatus.DONE if text else OcrStatus.EMPTY
        applied = self.guard.apply(job.entry_id, job.token, ocr_status=status, ocr_text=text)
        if applied:
            logger.info("Recognition %s: entry=%s chars=%d", status.name.lower(), job.entry_id, len(text))
        return applied

    async def recognize(self, entry_id: str) -> bool:
        job = self.start(entry_id)
        if job is None:
            return False
        return await self.complete(job)
