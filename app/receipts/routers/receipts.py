"""
簽收單 form API endpoints.

GET    /api/receipts/entries                 — list entries
POST   /api/receipts/entries                 — add an empty entry
PATCH  /api/receipts/entries/{id}            — edit driver / amount / note / image height
DELETE /api/receipts/entries/{id}            — remove an entry
POST   /api/receipts/entries/{id}/image      — upload an image, then recognize it
POST   /api/receipts/entries/{id}/paste      — paste a clipboard image, then recognize it
POST   /api/receipts/entries/{id}/recognize  — re-run recognition
GET    /api/receipts/print                   — printable summary

Routes are async so the entry list is only touched from the event loop.
Recognition runs as a background task after the response is sent.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, UploadFile

from app.config import settings
from app.receipts.ingest import InvalidImageError, image_to_data_url, normalize_data_url
from app.receipts.printing import project
from app.receipts.recognition import RecognitionEngine, RecognitionInvoker, TesseractEngine
from app.receipts.schemas import EntryUpdate, PasteRequest, PrintView, ReceiptEntry
from app.receipts.store import EntryStore

logger = logging.getLogger(__name__)
router = APIRouter()

# ── In-memory form state ──────────────────────────────────────────────────
_store = EntryStore()
_engine: Optional[RecognitionEngine] = None


def get_entry_store() -> EntryStore:
    return _store


def get_recognition_engine() -> RecognitionEngine:
    global _engine
    if _engine is None:
        _engine = TesseractEngine(settings.TESSERACT_CMD)
    return _engine


def get_invoker(
    store: EntryStore = Depends(get_entry_store),
    engine: RecognitionEngine = Depends(get_recognition_engine),
) -> RecognitionInvoker:
    return RecognitionInvoker(store, engine, settings.OCR_LANGUAGE)


def _require(store: EntryStore, entry_id: str) -> ReceiptEntry:
    entry = store.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


def _attach_and_recognize(
    entry_id: str,
    data_url: str,
    store: EntryStore,
    invoker: RecognitionInvoker,
    background: BackgroundTasks,
) -> ReceiptEntry:
    store.update(entry_id, image=data_url)
    job = invoker.start(entry_id)
    if job is not None:
        background.add_task(invoker.complete, job)
    return store.get(entry_id)


# ── GET /api/receipts/entries ─────────────────────────────────────────────
@router.get("/receipts/entries", response_model=list[ReceiptEntry])
async def list_entries(store: EntryStore = Depends(get_entry_store)):
    return store.entries()


# ── POST /api/receipts/entries ────────────────────────────────────────────
@router.post("/receipts/entries", response_model=ReceiptEntry, status_code=201)
async def add_entry(store: EntryStore = Depends(get_entry_store)):
    return store.add()


# ── PATCH /api/receipts/entries/{entry_id} ────────────────────────────────
@router.patch("/receipts/entries/{entry_id}", response_model=ReceiptEntry)
async def update_entry(
    entry_id: str,
    req: EntryUpdate,
    store: EntryStore = Depends(get_entry_store),
):
    _require(store, entry_id)
    return store.update(entry_id, **req.model_dump(exclude_unset=True, exclude_none=True))


# ── DELETE /api/receipts/entries/{entry_id} ───────────────────────────────
@router.delete("/receipts/entries/{entry_id}", response_model=list[ReceiptEntry])
async def remove_entry(entry_id: str, store: EntryStore = Depends(get_entry_store)):
    store.remove(entry_id)
    return store.entries()


# ── POST /api/receipts/entries/{entry_id}/image ───────────────────────────
@router.post("/receipts/entries/{entry_id}/image", response_model=ReceiptEntry)
async def upload_image(
    entry_id: str,
    background: BackgroundTasks,
    file: UploadFile = File(..., description="Photo or scan of the signed receipt"),
    store: EntryStore = Depends(get_entry_store),
    invoker: RecognitionInvoker = Depends(get_invoker),
):
    _require(store, entry_id)
    try:
        data_url = image_to_data_url(await file.read())
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Image uploaded: entry=%s file=%s", entry_id, file.filename)
    return _attach_and_recognize(entry_id, data_url, store, invoker, background)


# ── POST /api/receipts/entries/{entry_id}/paste ───────────────────────────
@router.post("/receipts/entries/{entry_id}/paste", response_model=ReceiptEntry)
async def paste_image(
    entry_id: str,
    req: PasteRequest,
    background: BackgroundTasks,
    store: EntryStore = Depends(get_entry_store),
    invoker: RecognitionInvoker = Depends(get_invoker),
):
    _require(store, entry_id)
    try:
        data_url = normalize_data_url(req.data_url)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Image pasted: entry=%s", entry_id)
    return _attach_and_recognize(entry_id, data_url, store, invoker, background)


# ── POST /api/receipts/entries/{entry_id}/recognize ───────────────────────
@router.post("/receipts/entries/{entry_id}/recognize", response_model=ReceiptEntry)
async def rerun_recognition(
    entry_id: str,
    background: BackgroundTasks,
    store: EntryStore = Depends(get_entry_store),
    invoker: RecognitionInvoker = Depends(get_invoker),
):
    _require(store, entry_id)
    job = invoker.start(entry_id)
    if job is None:
        raise HTTPException(status_code=400, detail="尚未上傳圖片")
    background.add_task(invoker.complete, job)
    return store.get(entry_id)


# ── GET /api/receipts/print ───────────────────────────────────────────────
@router.get("/receipts/print", response_model=PrintView)
async def print_summary(store: EntryStore = Depends(get_entry_store)):
    return project(store.entries())
