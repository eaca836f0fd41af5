"""
Customer lookup API endpoints.

GET    /api/customers              — list all customers
GET    /api/customers/search?q=    — search by recipient / address
POST   /api/customers              — add one customer
POST   /api/customers/import       — bulk import from a spreadsheet
PATCH  /api/customers/{id}         — update a customer
DELETE /api/customers/{id}         — delete a customer
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.customers.database import get_db
from app.customers.pipeline import (
    BatchDuplicateError,
    CustomerImportError,
    PersistedConflictError,
    StoreError,
    import_file,
)
from app.customers.pipeline.validator import validation_error
from app.customers.schemas import (
    Customer,
    CustomerCreateResponse,
    CustomerDraft,
    CustomerUpdate,
    DeleteResponse,
    ImportResponse,
    Notice,
    SearchResponse,
)
from app.customers.store import CustomerStore

logger = logging.getLogger(__name__)
router = APIRouter()


def get_store(db: Session = Depends(get_db)) -> CustomerStore:
    return CustomerStore(db)


def _error(status_code: int, message: str, stage: str = "", codes: list[str] | None = None):
    return HTTPException(
        status_code=status_code,
        detail={"stage": stage, "message": message, "codes": codes or []},
    )


def _import_status(err: CustomerImportError) -> int:
    if isinstance(err, (BatchDuplicateError, PersistedConflictError)):
        return 409
    if isinstance(err, StoreError):
        return 502
    return 400


# ── GET /api/customers ───────────────────────────────────────────────────
@router.get("/customers", response_model=list[Customer])
def list_customers(store: CustomerStore = Depends(get_store)):
    try:
        rows = store.list_all()
    except SQLAlchemyError as e:
        logger.error("Listing customers failed: %s", e)
        raise _error(502, "載入資料失敗", stage="list")
    logger.info("Found %d customers in database", len(rows))
    return rows


# ── GET /api/customers/search ────────────────────────────────────────────
@router.get("/customers/search", response_model=SearchResponse)
def search_customers(q: str = "", store: CustomerStore = Depends(get_store)):
    query = q.strip()
    if len(query) < settings.SEARCH_MIN_CHARS:
        return SearchResponse(query=query)

    try:
        rows = store.search(query)
    except SQLAlchemyError as e:
        logger.error("Search %r failed: %s", query, e)
        raise _error(502, "搜尋失敗，請檢查網路連線", stage="search")

    notice = None if rows else Notice(message="找不到符合的客戶", type="error")
    return SearchResponse(
        query=query,
        results=[Customer.model_validate(r) for r in rows],
        notice=notice,
    )


# ── POST /api/customers ──────────────────────────────────────────────────
@router.post("/customers", response_model=CustomerCreateResponse, status_code=201)
def add_customer(req: CustomerDraft, store: CustomerStore = Depends(get_store)):
    draft = CustomerDraft(**{k: v.strip() for k, v in req.model_dump().items()})

    reason = validation_error(draft)
    if reason:
        raise _error(400, reason, stage="validate")

    if not draft.customer_code:
        draft.customer_code = draft.tax_id

    try:
        if store.exists_by_code(draft.customer_code):
            raise _error(
                409,
                f"客戶代碼「{draft.customer_code}」已存在！",
                stage="persisted_conflicts",
                codes=[draft.customer_code],
            )
        row = store.insert_one(draft)
    except IntegrityError:
        raise _error(
            409,
            f"客戶代碼「{draft.customer_code}」已存在！",
            stage="insert",
            codes=[draft.customer_code],
        )
    except SQLAlchemyError as e:
        logger.error("Adding customer %s failed: %s", draft.customer_code, e)
        raise _error(502, "新增失敗", stage="insert")

    return CustomerCreateResponse(
        customer=Customer.model_validate(row),
        notice=Notice(message="新增成功！", type="success"),
    )


# ── POST /api/customers/import ───────────────────────────────────────────
@router.post("/customers/import", response_model=ImportResponse)
def import_customers(
    file: UploadFile = File(..., description="Excel (.xlsx) or CSV file"),
    store: CustomerStore = Depends(get_store),
):
    content = file.file.read()
    if len(content) > settings.IMPORT_MAX_BYTES:
        raise _error(413, "檔案過大", stage="read")

    logger.info("Import: file=%s  size=%d", file.filename, len(content))
    try:
        inserted = import_file(file.filename or "", content, store)
    except CustomerImportError as e:
        raise _error(_import_status(e), e.message, stage=e.stage, codes=e.codes)

    return ImportResponse(
        inserted=inserted,
        notice=Notice(message=f"成功匯入 {inserted} 筆資料！", type="success"),
    )


# ── PATCH /api/customers/{customer_id} ───────────────────────────────────
@router.patch("/customers/{customer_id}", response_model=Customer)
def update_customer(
    customer_id: int,
    req: CustomerUpdate,
    store: CustomerStore = Depends(get_store),
):
    fields = {k: v.strip() for k, v in req.model_dump(exclude_unset=True, exclude_none=True).items()}

    current = store.get(customer_id)
    if current is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    merged = CustomerDraft.model_validate(current, from_attributes=True).model_copy(update=fields)
    reason = validation_error(merged)
    if reason:
        raise _error(400, reason, stage="validate")
    if not merged.customer_code:
        fields["customer_code"] = merged.tax_id

    try:
        row = store.update(customer_id, fields)
    except IntegrityError:
        raise _error(409, f"客戶代碼「{fields.get('customer_code', '')}」已存在！", stage="update")
    except SQLAlchemyError as e:
        logger.error("Updating customer %s failed: %s", customer_id, e)
        raise _error(502, "更新失敗", stage="update")
    if row is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return row


# ── DELETE /api/customers/{customer_id} ──────────────────────────────────
@router.delete("/customers/{customer_id}", response_model=DeleteResponse)
def delete_customer(customer_id: int, store: CustomerStore = Depends(get_store)):
    try:
        deleted = store.delete_by_id(customer_id)
    except SQLAlchemyError as e:
        logger.error("Deleting customer %s failed: %s", customer_id, e)
        raise _error(502, "刪除失敗", stage="delete")
    if not deleted:
        raise HTTPException(status_code=404, detail="Customer not found")
    return DeleteResponse(id=customer_id, notice=Notice(message="刪除成功", type="success"))
