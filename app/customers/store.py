"""
Customer store — the persistence collaborator consumed by the customer
screen and the import pipeline.

Contract:

* ``search`` / ``list_all`` return rows ordered by ``created_at`` descending.
* ``insert_many`` is all-or-nothing: the batch is written in one transaction
  and committed once. On any failure the session is rolled back and the
  exception propagates, so no partial batch is ever persisted.
* ``customer_code`` uniqueness is enforced by the table's unique constraint;
  a violating write raises ``sqlalchemy.exc.IntegrityError``.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.customers.models import CustomerModel
from app.customers.schemas import CustomerDraft

logger = logging.getLogger(__name__)

# Stay well under SQLite's bound-parameter limit for IN (...) lookups
_LOOKUP_CHUNK = 500


class CustomerStore:
    def __init__(self, db: Session):
        self.db = db

    def _ordered(self):
        return self.db.query(CustomerModel).order_by(
            CustomerModel.created_at.desc(), CustomerModel.id.desc()
        )

    # ── reads ───────────────────────────────────────────────────────────
    def search(self, query: str) -> list[CustomerModel]:
        """Case-insensitive substring match on recipient or address."""
        rows = (
            self._ordered()
            .filter(
                or_(
                    CustomerModel.address.icontains(query, autoescape=True),
                    CustomerModel.recipient.icontains(query, autoescape=True),
                )
            )
            .all()
        )
        logger.info("Search %r matched %d customers", query, len(rows))
        return rows

    def list_all(self) -> list[CustomerModel]:
        return self._ordered().all()

    def get(self, customer_id: int) -> Optional[CustomerModel]:
        return self.db.query(CustomerModel).filter(CustomerModel.id == customer_id).first()

    def exists_by_code(self, code: str) -> bool:
        return (
            self.db.query(CustomerModel.id)
            .filter(CustomerModel.customer_code == code)
            .first()
            is not None
        )

    def existing_codes(self, codes: Iterable[str]) -> list[str]:
        """Return the subset of *codes* already on file, in input order."""
        wanted = list(dict.fromkeys(codes))
        found: set[str] = set()
        for start in range(0, len(wanted), _LOOKUP_CHUNK):
            chunk = wanted[start:start + _LOOKUP_CHUNK]
            rows = (
                self.db.query(CustomerModel.customer_code)
                .filter(CustomerModel.customer_code.in_(chunk))
                .all()
            )
            found.update(code for (code,) in rows)
        return [code for code in wanted if code in found]

    # ── writes ──────────────────────────────────────────────────────────
    def insert_one(self, draft: CustomerDraft) -> CustomerModel:
        row = CustomerModel(**draft.model_dump())
        self.db.add(row)
        self._commit()
        self.db.refresh(row)
        logger.info("Inserted customer %s (id=%s)", row.customer_code, row.id)
        return row

    def insert_many(self, drafts: list[CustomerDraft]) -> int:
        rows = [CustomerModel(**d.model_dump()) for d in drafts]
        self.db.add_all(rows)
        self._commit()
        logger.info("Inserted %d customers in one batch", len(rows))
        return len(rows)

    def update(self, customer_id: int, fields: dict) -> Optional[CustomerModel]:
        row = self.get(customer_id)
        if row is None:
            return None
        for key, value in fields.items():
            setattr(row, key, value)
        self._commit()
        self.db.refresh(row)
        logger.info("Updated customer id=%s fields=%s", customer_id, sorted(fields))
        return row

    def delete_by_id(self, customer_id: int) -> bool:
        row = self.get(customer_id)
        if row is None:
            return False
        self.db.delete(row)
        self._commit()
        logger.info("Deleted customer id=%s", customer_id)
        return True

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
