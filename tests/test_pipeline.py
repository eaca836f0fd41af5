"""
Unit tests for the customer import pipeline — normalizer, validator,
duplicate gate, conflict gate, bulk insert and the full import.
"""
import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.customers.models import CustomerModel
from app.customers.pipeline import (
    BatchDuplicateError,
    EmptyImportError,
    NoValidRowsError,
    PersistedConflictError,
    StoreError,
    import_rows,
)
from app.customers.pipeline.duplicates import find_batch_duplicates
from app.customers.pipeline.normalizer import lookup, normalize_row
from app.customers.pipeline.validator import filter_valid, validation_error
from app.customers.schemas import CustomerDraft
from app.customers.store import CustomerStore


class RecordingStore:
    """Stand-in store that records every call the pipeline makes."""

    def __init__(self, existing=(), fail_lookup=False, fail_insert=False):
        self.existing = set(existing)
        self.fail_lookup = fail_lookup
        self.fail_insert = fail_insert
        self.lookups = []
        self.insert_calls = []

    def existing_codes(self, codes):
        self.lookups.append(list(codes))
        if self.fail_lookup:
            raise SQLAlchemyError("store unreachable")
        return [c for c in codes if c in self.existing]

    def insert_many(self, drafts):
        self.insert_calls.append(list(drafts))
        if self.fail_insert:
            raise SQLAlchemyError("insert rejected")
        return len(drafts)


def _row(code="", recipient="王", address="台北", tax_id=""):
    return {"客戶代碼": code, "收貨人": recipient, "地址": address, "統編": tax_id}


# =====================================================================
# Normalizer
# =====================================================================
class TestNormalizer:
    def test_localized_columns(self):
        draft = normalize_row(
            {"客戶代碼": "C1", "收貨人": "王", "地址": "台北", "統編": "123", "備註": "後門"}
        )
        assert draft == CustomerDraft(
            customer_code="C1", recipient="王", address="台北", tax_id="123", notes="後門"
        )

    def test_canonical_columns(self):
        draft = normalize_row(
            {"customer_code": "C2", "recipient": "Lee", "address": "Taichung", "tax_id": "9"}
        )
        assert draft.customer_code == "C2"
        assert draft.recipient == "Lee"
        assert draft.address == "Taichung"
        assert draft.tax_id == "9"

    def test_localized_wins_over_canonical(self):
        draft = normalize_row({"收貨人": "陳", "recipient": "Chen"})
        assert draft.recipient == "陳"

    def test_empty_localized_falls_back_to_canonical(self):
        draft = normalize_row({"收貨人": "", "recipient": "Chen"})
        assert draft.recipient == "Chen"

    def test_code_backfilled_from_tax_id(self):
        draft = normalize_row(_row(code="", tax_id="T9"))
        assert draft.customer_code == "T9"
        assert draft.tax_id == "T9"

    def test_code_kept_when_present(self):
        draft = normalize_row(_row(code="C1", tax_id="T9"))
        assert draft.customer_code == "C1"

    def test_phone_becomes_notes_when_no_notes_column(self):
        assert normalize_row({"電話": "02-1234"}).notes == "02-1234"
        assert normalize_row({"phone": "0912"}).notes == "0912"

    def test_notes_preferred_over_phone(self):
        assert normalize_row({"notes": "n", "電話": "02-1234"}).notes == "n"

    def test_missing_everything(self):
        assert normalize_row({"unrelated": "x"}) == CustomerDraft()

    def test_values_coerced_to_text(self):
        draft = normalize_row({"統編": 12345678.0, "客戶代碼": 42})
        assert draft.tax_id == "12345678"
        assert draft.customer_code == "42"

    def test_lookup_none_is_empty(self):
        assert lookup({"a": None}, ["a", "b"]) == ""


# =====================================================================
# Validator
# =====================================================================
class TestValidator:
    def test_missing_code_and_tax_id_discarded(self):
        draft = normalize_row(_row(code="", tax_id=""))
        assert filter_valid([draft]) == []

    def test_missing_recipient(self):
        assert validation_error(CustomerDraft(customer_code="C", address="a")) is not None

    def test_missing_address(self):
        assert validation_error(CustomerDraft(customer_code="C", recipient="r")) is not None

    def test_tax_id_alone_is_enough(self):
        draft = CustomerDraft(recipient="r", address="a", tax_id="T")
        assert validation_error(draft) is None

    def test_filter_preserves_order(self):
        drafts = [
            CustomerDraft(customer_code="A", recipient="r", address="a"),
            CustomerDraft(customer_code="B"),
            CustomerDraft(customer_code="C", recipient="r", address="a"),
        ]
        assert [d.customer_code for d in filter_valid(drafts)] == ["A", "C"]


# =====================================================================
# In-file duplicates
# =====================================================================
class TestBatchDuplicates:
    def test_distinct_duplicates_only(self):
        assert find_batch_duplicates(["A", "B", "A"]) == ["A"]

    def test_triple_reported_once(self):
        assert find_batch_duplicates(["A", "A", "A", "B", "B"]) == ["A", "B"]

    def test_no_duplicates(self):
        assert find_batch_duplicates(["A", "B", "C"]) == []


# =====================================================================
# Full import against a recording store
# =====================================================================
class TestImportGates:
    def test_empty_rows(self):
        store = RecordingStore()
        with pytest.raises(EmptyImportError):
            import_rows([], store)
        assert store.lookups == []

    def test_all_rows_invalid(self):
        store = RecordingStore()
        with pytest.raises(NoValidRowsError):
            import_rows([_row(recipient=""), _row(code="", tax_id="")], store)
        assert store.lookups == []
        assert store.insert_calls == []

    def test_batch_duplicates_rejected_before_store(self):
        store = RecordingStore()
        rows = [_row(code="A"), _row(code="B"), _row(code="A")]
        with pytest.raises(BatchDuplicateError) as exc:
            import_rows(rows, store)
        assert exc.value.codes == ["A"]
        assert exc.value.stage == "batch_duplicates"
        assert store.lookups == []
        assert store.insert_calls == []

    def test_backfilled_code_counts_as_duplicate(self):
        store = RecordingStore()
        rows = [_row(code="T9"), _row(code="", tax_id="T9")]
        with pytest.raises(BatchDuplicateError) as exc:
            import_rows(rows, store)
        assert exc.value.codes == ["T9"]

    def test_persisted_conflict_rejects_everything(self):
        store = RecordingStore(existing={"X"})
        rows = [_row(code="A"), _row(code="X"), _row(code="B")]
        with pytest.raises(PersistedConflictError) as exc:
            import_rows(rows, store)
        assert exc.value.codes == ["X"]
        assert len(store.lookups) == 1
        assert store.insert_calls == []

    def test_single_batch_insert(self):
        store = RecordingStore()
        rows = [_row(code=f"C{i}") for i in range(5)]
        assert import_rows(rows, store) == 5
        assert len(store.insert_calls) == 1
        assert [d.customer_code for d in store.insert_calls[0]] == [f"C{i}" for i in range(5)]

    def test_invalid_rows_dropped_before_insert(self):
        store = RecordingStore()
        rows = [_row(code="A"), _row(code="B", address=""), _row(code="C")]
        assert import_rows(rows, store) == 2
        assert [d.customer_code for d in store.insert_calls[0]] == ["A", "C"]

    def test_lookup_failure(self):
        store = RecordingStore(fail_lookup=True)
        with pytest.raises(StoreError) as exc:
            import_rows([_row(code="A")], store)
        assert exc.value.stage == "conflict_lookup"
        assert store.insert_calls == []

    def test_insert_failure(self):
        store = RecordingStore(fail_insert=True)
        with pytest.raises(StoreError) as exc:
            import_rows([_row(code="A")], store)
        assert exc.value.stage == "insert"


# =====================================================================
# Full import against the database
# =====================================================================
class TestImportWithDatabase:
    def test_end_to_end(self, db):
        rows = [
            {"客戶代碼": "C1", "收貨人": "王", "地址": "台北", "統編": ""},
            {"客戶代碼": "", "收貨人": "陳", "地址": "台中", "統編": "T9"},
        ]
        assert import_rows(rows, CustomerStore(db)) == 2

        stored = {c.recipient: c for c in db.query(CustomerModel).all()}
        assert stored["王"].customer_code == "C1"
        assert stored["陳"].customer_code == "T9"
        assert stored["陳"].tax_id == "T9"
        assert all(c.id is not None and c.created_at is not None for c in stored.values())

    def test_conflict_leaves_store_untouched(self, db):
        store = CustomerStore(db)
        store.insert_one(CustomerDraft(customer_code="X", recipient="舊", address="高雄"))

        with pytest.raises(PersistedConflictError):
            import_rows([_row(code="A"), _row(code="X")], store)

        codes = [c.customer_code for c in db.query(CustomerModel).all()]
        assert codes == ["X"]
