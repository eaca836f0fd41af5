"""
Spreadsheet reader — uploaded file bytes → ordered raw row mappings.

The first row is the header. No guarantee is made about which columns exist;
downstream stages must tolerate missing and extra keys.
"""
from __future__ import annotations

import csv
import io
import logging
import os
import zipfile
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.customers.pipeline.errors import UnreadableFileError

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = {".xlsx", ".xlsm"}
CSV_EXTENSIONS = {".csv"}
SUPPORTED_EXTENSIONS = EXCEL_EXTENSIONS | CSV_EXTENSIONS
LEGACY_EXCEL_EXTENSIONS = {".xls"}

RowMapping = dict[str, Any]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _rows_to_mappings(rows: list[tuple]) -> list[RowMapping]:
    if not rows:
        return []
    header = [str(c).strip() if c is not None else "" for c in rows[0]]
    mappings: list[RowMapping] = []
    for row in rows[1:]:
        if all(_is_blank(c) for c in row):
            continue
        mapping: RowMapping = {}
        for key, value in zip(header, row):
            if key and value is not None:
                mapping[key] = value
        mappings.append(mapping)
    return mappings


def _read_excel(content: bytes) -> list[RowMapping]:
    wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        rows = list(ws.iter_rows(values_only=True))
    finally:
        wb.close()
    return _rows_to_mappings(rows)


def _read_csv(content: bytes) -> list[RowMapping]:
    text = content.decode("utf-8-sig")
    rows = [tuple(r) for r in csv.reader(io.StringIO(text))]
    return _rows_to_mappings(rows)


def read_rows(filename: str, content: bytes) -> list[RowMapping]:
    """Parse *content* according to the extension of *filename*."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext in LEGACY_EXCEL_EXTENSIONS:
        raise UnreadableFileError("不支援舊版 Excel (.xls) 檔案，請另存為 .xlsx 後再上傳")
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnreadableFileError(
            f"不支援的檔案格式：{ext or '(無副檔名)'}，請上傳 {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    try:
        if ext in EXCEL_EXTENSIONS:
            rows = _read_excel(content)
        else:
            rows = _read_csv(content)
    except (InvalidFileException, zipfile.BadZipFile, UnicodeDecodeError, csv.Error, KeyError, ValueError) as e:
        logger.warning("Could not parse %s: %s", filename, e)
        raise UnreadableFileError() from e

    logger.info("Read %d rows from %s", len(rows), filename)
    return rows
