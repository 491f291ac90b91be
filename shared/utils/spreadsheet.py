"""
shared/utils/spreadsheet.py
Read an uploaded member list (.xlsx or .csv) into MemberRow objects.

Headers are matched case-insensitively, with spaces and underscores treated
alike, against a small alias table. Rows without a phone number are
dropped; nothing else is validated.
"""

import csv
import io
from typing import Any, Iterable, Iterator

import openpyxl

from shared.schemas.schemas import MemberRow

COLUMN_ALIASES = {
    "phone": ("phone",),
    "full_name": ("full_name", "name"),
    "city": ("city",),
    "gotra": ("gotra",),
}


class UnsupportedFileType(ValueError):
    pass


def normalize_header(header: Any) -> str:
    return str(header or "").strip().lower().replace(" ", "_")


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    # Excel stores phone numbers as floats
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def to_member(raw: dict) -> MemberRow:
    """raw is keyed by normalized header."""
    values = {}
    for field, aliases in COLUMN_ALIASES.items():
        values[field] = next((raw[a] for a in aliases if raw.get(a)), "")
    return MemberRow(**values)


def _xlsx_rows(content: bytes) -> Iterator[dict]:
    wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        rows = ws.iter_rows(values_only=True)
        headers = [normalize_header(h) for h in next(rows, ())]
        for values in rows:
            if values is None or all(v is None for v in values):
                continue
            yield {h: cell_text(v) for h, v in zip(headers, values) if h}
    finally:
        wb.close()


def _csv_rows(content: bytes) -> Iterator[dict]:
    text = content.decode("utf-8-sig", errors="ignore")
    for r in csv.DictReader(io.StringIO(text)):
        yield {normalize_header(k): cell_text(v) for k, v in r.items() if k}


def read_rows(filename: str, content: bytes) -> list[dict]:
    name = (filename or "").lower()
    if name.endswith(".xlsx"):
        return list(_xlsx_rows(content))
    if name.endswith(".csv"):
        return list(_csv_rows(content))
    raise UnsupportedFileType("Unsupported file type. Use .csv or .xlsx")


def parse_members(raw_rows: Iterable[dict]) -> tuple[int, list[MemberRow]]:
    """Returns (rows read, members with a phone)."""
    members = [to_member(r) for r in raw_rows]
    return len(members), [m for m in members if m.phone]
