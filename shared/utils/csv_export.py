"""
shared/utils/csv_export.py
CSV downloads built from the filtered rows already in memory.
"""

import csv
import io
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from fastapi import Response


def to_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """Header line plus one line per row; every field quoted."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(row)
    return output.getvalue()


def dated_filename(prefix: str, extension: str) -> str:
    today = datetime.now(timezone.utc).date().isoformat()
    return f"{prefix}-{today}.{extension}"


def csv_response(prefix: str, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> Response:
    resp = Response(content=to_csv(headers, rows), media_type="text/csv")
    resp.headers["Content-Disposition"] = f"attachment; filename={dated_filename(prefix, 'csv')}"
    return resp
