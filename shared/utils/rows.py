"""
shared/utils/rows.py
Turn ORM rows into JSON-ready dicts for list views and exports.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Optional

from sqlalchemy import inspect


def to_json_value(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Enum):
        return value.value
    return value


def row_to_dict(obj: Any) -> dict:
    """Every mapped column of obj, keyed by attribute name."""
    return {
        attr.key: to_json_value(getattr(obj, attr.key))
        for attr in inspect(obj).mapper.column_attrs
    }


def user_summary(user: Any, fields: Iterable[str] = ("full_name", "phone")) -> Optional[dict]:
    """The nested `user` block shown next to a record, or None when unlinked."""
    if user is None:
        return None
    return {field: to_json_value(getattr(user, field)) for field in fields}


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)
