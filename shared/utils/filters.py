"""
shared/utils/filters.py
Pure, in-memory filtering for the list views.

Every filter takes the serialized rows of one table and returns a new list
holding the rows that satisfy all active predicates. Input rows are never
modified. Free-text search is a case-insensitive substring match OR'ed
across a fixed set of fields; select filters are exact matches and are
switched off by None, "" or "all".
"""

from datetime import date
from typing import Any, Callable, Iterable, Optional, Sequence

from shared.utils.rows import parse_timestamp

ALL = "all"

Row = dict
Predicate = Callable[[Row], bool]


def get_field(row: Row, path: str) -> Any:
    """Read a dotted path such as "user.full_name"; missing links give None."""
    value: Any = row
    for key in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def is_active(selected: Optional[str]) -> bool:
    return selected not in (None, "", ALL)


def text_matches(row: Row, query: Optional[str], fields: Sequence[str]) -> bool:
    if not query:
        return True
    needle = query.lower()
    for field in fields:
        value = get_field(row, field)
        if value is not None and needle in str(value).lower():
            return True
    return False


def choice_matches(row: Row, field: str, selected: Optional[str], *, ignore_case: bool = False) -> bool:
    if not is_active(selected):
        return True
    value = get_field(row, field)
    if value is None:
        return False
    if ignore_case:
        return str(value).lower() == selected.lower()
    return str(value) == selected


def flag_matches(row: Row, field: str, selected: Optional[str], on: str, off: str) -> bool:
    """Two-valued select over a boolean column, e.g. verified/unverified."""
    if not is_active(selected):
        return True
    if selected == on:
        return bool(get_field(row, field))
    if selected == off:
        return not get_field(row, field)
    return False


def apply_filters(rows: Iterable[Row], predicates: Iterable[Predicate]) -> list[Row]:
    checks = list(predicates)
    return [row for row in rows if all(check(row) for check in checks)]


# ── Per-view filters ─────────────────────────────────────────

USER_SEARCH_FIELDS = ("full_name", "phone", "email")
MATRIMONIAL_SEARCH_FIELDS = ("user.full_name", "city")
JOB_SEARCH_FIELDS = ("title", "location")
EVENT_SEARCH_FIELDS = ("title", "user.full_name")
DONOR_SEARCH_FIELDS = ("user.full_name", "user.phone", "city")
DONATION_SEARCH_FIELDS = ("donor_name", "transaction_id", "upi_ref")


def filter_users(
    rows: Iterable[Row],
    q: Optional[str] = None,
    verification: Optional[str] = None,
    role: Optional[str] = None,
) -> list[Row]:
    return apply_filters(rows, [
        lambda r: text_matches(r, q, USER_SEARCH_FIELDS),
        lambda r: flag_matches(r, "is_verified", verification, "verified", "unverified"),
        lambda r: flag_matches(r, "is_admin", role, "admin", "user"),
    ])


def filter_matrimonial(
    rows: Iterable[Row],
    q: Optional[str] = None,
    status: Optional[str] = None,
    gender: Optional[str] = None,
) -> list[Row]:
    return apply_filters(rows, [
        lambda r: text_matches(r, q, MATRIMONIAL_SEARCH_FIELDS),
        lambda r: choice_matches(r, "status", status),
        lambda r: choice_matches(r, "gender", gender, ignore_case=True),
    ])


def filter_jobs(rows: Iterable[Row], q: Optional[str] = None, status: Optional[str] = None) -> list[Row]:
    return apply_filters(rows, [
        lambda r: text_matches(r, q, JOB_SEARCH_FIELDS),
        lambda r: choice_matches(r, "status", status),
    ])


def _event_type_matches(row: Row, event_type: Optional[str]) -> bool:
    if event_type == "announcement":
        return bool(row.get("is_announcement"))
    return choice_matches(row, "event_type", event_type)


def filter_events(
    rows: Iterable[Row],
    q: Optional[str] = None,
    status: Optional[str] = None,
    event_type: Optional[str] = None,
) -> list[Row]:
    return apply_filters(rows, [
        lambda r: text_matches(r, q, EVENT_SEARCH_FIELDS),
        lambda r: choice_matches(r, "status", status),
        lambda r: _event_type_matches(r, event_type),
    ])


def filter_blood_donors(
    rows: Iterable[Row],
    q: Optional[str] = None,
    blood_group: Optional[str] = None,
    city: Optional[str] = None,
    availability: Optional[str] = None,
) -> list[Row]:
    return apply_filters(rows, [
        lambda r: text_matches(r, q, DONOR_SEARCH_FIELDS),
        lambda r: choice_matches(r, "blood_group", blood_group),
        lambda r: choice_matches(r, "city", city),
        lambda r: flag_matches(r, "is_available", availability, "available", "unavailable"),
    ])


def _donated_on(row: Row) -> Optional[date]:
    donated_at = parse_timestamp(row.get("donated_at"))
    return donated_at.date() if donated_at else None


def filter_donations(
    rows: Iterable[Row],
    q: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> list[Row]:
    def in_range(row: Row) -> bool:
        day = _donated_on(row)
        if day is None:
            return date_from is None and date_to is None
        if date_from and day < date_from:
            return False
        if date_to and day > date_to:
            return False
        return True

    return apply_filters(rows, [
        lambda r: text_matches(r, q, DONATION_SEARCH_FIELDS),
        in_range,
    ])


def filter_by_status(rows: Iterable[Row], status: Optional[str] = None) -> list[Row]:
    return apply_filters(rows, [lambda r: choice_matches(r, "status", status)])


def count_by_status(rows: Sequence[Row], statuses: Iterable[str]) -> dict[str, int]:
    counts = {"total": len(rows)}
    for status in statuses:
        counts[status] = sum(1 for r in rows if r.get("status") == status)
    return counts
