# -*- coding: utf-8 -*-
"""Timestamp helpers shared by the storage modules.

Timestamps are stored as UTC ISO-8601 strings ending in ``Z`` so that plain
string comparison in SQL orders them chronologically. Dates are ``YYYY-MM-DD``.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from fastapi import HTTPException


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def date_prefix(iso8601: str) -> str:
    return (iso8601 or "")[:10]


def parse_iso(iso8601: str) -> Optional[datetime]:
    if not iso8601:
        return None
    value = iso8601.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_timestamp(value: Optional[str], *, field: str = "timestamp") -> str:
    """Return ``value`` as a UTC ``...Z`` timestamp, or now when empty.

    A bare date becomes midnight UTC of that day.
    """
    if value is None or not str(value).strip():
        return utc_now()
    parsed = parse_iso(str(value))
    if parsed is None:
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {value!r}")
    return parsed.isoformat(timespec="seconds").replace("+00:00", "Z")


def normalize_date(value: Optional[str], *, field: str = "date") -> str:
    if value is None or not str(value).strip():
        return today()
    try:
        return date.fromisoformat(str(value).strip()[:10]).isoformat()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {field}: {value!r}") from exc


def day_bounds(day: str) -> tuple[str, str]:
    """Inclusive lower / exclusive upper timestamp bounds for a calendar day."""
    d = date.fromisoformat(normalize_date(day))
    nxt = d + timedelta(days=1)
    return f"{d.isoformat()}T00:00:00Z", f"{nxt.isoformat()}T00:00:00Z"


def iter_days(start: str, end: str) -> List[str]:
    try:
        s = date.fromisoformat(start[:10])
        e = date.fromisoformat(end[:10])
    except ValueError:
        return []
    if e < s:
        return []
    days: List[str] = []
    cur = s
    while cur <= e:
        days.append(cur.isoformat())
        cur = cur + timedelta(days=1)
    return days


def week_start_sunday(ref: date) -> date:
    # date.weekday(): Monday=0 .. Sunday=6
    return ref - timedelta(days=(ref.weekday() + 1) % 7)
