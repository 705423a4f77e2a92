# -*- coding: utf-8 -*-
"""Supplements — DB storage helpers."""

from __future__ import annotations

import sqlite3
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException

from ..app_db import db_conn
from ..config import settings
from ..timeutil import iter_days, normalize_date, today, utc_now

_FIELDS = (
    "name",
    "dosage",
    "form",
    "frequency",
    "start_date",
    "end_date",
    "is_active",
    "linked_marker_id",
    "notes",
)

WEEK_DAYS = 7


def _row(row: sqlite3.Row) -> Dict[str, Any]:
    item = dict(row)
    item["is_active"] = bool(item.get("is_active"))
    return item


def _fetch(conn: sqlite3.Connection, user_id: str, supplement_id: str) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM supplements WHERE id = ? AND user_id = ?",
        (supplement_id, user_id),
    ).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Supplement not found")
    return _row(row)


def _check_marker(conn: sqlite3.Connection, user_id: str, marker_id: Optional[str]) -> None:
    if not marker_id:
        return
    owned = conn.execute(
        "SELECT 1 FROM health_markers WHERE id = ? AND user_id = ?",
        (marker_id, user_id),
    ).fetchone()
    if not owned:
        raise HTTPException(status_code=404, detail="Linked marker not found")


def _check_name(conn: sqlite3.Connection, user_id: str, name: str, exclude_id: Optional[str] = None) -> None:
    row = conn.execute(
        "SELECT id FROM supplements WHERE user_id = ? AND name = ? COLLATE NOCASE",
        (user_id, name),
    ).fetchone()
    if row and row["id"] != exclude_id:
        raise HTTPException(status_code=409, detail=f"Supplement '{name}' already exists")


def _clean_dates(fields: Dict[str, Any]) -> Dict[str, Any]:
    for key in ("start_date", "end_date"):
        if fields.get(key):
            fields[key] = normalize_date(fields[key], field=key)
    if fields.get("start_date") and fields.get("end_date") and fields["end_date"] < fields["start_date"]:
        raise HTTPException(status_code=400, detail="end_date must not precede start_date")
    return fields


def create_supplement(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    values = _clean_dates({k: fields.get(k) for k in _FIELDS})
    values["linked_marker_id"] = values.get("linked_marker_id") or None
    now = utc_now()
    supplement_id = str(uuid4())
    with db_conn(settings.app_db_path) as conn:
        _check_name(conn, user_id, values["name"])
        _check_marker(conn, user_id, values["linked_marker_id"])
        conn.execute(
            """
            INSERT INTO supplements (
                id, user_id, name, dosage, form, frequency, start_date, end_date,
                is_active, linked_marker_id, notes, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                supplement_id,
                user_id,
                values["name"],
                values["dosage"],
                values["form"],
                values["frequency"],
                values["start_date"],
                values["end_date"],
                1 if values.get("is_active", True) is not False else 0,
                values["linked_marker_id"],
                values["notes"],
                now,
                now,
            ),
        )
        return _fetch(conn, user_id, supplement_id)


def list_supplements(user_id: str, *, active: Optional[bool] = None) -> List[Dict[str, Any]]:
    sql = "SELECT * FROM supplements WHERE user_id = ?"
    params: List[Any] = [user_id]
    if active is not None:
        sql += " AND is_active = ?"
        params.append(1 if active else 0)
    sql += " ORDER BY is_active DESC, name COLLATE NOCASE"
    with db_conn(settings.app_db_path) as conn:
        return [_row(r) for r in conn.execute(sql, params).fetchall()]


def get_supplement(user_id: str, supplement_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        return _fetch(conn, user_id, supplement_id)


def update_supplement(user_id: str, supplement_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        current = _fetch(conn, user_id, supplement_id)
        updates = {k: v for k, v in fields.items() if k in _FIELDS}
        if "name" in updates:
            if not updates["name"] or not str(updates["name"]).strip():
                raise HTTPException(status_code=400, detail="name must not be empty")
            updates["name"] = str(updates["name"]).strip()
            _check_name(conn, user_id, updates["name"], exclude_id=supplement_id)
        if "linked_marker_id" in updates:
            updates["linked_marker_id"] = updates["linked_marker_id"] or None
            _check_marker(conn, user_id, updates["linked_marker_id"])
        if "is_active" in updates:
            updates["is_active"] = 1 if updates["is_active"] else 0
        merged = _clean_dates({**current, **updates})
        for key in ("start_date", "end_date"):
            if key in updates:
                updates[key] = merged[key]

        if updates:
            updates["updated_at"] = utc_now()
            assignments = ", ".join(f"{k} = ?" for k in updates)
            conn.execute(
                f"UPDATE supplements SET {assignments} WHERE id = ? AND user_id = ?",
                (*updates.values(), supplement_id, user_id),
            )
        return _fetch(conn, user_id, supplement_id)


def delete_supplement(user_id: str, supplement_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        _fetch(conn, user_id, supplement_id)
        conn.execute("DELETE FROM supplements WHERE id = ? AND user_id = ?", (supplement_id, user_id))


def log_usage(
    user_id: str,
    supplement_id: str,
    *,
    dates: List[str],
    dose: Optional[str] = None,
    notes: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """One log row per distinct date; all or nothing."""
    days = sorted({normalize_date(d, field="date") for d in dates}) if dates else [today()]
    now = utc_now()
    with db_conn(settings.app_db_path) as conn:
        supplement = _fetch(conn, user_id, supplement_id)
        effective_dose = dose if dose else supplement.get("dosage")
        logs = []
        for day in days:
            log = {
                "id": str(uuid4()),
                "supplement_id": supplement_id,
                "supplement_name": supplement["name"],
                "taken_at": day,
                "dose": effective_dose,
                "notes": notes,
                "created_at": now,
            }
            conn.execute(
                """
                INSERT INTO supplement_logs (id, supplement_id, user_id, taken_at, dose, notes, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (log["id"], supplement_id, user_id, day, effective_dose, notes, now),
            )
            logs.append(log)
    return logs


def list_logs(
    user_id: str,
    *,
    supplement_id: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
    limit: int = 100,
) -> List[Dict[str, Any]]:
    clauses = ["l.user_id = ?"]
    params: List[Any] = [user_id]
    if supplement_id:
        clauses.append("l.supplement_id = ?")
        params.append(supplement_id)
    if start:
        clauses.append("l.taken_at >= ?")
        params.append(normalize_date(start, field="start"))
    if end:
        clauses.append("l.taken_at <= ?")
        params.append(normalize_date(end, field="end"))
    params.append(int(limit))
    with db_conn(settings.app_db_path) as conn:
        if supplement_id:
            _fetch(conn, user_id, supplement_id)
        rows = conn.execute(
            f"""
            SELECT l.*, s.name AS supplement_name
            FROM supplement_logs l
            JOIN supplements s ON s.id = l.supplement_id
            WHERE {' AND '.join(clauses)}
            ORDER BY l.taken_at DESC, l.created_at DESC
            LIMIT ?
            """,
            params,
        ).fetchall()
        return [dict(r) for r in rows]


def delete_log(user_id: str, log_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute("DELETE FROM supplement_logs WHERE id = ? AND user_id = ?", (log_id, user_id))
        if cur.rowcount == 0:
            raise HTTPException(status_code=404, detail="Log not found")


def _counts_by_day(
    user_id: str, start: str, end: str, supplement_id: Optional[str]
) -> Dict[str, int]:
    sql = """
        SELECT taken_at, COUNT(*) AS n FROM supplement_logs
        WHERE user_id = ? AND taken_at >= ? AND taken_at <= ?
    """
    params: List[Any] = [user_id, start, end]
    if supplement_id:
        sql += " AND supplement_id = ?"
        params.append(supplement_id)
    sql += " GROUP BY taken_at"
    with db_conn(settings.app_db_path) as conn:
        if supplement_id:
            _fetch(conn, user_id, supplement_id)
        return {r["taken_at"]: int(r["n"]) for r in conn.execute(sql, params).fetchall()}


def usage_history(
    user_id: str,
    *,
    start: str,
    end: str,
    supplement_id: Optional[str] = None,
) -> Dict[str, Any]:
    start = normalize_date(start, field="start")
    end = normalize_date(end, field="end")
    if end < start:
        raise HTTPException(status_code=400, detail="end must not precede start")
    counts = _counts_by_day(user_id, start, end, supplement_id)
    days = [{"date": d, "has_usage": counts.get(d, 0) > 0, "count": counts.get(d, 0)} for d in iter_days(start, end)]
    return {"start": start, "end": end, "days": days}


def weekly_usage(
    user_id: str,
    *,
    supplement_id: Optional[str] = None,
    ref_day: Optional[str] = None,
) -> Dict[str, Any]:
    """Today and the six days before it, oldest first."""
    end = date.fromisoformat(normalize_date(ref_day, field="date"))
    start = end - timedelta(days=WEEK_DAYS - 1)
    history = usage_history(user_id, start=start.isoformat(), end=end.isoformat(), supplement_id=supplement_id)
    used = sum(1 for d in history["days"] if d["has_usage"])
    return {
        "supplement_id": supplement_id,
        "days": history["days"],
        "days_with_usage": used,
        "adherence": round(used / WEEK_DAYS * 100),
    }
