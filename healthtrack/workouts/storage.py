# -*- coding: utf-8 -*-
"""Workouts — DB storage helpers."""

from __future__ import annotations

import json
import sqlite3
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException

from ..ai.models import WEEK_DAYS
from ..app_db import db_conn
from ..config import settings
from ..timeutil import date_prefix, day_bounds, normalize_date, normalize_timestamp, today, utc_now, week_start_sunday

_FIELDS = (
    "name",
    "description",
    "category",
    "difficulty_level",
    "estimated_duration",
    "week_days",
    "is_template",
)


def _load_days(raw: Optional[str]) -> List[str]:
    try:
        days = json.loads(raw or "[]")
    except json.JSONDecodeError:
        return []
    return [d for d in days if d in WEEK_DAYS] if isinstance(days, list) else []


def _exercises(conn: sqlite3.Connection, workout_id: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT id, name, sets, reps, load, notes, order_index
        FROM workout_exercises WHERE workout_id = ?
        ORDER BY order_index, rowid
        """,
        (workout_id,),
    ).fetchall()
    return [dict(r) for r in rows]


def _hydrate(conn: sqlite3.Connection, row: sqlite3.Row) -> Dict[str, Any]:
    item = dict(row)
    item["week_days"] = _load_days(item.get("week_days"))
    item["is_template"] = bool(item.get("is_template"))
    item["exercises"] = _exercises(conn, item["id"])
    return item


def _fetch(conn: sqlite3.Connection, user_id: str, workout_id: str) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM workouts WHERE id = ? AND user_id = ?",
        (workout_id, user_id),
    ).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Workout not found")
    return _hydrate(conn, row)


def _replace_exercises(conn: sqlite3.Connection, workout_id: str, exercises: List[Dict[str, Any]]) -> None:
    conn.execute("DELETE FROM workout_exercises WHERE workout_id = ?", (workout_id,))
    now = utc_now()
    index = 0
    for ex in exercises:
        name = (ex.get("name") or "").strip()
        if not name:
            continue
        conn.execute(
            """
            INSERT INTO workout_exercises (id, workout_id, name, sets, reps, load, notes, order_index, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(uuid4()),
                workout_id,
                name,
                int(ex.get("sets") or 3),
                int(ex.get("reps") or 10),
                ex.get("load"),
                ex.get("notes"),
                index,
                now,
            ),
        )
        index += 1


def insert_workout(conn: sqlite3.Connection, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    name = (fields.get("name") or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Workout name is required")
    workout_id = str(uuid4())
    now = utc_now()
    conn.execute(
        """
        INSERT INTO workouts (
            id, user_id, name, description, category, difficulty_level, estimated_duration,
            week_days, is_template, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            workout_id,
            user_id,
            name,
            fields.get("description"),
            fields.get("category"),
            fields.get("difficulty_level"),
            fields.get("estimated_duration"),
            json.dumps([d for d in fields.get("week_days") or [] if d in WEEK_DAYS]),
            1 if fields.get("is_template") else 0,
            now,
            now,
        ),
    )
    _replace_exercises(conn, workout_id, fields.get("exercises") or [])
    return _fetch(conn, user_id, workout_id)


def create_workout(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        return insert_workout(conn, user_id, fields)


def list_workouts(user_id: str, *, is_template: Optional[bool] = None) -> List[Dict[str, Any]]:
    sql = "SELECT * FROM workouts WHERE user_id = ?"
    params: List[Any] = [user_id]
    if is_template is not None:
        sql += " AND is_template = ?"
        params.append(1 if is_template else 0)
    sql += " ORDER BY created_at DESC, rowid DESC"
    with db_conn(settings.app_db_path) as conn:
        return [_hydrate(conn, r) for r in conn.execute(sql, params).fetchall()]


def get_workout(user_id: str, workout_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        return _fetch(conn, user_id, workout_id)


def update_workout(user_id: str, workout_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        _fetch(conn, user_id, workout_id)
        updates = {k: v for k, v in fields.items() if k in _FIELDS}
        if "name" in updates and not (updates["name"] or "").strip():
            raise HTTPException(status_code=400, detail="Workout name is required")
        if "week_days" in updates:
            updates["week_days"] = json.dumps(updates["week_days"] or [])
        if "is_template" in updates:
            updates["is_template"] = 1 if updates["is_template"] else 0
        updates["updated_at"] = utc_now()
        assignments = ", ".join(f"{k} = ?" for k in updates)
        conn.execute(
            f"UPDATE workouts SET {assignments} WHERE id = ? AND user_id = ?",
            (*updates.values(), workout_id, user_id),
        )
        if fields.get("exercises") is not None:
            _replace_exercises(conn, workout_id, fields["exercises"])
        return _fetch(conn, user_id, workout_id)


def delete_workout(user_id: str, workout_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        _fetch(conn, user_id, workout_id)
        conn.execute("DELETE FROM workouts WHERE id = ? AND user_id = ?", (workout_id, user_id))


def check_in(
    user_id: str,
    workout_id: str,
    *,
    completed_at: Optional[str] = None,
    notes: Optional[str] = None,
) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        workout = _fetch(conn, user_id, workout_id)
        record = {
            "id": str(uuid4()),
            "workout_id": workout_id,
            "workout_name": workout["name"],
            "completed_at": normalize_timestamp(completed_at, field="completed_at"),
            "notes": notes,
            "created_at": utc_now(),
        }
        conn.execute(
            """
            INSERT INTO workout_checkins (id, workout_id, user_id, completed_at, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (record["id"], workout_id, user_id, record["completed_at"], notes, record["created_at"]),
        )
    return record


def list_checkins(
    user_id: str,
    *,
    start: Optional[str] = None,
    end: Optional[str] = None,
    workout_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    clauses = ["c.user_id = ?"]
    params: List[Any] = [user_id]
    if start:
        clauses.append("substr(c.completed_at, 1, 10) >= ?")
        params.append(normalize_date(start, field="start"))
    if end:
        clauses.append("substr(c.completed_at, 1, 10) <= ?")
        params.append(normalize_date(end, field="end"))
    if workout_id:
        clauses.append("c.workout_id = ?")
        params.append(workout_id)
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            f"""
            SELECT c.*, w.name AS workout_name
            FROM workout_checkins c
            JOIN workouts w ON w.id = c.workout_id
            WHERE {' AND '.join(clauses)}
            ORDER BY c.completed_at DESC, c.rowid DESC
            """,
            params,
        ).fetchall()
        return [dict(r) for r in rows]


def delete_checkin(user_id: str, checkin_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute("DELETE FROM workout_checkins WHERE id = ? AND user_id = ?", (checkin_id, user_id))
        if cur.rowcount == 0:
            raise HTTPException(status_code=404, detail="Check-in not found")


def checkins_on(user_id: str, day: str) -> int:
    lo, hi = day_bounds(day)
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM workout_checkins WHERE user_id = ? AND completed_at >= ? AND completed_at < ?",
            (user_id, lo, hi),
        ).fetchone()
    return int(row["n"])


_DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def weekly_consistency(user_id: str, *, ref_day: Optional[str] = None) -> Dict[str, Any]:
    """Sunday..Saturday of the week holding ``ref_day`` (today by default)."""
    current = today()
    ref = date.fromisoformat(normalize_date(ref_day, field="date") if ref_day else current)
    start = week_start_sunday(ref)
    end = start + timedelta(days=6)

    checkins = list_checkins(user_id, start=start.isoformat(), end=end.isoformat())
    checked_days = {date_prefix(c["completed_at"]) for c in checkins}
    days = []
    for i in range(7):
        d = (start + timedelta(days=i)).isoformat()
        days.append({"date": d, "weekday": _DAY_NAMES[i], "has_checkin": d in checked_days, "is_today": d == current})

    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute("SELECT week_days FROM workouts WHERE user_id = ?", (user_id,)).fetchall()
    planned = sum(len(_load_days(r["week_days"])) for r in rows)

    return {
        "week_start": start.isoformat(),
        "week_end": end.isoformat(),
        "days": days,
        "completed": len(checkins),
        "planned": planned,
    }
