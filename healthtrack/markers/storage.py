# -*- coding: utf-8 -*-
"""Markers — DB storage helpers.

Functions taking ``conn`` run inside a caller's transaction (the import commit
uses them); the others open their own.
"""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException

from ..app_db import db_conn
from ..config import settings
from ..timeutil import normalize_timestamp, utc_now
from .reference import HIGH, LOW, UNKNOWN, classify

_MARKER_FIELDS = ("name", "unit", "min_reference", "max_reference", "personal_goal")

ALERT_WINDOW = 3


def _check_bounds(min_reference: Optional[float], max_reference: Optional[float]) -> None:
    if min_reference is not None and max_reference is not None and min_reference > max_reference:
        raise HTTPException(status_code=400, detail="min_reference must not exceed max_reference")


def _fetch_marker(conn: sqlite3.Connection, user_id: str, marker_id: str) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM health_markers WHERE id = ? AND user_id = ?",
        (marker_id, user_id),
    ).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Marker not found")
    return dict(row)


def _latest_value(conn: sqlite3.Connection, marker_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        """
        SELECT * FROM health_marker_values
        WHERE marker_id = ?
        ORDER BY measured_at DESC, rowid DESC
        LIMIT 1
        """,
        (marker_id,),
    ).fetchone()
    return dict(row) if row else None


def _with_latest(conn: sqlite3.Connection, marker: Dict[str, Any]) -> Dict[str, Any]:
    latest = _latest_value(conn, marker["id"])
    marker["latest_value"] = latest
    marker["status"] = classify(
        latest["value"] if latest else None,
        marker.get("min_reference"),
        marker.get("max_reference"),
    )
    return marker


def find_marker_by_name(conn: sqlite3.Connection, user_id: str, name: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT * FROM health_markers WHERE user_id = ? AND name = ? COLLATE NOCASE",
        (user_id, name.strip()),
    ).fetchone()
    return dict(row) if row else None


def insert_marker(conn: sqlite3.Connection, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    _check_bounds(fields.get("min_reference"), fields.get("max_reference"))
    if find_marker_by_name(conn, user_id, fields["name"]):
        raise HTTPException(status_code=409, detail=f"Marker '{fields['name']}' already exists")

    now = utc_now()
    marker = {
        "id": str(uuid4()),
        "user_id": user_id,
        "name": fields["name"].strip(),
        "unit": (fields.get("unit") or "").strip(),
        "min_reference": fields.get("min_reference"),
        "max_reference": fields.get("max_reference"),
        "personal_goal": fields.get("personal_goal"),
        "created_at": now,
        "updated_at": now,
    }
    conn.execute(
        """
        INSERT INTO health_markers (
            id, user_id, name, unit, min_reference, max_reference, personal_goal, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        tuple(marker[k] for k in (
            "id", "user_id", "name", "unit", "min_reference", "max_reference", "personal_goal", "created_at", "updated_at"
        )),
    )
    return marker


def insert_value(
    conn: sqlite3.Connection,
    user_id: str,
    marker_id: str,
    *,
    value: float,
    measured_at: Optional[str] = None,
    notes: Optional[str] = None,
    supplement_intervention_id: Optional[str] = None,
) -> Dict[str, Any]:
    if value < 0:
        raise HTTPException(status_code=400, detail="value must be non-negative")
    if supplement_intervention_id:
        owned = conn.execute(
            "SELECT 1 FROM supplements WHERE id = ? AND user_id = ?",
            (supplement_intervention_id, user_id),
        ).fetchone()
        if not owned:
            raise HTTPException(status_code=404, detail="Supplement not found")

    record = {
        "id": str(uuid4()),
        "marker_id": marker_id,
        "value": float(value),
        "measured_at": normalize_timestamp(measured_at, field="measured_at"),
        "notes": notes,
        "supplement_intervention_id": supplement_intervention_id or None,
        "created_at": utc_now(),
    }
    conn.execute(
        """
        INSERT INTO health_marker_values (
            id, marker_id, value, measured_at, notes, supplement_intervention_id, created_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (
            record["id"],
            record["marker_id"],
            record["value"],
            record["measured_at"],
            record["notes"],
            record["supplement_intervention_id"],
            record["created_at"],
        ),
    )
    return record


def create_marker(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        marker = insert_marker(conn, user_id, fields)
        return _with_latest(conn, marker)


def list_markers(user_id: str) -> List[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            "SELECT * FROM health_markers WHERE user_id = ? ORDER BY name COLLATE NOCASE",
            (user_id,),
        ).fetchall()
        return [_with_latest(conn, dict(r)) for r in rows]


def get_marker(user_id: str, marker_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        return _with_latest(conn, _fetch_marker(conn, user_id, marker_id))


def update_marker(user_id: str, marker_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        current = _fetch_marker(conn, user_id, marker_id)
        updates = {k: v for k, v in fields.items() if k in _MARKER_FIELDS}
        for key in ("name", "unit"):
            if key in updates and updates[key] is None:
                raise HTTPException(status_code=400, detail=f"{key} must not be null")
        merged = {**current, **updates}
        _check_bounds(merged.get("min_reference"), merged.get("max_reference"))

        if updates.get("name") and updates["name"].lower() != current["name"].lower():
            clash = find_marker_by_name(conn, user_id, updates["name"])
            if clash and clash["id"] != marker_id:
                raise HTTPException(status_code=409, detail=f"Marker '{updates['name']}' already exists")

        if updates:
            updates["updated_at"] = utc_now()
            assignments = ", ".join(f"{k} = ?" for k in updates)
            conn.execute(
                f"UPDATE health_markers SET {assignments} WHERE id = ? AND user_id = ?",
                (*updates.values(), marker_id, user_id),
            )
        return _with_latest(conn, _fetch_marker(conn, user_id, marker_id))


def delete_marker(user_id: str, marker_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        _fetch_marker(conn, user_id, marker_id)
        conn.execute("DELETE FROM health_markers WHERE id = ? AND user_id = ?", (marker_id, user_id))


def add_value(user_id: str, marker_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        _fetch_marker(conn, user_id, marker_id)
        return insert_value(
            conn,
            user_id,
            marker_id,
            value=fields["value"],
            measured_at=fields.get("measured_at"),
            notes=fields.get("notes"),
            supplement_intervention_id=fields.get("supplement_intervention_id"),
        )


def list_values(
    user_id: str,
    marker_id: str,
    *,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Values in chart order: ``measured_at`` ascending, insertion order on ties."""
    clauses = ["marker_id = ?"]
    params: List[Any] = [marker_id]
    if start:
        clauses.append("substr(measured_at, 1, 10) >= ?")
        params.append(start[:10])
    if end:
        clauses.append("substr(measured_at, 1, 10) <= ?")
        params.append(end[:10])
    with db_conn(settings.app_db_path) as conn:
        _fetch_marker(conn, user_id, marker_id)
        rows = conn.execute(
            f"SELECT * FROM health_marker_values WHERE {' AND '.join(clauses)} ORDER BY measured_at ASC, rowid ASC",
            params,
        ).fetchall()
        return [dict(r) for r in rows]


def delete_value(user_id: str, marker_id: str, value_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        _fetch_marker(conn, user_id, marker_id)
        cur = conn.execute(
            "DELETE FROM health_marker_values WHERE id = ? AND marker_id = ?",
            (value_id, marker_id),
        )
        if cur.rowcount == 0:
            raise HTTPException(status_code=404, detail="Value not found")


def _alerts_for(marker: Dict[str, Any], recent: List[float]) -> List[Dict[str, Any]]:
    if len(recent) < ALERT_WINDOW:
        return []
    alerts: List[Dict[str, Any]] = []
    statuses = [classify(v, marker.get("min_reference"), marker.get("max_reference")) for v in recent]
    if UNKNOWN not in statuses and all(s in (LOW, HIGH) for s in statuses):
        alerts.append(
            {
                "marker_id": marker["id"],
                "marker_name": marker["name"],
                "level": "warning",
                "message": (
                    f"Suas últimas {len(recent)} medições estão fora da faixa de referência. "
                    "Considere discutir com seu médico."
                ),
                "values": recent,
            }
        )
    goal = marker.get("personal_goal")
    if goal is not None and all(v < goal for v in recent):
        alerts.append(
            {
                "marker_id": marker["id"],
                "marker_name": marker["name"],
                "level": "info",
                "message": f"Você não atingiu sua meta pessoal nas últimas {len(recent)} medições.",
                "values": recent,
            }
        )
    return alerts


def _recent_values(conn: sqlite3.Connection, marker_id: str) -> List[float]:
    rows = conn.execute(
        """
        SELECT value FROM health_marker_values
        WHERE marker_id = ?
        ORDER BY measured_at DESC, rowid DESC
        LIMIT ?
        """,
        (marker_id, ALERT_WINDOW),
    ).fetchall()
    # oldest first, like the chart
    return [float(r["value"]) for r in reversed(rows)]


def marker_alerts(user_id: str, marker_id: Optional[str] = None) -> List[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        if marker_id:
            markers = [_fetch_marker(conn, user_id, marker_id)]
        else:
            markers = [
                dict(r)
                for r in conn.execute(
                    "SELECT * FROM health_markers WHERE user_id = ? ORDER BY name COLLATE NOCASE",
                    (user_id,),
                ).fetchall()
            ]
        alerts: List[Dict[str, Any]] = []
        for marker in markers:
            alerts.extend(_alerts_for(marker, _recent_values(conn, marker["id"])))
        return alerts
