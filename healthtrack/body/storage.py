# -*- coding: utf-8 -*-
"""Body composition — derivations and DB storage helpers."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException

from ..app_db import db_conn
from ..config import settings
from ..timeutil import normalize_timestamp, utc_now

COMPARED_FIELDS = (
    "weight_kg",
    "imc",
    "fat_percent",
    "fat_weight_kg",
    "lean_mass_kg",
    "water_percent",
    "basal_metabolic_rate",
)


def derive_composition(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Fill imc / fat_weight_kg / lean_mass_kg from weight, height and fat %.

    Values the caller supplied are kept as given.
    """
    out = dict(fields)
    weight = out.get("weight_kg")
    if not weight or weight <= 0:
        raise HTTPException(status_code=400, detail="weight_kg must be positive")

    height = out.get("height_m")
    if out.get("imc") is None and height:
        out["imc"] = round(weight / (height * height), 2)

    fat_percent = out.get("fat_percent")
    if fat_percent is not None and out.get("fat_weight_kg") is None:
        out["fat_weight_kg"] = round(weight * fat_percent / 100.0, 2)
    if out.get("fat_weight_kg") is not None and out["fat_weight_kg"] > weight:
        raise HTTPException(status_code=400, detail="fat_weight_kg must not exceed weight_kg")
    if fat_percent is not None and out.get("lean_mass_kg") is None:
        out["lean_mass_kg"] = round(weight - out["fat_weight_kg"], 2)
    return out


def _segments(conn: sqlite3.Connection, measurement_id: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT id, region, lean_mass_kg, fat_mass_kg FROM body_segments WHERE measurement_id = ? ORDER BY rowid",
        (measurement_id,),
    ).fetchall()
    return [dict(r) for r in rows]


def _fetch(conn: sqlite3.Connection, user_id: str, measurement_id: str) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM body_measurements WHERE id = ? AND user_id = ?",
        (measurement_id, user_id),
    ).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Measurement not found")
    item = dict(row)
    item["segments"] = _segments(conn, measurement_id)
    return item


def create_measurement(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    values = derive_composition(fields)
    measurement_id = str(uuid4())
    now = utc_now()
    segments = [
        s for s in values.get("segments") or []
        if s.get("lean_mass_kg") is not None or s.get("fat_mass_kg") is not None
    ]
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO body_measurements (
                id, user_id, measured_at, weight_kg, height_m, imc, fat_percent, fat_weight_kg,
                lean_mass_kg, water_percent, basal_metabolic_rate, attachment_url, notes, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                measurement_id,
                user_id,
                normalize_timestamp(values.get("measured_at"), field="measured_at"),
                values["weight_kg"],
                values.get("height_m"),
                values.get("imc"),
                values.get("fat_percent"),
                values.get("fat_weight_kg"),
                values.get("lean_mass_kg"),
                values.get("water_percent"),
                values.get("basal_metabolic_rate"),
                values.get("attachment_url"),
                values.get("notes"),
                now,
                now,
            ),
        )
        for seg in segments:
            conn.execute(
                """
                INSERT INTO body_segments (id, measurement_id, region, lean_mass_kg, fat_mass_kg, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (str(uuid4()), measurement_id, seg["region"], seg.get("lean_mass_kg"), seg.get("fat_mass_kg"), now),
            )
        return _fetch(conn, user_id, measurement_id)


def list_measurements(user_id: str, *, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    sql = "SELECT id FROM body_measurements WHERE user_id = ? ORDER BY measured_at DESC, rowid DESC"
    params: List[Any] = [user_id]
    if limit:
        sql += " LIMIT ?"
        params.append(int(limit))
    with db_conn(settings.app_db_path) as conn:
        return [_fetch(conn, user_id, r["id"]) for r in conn.execute(sql, params).fetchall()]


def get_measurement(user_id: str, measurement_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        return _fetch(conn, user_id, measurement_id)


def delete_measurement(user_id: str, measurement_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        _fetch(conn, user_id, measurement_id)
        conn.execute("DELETE FROM body_measurements WHERE id = ? AND user_id = ?", (measurement_id, user_id))


def compare_latest(user_id: str) -> Dict[str, Any]:
    recent = list_measurements(user_id, limit=2)
    latest = recent[0] if recent else None
    previous = recent[1] if len(recent) > 1 else None
    differences: Dict[str, Optional[float]] = {}
    if latest and previous:
        for key in COMPARED_FIELDS:
            a, b = latest.get(key), previous.get(key)
            differences[key] = round(a - b, 2) if a is not None and b is not None else None
    return {"latest": latest, "previous": previous, "differences": differences}
