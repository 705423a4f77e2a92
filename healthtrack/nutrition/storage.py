# -*- coding: utf-8 -*-
"""Nutrition — DB storage helpers for meals, water and AI logs."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException

from ..app_db import db_conn
from ..config import settings
from ..timeutil import day_bounds, normalize_date, normalize_timestamp, utc_now

_MACROS = ("calories", "protein_g", "carbs_g", "fat_g")


def compute_totals(items: List[Dict[str, Any]]) -> Dict[str, float]:
    calories = 0.0
    protein = 0.0
    carbs = 0.0
    fat = 0.0
    for item in items:
        calories += float(item.get("calories") or 0.0)
        protein += float(item.get("protein_g") or 0.0)
        carbs += float(item.get("carbs_g") or 0.0)
        fat += float(item.get("fat_g") or 0.0)
    return {
        "total_calories": round(calories, 1),
        "protein_g": round(protein, 1),
        "carbs_g": round(carbs, 1),
        "fat_g": round(fat, 1),
    }


def _items(conn: sqlite3.Connection, meal_id: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT id, name, quantity, calories, protein_g, carbs_g, fat_g
        FROM nutrition_items WHERE meal_id = ? ORDER BY rowid
        """,
        (meal_id,),
    ).fetchall()
    return [dict(r) for r in rows]


def _hydrate(conn: sqlite3.Connection, row: sqlite3.Row) -> Dict[str, Any]:
    meal = dict(row)
    meal["is_ai_generated"] = bool(meal.get("is_ai_generated"))
    meal["items"] = _items(conn, meal["id"])
    return meal


def _fetch_meal(conn: sqlite3.Connection, user_id: str, meal_id: str) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM nutrition_meals WHERE id = ? AND user_id = ?",
        (meal_id, user_id),
    ).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Meal not found")
    return _hydrate(conn, row)


def insert_meal(conn: sqlite3.Connection, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    name = (fields.get("name") or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Meal name is required")
    items = [i for i in fields.get("items") or [] if (i.get("name") or "").strip()]
    for item in items:
        if any(float(item.get(k) or 0.0) < 0 for k in _MACROS):
            raise HTTPException(status_code=400, detail="Macros must be non-negative")
    totals = compute_totals(items)
    category = fields.get("category") or "livre"
    if hasattr(category, "value"):
        category = category.value

    meal_id = str(uuid4())
    now = utc_now()
    conn.execute(
        """
        INSERT INTO nutrition_meals (
            id, user_id, name, category, eaten_at, total_calories, protein_g, carbs_g, fat_g,
            notes, image_url, is_ai_generated, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            meal_id,
            user_id,
            name,
            category,
            normalize_timestamp(fields.get("eaten_at"), field="eaten_at"),
            totals["total_calories"],
            totals["protein_g"],
            totals["carbs_g"],
            totals["fat_g"],
            fields.get("notes"),
            fields.get("image_url"),
            1 if fields.get("is_ai_generated") else 0,
            now,
            now,
        ),
    )
    for item in items:
        conn.execute(
            """
            INSERT INTO nutrition_items (id, meal_id, name, quantity, calories, protein_g, carbs_g, fat_g, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(uuid4()),
                meal_id,
                item["name"].strip(),
                item.get("quantity"),
                float(item.get("calories") or 0.0),
                float(item.get("protein_g") or 0.0),
                float(item.get("carbs_g") or 0.0),
                float(item.get("fat_g") or 0.0),
                now,
            ),
        )
    return _fetch_meal(conn, user_id, meal_id)


def create_meal(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        return insert_meal(conn, user_id, fields)


def list_meals(user_id: str, *, day: Optional[str] = None) -> List[Dict[str, Any]]:
    lo, hi = day_bounds(normalize_date(day))
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT * FROM nutrition_meals
            WHERE user_id = ? AND eaten_at >= ? AND eaten_at < ?
            ORDER BY eaten_at, rowid
            """,
            (user_id, lo, hi),
        ).fetchall()
        return [_hydrate(conn, r) for r in rows]


def get_meal(user_id: str, meal_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        return _fetch_meal(conn, user_id, meal_id)


def delete_meal(user_id: str, meal_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        _fetch_meal(conn, user_id, meal_id)
        conn.execute("DELETE FROM nutrition_meals WHERE id = ? AND user_id = ?", (meal_id, user_id))


def add_water(user_id: str, *, amount_ml: int, logged_at: Optional[str] = None) -> Dict[str, Any]:
    if amount_ml <= 0:
        raise HTTPException(status_code=400, detail="amount_ml must be positive")
    record = {
        "id": str(uuid4()),
        "amount_ml": int(amount_ml),
        "logged_at": normalize_timestamp(logged_at, field="logged_at"),
        "created_at": utc_now(),
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            "INSERT INTO water_logs (id, user_id, amount_ml, logged_at, created_at) VALUES (?, ?, ?, ?, ?)",
            (record["id"], user_id, record["amount_ml"], record["logged_at"], record["created_at"]),
        )
    return record


def list_water(user_id: str, *, day: Optional[str] = None) -> List[Dict[str, Any]]:
    lo, hi = day_bounds(normalize_date(day))
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT id, amount_ml, logged_at, created_at FROM water_logs
            WHERE user_id = ? AND logged_at >= ? AND logged_at < ?
            ORDER BY logged_at, rowid
            """,
            (user_id, lo, hi),
        ).fetchall()
        return [dict(r) for r in rows]


def delete_water(user_id: str, log_id: str) -> None:
    with db_conn(settings.app_db_path) as conn:
        cur = conn.execute("DELETE FROM water_logs WHERE id = ? AND user_id = ?", (log_id, user_id))
        if cur.rowcount == 0:
            raise HTTPException(status_code=404, detail="Water log not found")


def daily_summary(user_id: str, *, day: Optional[str] = None) -> Dict[str, Any]:
    day = normalize_date(day)
    lo, hi = day_bounds(day)
    with db_conn(settings.app_db_path) as conn:
        meals = conn.execute(
            """
            SELECT COUNT(*) AS n,
                   COALESCE(SUM(total_calories), 0) AS calories,
                   COALESCE(SUM(protein_g), 0) AS protein_g,
                   COALESCE(SUM(carbs_g), 0) AS carbs_g,
                   COALESCE(SUM(fat_g), 0) AS fat_g
            FROM nutrition_meals
            WHERE user_id = ? AND eaten_at >= ? AND eaten_at < ?
            """,
            (user_id, lo, hi),
        ).fetchone()
        water = conn.execute(
            """
            SELECT COALESCE(SUM(amount_ml), 0) AS ml FROM water_logs
            WHERE user_id = ? AND logged_at >= ? AND logged_at < ?
            """,
            (user_id, lo, hi),
        ).fetchone()
    return {
        "date": day,
        "calories": round(float(meals["calories"]), 1),
        "protein_g": round(float(meals["protein_g"]), 1),
        "carbs_g": round(float(meals["carbs_g"]), 1),
        "fat_g": round(float(meals["fat_g"]), 1),
        "water_ml": int(water["ml"]),
        "meal_count": int(meals["n"]),
    }


def save_ai_logs(user_id: str, *, insights: List[str], alerts: List[str]) -> List[Dict[str, Any]]:
    now = utc_now()
    records = [{"id": str(uuid4()), "type": "insight", "suggestion_text": t, "created_at": now} for t in insights]
    records += [{"id": str(uuid4()), "type": "alert", "suggestion_text": t, "created_at": now} for t in alerts]
    if not records:
        return []
    with db_conn(settings.app_db_path) as conn:
        conn.executemany(
            "INSERT INTO nutrition_ai_logs (id, user_id, type, suggestion_text, created_at) VALUES (?, ?, ?, ?, ?)",
            [(r["id"], user_id, r["type"], r["suggestion_text"], r["created_at"]) for r in records],
        )
    return records


def list_ai_logs(user_id: str, *, log_type: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
    sql = "SELECT id, type, suggestion_text, created_at FROM nutrition_ai_logs WHERE user_id = ?"
    params: List[Any] = [user_id]
    if log_type:
        sql += " AND type = ?"
        params.append(log_type)
    sql += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
    params.append(int(limit))
    with db_conn(settings.app_db_path) as conn:
        return [dict(r) for r in conn.execute(sql, params).fetchall()]
