# -*- coding: utf-8 -*-
"""Auth — DB storage helpers."""

from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings
from ..timeutil import utc_now


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM users WHERE email = ?", (email.lower().strip(),)).fetchone()
        return dict(row) if row else None


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return dict(row) if row else None


def create_user(*, email: str, password_hash: str, full_name: Optional[str] = None) -> Dict[str, Any]:
    user_id = str(uuid4())
    now = utc_now()
    email_norm = email.lower().strip()
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            "INSERT INTO users (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
            (user_id, email_norm, password_hash, now),
        )
        conn.execute(
            "INSERT INTO profiles (user_id, full_name, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (user_id, full_name, now, now),
        )
    return {"id": user_id, "email": email_norm, "password_hash": password_hash, "created_at": now}


def get_profile(user_id: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
        return dict(row) if row else None


def update_profile(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    now = utc_now()
    with db_conn(settings.app_db_path) as conn:
        existing = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
        if not existing:
            conn.execute(
                "INSERT INTO profiles (user_id, created_at, updated_at) VALUES (?, ?, ?)",
                (user_id, now, now),
            )
        for key in ("full_name", "phone", "avatar_url"):
            if key in fields:
                conn.execute(f"UPDATE profiles SET {key} = ? WHERE user_id = ?", (fields[key], user_id))
        conn.execute("UPDATE profiles SET updated_at = ? WHERE user_id = ?", (now, user_id))
        row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
    return dict(row)
