# -*- coding: utf-8 -*-
"""Imports — staged drafts (SQLite) and the commit that turns them into records.

A draft is only written once the AI output parsed; review edits rewrite the
payload in place; commit performs every insert of the draft inside one
transaction and flips the status, so a failure leaves neither records nor a
committed status behind.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException
from pydantic import ValidationError

from ..app_db import db_conn
from ..config import settings
from ..markers.reference import parse_reference_range
from ..markers.storage import find_marker_by_name, insert_marker, insert_value
from ..nutrition.storage import insert_meal
from ..timeutil import utc_now
from ..workouts.storage import insert_workout
from .models import DRAFT_MODELS, ENTRY_KEYS, ENTRY_MODELS

log = logging.getLogger(__name__)


def _validation_detail(exc: ValidationError) -> List[Dict[str, Any]]:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]


def validate_draft(kind: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    model = DRAFT_MODELS.get(kind)
    if model is None:
        raise HTTPException(status_code=400, detail=f"Unknown import kind: {kind}")
    try:
        return model.model_validate(payload).model_dump(mode="json")
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=_validation_detail(exc)) from exc


def _validate_entry(kind: str, entry: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return ENTRY_MODELS[kind].model_validate(entry).model_dump(mode="json")
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=_validation_detail(exc)) from exc


def _loads(raw: Optional[str], default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default


def _row_to_import(row: sqlite3.Row) -> Dict[str, Any]:
    item = dict(row)
    return {
        "id": item["id"],
        "kind": item["kind"],
        "status": item["status"],
        "payload": _loads(item.get("payload_json"), {}),
        "warnings": _loads(item.get("warnings_json"), []),
        "source_filename": item.get("source_filename"),
        "result": _loads(item.get("result_json"), None),
        "created_at": item["created_at"],
        "updated_at": item["updated_at"],
        "committed_at": item.get("committed_at"),
    }


def _fetch(conn: sqlite3.Connection, user_id: str, import_id: str) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM staged_imports WHERE id = ? AND user_id = ?",
        (import_id, user_id),
    ).fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Import not found")
    return _row_to_import(row)


def _fetch_staged(conn: sqlite3.Connection, user_id: str, import_id: str) -> Dict[str, Any]:
    current = _fetch(conn, user_id, import_id)
    if current["status"] != "staged":
        raise HTTPException(status_code=409, detail=f"Import already {current['status']}")
    return current


def create_staged_import(
    user_id: str,
    *,
    kind: str,
    payload: Dict[str, Any],
    warnings: Optional[List[str]] = None,
    source_filename: Optional[str] = None,
) -> Dict[str, Any]:
    draft = validate_draft(kind, payload)
    import_id = str(uuid4())
    now = utc_now()
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            """
            INSERT INTO staged_imports (
                id, user_id, kind, status, payload_json, warnings_json, source_filename, created_at, updated_at
            ) VALUES (?, ?, ?, 'staged', ?, ?, ?, ?, ?)
            """,
            (
                import_id,
                user_id,
                kind,
                json.dumps(draft, ensure_ascii=False),
                json.dumps(list(warnings or []), ensure_ascii=False),
                source_filename,
                now,
                now,
            ),
        )
        return _fetch(conn, user_id, import_id)


def get_import(user_id: str, import_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        return _fetch(conn, user_id, import_id)


def list_imports(
    user_id: str,
    *,
    status: Optional[str] = None,
    kind: Optional[str] = None,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    clauses = ["user_id = ?"]
    params: List[Any] = [user_id]
    if status:
        clauses.append("status = ?")
        params.append(status)
    if kind:
        clauses.append("kind = ?")
        params.append(kind)
    params.append(int(limit))
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            f"SELECT * FROM staged_imports WHERE {' AND '.join(clauses)} ORDER BY created_at DESC, rowid DESC LIMIT ?",
            params,
        ).fetchall()
        return [_row_to_import(r) for r in rows]


def _write_payload(conn: sqlite3.Connection, user_id: str, import_id: str, payload: Dict[str, Any]) -> None:
    conn.execute(
        "UPDATE staged_imports SET payload_json = ?, updated_at = ? WHERE id = ? AND user_id = ?",
        (json.dumps(payload, ensure_ascii=False), utc_now(), import_id, user_id),
    )


def replace_payload(user_id: str, import_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        current = _fetch_staged(conn, user_id, import_id)
        _write_payload(conn, user_id, import_id, validate_draft(current["kind"], payload))
        return _fetch(conn, user_id, import_id)


def _edit_entries(user_id: str, import_id: str, edit) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        current = _fetch_staged(conn, user_id, import_id)
        kind = current["kind"]
        payload = dict(current["payload"])
        entries = list(payload.get(ENTRY_KEYS[kind]) or [])
        payload[ENTRY_KEYS[kind]] = edit(kind, entries)
        _write_payload(conn, user_id, import_id, validate_draft(kind, payload))
        return _fetch(conn, user_id, import_id)


def _check_index(entries: List[Any], index: int) -> None:
    if index < 0 or index >= len(entries):
        raise HTTPException(status_code=404, detail=f"Entry {index} not found")


def add_entry(user_id: str, import_id: str, entry: Dict[str, Any]) -> Dict[str, Any]:
    def edit(kind: str, entries: List[Any]) -> List[Any]:
        return entries + [_validate_entry(kind, entry)]

    return _edit_entries(user_id, import_id, edit)


def update_entry(user_id: str, import_id: str, index: int, entry: Dict[str, Any]) -> Dict[str, Any]:
    def edit(kind: str, entries: List[Any]) -> List[Any]:
        _check_index(entries, index)
        # partial update: unspecified fields keep their reviewed value
        entries[index] = _validate_entry(kind, {**entries[index], **entry})
        return entries

    return _edit_entries(user_id, import_id, edit)


def remove_entry(user_id: str, import_id: str, index: int) -> Dict[str, Any]:
    def edit(kind: str, entries: List[Any]) -> List[Any]:  # noqa: ARG001
        _check_index(entries, index)
        return entries[:index] + entries[index + 1 :]

    return _edit_entries(user_id, import_id, edit)


def _commit_exam(conn: sqlite3.Connection, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    exam_date = payload["exam_date"]
    created_markers: List[str] = []
    recorded: List[Dict[str, Any]] = []
    skipped: List[str] = []
    for entry in payload.get("markers") or []:
        name = (entry.get("marker_name") or "").strip()
        if not name or entry.get("value") is None:
            skipped.append(name or "(unnamed)")
            continue
        marker = find_marker_by_name(conn, user_id, name)
        if marker is None:
            low, high = parse_reference_range(entry.get("reference_range"))
            marker = insert_marker(
                conn,
                user_id,
                {"name": name, "unit": entry.get("unit") or "", "min_reference": low, "max_reference": high},
            )
            created_markers.append(name)
        value = insert_value(conn, user_id, marker["id"], value=float(entry["value"]), measured_at=exam_date)
        recorded.append({"marker_id": marker["id"], "marker_name": marker["name"], "value_id": value["id"]})
    return {
        "exam_date": exam_date,
        "values_created": len(recorded),
        "values": recorded,
        "markers_created": created_markers,
        "skipped": skipped,
    }


def _commit_workout(conn: sqlite3.Connection, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    workout = insert_workout(conn, user_id, payload)
    return {"workout_id": workout["id"], "exercises_created": len(workout["exercises"])}


def _commit_meal(conn: sqlite3.Connection, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    meal = insert_meal(conn, user_id, {**payload, "is_ai_generated": True})
    return {"meal_id": meal["id"], "items_created": len(meal["items"]), "total_calories": meal["total_calories"]}


_COMMITTERS = {
    "exam": _commit_exam,
    "workout": _commit_workout,
    "meal": _commit_meal,
}


def commit_import(user_id: str, import_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        current = _fetch_staged(conn, user_id, import_id)
        kind = current["kind"]
        payload = validate_draft(kind, current["payload"])
        result = _COMMITTERS[kind](conn, user_id, payload)
        now = utc_now()
        conn.execute(
            """
            UPDATE staged_imports
            SET status = 'committed', result_json = ?, committed_at = ?, updated_at = ?
            WHERE id = ? AND user_id = ?
            """,
            (json.dumps(result, ensure_ascii=False), now, now, import_id, user_id),
        )
        committed = _fetch(conn, user_id, import_id)
    log.info("committed %s import %s for user %s", kind, import_id, user_id)
    return committed


def discard_import(user_id: str, import_id: str) -> Dict[str, Any]:
    with db_conn(settings.app_db_path) as conn:
        _fetch_staged(conn, user_id, import_id)
        now = utc_now()
        conn.execute(
            "UPDATE staged_imports SET status = 'discarded', updated_at = ? WHERE id = ? AND user_id = ?",
            (now, import_id, user_id),
        )
        return _fetch(conn, user_id, import_id)
