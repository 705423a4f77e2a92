# -*- coding: utf-8 -*-
"""Exams — read-only views over ``health_marker_values``."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import HTTPException

from ..app_db import db_conn
from ..config import settings
from ..markers.reference import classify, format_reference
from ..timeutil import normalize_date


def list_exams(user_id: str) -> List[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT substr(v.measured_at, 1, 10) AS exam_date, COUNT(*) AS marker_count
            FROM health_marker_values v
            JOIN health_markers m ON m.id = v.marker_id
            WHERE m.user_id = ?
            GROUP BY exam_date
            ORDER BY exam_date DESC
            """,
            (user_id,),
        ).fetchall()
        return [dict(r) for r in rows]


def get_exam(user_id: str, exam_date: str) -> Dict[str, Any]:
    day = normalize_date(exam_date, field="exam_date")
    with db_conn(settings.app_db_path) as conn:
        rows = conn.execute(
            """
            SELECT v.id AS value_id, v.marker_id, v.value, v.measured_at, v.notes,
                   m.name, m.unit, m.min_reference, m.max_reference
            FROM health_marker_values v
            JOIN health_markers m ON m.id = v.marker_id
            WHERE m.user_id = ? AND substr(v.measured_at, 1, 10) = ?
            ORDER BY m.name COLLATE NOCASE, v.measured_at, v.rowid
            """,
            (user_id, day),
        ).fetchall()
    if not rows:
        raise HTTPException(status_code=404, detail="Exam not found")

    markers = []
    for r in rows:
        item = dict(r)
        item["classification"] = classify(item["value"], item["min_reference"], item["max_reference"])
        markers.append(item)
    return {"exam_date": day, "markers": markers}


def export_exam(user_id: str, exam_date: str) -> Dict[str, Any]:
    exam = get_exam(user_id, exam_date)
    return {
        "exam_date": exam["exam_date"],
        "markers": [
            {
                "name": m["name"],
                "value": m["value"],
                "unit": m["unit"],
                "reference": format_reference(m["min_reference"], m["max_reference"]),
                "classification": m["classification"],
            }
            for m in exam["markers"]
        ],
    }
