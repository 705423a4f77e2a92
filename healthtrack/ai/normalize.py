# -*- coding: utf-8 -*-
"""Best-effort normalization of model JSON into the typed AI results.

Models rename keys, quote numbers and attach units ("5,4 g/dL"); everything
here maps those shapes onto the pydantic models without inventing values.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, List, Optional

from ..markers.reference import UNKNOWN, classify, parse_reference_range
from ..timeutil import today
from .models import (
    ExamExtraction,
    GeneratedWorkout,
    MacroEstimate,
    MealSuggestion,
    NutritionAnalysis,
)

_NUM_RE = re.compile(r"-?\d+(?:\.\d+)?")
_ANA_REFS = {"NORMAL", "LOW", "HIGH", "UNKNOWN"}


def coerce_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        # "5,4" and "1.250,5" use a decimal comma; "1,250.5" a thousands comma.
        if "," in s and "." not in s:
            s = s.replace(",", ".")
        elif "," in s and s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
        m = _NUM_RE.search(s)
        if not m:
            return None
        return float(m.group(0))
    return None


def coerce_int(value: Any) -> Optional[int]:
    f = coerce_float(value)
    return int(round(f)) if f is not None else None


def first_present(obj: Dict[str, Any], keys: List[str]) -> Any:
    for k in keys:
        if k in obj and obj.get(k) is not None:
            return obj.get(k)
    return None


def _clean_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _non_negative(value: Any) -> float:
    f = coerce_float(value)
    return max(0.0, f) if f is not None else 0.0


def _normalize_date(value: Any) -> Optional[str]:
    s = _clean_str(value)
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10]).isoformat()
    except ValueError:
        pass
    # dd/mm/yyyy as printed on Brazilian lab reports
    m = re.match(r"^(\d{1,2})[/.-](\d{1,2})[/.-](\d{4})", s)
    if m:
        try:
            return date(int(m.group(3)), int(m.group(2)), int(m.group(1))).isoformat()
        except ValueError:
            return None
    return None


def normalize_exam(parsed: Dict[str, Any]) -> ExamExtraction:
    warnings: List[str] = []
    raw_markers = first_present(parsed, ["markers", "results", "exams"]) or []
    if not isinstance(raw_markers, list):
        raw_markers = []

    markers: List[Dict[str, Any]] = []
    for raw in raw_markers:
        if not isinstance(raw, dict):
            continue
        name = _clean_str(first_present(raw, ["marker_name", "name", "marker", "exam"]))
        if not name:
            continue
        value = coerce_float(first_present(raw, ["value", "result", "valor"]))
        if value is not None and value < 0:
            value = None
        reference_range = _clean_str(first_present(raw, ["reference_range", "reference", "range", "referencia"]))
        ana_ref = _clean_str(raw.get("ana_ref")).upper()
        if ana_ref not in _ANA_REFS or ana_ref == UNKNOWN:
            low, high = parse_reference_range(reference_range)
            ana_ref = classify(value, low, high)
        if value is None:
            warnings.append(f"No numeric value found for {name}")
        markers.append(
            {
                "marker_name": name[:200],
                "value": value,
                "unit": _clean_str(first_present(raw, ["unit", "unidade"]))[:50],
                "reference_range": reference_range[:200],
                "ana_ref": ana_ref,
            }
        )

    exam_date = _normalize_date(first_present(parsed, ["exam_date", "date", "data"]))
    if not exam_date:
        exam_date = today()
        warnings.append("Exam date not found; using today")

    return ExamExtraction.model_validate({"exam_date": exam_date, "markers": markers, "warnings": warnings})


def _normalize_food_items(items: Any) -> List[Dict[str, Any]]:
    if not isinstance(items, list):
        return []
    out: List[Dict[str, Any]] = []
    for raw in items:
        if not isinstance(raw, dict):
            continue
        name = _clean_str(first_present(raw, ["name", "food", "item", "ingredient"])) or "unknown"
        quantity = first_present(raw, ["quantity", "portion", "serving", "amount"])
        out.append(
            {
                "name": name[:200],
                "quantity": _clean_str(quantity)[:200] or None,
                "calories": _non_negative(first_present(raw, ["calories", "calories_kcal", "kcal", "energy"])),
                "protein_g": _non_negative(first_present(raw, ["protein_g", "protein"])),
                "carbs_g": _non_negative(first_present(raw, ["carbs_g", "carbs", "carbohydrates"])),
                "fat_g": _non_negative(first_present(raw, ["fat_g", "fat"])),
            }
        )
    return out


def _macro_fields(parsed: Dict[str, Any], items: List[Dict[str, Any]]) -> Dict[str, float]:
    """Totals as reported, falling back to the item sums when the model omits them."""
    reported = {
        "total_calories": coerce_float(first_present(parsed, ["total_calories", "calories", "kcal"])),
        "protein_g": coerce_float(first_present(parsed, ["protein_g", "protein"])),
        "carbs_g": coerce_float(first_present(parsed, ["carbs_g", "carbs", "carbohydrates"])),
        "fat_g": coerce_float(first_present(parsed, ["fat_g", "fat"])),
    }
    item_keys = {"total_calories": "calories", "protein_g": "protein_g", "carbs_g": "carbs_g", "fat_g": "fat_g"}
    out: Dict[str, float] = {}
    for key, value in reported.items():
        if value is None:
            value = sum(float(i[item_keys[key]]) for i in items)
        out[key] = round(max(0.0, value), 1)
    return out


def normalize_macros(parsed: Dict[str, Any]) -> MacroEstimate:
    items = _normalize_food_items(parsed.get("items") or parsed.get("foods"))
    return MacroEstimate.model_validate({**_macro_fields(parsed, items), "items": items})


def normalize_meal_suggestion(parsed: Dict[str, Any]) -> MealSuggestion:
    items = _normalize_food_items(parsed.get("items") or parsed.get("ingredients"))
    return MealSuggestion.model_validate(
        {
            **_macro_fields(parsed, items),
            "items": items,
            "name": _clean_str(parsed.get("name")),
            "reasoning": _clean_str(parsed.get("reasoning")),
        }
    )


def normalize_analysis(parsed: Dict[str, Any]) -> NutritionAnalysis:
    return NutritionAnalysis.model_validate(
        {
            "insights": parsed.get("insights"),
            "alerts": parsed.get("alerts") if parsed.get("alerts") is not None else parsed.get("warnings"),
            "recommendations": parsed.get("recommendations"),
        }
    )


def normalize_workout(parsed: Dict[str, Any]) -> GeneratedWorkout:
    exercises: List[Dict[str, Any]] = []
    raw_exercises = parsed.get("exercises")
    if not isinstance(raw_exercises, list):
        raw_exercises = []
    for raw in raw_exercises:
        if not isinstance(raw, dict):
            continue
        name = _clean_str(first_present(raw, ["name", "exercise"]))
        if not name:
            continue
        sets = coerce_int(raw.get("sets"))
        reps = coerce_int(first_present(raw, ["reps", "repetitions"]))
        notes = _clean_str(raw.get("notes"))[:2000] or None
        exercises.append(
            {
                "name": name[:200],
                "sets": min(sets, 100) if sets and sets > 0 else 3,
                "reps": min(reps, 1000) if reps and reps > 0 else 10,
                "load": _non_negative(raw.get("load")),
                "notes": notes,
            }
        )

    duration = coerce_int(first_present(parsed, ["duration", "estimated_duration"]))
    return GeneratedWorkout.model_validate(
        {
            "name": _clean_str(parsed.get("name"))[:200] or "Treino",
            "description": _clean_str(parsed.get("description"))[:2000] or None,
            "category": _clean_str(parsed.get("category"))[:50] or None,
            "difficulty": _clean_str(first_present(parsed, ["difficulty", "difficulty_level"]))[:50] or None,
            "duration": duration if duration is not None and duration >= 0 else None,
            "week_days": parsed.get("week_days"),
            "exercises": exercises,
        }
    )
