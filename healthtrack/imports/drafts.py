# -*- coding: utf-8 -*-
"""Imports — map typed AI results onto reviewable draft payloads."""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..ai.models import ExamExtraction, GeneratedWorkout, MacroEstimate


def exam_draft(extraction: ExamExtraction) -> Dict[str, Any]:
    return {
        "exam_date": extraction.exam_date,
        "markers": [m.model_dump() for m in extraction.markers],
    }


def workout_draft(workout: GeneratedWorkout) -> Dict[str, Any]:
    return {
        "name": workout.name,
        "description": workout.description,
        "category": workout.category,
        "difficulty_level": workout.difficulty,
        "estimated_duration": workout.duration,
        "week_days": list(workout.week_days),
        "is_template": False,
        "exercises": [e.model_dump() for e in workout.exercises],
    }


def meal_draft(
    estimate: MacroEstimate,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    category: Optional[str] = None,
    eaten_at: Optional[str] = None,
    image_url: Optional[str] = None,
) -> Dict[str, Any]:
    title = (name or "").strip() or (description or "").strip()[:80] or "Refeição"
    items = [i.model_dump() for i in estimate.items]
    if not items and estimate.total_calories > 0:
        # Meal totals are item sums; keep a whole-meal estimate as a single item.
        items = [
            {
                "name": title,
                "quantity": None,
                "calories": estimate.total_calories,
                "protein_g": estimate.protein_g,
                "carbs_g": estimate.carbs_g,
                "fat_g": estimate.fat_g,
            }
        ]
    return {
        "name": title,
        "category": category or "livre",
        "eaten_at": eaten_at,
        "items": items,
        "notes": description,
        "image_url": image_url,
        "is_ai_generated": True,
    }
