# -*- coding: utf-8 -*-
"""AI — one function per prompt task: build the message, call the gateway, normalize."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, TypeVar

from pydantic import ValidationError

from . import gateway, prompts
from .gateway import AIResponseError
from .models import ExamExtraction, GeneratedWorkout, MacroEstimate, MealSuggestion, NutritionAnalysis
from .normalize import (
    normalize_analysis,
    normalize_exam,
    normalize_macros,
    normalize_meal_suggestion,
    normalize_workout,
)

T = TypeVar("T")


def _normalized(normalize: Callable[[Dict[str, Any]], T], parsed: Dict[str, Any]) -> T:
    """Model JSON that survives parsing but not the typed result is still bad output."""
    try:
        return normalize(parsed)
    except ValidationError as exc:
        raise AIResponseError(f"Invalid AI response content: {exc.error_count()} field error(s)") from exc


def extract_exam_markers(file_url: str) -> ExamExtraction:
    """``file_url`` is a data URL (or a public URL) of the exam image/PDF."""
    message = gateway.user_message("Extract the health markers from this exam.", image_url=file_url)
    parsed = gateway.complete_json(prompts.exam_extraction_prompt(), message, temperature=0.1)
    return _normalized(normalize_exam, parsed)


def calculate_macros(description: str) -> MacroEstimate:
    parsed = gateway.complete_json(prompts.macros_prompt(), description, temperature=0.2)
    return _normalized(normalize_macros, parsed)


def analyze_meal_photo(image_url: str) -> MacroEstimate:
    message = gateway.user_message("Analyze the foods in this photo.", image_url=image_url)
    parsed = gateway.complete_json(prompts.photo_prompt(), message, temperature=0.2)
    return _normalized(normalize_macros, parsed)


def suggest_meal(context: Dict[str, Any]) -> MealSuggestion:
    text = "Context:\n" + json.dumps(context or {}, ensure_ascii=False, indent=2)
    parsed = gateway.complete_json(prompts.suggest_meal_prompt(), text)
    return _normalized(normalize_meal_suggestion, parsed)


def analyze_nutrition(day: Dict[str, Any]) -> NutritionAnalysis:
    text = "Daily intake:\n" + json.dumps(day or {}, ensure_ascii=False, indent=2)
    parsed = gateway.complete_json(prompts.nutrition_analysis_prompt(), text)
    return _normalized(normalize_analysis, parsed)


def generate_workout(prompt: str) -> GeneratedWorkout:
    parsed = gateway.complete_json(prompts.workout_prompt(), prompt)
    return _normalized(normalize_workout, parsed)
