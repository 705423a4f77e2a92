# -*- coding: utf-8 -*-
"""AI — typed results of the prompt tasks."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

AnaRef = Literal["NORMAL", "LOW", "HIGH", "UNKNOWN"]

WEEK_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def _coerce_str_list(value: object) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        v = value.strip()
        return [v] if v else []
    if isinstance(value, list):
        out: List[str] = []
        for item in value:
            if item is None:
                continue
            s = str(item).strip()
            if s:
                out.append(s)
        return out
    s = str(value).strip()
    return [s] if s else []


class ExtractedMarker(BaseModel):
    marker_name: str = Field(..., min_length=1, max_length=200)
    value: Optional[float] = Field(None, ge=0)
    unit: str = Field("", max_length=50)
    reference_range: str = Field("", max_length=200)
    ana_ref: AnaRef = "UNKNOWN"


class ExamExtraction(BaseModel):
    exam_date: str = Field(..., description="YYYY-MM-DD")
    markers: List[ExtractedMarker] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class FoodEstimate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[str] = Field(None, max_length=200)
    calories: float = Field(0.0, ge=0)
    protein_g: float = Field(0.0, ge=0)
    carbs_g: float = Field(0.0, ge=0)
    fat_g: float = Field(0.0, ge=0)


class MacroEstimate(BaseModel):
    total_calories: float = Field(0.0, ge=0)
    protein_g: float = Field(0.0, ge=0)
    carbs_g: float = Field(0.0, ge=0)
    fat_g: float = Field(0.0, ge=0)
    items: List[FoodEstimate] = Field(default_factory=list)


class MealSuggestion(MacroEstimate):
    name: str = ""
    reasoning: str = ""


class NutritionAnalysis(BaseModel):
    insights: List[str] = Field(default_factory=list)
    alerts: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("insights", "alerts", "recommendations", mode="before")
    @classmethod
    def _coerce_lists(cls, value: object) -> List[str]:
        """Models answer ``"text"`` as often as ``["text"]``."""
        return _coerce_str_list(value)


class GeneratedExercise(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    sets: int = Field(3, ge=1)
    reps: int = Field(10, ge=1)
    load: float = Field(0.0, ge=0)
    notes: Optional[str] = None


class GeneratedWorkout(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0, description="minutes")
    week_days: List[str] = Field(default_factory=list)
    exercises: List[GeneratedExercise] = Field(default_factory=list)

    @field_validator("week_days", mode="before")
    @classmethod
    def _known_days(cls, value: object) -> List[str]:
        return [d.lower() for d in _coerce_str_list(value) if d.lower() in WEEK_DAYS]
