# -*- coding: utf-8 -*-
"""Imports — Pydantic models for staged drafts and the review API."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, Field, field_validator, model_validator

from ..ai.models import AnaRef
from ..nutrition.models import MealCreateRequest, MealItemIn
from ..workouts.models import ExerciseIn, WorkoutCreateRequest

ImportKind = Literal["exam", "workout", "meal"]
ImportStatus = Literal["staged", "committed", "discarded"]


class ExamEntry(BaseModel):
    """One reviewed marker line. Blank names or missing values are skipped on commit."""

    marker_name: str = Field("", max_length=200)
    value: Optional[float] = Field(None, ge=0)
    unit: str = Field("", max_length=50)
    reference_range: str = Field("", max_length=200)
    ana_ref: AnaRef = "UNKNOWN"

    @field_validator("marker_name", "unit", "reference_range", mode="before")
    @classmethod
    def _none_to_blank(cls, value: object) -> object:
        return "" if value is None else value


class ExamDraft(BaseModel):
    exam_date: str = Field(..., description="YYYY-MM-DD")
    markers: List[ExamEntry] = Field(default_factory=list)

    @field_validator("exam_date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        return date.fromisoformat(value.strip()[:10]).isoformat()


class WorkoutDraft(WorkoutCreateRequest):
    pass


class MealDraft(MealCreateRequest):
    is_ai_generated: bool = True


DRAFT_MODELS: Dict[str, Type[BaseModel]] = {
    "exam": ExamDraft,
    "workout": WorkoutDraft,
    "meal": MealDraft,
}

ENTRY_MODELS: Dict[str, Type[BaseModel]] = {
    "exam": ExamEntry,
    "workout": ExerciseIn,
    "meal": MealItemIn,
}

# payload key holding the reviewable list of each kind
ENTRY_KEYS: Dict[str, str] = {
    "exam": "markers",
    "workout": "exercises",
    "meal": "items",
}


class ExamImportRequest(BaseModel):
    file_base64: str = Field(..., min_length=16, description="Raw base64 or a data URL")
    mime_type: Optional[str] = Field(None, description="image/* or application/pdf; read from the data URL when omitted")
    filename: Optional[str] = Field(None, max_length=255)
    auto_commit: bool = Field(False, description="Commit without review")


class WorkoutImportRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=4000)
    auto_commit: bool = False


class MealImportRequest(BaseModel):
    description: Optional[str] = Field(None, max_length=4000)
    image_base64: Optional[str] = Field(None, description="Raw base64 or a data URL")
    image_mime: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=2048)
    name: Optional[str] = Field(None, max_length=200)
    category: Optional[str] = None
    eaten_at: Optional[str] = None
    auto_commit: bool = False

    @model_validator(mode="after")
    def _one_source(self) -> "MealImportRequest":
        if not (self.description or "").strip() and not self.image_base64 and not self.image_url:
            raise ValueError("description, image_base64 or image_url is required")
        return self


class PayloadReplaceRequest(BaseModel):
    payload: Dict[str, Any]


class EntryRequest(BaseModel):
    entry: Dict[str, Any]


class StagedImport(BaseModel):
    id: str
    kind: ImportKind
    status: ImportStatus
    payload: Dict[str, Any]
    warnings: List[str] = []
    source_filename: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    created_at: str
    updated_at: str
    committed_at: Optional[str] = None
