# -*- coding: utf-8 -*-
"""Markers — Pydantic models."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

MarkerStatus = Literal["NORMAL", "LOW", "HIGH", "UNKNOWN"]


class MarkerCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="e.g. 'Vitamina D'")
    unit: str = Field(..., max_length=50, description="e.g. 'ng/mL'")
    min_reference: Optional[float] = Field(None, ge=0)
    max_reference: Optional[float] = Field(None, ge=0)
    personal_goal: Optional[float] = Field(None, ge=0)

    @field_validator("name", "unit", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class MarkerUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    unit: Optional[str] = Field(None, max_length=50)
    min_reference: Optional[float] = Field(None, ge=0)
    max_reference: Optional[float] = Field(None, ge=0)
    personal_goal: Optional[float] = Field(None, ge=0)

    @field_validator("name", "unit", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class MarkerValueCreateRequest(BaseModel):
    value: float = Field(..., ge=0)
    measured_at: Optional[str] = Field(None, description="ISO8601 timestamp or YYYY-MM-DD; defaults to now")
    notes: Optional[str] = Field(None, max_length=2000)
    supplement_intervention_id: Optional[str] = Field(None, description="Supplement believed to drive this value")


class MarkerValue(BaseModel):
    id: str
    marker_id: str
    value: float
    measured_at: str
    notes: Optional[str] = None
    supplement_intervention_id: Optional[str] = None
    created_at: str


class Marker(BaseModel):
    id: str
    name: str
    unit: str
    min_reference: Optional[float] = None
    max_reference: Optional[float] = None
    personal_goal: Optional[float] = None
    created_at: str
    updated_at: str
    latest_value: Optional[MarkerValue] = None
    status: MarkerStatus = "UNKNOWN"


class MarkerValuesResponse(BaseModel):
    marker_id: str
    count: int
    values: List[MarkerValue] = []


class MarkerAlert(BaseModel):
    marker_id: str
    marker_name: str
    level: Literal["warning", "info"]
    message: str
    values: List[float] = []
