# -*- coding: utf-8 -*-
"""Supplements — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class SupplementCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    dosage: Optional[str] = Field(None, max_length=100, description="e.g. '2000 UI'")
    form: Optional[str] = Field(None, max_length=50, description="capsule, powder, liquid...")
    frequency: Optional[str] = Field(None, max_length=100)
    start_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    end_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    is_active: bool = True
    linked_marker_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value


class SupplementUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    dosage: Optional[str] = Field(None, max_length=100)
    form: Optional[str] = Field(None, max_length=50)
    frequency: Optional[str] = Field(None, max_length=100)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_active: Optional[bool] = None
    linked_marker_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


class Supplement(BaseModel):
    id: str
    name: str
    dosage: Optional[str] = None
    form: Optional[str] = None
    frequency: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_active: bool = True
    linked_marker_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str


class SupplementLogRequest(BaseModel):
    dates: List[str] = Field(default_factory=list, description="YYYY-MM-DD; empty means today")
    dose: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=2000)


class SupplementLog(BaseModel):
    id: str
    supplement_id: str
    supplement_name: Optional[str] = None
    taken_at: str
    dose: Optional[str] = None
    notes: Optional[str] = None
    created_at: str


class UsageDay(BaseModel):
    date: str
    has_usage: bool
    count: int = 0


class WeeklyUsage(BaseModel):
    supplement_id: Optional[str] = None
    days: List[UsageDay]
    days_with_usage: int
    adherence: int = Field(..., ge=0, le=100, description="percent of the last 7 days")


class UsageHistory(BaseModel):
    start: str
    end: str
    days: List[UsageDay]
