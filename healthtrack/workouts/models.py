# -*- coding: utf-8 -*-
"""Workouts — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..ai.models import WEEK_DAYS


def _week_days(value: object) -> object:
    if value is None:
        return []
    if isinstance(value, list):
        days = []
        for item in value:
            day = str(item).strip().lower()
            if day not in WEEK_DAYS:
                raise ValueError(f"unknown week day: {item!r}")
            if day not in days:
                days.append(day)
        return days
    return value


class ExerciseIn(BaseModel):
    name: str = Field("", max_length=200)
    sets: int = Field(3, ge=1, le=100)
    reps: int = Field(10, ge=1, le=1000)
    load: Optional[float] = Field(None, ge=0, description="kg")
    notes: Optional[str] = Field(None, max_length=2000)


class Exercise(BaseModel):
    id: str
    name: str
    sets: int
    reps: int
    load: Optional[float] = None
    notes: Optional[str] = None
    order_index: int


class WorkoutCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=50, description="strength, cardio, mobility...")
    difficulty_level: Optional[str] = Field(None, max_length=50)
    estimated_duration: Optional[int] = Field(None, ge=0, description="minutes")
    week_days: List[str] = Field(default_factory=list, description="monday..sunday")
    is_template: bool = False
    exercises: List[ExerciseIn] = Field(default_factory=list)

    @field_validator("week_days", mode="before")
    @classmethod
    def _days(cls, value: object) -> object:
        return _week_days(value)


class WorkoutUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    category: Optional[str] = Field(None, max_length=50)
    difficulty_level: Optional[str] = Field(None, max_length=50)
    estimated_duration: Optional[int] = Field(None, ge=0)
    week_days: Optional[List[str]] = None
    is_template: Optional[bool] = None
    exercises: Optional[List[ExerciseIn]] = Field(None, description="Replaces the whole list when given")

    @field_validator("week_days", mode="before")
    @classmethod
    def _days(cls, value: object) -> object:
        return None if value is None else _week_days(value)


class Workout(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty_level: Optional[str] = None
    estimated_duration: Optional[int] = None
    week_days: List[str] = []
    is_template: bool = False
    created_at: str
    updated_at: str
    exercises: List[Exercise] = []


class CheckInRequest(BaseModel):
    completed_at: Optional[str] = Field(None, description="ISO8601; defaults to now")
    notes: Optional[str] = Field(None, max_length=2000)


class CheckIn(BaseModel):
    id: str
    workout_id: str
    workout_name: Optional[str] = None
    completed_at: str
    notes: Optional[str] = None
    created_at: str


class ConsistencyDay(BaseModel):
    date: str
    weekday: str
    has_checkin: bool
    is_today: bool


class WeeklyConsistency(BaseModel):
    week_start: str
    week_end: str
    days: List[ConsistencyDay]
    completed: int
    planned: int
