# -*- coding: utf-8 -*-
"""Dashboard — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from ..body.models import Measurement
from ..nutrition.models import DailySummary


class MarkerCounts(BaseModel):
    total: int = 0
    out_of_range: int = 0
    alerts: int = 0


class WorkoutWeek(BaseModel):
    completed: int = 0
    planned: int = 0


class DashboardSummary(BaseModel):
    date: str
    markers: MarkerCounts
    active_supplements: int = 0
    supplement_adherence: int = 0
    workouts: WorkoutWeek
    nutrition: DailySummary
    latest_body: Optional[Measurement] = None
