# -*- coding: utf-8 -*-
"""Exams — Pydantic models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from ..markers.models import MarkerStatus


class ExamSummary(BaseModel):
    exam_date: str
    marker_count: int


class ExamValue(BaseModel):
    value_id: str
    marker_id: str
    name: str
    unit: str
    value: float
    measured_at: str
    min_reference: Optional[float] = None
    max_reference: Optional[float] = None
    classification: MarkerStatus = "UNKNOWN"
    notes: Optional[str] = None


class ExamDetail(BaseModel):
    exam_date: str
    markers: List[ExamValue] = []


class ExportedMarker(BaseModel):
    name: str
    value: float
    unit: str
    reference: str
    classification: MarkerStatus


class ExamExport(BaseModel):
    exam_date: str
    markers: List[ExportedMarker] = []
