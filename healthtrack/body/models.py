# -*- coding: utf-8 -*-
"""Body composition — Pydantic models."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

DEFAULT_REGIONS = (
    "Braço Direito",
    "Braço Esquerdo",
    "Tronco",
    "Abdômen",
    "Coxa Direita",
    "Coxa Esquerda",
    "Panturrilhas",
)


class SegmentIn(BaseModel):
    region: str = Field(..., min_length=1, max_length=100)
    lean_mass_kg: Optional[float] = Field(None, ge=0)
    fat_mass_kg: Optional[float] = Field(None, ge=0)


class Segment(SegmentIn):
    id: str


class MeasurementCreateRequest(BaseModel):
    measured_at: Optional[str] = Field(None, description="ISO8601 or YYYY-MM-DD; defaults to now")
    weight_kg: float = Field(..., gt=0, le=700)
    height_m: Optional[float] = Field(None, gt=0, le=3)
    imc: Optional[float] = Field(None, ge=0, description="Derived from weight and height when omitted")
    fat_percent: Optional[float] = Field(None, ge=0, le=100)
    fat_weight_kg: Optional[float] = Field(None, ge=0, description="Derived from fat_percent when omitted")
    lean_mass_kg: Optional[float] = Field(None, ge=0, description="Derived from fat_percent when omitted")
    water_percent: Optional[float] = Field(None, ge=0, le=100)
    basal_metabolic_rate: Optional[int] = Field(None, ge=0, description="kcal/day")
    attachment_url: Optional[str] = Field(None, max_length=2048)
    notes: Optional[str] = Field(None, max_length=2000)
    segments: List[SegmentIn] = Field(default_factory=list)


class Measurement(BaseModel):
    id: str
    measured_at: str
    weight_kg: float
    height_m: Optional[float] = None
    imc: Optional[float] = None
    fat_percent: Optional[float] = None
    fat_weight_kg: Optional[float] = None
    lean_mass_kg: Optional[float] = None
    water_percent: Optional[float] = None
    basal_metabolic_rate: Optional[int] = None
    attachment_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str
    segments: List[Segment] = []


class Comparison(BaseModel):
    latest: Optional[Measurement] = None
    previous: Optional[Measurement] = None
    differences: Dict[str, Optional[float]] = Field(default_factory=dict, description="latest minus previous")
