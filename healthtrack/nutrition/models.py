# -*- coding: utf-8 -*-
"""Nutrition — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


class MealCategory(str, Enum):
    cafe_manha = "cafe-manha"
    lanche_manha = "lanche-manha"
    almoco = "almoco"
    lanche_tarde = "lanche-tarde"
    jantar = "jantar"
    ceia = "ceia"
    pre_treino = "pre-treino"
    pos_treino = "pos-treino"
    livre = "livre"


class MealItemIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: Optional[str] = Field(None, max_length=200, description="e.g. '1 cup', '150 g'")
    calories: float = Field(0.0, ge=0)
    protein_g: float = Field(0.0, ge=0)
    carbs_g: float = Field(0.0, ge=0)
    fat_g: float = Field(0.0, ge=0)


class MealItem(MealItemIn):
    id: str


class MealCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: MealCategory = MealCategory.livre
    eaten_at: Optional[str] = Field(None, description="ISO8601; defaults to now")
    items: List[MealItemIn] = Field(default_factory=list)
    notes: Optional[str] = Field(None, max_length=2000)
    image_url: Optional[str] = Field(None, max_length=2048)
    is_ai_generated: bool = False


class Meal(BaseModel):
    id: str
    name: str
    category: str
    eaten_at: str
    total_calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    notes: Optional[str] = None
    image_url: Optional[str] = None
    is_ai_generated: bool = False
    created_at: str
    updated_at: str
    items: List[MealItem] = []


class WaterCreateRequest(BaseModel):
    amount_ml: int = Field(..., gt=0, le=10000)
    logged_at: Optional[str] = Field(None, description="ISO8601; defaults to now")


class WaterLog(BaseModel):
    id: str
    amount_ml: int
    logged_at: str
    created_at: str


class DailySummary(BaseModel):
    date: str
    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    water_ml: int = 0
    meal_count: int = 0


class MacrosRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=4000)


class PhotoRequest(BaseModel):
    image_base64: Optional[str] = Field(None, description="Raw base64 or a data URL")
    image_mime: Optional[str] = Field(None, description="Required with raw base64")
    image_url: Optional[str] = Field(None, max_length=2048, description="Public URL of the photo")

    @model_validator(mode="after")
    def _one_source(self) -> "PhotoRequest":
        if not self.image_base64 and not self.image_url:
            raise ValueError("image_base64 or image_url is required")
        return self


class SuggestRequest(BaseModel):
    date: Optional[str] = Field(None, description="YYYY-MM-DD; defaults to today")
    data: Dict[str, Any] = Field(default_factory=dict, description="Extra context: goals, preferences...")


class AnalyzeRequest(BaseModel):
    date: Optional[str] = Field(None, description="YYYY-MM-DD; defaults to today")


class AILog(BaseModel):
    id: str
    type: Literal["insight", "alert"]
    suggestion_text: str
    created_at: str
