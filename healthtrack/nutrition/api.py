# -*- coding: utf-8 -*-
"""Nutrition — API endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from ..ai import tasks
from ..ai.gateway import data_url
from ..ai.http import IMAGE_MIMES, ai_errors_as_http, decode_upload_or_400
from ..ai.models import MacroEstimate, MealSuggestion, NutritionAnalysis
from ..auth.security import get_current_user
from ..config import settings
from ..timeutil import normalize_date
from ..workouts.storage import checkins_on
from .models import (
    AILog,
    AnalyzeRequest,
    DailySummary,
    MacrosRequest,
    Meal,
    MealCreateRequest,
    PhotoRequest,
    SuggestRequest,
    WaterCreateRequest,
    WaterLog,
)
from .storage import (
    add_water,
    create_meal,
    daily_summary,
    delete_meal,
    delete_water,
    get_meal,
    list_ai_logs,
    list_meals,
    list_water,
    save_ai_logs,
)

router = APIRouter(prefix="/api/nutrition", tags=["Nutrition"])

log = logging.getLogger(__name__)


def _day_context(user_id: str, day: str) -> Dict[str, Any]:
    meals = list_meals(user_id, day=day)
    return {
        "date": day,
        "dailySummary": daily_summary(user_id, day=day),
        "meals": [
            {
                "name": m["name"],
                "category": m["category"],
                "calories": m["total_calories"],
                "protein": m["protein_g"],
                "carbs": m["carbs_g"],
                "fat": m["fat_g"],
            }
            for m in meals
        ],
        "workoutsToday": checkins_on(user_id, day),
    }


@router.post("/meals", response_model=Meal, status_code=201, summary="Log a meal with its items")
def create(request: MealCreateRequest, user: dict = Depends(get_current_user)):
    return Meal.model_validate(create_meal(user["id"], request.model_dump()))


@router.get("/meals", response_model=List[Meal], summary="Meals of one day, in eating order")
def meals(
    date: str | None = Query(default=None, description="YYYY-MM-DD; defaults to today"),
    user: dict = Depends(get_current_user),
):
    return [Meal.model_validate(m) for m in list_meals(user["id"], day=date)]


@router.get("/meals/{meal_id}", response_model=Meal, summary="Get a meal")
def read_meal(meal_id: str, user: dict = Depends(get_current_user)):
    return Meal.model_validate(get_meal(user["id"], meal_id))


@router.delete("/meals/{meal_id}", summary="Delete a meal")
def remove_meal(meal_id: str, user: dict = Depends(get_current_user)):
    delete_meal(user["id"], meal_id)
    return {"status": "ok"}


@router.post("/water", response_model=WaterLog, status_code=201, summary="Log water intake")
def create_water(request: WaterCreateRequest, user: dict = Depends(get_current_user)):
    return WaterLog.model_validate(add_water(user["id"], amount_ml=request.amount_ml, logged_at=request.logged_at))


@router.get("/water", response_model=List[WaterLog], summary="Water logs of one day")
def water(
    date: str | None = Query(default=None, description="YYYY-MM-DD; defaults to today"),
    user: dict = Depends(get_current_user),
):
    return [WaterLog.model_validate(w) for w in list_water(user["id"], day=date)]


@router.delete("/water/{log_id}", summary="Delete a water log")
def remove_water(log_id: str, user: dict = Depends(get_current_user)):
    delete_water(user["id"], log_id)
    return {"status": "ok"}


@router.get("/summary", response_model=DailySummary, summary="Macro and water totals for one day")
def summary(
    date: str | None = Query(default=None, description="YYYY-MM-DD; defaults to today"),
    user: dict = Depends(get_current_user),
):
    return DailySummary.model_validate(daily_summary(user["id"], day=date))


@router.post("/ai/macros", response_model=MacroEstimate, summary="Estimate macros from a description")
def ai_macros(request: MacrosRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    with ai_errors_as_http():
        return tasks.calculate_macros(request.description)


@router.post("/ai/photo", response_model=MacroEstimate, summary="Estimate macros from a meal photo")
def ai_photo(request: PhotoRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    if request.image_base64:
        mime, data = decode_upload_or_400(
            request.image_base64,
            mime=request.image_mime,
            max_bytes=settings.max_upload_bytes,
            allowed=IMAGE_MIMES,
        )
        image_url = data_url(mime, data)
    else:
        image_url = request.image_url or ""
    with ai_errors_as_http():
        return tasks.analyze_meal_photo(image_url)


@router.post("/ai/suggest", response_model=MealSuggestion, summary="Suggest the next meal")
def ai_suggest(request: SuggestRequest, user: dict = Depends(get_current_user)):
    context = _day_context(user["id"], normalize_date(request.date))
    context.update(request.data or {})
    with ai_errors_as_http():
        return tasks.suggest_meal(context)


@router.post("/ai/analyze", response_model=NutritionAnalysis, summary="AI review of one day; stores insights and alerts")
def ai_analyze(request: AnalyzeRequest, user: dict = Depends(get_current_user)):
    day = normalize_date(request.date)
    with ai_errors_as_http():
        analysis = tasks.analyze_nutrition(_day_context(user["id"], day))
    saved = save_ai_logs(user["id"], insights=analysis.insights, alerts=analysis.alerts)
    log.info("stored %d nutrition AI logs for user %s", len(saved), user["id"])
    return analysis


@router.get("/ai/logs", response_model=List[AILog], summary="Stored AI insights and alerts, newest first")
def ai_logs(
    type: str | None = Query(default=None, pattern="^(insight|alert)$"),
    limit: int = Query(default=50, ge=1, le=500),
    user: dict = Depends(get_current_user),
):
    return [AILog.model_validate(r) for r in list_ai_logs(user["id"], log_type=type, limit=limit)]
