# -*- coding: utf-8 -*-
"""Supplements — API endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from typing import List

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from ..timeutil import today
from .models import (
    Supplement,
    SupplementCreateRequest,
    SupplementLog,
    SupplementLogRequest,
    SupplementUpdateRequest,
    UsageHistory,
    WeeklyUsage,
)
from .storage import (
    create_supplement,
    delete_log,
    delete_supplement,
    get_supplement,
    list_logs,
    list_supplements,
    log_usage,
    update_supplement,
    usage_history,
    weekly_usage,
)

router = APIRouter(prefix="/api/supplements", tags=["Supplements"])


@router.post("", response_model=Supplement, status_code=201, summary="Create a supplement")
def create(request: SupplementCreateRequest, user: dict = Depends(get_current_user)):
    return Supplement.model_validate(create_supplement(user["id"], request.model_dump()))


@router.get("", response_model=List[Supplement], summary="List supplements")
def list_all(
    active: bool | None = Query(default=None, description="Only active (true) or inactive (false)"),
    user: dict = Depends(get_current_user),
):
    return [Supplement.model_validate(s) for s in list_supplements(user["id"], active=active)]


@router.get("/logs", response_model=List[SupplementLog], summary="Usage logs, newest first")
def logs(
    supplement_id: str | None = Query(default=None),
    start: str | None = Query(default=None, description="YYYY-MM-DD"),
    end: str | None = Query(default=None, description="YYYY-MM-DD"),
    limit: int = Query(default=100, ge=1, le=1000),
    user: dict = Depends(get_current_user),
):
    rows = list_logs(user["id"], supplement_id=supplement_id, start=start, end=end, limit=limit)
    return [SupplementLog.model_validate(r) for r in rows]


@router.delete("/logs/{log_id}", summary="Delete a usage log")
def remove_log(log_id: str, user: dict = Depends(get_current_user)):
    delete_log(user["id"], log_id)
    return {"status": "ok"}


@router.get("/usage/weekly", response_model=WeeklyUsage, summary="Last seven days of usage")
def weekly(
    supplement_id: str | None = Query(default=None),
    user: dict = Depends(get_current_user),
):
    return WeeklyUsage.model_validate(weekly_usage(user["id"], supplement_id=supplement_id))


@router.get("/usage/history", response_model=UsageHistory, summary="Per-day usage counts")
def history(
    start: str | None = Query(default=None, description="YYYY-MM-DD; defaults to 30 days ago"),
    end: str | None = Query(default=None, description="YYYY-MM-DD; defaults to today"),
    supplement_id: str | None = Query(default=None),
    user: dict = Depends(get_current_user),
):
    end = end or today()
    start = start or (date.fromisoformat(end[:10]) - timedelta(days=29)).isoformat()
    return UsageHistory.model_validate(usage_history(user["id"], start=start, end=end, supplement_id=supplement_id))


@router.get("/{supplement_id}", response_model=Supplement, summary="Get a supplement")
def read(supplement_id: str, user: dict = Depends(get_current_user)):
    return Supplement.model_validate(get_supplement(user["id"], supplement_id))


@router.patch("/{supplement_id}", response_model=Supplement, summary="Update a supplement")
def update(supplement_id: str, request: SupplementUpdateRequest, user: dict = Depends(get_current_user)):
    fields = request.model_dump(exclude_unset=True)
    return Supplement.model_validate(update_supplement(user["id"], supplement_id, fields))


@router.delete("/{supplement_id}", summary="Delete a supplement and its logs")
def delete(supplement_id: str, user: dict = Depends(get_current_user)):
    delete_supplement(user["id"], supplement_id)
    return {"status": "ok"}


@router.post("/{supplement_id}/logs", response_model=List[SupplementLog], status_code=201, summary="Log usage")
def create_logs(supplement_id: str, request: SupplementLogRequest, user: dict = Depends(get_current_user)):
    rows = log_usage(user["id"], supplement_id, dates=request.dates, dose=request.dose, notes=request.notes)
    return [SupplementLog.model_validate(r) for r in rows]
