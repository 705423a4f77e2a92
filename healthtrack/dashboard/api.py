# -*- coding: utf-8 -*-
"""Dashboard — API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth.security import get_current_user
from ..body.storage import list_measurements
from ..markers.reference import HIGH, LOW
from ..markers.storage import list_markers, marker_alerts
from ..nutrition.storage import daily_summary
from ..supplements.storage import list_supplements, weekly_usage
from ..timeutil import today
from ..workouts.storage import weekly_consistency
from .models import DashboardSummary

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/summary", response_model=DashboardSummary, summary="Headline numbers across all domains")
def summary(user: dict = Depends(get_current_user)):
    user_id = user["id"]
    markers = list_markers(user_id)
    week = weekly_consistency(user_id)
    latest = list_measurements(user_id, limit=1)
    return DashboardSummary(
        date=today(),
        markers={
            "total": len(markers),
            "out_of_range": sum(1 for m in markers if m["status"] in (LOW, HIGH)),
            "alerts": len(marker_alerts(user_id)),
        },
        active_supplements=len(list_supplements(user_id, active=True)),
        supplement_adherence=weekly_usage(user_id)["adherence"],
        workouts={"completed": week["completed"], "planned": week["planned"]},
        nutrition=daily_summary(user_id),
        latest_body=latest[0] if latest else None,
    )
