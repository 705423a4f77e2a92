# -*- coding: utf-8 -*-
"""Markers — API endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import (
    Marker,
    MarkerAlert,
    MarkerCreateRequest,
    MarkerUpdateRequest,
    MarkerValue,
    MarkerValueCreateRequest,
    MarkerValuesResponse,
)
from .storage import (
    add_value,
    create_marker,
    delete_marker,
    delete_value,
    get_marker,
    list_markers,
    list_values,
    marker_alerts,
    update_marker,
)

router = APIRouter(prefix="/api/markers", tags=["Markers"])


@router.post("", response_model=Marker, status_code=201, summary="Create a health marker")
def create(request: MarkerCreateRequest, user: dict = Depends(get_current_user)):
    return Marker.model_validate(create_marker(user["id"], request.model_dump()))


@router.get("", response_model=List[Marker], summary="List markers with their latest value")
def list_all(user: dict = Depends(get_current_user)):
    return [Marker.model_validate(m) for m in list_markers(user["id"])]


@router.get("/alerts", response_model=List[MarkerAlert], summary="Trend alerts across all markers")
def alerts(user: dict = Depends(get_current_user)):
    return [MarkerAlert.model_validate(a) for a in marker_alerts(user["id"])]


@router.get("/{marker_id}", response_model=Marker, summary="Get a marker")
def read(marker_id: str, user: dict = Depends(get_current_user)):
    return Marker.model_validate(get_marker(user["id"], marker_id))


@router.patch("/{marker_id}", response_model=Marker, summary="Update a marker")
def update(marker_id: str, request: MarkerUpdateRequest, user: dict = Depends(get_current_user)):
    return Marker.model_validate(update_marker(user["id"], marker_id, request.model_dump(exclude_unset=True)))


@router.delete("/{marker_id}", summary="Delete a marker and its values")
def delete(marker_id: str, user: dict = Depends(get_current_user)):
    delete_marker(user["id"], marker_id)
    return {"status": "ok"}


@router.get("/{marker_id}/alerts", response_model=List[MarkerAlert], summary="Trend alerts for one marker")
def alerts_for_marker(marker_id: str, user: dict = Depends(get_current_user)):
    return [MarkerAlert.model_validate(a) for a in marker_alerts(user["id"], marker_id)]


@router.post("/{marker_id}/values", response_model=MarkerValue, status_code=201, summary="Record a value")
def create_value(marker_id: str, request: MarkerValueCreateRequest, user: dict = Depends(get_current_user)):
    return MarkerValue.model_validate(add_value(user["id"], marker_id, request.model_dump()))


@router.get("/{marker_id}/values", response_model=MarkerValuesResponse, summary="Value series, oldest first")
def read_values(
    marker_id: str,
    start: str | None = Query(default=None, description="YYYY-MM-DD"),
    end: str | None = Query(default=None, description="YYYY-MM-DD"),
    user: dict = Depends(get_current_user),
):
    values = list_values(user["id"], marker_id, start=start, end=end)
    return MarkerValuesResponse(marker_id=marker_id, count=len(values), values=values)


@router.delete("/{marker_id}/values/{value_id}", summary="Delete one recorded value")
def remove_value(marker_id: str, value_id: str, user: dict = Depends(get_current_user)):
    delete_value(user["id"], marker_id, value_id)
    return {"status": "ok"}
