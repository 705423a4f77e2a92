# -*- coding: utf-8 -*-
"""Body composition — API endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import DEFAULT_REGIONS, Comparison, Measurement, MeasurementCreateRequest
from .storage import compare_latest, create_measurement, delete_measurement, get_measurement, list_measurements

router = APIRouter(prefix="/api/body", tags=["Body composition"])


@router.post("/measurements", response_model=Measurement, status_code=201, summary="Record a measurement")
def create(request: MeasurementCreateRequest, user: dict = Depends(get_current_user)):
    return Measurement.model_validate(create_measurement(user["id"], request.model_dump()))


@router.get("/measurements", response_model=List[Measurement], summary="Measurements, newest first")
def list_all(
    limit: int | None = Query(default=None, ge=1, le=500),
    user: dict = Depends(get_current_user),
):
    return [Measurement.model_validate(m) for m in list_measurements(user["id"], limit=limit)]


@router.get("/measurements/{measurement_id}", response_model=Measurement, summary="Get a measurement")
def read(measurement_id: str, user: dict = Depends(get_current_user)):
    return Measurement.model_validate(get_measurement(user["id"], measurement_id))


@router.delete("/measurements/{measurement_id}", summary="Delete a measurement")
def delete(measurement_id: str, user: dict = Depends(get_current_user)):
    delete_measurement(user["id"], measurement_id)
    return {"status": "ok"}


@router.get("/comparison", response_model=Comparison, summary="Latest vs previous measurement")
def comparison(user: dict = Depends(get_current_user)):
    return Comparison.model_validate(compare_latest(user["id"]))


@router.get("/regions", response_model=List[str], summary="Default segment regions")
def regions(user: dict = Depends(get_current_user)):  # noqa: ARG001
    return list(DEFAULT_REGIONS)
