# -*- coding: utf-8 -*-
"""Workouts — API endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from .models import (
    CheckIn,
    CheckInRequest,
    WeeklyConsistency,
    Workout,
    WorkoutCreateRequest,
    WorkoutUpdateRequest,
)
from .storage import (
    check_in,
    create_workout,
    delete_checkin,
    delete_workout,
    get_workout,
    list_checkins,
    list_workouts,
    update_workout,
    weekly_consistency,
)

router = APIRouter(prefix="/api/workouts", tags=["Workouts"])


@router.post("", response_model=Workout, status_code=201, summary="Create a workout with its exercises")
def create(request: WorkoutCreateRequest, user: dict = Depends(get_current_user)):
    return Workout.model_validate(create_workout(user["id"], request.model_dump()))


@router.get("", response_model=List[Workout], summary="List workouts, newest first")
def list_all(
    is_template: bool | None = Query(default=None),
    user: dict = Depends(get_current_user),
):
    return [Workout.model_validate(w) for w in list_workouts(user["id"], is_template=is_template)]


@router.get("/checkins", response_model=List[CheckIn], summary="List check-ins")
def checkins(
    start: str | None = Query(default=None, description="YYYY-MM-DD"),
    end: str | None = Query(default=None, description="YYYY-MM-DD"),
    workout_id: str | None = Query(default=None),
    user: dict = Depends(get_current_user),
):
    rows = list_checkins(user["id"], start=start, end=end, workout_id=workout_id)
    return [CheckIn.model_validate(r) for r in rows]


@router.delete("/checkins/{checkin_id}", summary="Delete a check-in")
def remove_checkin(checkin_id: str, user: dict = Depends(get_current_user)):
    delete_checkin(user["id"], checkin_id)
    return {"status": "ok"}


@router.get("/consistency/weekly", response_model=WeeklyConsistency, summary="This week's check-ins vs plan")
def consistency(
    date: str | None = Query(default=None, description="Any day of the week to report; defaults to today"),
    user: dict = Depends(get_current_user),
):
    return WeeklyConsistency.model_validate(weekly_consistency(user["id"], ref_day=date))


@router.get("/{workout_id}", response_model=Workout, summary="Get a workout")
def read(workout_id: str, user: dict = Depends(get_current_user)):
    return Workout.model_validate(get_workout(user["id"], workout_id))


@router.patch("/{workout_id}", response_model=Workout, summary="Update a workout")
def update(workout_id: str, request: WorkoutUpdateRequest, user: dict = Depends(get_current_user)):
    fields = request.model_dump(exclude_unset=True)
    return Workout.model_validate(update_workout(user["id"], workout_id, fields))


@router.delete("/{workout_id}", summary="Delete a workout")
def delete(workout_id: str, user: dict = Depends(get_current_user)):
    delete_workout(user["id"], workout_id)
    return {"status": "ok"}


@router.post("/{workout_id}/checkins", response_model=CheckIn, status_code=201, summary="Check in a session")
def create_checkin(workout_id: str, request: CheckInRequest, user: dict = Depends(get_current_user)):
    return CheckIn.model_validate(
        check_in(user["id"], workout_id, completed_at=request.completed_at, notes=request.notes)
    )
