# -*- coding: utf-8 -*-
"""Imports — API endpoints (stage, review, commit, discard)."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ..ai import tasks
from ..ai.gateway import data_url
from ..ai.http import EXAM_MIMES, IMAGE_MIMES, ai_errors_as_http, decode_upload_or_400
from ..auth.security import get_current_user
from ..config import settings
from .drafts import exam_draft, meal_draft, workout_draft
from .models import (
    EntryRequest,
    ExamImportRequest,
    MealImportRequest,
    PayloadReplaceRequest,
    StagedImport,
    WorkoutImportRequest,
)
from .storage import (
    add_entry,
    commit_import,
    create_staged_import,
    discard_import,
    get_import,
    list_imports,
    remove_entry,
    replace_payload,
    update_entry,
)

router = APIRouter(prefix="/api/imports", tags=["Imports"])

log = logging.getLogger(__name__)


def _stage(user_id: str, *, kind: str, payload: dict, warnings: list, filename: str | None, auto_commit: bool):
    staged = create_staged_import(user_id, kind=kind, payload=payload, warnings=warnings, source_filename=filename)
    if auto_commit:
        staged = commit_import(user_id, staged["id"])
    return StagedImport.model_validate(staged)


@router.post("/exam", response_model=StagedImport, status_code=201, summary="Extract markers from an exam file")
def stage_exam(request: ExamImportRequest, user: dict = Depends(get_current_user)):
    mime, data = decode_upload_or_400(
        request.file_base64,
        mime=request.mime_type,
        max_bytes=settings.max_upload_bytes,
        allowed=EXAM_MIMES,
    )
    with ai_errors_as_http():
        extraction = tasks.extract_exam_markers(data_url(mime, data))
    log.info("extracted %d markers from %s", len(extraction.markers), request.filename or "upload")
    return _stage(
        user["id"],
        kind="exam",
        payload=exam_draft(extraction),
        warnings=extraction.warnings,
        filename=request.filename,
        auto_commit=request.auto_commit,
    )


@router.post("/workout", response_model=StagedImport, status_code=201, summary="Generate a workout draft")
def stage_workout(request: WorkoutImportRequest, user: dict = Depends(get_current_user)):
    with ai_errors_as_http():
        workout = tasks.generate_workout(request.prompt)
    return _stage(
        user["id"],
        kind="workout",
        payload=workout_draft(workout),
        warnings=[],
        filename=None,
        auto_commit=request.auto_commit,
    )


@router.post("/meal", response_model=StagedImport, status_code=201, summary="Estimate a meal draft")
def stage_meal(request: MealImportRequest, user: dict = Depends(get_current_user)):
    if request.image_base64:
        mime, data = decode_upload_or_400(
            request.image_base64,
            mime=request.image_mime,
            max_bytes=settings.max_upload_bytes,
            allowed=IMAGE_MIMES,
        )
        with ai_errors_as_http():
            estimate = tasks.analyze_meal_photo(data_url(mime, data))
    elif request.image_url:
        with ai_errors_as_http():
            estimate = tasks.analyze_meal_photo(request.image_url)
    else:
        with ai_errors_as_http():
            estimate = tasks.calculate_macros(request.description or "")
    payload = meal_draft(
        estimate,
        name=request.name,
        description=request.description,
        category=request.category,
        eaten_at=request.eaten_at,
        image_url=request.image_url,
    )
    return _stage(user["id"], kind="meal", payload=payload, warnings=[], filename=None, auto_commit=request.auto_commit)


@router.get("", response_model=List[StagedImport], summary="List imports, newest first")
def list_all(
    status: str | None = Query(default=None, pattern="^(staged|committed|discarded)$"),
    kind: str | None = Query(default=None, pattern="^(exam|workout|meal)$"),
    limit: int = Query(default=50, ge=1, le=500),
    user: dict = Depends(get_current_user),
):
    return [StagedImport.model_validate(i) for i in list_imports(user["id"], status=status, kind=kind, limit=limit)]


@router.get("/{import_id}", response_model=StagedImport, summary="Get an import")
def read(import_id: str, user: dict = Depends(get_current_user)):
    return StagedImport.model_validate(get_import(user["id"], import_id))


@router.put("/{import_id}/payload", response_model=StagedImport, summary="Replace the reviewed payload")
def put_payload(import_id: str, request: PayloadReplaceRequest, user: dict = Depends(get_current_user)):
    return StagedImport.model_validate(replace_payload(user["id"], import_id, request.payload))


@router.post("/{import_id}/entries", response_model=StagedImport, summary="Append an entry")
def post_entry(import_id: str, request: EntryRequest, user: dict = Depends(get_current_user)):
    return StagedImport.model_validate(add_entry(user["id"], import_id, request.entry))


@router.patch("/{import_id}/entries/{index}", response_model=StagedImport, summary="Edit an entry by position")
def patch_entry(import_id: str, index: int, request: EntryRequest, user: dict = Depends(get_current_user)):
    return StagedImport.model_validate(update_entry(user["id"], import_id, index, request.entry))


@router.delete("/{import_id}/entries/{index}", response_model=StagedImport, summary="Remove an entry by position")
def delete_entry(import_id: str, index: int, user: dict = Depends(get_current_user)):
    return StagedImport.model_validate(remove_entry(user["id"], import_id, index))


@router.post("/{import_id}/commit", response_model=StagedImport, summary="Write the reviewed records")
def commit(import_id: str, user: dict = Depends(get_current_user)):
    return StagedImport.model_validate(commit_import(user["id"], import_id))


@router.post("/{import_id}/discard", response_model=StagedImport, summary="Drop the draft")
def discard(import_id: str, user: dict = Depends(get_current_user)):
    return StagedImport.model_validate(discard_import(user["id"], import_id))
