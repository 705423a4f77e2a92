# -*- coding: utf-8 -*-
"""Functions — API endpoints.

Failures answer ``{"error": "<message>"}`` with HTTP 500 (400 only for a missing
prompt) instead of FastAPI's ``detail`` envelope, which is what the existing
clients of these endpoints read.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..ai import tasks
from ..ai.gateway import AIGatewayError, AIResponseError
from ..ai.http import EXAM_MIMES, decode_upload_or_400, split_data_url
from ..auth.security import get_current_user
from ..config import settings

router = APIRouter(prefix="/api/functions", tags=["Functions"])

log = logging.getLogger(__name__)


class ProcessExamRequest(BaseModel):
    file: str = Field(..., min_length=1, description="Data URL or public URL of the exam")
    filename: Optional[str] = None


class NutritionAIRequest(BaseModel):
    type: str = Field(..., description="calculate-macros | analyze-photo | suggest-meal | analyze-nutrition")
    data: Dict[str, Any] = Field(default_factory=dict)


class GenerateWorkoutRequest(BaseModel):
    prompt: Optional[str] = None


def _error(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _run(name: str, fn: Callable[[], Any]) -> Any:
    try:
        return fn()
    except HTTPException as exc:
        return _error(str(exc.detail))
    except (AIGatewayError, AIResponseError) as exc:
        log.warning("%s failed: %s", name, exc)
        return _error(str(exc))


def _exam_file_url(file: str) -> str:
    mime, _ = split_data_url(file)
    if mime is None:
        if file.startswith(("http://", "https://")):
            return file
        raise HTTPException(status_code=400, detail="file must be a data URL or an http(s) URL")
    # validates type and size; the data URL itself is forwarded unchanged
    decode_upload_or_400(file, mime=mime, max_bytes=settings.max_upload_bytes, allowed=EXAM_MIMES)
    return file


@router.post("/process-exam", summary="Extract markers from an exam file")
def process_exam(request: ProcessExamRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    def work() -> Dict[str, Any]:
        extraction = tasks.extract_exam_markers(_exam_file_url(request.file))
        return {
            "exam_date": extraction.exam_date,
            "markers": [
                {
                    "name": m.marker_name,
                    "value": m.value,
                    "unit": m.unit,
                    "reference_range": m.reference_range,
                    "ana_ref": m.ana_ref,
                }
                for m in extraction.markers
            ],
            "warnings": extraction.warnings,
        }

    return _run("process-exam", work)


def _nutrition_task(kind: str, data: Dict[str, Any]) -> Dict[str, Any]:
    if kind == "calculate-macros":
        description = str(data.get("description") or "").strip()
        if not description:
            raise HTTPException(status_code=400, detail="description is required")
        return tasks.calculate_macros(f"Refeição: {description}").model_dump()
    if kind == "analyze-photo":
        image_url = str(data.get("imageUrl") or data.get("image_url") or "").strip()
        if not image_url:
            raise HTTPException(status_code=400, detail="imageUrl is required")
        return tasks.analyze_meal_photo(image_url).model_dump()
    if kind == "suggest-meal":
        return tasks.suggest_meal(data).model_dump()
    if kind == "analyze-nutrition":
        return tasks.analyze_nutrition(data).model_dump()
    raise HTTPException(status_code=500, detail="Invalid type")


@router.post("/nutrition-ai", summary="Nutrition AI tasks")
def nutrition_ai(request: NutritionAIRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    return _run("nutrition-ai", lambda: _nutrition_task(request.type, request.data))


@router.post("/generate-workout", summary="Generate a workout from a prompt")
def generate_workout(request: GenerateWorkoutRequest, user: dict = Depends(get_current_user)):  # noqa: ARG001
    prompt = (request.prompt or "").strip()
    if not prompt:
        return _error("Prompt is required", 400)
    return _run("generate-workout", lambda: tasks.generate_workout(prompt).model_dump())
