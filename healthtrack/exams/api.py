# -*- coding: utf-8 -*-
"""Exams — API endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..auth.security import get_current_user
from .models import ExamDetail, ExamExport, ExamSummary
from .storage import export_exam, get_exam, list_exams

router = APIRouter(prefix="/api/exams", tags=["Exams"])


@router.get("", response_model=List[ExamSummary], summary="List exam dates, newest first")
def list_all(user: dict = Depends(get_current_user)):
    return [ExamSummary.model_validate(e) for e in list_exams(user["id"])]


@router.get("/{exam_date}", response_model=ExamDetail, summary="Values recorded on one date")
def read(exam_date: str, user: dict = Depends(get_current_user)):
    return ExamDetail.model_validate(get_exam(user["id"], exam_date))


@router.get("/{exam_date}/export", response_model=ExamExport, summary="Download an exam as JSON")
def export(exam_date: str, user: dict = Depends(get_current_user)):
    doc = ExamExport.model_validate(export_exam(user["id"], exam_date))
    return JSONResponse(
        content=doc.model_dump(),
        headers={"Content-Disposition": f'attachment; filename="exam-{doc.exam_date}.json"'},
    )
