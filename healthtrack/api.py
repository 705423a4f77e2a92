# -*- coding: utf-8 -*-
"""
healthtrack API

Personal health tracking: markers and exams, supplements, workouts,
nutrition, body composition, and AI-assisted imports.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .app_db import init_app_db
from .auth.api import router as auth_router
from .auth.security import get_current_user_from_request
from .body.api import router as body_router
from .config import settings
from .dashboard.api import router as dashboard_router
from .exams.api import router as exams_router
from .functions.api import router as functions_router
from .imports.api import router as imports_router
from .markers.api import router as markers_router
from .nutrition.api import router as nutrition_router
from .supplements.api import router as supplements_router
from .workouts.api import router as workouts_router

app = FastAPI(
    title="healthtrack",
    description="Markers, supplements, workouts, nutrition and body composition tracking",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup_init_db() -> None:
    init_app_db(settings.app_db_path)


# Ensure the app DB exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.app_db_path)


_AUTH_EXEMPT_PREFIXES = (
    "/api/auth/login",
    "/api/auth/register",
    "/api/auth/logout",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
)


@app.middleware("http")
async def _auth_gate(request: Request, call_next):
    path = request.url.path
    if (
        request.method != "OPTIONS"
        and path.startswith("/api")
        and path != "/api/health"
        and not any(path.startswith(p) for p in _AUTH_EXEMPT_PREFIXES)
    ):
        try:
            user = get_current_user_from_request(request)
            request.state.user = user
        except HTTPException as exc:
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
    return await call_next(request)


app.include_router(auth_router)
app.include_router(markers_router)
app.include_router(exams_router)
app.include_router(imports_router)
app.include_router(supplements_router)
app.include_router(workouts_router)
app.include_router(nutrition_router)
app.include_router(body_router)
app.include_router(dashboard_router)
app.include_router(functions_router)


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "version": app.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
