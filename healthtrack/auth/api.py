# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from ..config import settings
from .models import AuthResponse, LoginRequest, Profile, ProfileUpdateRequest, RegisterRequest, UserPublic
from .security import TOKEN_COOKIE_NAME, create_access_token, get_current_user, hash_password, verify_password
from .storage import create_user, get_profile, get_user_by_email, update_profile

router = APIRouter(prefix="/api/auth", tags=["Auth"])

log = logging.getLogger(__name__)


def _user_public(row: dict) -> UserPublic:
    return UserPublic(id=row["id"], email=row["email"], created_at=row["created_at"])


def _set_auth_cookie(resp: Response, token: str) -> None:
    resp.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        httponly=True,
        secure=bool(settings.cookie_secure),
        samesite="lax",
        max_age=int(settings.token_ttl_days) * 24 * 60 * 60,
        path="/",
    )


@router.post("/register", response_model=AuthResponse, summary="Register a new user")
def register(request: RegisterRequest, response: Response):
    if get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = create_user(
        email=request.email,
        password_hash=hash_password(request.password),
        full_name=request.full_name,
    )
    log.info("registered user %s", user["id"])

    token = create_access_token(user_id=user["id"], email=user["email"])
    _set_auth_cookie(response, token)
    return AuthResponse(user=_user_public(user), token=token)


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(request: LoginRequest, response: Response):
    user = get_user_by_email(request.email)
    if not user or not verify_password(request.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(user_id=user["id"], email=user["email"])
    _set_auth_cookie(response, token)
    return AuthResponse(user=_user_public(user), token=token)


@router.post("/logout", summary="Logout")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/")
    return {"status": "ok"}


@router.get("/me", response_model=UserPublic, summary="Get current user")
def me(user: dict = Depends(get_current_user)):
    return _user_public(user)


@router.get("/profile", response_model=Profile, summary="Get my profile")
def read_profile(user: dict = Depends(get_current_user)):
    row = get_profile(user["id"])
    if not row:
        # Accounts created before profiles existed get an empty one on first read.
        row = update_profile(user["id"], {})
    return Profile.model_validate(row)


@router.put("/profile", response_model=Profile, summary="Update my profile")
def write_profile(request: ProfileUpdateRequest, user: dict = Depends(get_current_user)):
    row = update_profile(user["id"], request.model_dump(exclude_unset=True))
    return Profile.model_validate(row)
