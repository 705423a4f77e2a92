# -*- coding: utf-8 -*-
"""Auth — password hashing, signed session tokens and the FastAPI user dependency."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from ..config import settings
from .storage import get_user_by_id

TOKEN_COOKIE_NAME = "healthtrack_token"

_PBKDF2_ALG = "sha256"
_PBKDF2_ITERATIONS = 200_000


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    pad = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode((data + pad).encode("ascii"))


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    derived = hashlib.pbkdf2_hmac(_PBKDF2_ALG, password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return f"pbkdf2_{_PBKDF2_ALG}${_PBKDF2_ITERATIONS}${_b64url_encode(salt)}${_b64url_encode(derived)}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        scheme, iterations, salt_b64, expected_b64 = password_hash.split("$", 3)
    except ValueError:
        return False
    if not scheme.startswith("pbkdf2_"):
        return False
    try:
        actual = hashlib.pbkdf2_hmac(
            scheme.split("_", 1)[1],
            password.encode("utf-8"),
            _b64url_decode(salt_b64),
            int(iterations),
        )
        return hmac.compare_digest(actual, _b64url_decode(expected_b64))
    except (ValueError, TypeError):
        return False


def _sign(signing_input: bytes) -> bytes:
    return hmac.new(settings.jwt_secret.encode("utf-8"), signing_input, hashlib.sha256).digest()


def _jwt_encode(payload: Dict[str, Any]) -> str:
    header = _b64url_encode(json.dumps({"alg": "HS256", "typ": "JWT"}, separators=(",", ":")).encode("utf-8"))
    body = _b64url_encode(json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
    signature = _b64url_encode(_sign(f"{header}.{body}".encode("ascii")))
    return f"{header}.{body}.{signature}"


def _jwt_decode(token: str) -> Dict[str, Any]:
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("malformed token")
    header, body, signature = parts
    if not hmac.compare_digest(_sign(f"{header}.{body}".encode("ascii")), _b64url_decode(signature)):
        raise ValueError("bad signature")
    payload = json.loads(_b64url_decode(body).decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("bad payload")
    return payload


def create_access_token(*, user_id: str, email: str) -> str:
    now = datetime.now(timezone.utc)
    expires = now + timedelta(days=int(settings.token_ttl_days))
    return _jwt_encode(
        {
            "sub": user_id,
            "email": email,
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
        }
    )


def decode_token(token: str) -> Dict[str, Any]:
    try:
        payload = _jwt_decode(token)
    except (ValueError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc
    exp = int(payload.get("exp") or 0)
    if exp and exp < int(datetime.now(timezone.utc).timestamp()):
        raise HTTPException(status_code=401, detail="Token expired")
    return payload


def get_token_from_request(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization") or ""
    if auth.lower().startswith("bearer "):
        token = auth.split(" ", 1)[1].strip()
        return token or None
    return request.cookies.get(TOKEN_COOKIE_NAME) or None


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    user = getattr(request.state, "user", None)
    if user:
        return user

    token = get_token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_token(token)
    user_id = str(payload.get("sub") or "")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    user_row = get_user_by_id(user_id)
    if not user_row:
        raise HTTPException(status_code=401, detail="User not found")

    request.state.user = user_row
    return user_row


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user
