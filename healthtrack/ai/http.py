# -*- coding: utf-8 -*-
"""HTTP-facing helpers for routers that call the AI tasks."""

from __future__ import annotations

import base64
import binascii
import re
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, Tuple

from fastapi import HTTPException

from .gateway import AIGatewayError, AIResponseError

EXAM_MIMES = ("image/jpeg", "image/jpg", "image/png", "image/webp", "image/heic", "application/pdf")
IMAGE_MIMES = ("image/jpeg", "image/jpg", "image/png", "image/webp", "image/heic")

_DATA_URL_RE = re.compile(r"^data:([\w.+/-]+);base64,(.*)$", re.DOTALL)


@contextmanager
def ai_errors_as_http() -> Iterator[None]:
    """Unparseable model output is our 500; an unreachable or failing gateway is a 502."""
    try:
        yield
    except AIResponseError as exc:
        raise HTTPException(status_code=500, detail=f"AI output error: {exc}") from exc
    except AIGatewayError as exc:
        raise HTTPException(status_code=502, detail=f"AI gateway call failed: {exc}") from exc


def split_data_url(value: str, default_mime: Optional[str] = None) -> Tuple[Optional[str], str]:
    """``data:<mime>;base64,<payload>`` → (mime, payload); raw base64 passes through."""
    m = _DATA_URL_RE.match(value.strip())
    if m:
        return m.group(1).lower(), m.group(2)
    return default_mime, value


def decode_upload_or_400(
    payload_b64: str,
    *,
    mime: Optional[str],
    max_bytes: int,
    allowed: Iterable[str],
) -> Tuple[str, bytes]:
    mime, raw = split_data_url(payload_b64, default_mime=mime)
    mime = (mime or "").lower()
    allowed = tuple(allowed)
    if mime not in allowed:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {mime or 'unknown'}")
    try:
        data = base64.b64decode(re.sub(r"\s+", "", raw), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid base64 file: {exc}") from exc
    if not data:
        raise HTTPException(status_code=400, detail="Empty file")
    if len(data) > max_bytes:
        raise HTTPException(status_code=400, detail=f"File too large: {len(data)} bytes > {max_bytes}")
    return mime, data
