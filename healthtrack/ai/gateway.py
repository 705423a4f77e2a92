# -*- coding: utf-8 -*-
"""LLM gateway client (OpenAI-compatible chat completions over httpx)."""

from __future__ import annotations

import base64
import json
import logging
import re
from typing import Any, Dict, List, Optional, Union

import httpx

from ..config import settings

log = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


class AIGatewayError(RuntimeError):
    """The gateway could not be reached or returned no usable completion."""


class AIResponseError(ValueError):
    """The completion arrived but does not hold the expected JSON object."""


def _completions_url() -> str:
    base = settings.ai_base_url.rstrip("/")
    if base.endswith("/chat/completions"):
        return base
    return f"{base}/chat/completions"


def data_url(mime: str, payload: bytes) -> str:
    b64 = base64.b64encode(payload).decode("ascii")
    return f"data:{mime};base64,{b64}"


def user_message(text: str, image_url: Optional[str] = None) -> Dict[str, Any]:
    if not image_url:
        return {"role": "user", "content": text}
    return {
        "role": "user",
        "content": [
            {"type": "text", "text": text},
            {"type": "image_url", "image_url": {"url": image_url}},
        ],
    }


def _content_from_response(data: object) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    message = first.get("message")
    if isinstance(message, dict):
        content = message.get("content")
        if isinstance(content, str):
            return content
        # Some providers return a list of typed parts.
        if isinstance(content, list):
            return "".join(
                str(part.get("text") or "")
                for part in content
                if isinstance(part, dict) and part.get("type") in (None, "text", "output_text")
            )
    text = first.get("text")
    return text if isinstance(text, str) else ""


def chat_completion(messages: List[Dict[str, Any]], *, temperature: Optional[float] = None) -> str:
    if not settings.ai_api_key:
        raise AIGatewayError("AI_GATEWAY_API_KEY not configured")

    payload: Dict[str, Any] = {
        "model": settings.ai_model,
        "messages": messages,
        "temperature": settings.ai_temperature if temperature is None else temperature,
    }
    headers = {
        "Authorization": f"Bearer {settings.ai_api_key}",
        "Content-Type": "application/json",
    }
    try:
        with httpx.Client(timeout=settings.ai_timeout, follow_redirects=True) as client:
            resp = client.post(_completions_url(), headers=headers, json=payload)
    except httpx.HTTPError as exc:
        raise AIGatewayError(f"AI gateway unreachable: {exc}") from exc

    if resp.status_code >= 400:
        log.warning("AI gateway error %s: %s", resp.status_code, (resp.text or "")[:500])
        raise AIGatewayError(f"AI API error: {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as exc:
        snippet = (resp.text or "").replace("\n", " ").strip()[:200]
        raise AIGatewayError(f"AI gateway returned non-JSON response: {snippet}") from exc

    content = _content_from_response(data)
    if not content.strip():
        raise AIGatewayError("No content returned from AI")
    return content


def extract_json(text: str) -> Dict[str, Any]:
    """Pull the JSON object out of a completion, tolerating markdown fences and prose."""
    fenced = _FENCE_RE.search(text or "")
    candidate = (fenced.group(1) if fenced else (text or "")).strip()
    start = candidate.find("{")
    end = candidate.rfind("}")
    if start == -1 or end <= start:
        raise AIResponseError("AI response does not contain a JSON object")
    try:
        parsed = json.loads(candidate[start : end + 1])
    except json.JSONDecodeError as exc:
        raise AIResponseError(f"Invalid AI response format: {exc}") from exc
    if not isinstance(parsed, dict):
        raise AIResponseError("AI response JSON is not an object")
    return parsed


def complete_json(
    system_prompt: str,
    user_content: Union[str, Dict[str, Any]],
    *,
    temperature: Optional[float] = None,
) -> Dict[str, Any]:
    """One round-trip: system prompt + user message in, parsed JSON object out."""
    message = user_content if isinstance(user_content, dict) else user_message(user_content)
    content = chat_completion([{"role": "system", "content": system_prompt}, message], temperature=temperature)
    try:
        return extract_json(content)
    except AIResponseError:
        log.warning("AI output parse failed: %r", content[:300], exc_info=True)
        raise
