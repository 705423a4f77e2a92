# -*- coding: utf-8 -*-
"""Reference-range parsing and value classification for health markers."""

from __future__ import annotations

import re
from typing import Optional, Tuple

LOW = "LOW"
HIGH = "HIGH"
NORMAL = "NORMAL"
UNKNOWN = "UNKNOWN"

_NUM = r"(-?\d+(?:[.,]\d+)?)"
_BETWEEN_RE = re.compile(rf"{_NUM}\s*(?:-|–|a|to|até|ate)\s*{_NUM}", re.IGNORECASE)
_UPPER_RE = re.compile(rf"(?:<=?|≤|até|ate|inferior a|menor que|up to|below)\s*{_NUM}", re.IGNORECASE)
_LOWER_RE = re.compile(rf"(?:>=?|≥|superior a|maior que|above|over)\s*{_NUM}", re.IGNORECASE)


def _to_float(raw: str) -> float:
    return float(raw.replace(",", "."))


def parse_reference_range(text: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """Parse strings such as ``"70 - 99"``, ``"< 200"`` or ``"> 40"`` into (min, max)."""
    if not text:
        return None, None
    value = text.strip()
    m = _BETWEEN_RE.search(value)
    if m:
        low, high = _to_float(m.group(1)), _to_float(m.group(2))
        if low > high:
            low, high = high, low
        return low, high
    m = _UPPER_RE.search(value)
    if m:
        return None, _to_float(m.group(1))
    m = _LOWER_RE.search(value)
    if m:
        return _to_float(m.group(1)), None
    return None, None


def classify(value: Optional[float], min_reference: Optional[float], max_reference: Optional[float]) -> str:
    if value is None or (min_reference is None and max_reference is None):
        return UNKNOWN
    if min_reference is not None and value < min_reference:
        return LOW
    if max_reference is not None and value > max_reference:
        return HIGH
    return NORMAL


def format_reference(min_reference: Optional[float], max_reference: Optional[float]) -> str:
    def fmt(v: Optional[float]) -> str:
        if v is None:
            return "?"
        return f"{v:g}"

    return f"{fmt(min_reference)} - {fmt(max_reference)}"
