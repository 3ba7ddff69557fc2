# core/utils.py
from __future__ import annotations
import re
from typing import Any, Optional, Tuple

# "Math(50%)" -> weight, "Math[100]" -> max score
_WEIGHT_RE = re.compile(r"^(.+?)\s*[(（]\s*(\d+(?:\.\d+)?)\s*%\s*[)）]$")
_MAX_RE = re.compile(r"^(.+?)\s*\[\s*(\d+)\s*\]$")

def cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()

def parse_int(value: Any) -> Optional[int]:
    """Integer from a spreadsheet cell; accepts 85, 85.0 and "85". None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    s = str(value).strip()
    if re.fullmatch(r"[+-]?\d+", s):
        return int(s)
    if re.fullmatch(r"[+-]?\d+\.0*", s):
        return int(float(s))
    return None

def parse_subject_header(title: str) -> Tuple[str, float, Optional[int]]:
    """Split a header cell into (subject, weight, max_score)."""
    t = (title or "").strip()
    m = _WEIGHT_RE.match(t)
    if m:
        return m.group(1).strip(), float(m.group(2)), None
    m = _MAX_RE.match(t)
    if m:
        return m.group(1).strip(), 1.0, int(m.group(2))
    return t, 1.0, None
