"""
normalizer.py — JSON extraction from free-form model replies
=============================================================
Models are asked for "JSON only" but routinely wrap it in prose, code
fences or trailing commentary.  This module turns such a reply into one
parsed JSON value, or the UNPARSEABLE sentinel.  It never raises.

Pipeline
--------
  1. strip_code_fence     ```json ... ``` → inner text (only when the reply
                          starts with a fence)
  2. extract_json_text    first balanced {...} or [...] region, braces inside
                          string literals ignored; falls back to a non-greedy
                          regex match, then to the text itself
  3. repair_json_text     bare numeric ranges in range-valued keys
                          ("day": 2-5) are quoted ("day": "2-5")
  4. json.loads           failure → UNPARSEABLE

Also home to flatten_strings(), the single flattening rule used everywhere
a list-of-strings field may arrive as a list, a category → list map, or a
bare string.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)


class _Unparseable:
    """Sentinel returned when no JSON value could be recovered."""

    _instance: "_Unparseable | None" = None

    def __new__(cls) -> "_Unparseable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNPARSEABLE"


UNPARSEABLE = _Unparseable()

_FENCE_OPEN  = re.compile(r"^```[ \t]*(?:json|JSON)?[ \t]*\r?\n?")
_FENCE_CLOSE = re.compile(r"\r?\n?[ \t]*```[ \t]*$")
_LOOSE_JSON  = re.compile(r"\{[\s\S]*?\}|\[[\s\S]*?\]")

# Keys whose values are schedule ranges ("days 2-5") that models emit unquoted
RANGE_KEYS: tuple[str, ...] = ("day", "days", "week", "weeks")
_BARE_RANGE = re.compile(
    r'("(?:' + "|".join(RANGE_KEYS) + r')"\s*:\s*)(-?\d+(?:\.\d+)?\s*-\s*\d+(?:\.\d+)?)(?=\s*[,}\]])'
)


# ─── Steps ───────────────────────────────────────────────────────────────────

def strip_code_fence(text: str) -> str:
    """Remove an opening ``` / ```json fence and its trailing fence."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    stripped = _FENCE_OPEN.sub("", stripped, count=1)
    stripped = _FENCE_CLOSE.sub("", stripped, count=1)
    return stripped.strip()


def find_balanced_json(text: str) -> str | None:
    """Return the first balanced object/array in *text*, or None.

    Depth only counts the bracket kind that opened the region; characters
    inside double-quoted strings (with backslash escapes) are skipped.
    """
    match = re.search(r"[{\[]", text)
    if match is None:
        return None

    first      = match.start()
    open_char  = text[first]
    close_char = "}" if open_char == "{" else "]"

    depth     = 0
    in_string = False
    escape    = False
    for i in range(first, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return text[first:i + 1]
    return None


def extract_json_text(text: str) -> str:
    """Best-effort JSON substring: balanced region → loose regex → text."""
    balanced = find_balanced_json(text)
    if balanced is not None:
        return balanced
    loose = _LOOSE_JSON.search(text)
    if loose is not None:
        return loose.group(0)
    return text


def _quote_range(match: re.Match) -> str:
    value = re.sub(r"\s+", "", match.group(2))
    return f'{match.group(1)}"{value}"'


def repair_json_text(text: str) -> str:
    """Quote bare numeric ranges such as ``"day": 2-5``."""
    return _BARE_RANGE.sub(_quote_range, text)


# ─── Public entry points ─────────────────────────────────────────────────────

def parse_llm_json(text: Any) -> Any:
    """Parse a model reply into a JSON value, or return UNPARSEABLE.

    A reply that is a single JSON value, optionally inside a code fence,
    parses to that value.  When prose surrounds the payload only an object
    or array is recovered; a scalar such as ``42`` inside prose comes back
    UNPARSEABLE.
    """
    if not isinstance(text, str) or not text.strip():
        return UNPARSEABLE

    candidate = repair_json_text(extract_json_text(strip_code_fence(text)))
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, ValueError) as exc:
        logger.warning("Could not parse model reply as JSON: %s", exc)
        logger.debug("Unparseable reply: %r", text[:500])
        return UNPARSEABLE


def parse_llm_object(text: Any) -> dict[str, Any] | None:
    """Like parse_llm_json() but only accepts a JSON object."""
    value = parse_llm_json(text)
    if isinstance(value, dict):
        return value
    if value is not UNPARSEABLE:
        logger.warning("Model reply parsed to %s, expected an object", type(value).__name__)
    return None


def flatten_strings(value: Any) -> list[str]:
    """Flatten a list / category map / bare string into a flat list of strings.

    {"frontend": ["React"], "backend": ["Node"]} → ["React", "Node"]
    "System Design"                              → ["System Design"]
    None or anything unrecognised                → []
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, bool):
        return []
    if isinstance(value, (int, float)):
        return [str(value)]
    if isinstance(value, dict):
        out: list[str] = []
        for item in value.values():
            out.extend(flatten_strings(item))
        return out
    if isinstance(value, (list, tuple)):
        out = []
        for item in value:
            out.extend(flatten_strings(item))
        return out
    return []
