from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)


@dataclass(frozen=True)
class ParseFailure:
    """An unparsable model payload. Callers route this to their fallback."""

    reason: str
    raw: str


def strip_fences(text: str) -> str:
    return _FENCE_RE.sub("", text).strip()


def parse_json_payload(text: str | None) -> Any | ParseFailure:
    """Parse JSON out of model text that may be wrapped in markdown fences."""
    if not text or not text.strip():
        return ParseFailure(reason="empty response", raw=text or "")

    cleaned = strip_fences(text)
    try:
        return json.loads(cleaned)
    except ValueError as exc:
        return ParseFailure(reason=str(exc), raw=text)


def parse_json_list(text: str | None) -> list[Any] | ParseFailure:
    parsed = parse_json_payload(text)
    if isinstance(parsed, ParseFailure):
        return parsed
    if not isinstance(parsed, list):
        return ParseFailure(reason=f"expected a JSON array, got {type(parsed).__name__}", raw=text or "")
    return parsed


def parse_json_object(text: str | None) -> dict[str, Any] | ParseFailure:
    parsed = parse_json_payload(text)
    if isinstance(parsed, ParseFailure):
        return parsed
    if not isinstance(parsed, dict):
        return ParseFailure(reason=f"expected a JSON object, got {type(parsed).__name__}", raw=text or "")
    return parsed
