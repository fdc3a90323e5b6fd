"""
Post-processing of raw model text into section results.

None of these raise on malformed output; each degrades to a fallback value
and logs a warning.
"""

from __future__ import annotations

import json
import re
from typing import Any

from adcreative_genai.errors import MalformedResponseError
from adcreative_genai.logging import get_logger

logger = get_logger(__name__)

SEGMENT_SEPARATOR = "###SEGMENT###"
SCRIPT_PLACEHOLDER = "Script content placeholder"

_LEADING_FENCE_RE = re.compile(r"^```[\w.+-]*[ \t]*(?:\n|$)")
_TRAILING_FENCE_RE = re.compile(r"\n?[ \t]*```[ \t]*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ```lang fence and a trailing ``` fence. Idempotent."""
    s = (text or "").strip()
    s = _LEADING_FENCE_RE.sub("", s, count=1)
    s = _TRAILING_FENCE_RE.sub("", s, count=1)
    return s.strip()


def _loads(text: str) -> Any:
    try:
        return json.loads(strip_code_fences(text))
    except ValueError as exc:
        raise MalformedResponseError(str(exc)) from exc


def parse_json_object(text: str | None) -> dict[str, Any]:
    """Business-info style JSON: parsed object, or the raw text under `raw`."""
    if not text or not text.strip():
        return {}
    try:
        parsed = _loads(text)
    except MalformedResponseError:
        logger.warning("Failed to parse JSON directly, using raw text")
        return {"raw": text}
    if not isinstance(parsed, dict):
        logger.warning("Expected a JSON object, got %s; using raw text", type(parsed).__name__)
        return {"raw": text}
    return parsed


def format_poster_json(text: str | None) -> str:
    """Pretty-print poster JSON; keep the raw text when it does not parse."""
    raw = text if text and text.strip() else "{}"
    try:
        parsed = _loads(raw)
    except MalformedResponseError:
        logger.warning("Poster response is not valid JSON; keeping raw text")
        return raw
    return json.dumps(parsed, indent=2, ensure_ascii=False)


def parse_stock_images(text: str | None) -> list[dict[str, Any]]:
    raw = text if text and text.strip() else "[]"
    try:
        parsed = _loads(raw)
    except MalformedResponseError:
        logger.warning("Stock image response is not valid JSON; returning error marker")
        return [
            {
                "id": 1,
                "concept": "Parse Error",
                "timing": "N/A",
                "prompt": raw,
                "usage": "Manual review needed",
            }
        ]
    return parsed if isinstance(parsed, list) else [parsed]


def split_segments(text: str | None, separator: str = SEGMENT_SEPARATOR) -> list[str]:
    raw = text or ""
    parts = [p.strip() for p in raw.split(separator)]
    parts = [p for p in parts if p]
    return parts if parts else [raw]


def join_segments(segments: list[str], separator: str = SEGMENT_SEPARATOR) -> str:
    return f"\n{separator}\n".join(segments)


def parse_script_segments(script: str, segment_count: int) -> list[str]:
    """
    Cut a voice-over script into its timed segments.

    Lines starting with "segment" (any case) open a new segment; the text after
    the first ':' on that line begins it. This is a heuristic over the model's
    own prose, so when it finds nothing we fall back to the whole script as a
    single segment (or placeholders for an empty script) and log the degradation.
    """
    segments: list[str] = []
    current: str | None = None
    for line in script.splitlines():
        if line.strip().lower().startswith("segment"):
            if current and current.strip():
                segments.append(current.strip())
            _, _, current = line.partition(":")
        elif current is not None:
            current += " " + line
    if current and current.strip():
        segments.append(current.strip())

    if segments:
        if len(segments) != segment_count:
            logger.warning("Voice-over split into %d segments, expected %d", len(segments), segment_count)
        return segments

    logger.warning("No segment markers found in voice-over script; using fallback")
    if script.strip():
        return [script.strip()]
    return [SCRIPT_PLACEHOLDER] * max(1, segment_count)
