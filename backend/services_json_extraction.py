"""
Recover a JSON array from free-form LLM output.

Models wrap JSON in prose, put it in markdown fences, or drop the outer
brackets. extract_json_array() tries progressively looser strategies and
returns the first one that parses:

1. fenced ```json [...] ``` block
2. greedy first-'[' to last-']' span
3. the whole text as JSON (arrays only)
4. every flat {...} object literal, parsed one by one
"""
import json
import logging
import re
from typing import Any, Callable, List, Optional

from errors import ExtractionError

logger = logging.getLogger("kflow")

_FENCED_ARRAY_RE = re.compile(r"```(?:json)?\s*(\[[\s\S]*?\])\s*```")
_ARRAY_SPAN_RE = re.compile(r"(\[[\s\S]*\])")
_FLAT_OBJECT_RE = re.compile(r"\{[^{}]*\}")


def _from_fenced_block(text: str) -> Optional[List[Any]]:
    match = _FENCED_ARRAY_RE.search(text)
    if not match:
        return None
    return json.loads(match.group(1))


def _from_array_span(text: str) -> Optional[List[Any]]:
    match = _ARRAY_SPAN_RE.search(text)
    if not match:
        return None
    return json.loads(match.group(1))


def _from_whole_text(text: str) -> Optional[List[Any]]:
    parsed = json.loads(text)
    return parsed if isinstance(parsed, list) else None


def _from_object_literals(text: str) -> Optional[List[Any]]:
    matches = _FLAT_OBJECT_RE.findall(text)
    if not matches:
        return None
    return [json.loads(m) for m in matches]


_STRATEGIES: List[Callable[[str], Optional[List[Any]]]] = [
    _from_fenced_block,
    _from_array_span,
    _from_whole_text,
    _from_object_literals,
]


def extract_json_array(text: Any) -> List[Any]:
    """Return the JSON array embedded in text, or raise ExtractionError."""
    if not isinstance(text, str):
        raise ExtractionError("Failed to parse LLM response: expected text, got " + type(text).__name__)

    for strategy in _STRATEGIES:
        try:
            result = strategy(text)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(result, list):
            if strategy is not _from_fenced_block:
                logger.debug(f"[extract] recovered JSON array via {strategy.__name__}")
            return result

    preview = text[:200].replace("\n", " ")
    raise ExtractionError(
        f"Failed to parse LLM response: could not extract JSON array (response began: {preview!r})"
    )
