"""
Helpers for unwrapping permissive backend payloads.

The backend returns the same data under different envelopes depending on the
endpoint and its version ({items: [...]}, {articles: [...]}, {data: {...}},
bare arrays, ...). extract_first() is the single place that knows how to dig
the useful part out.
"""
import json
import logging
import re
from typing import Any, Iterable, Literal, Optional

logger = logging.getLogger(__name__)

_INDEX_RE = re.compile(r"^(?P<key>[^\[]*)\[(?P<index>\d+)\]$")

ARTICLE_LIST_KEYS = ("articles", "items", "data", "result")
ARTICLE_KEYS = ("article", "data")
STORY_LIST_KEYS = ("stories", "items", "data.stories")
STORY_KEYS = ("story", "data")
TOPIC_LIST_KEYS = ("topics", "items", "data", "trending")
LABEL_KEYS = ("labels", "data.labels", "data")
AD_KEYS = ("ad", "ads[0]", "data[0]", "data")


def parse_json_text(text: Optional[str]) -> Any:
    """Parse a response body, returning None for empty or malformed JSON."""
    if not text:
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        logger.debug("Upstream body is not valid JSON")
        return None


def resolve_path(data: Any, path: str) -> Any:
    """
    Resolve a dotted path with optional list indexes.

    >>> resolve_path({"data": {"stories": [1]}}, "data.stories")
    [1]
    >>> resolve_path({"ads": [{"id": 1}]}, "ads[0]")
    {'id': 1}
    """
    current = data
    for part in path.split("."):
        match = _INDEX_RE.match(part)
        if match:
            key, index = match.group("key"), int(match.group("index"))
            if key:
                current = current.get(key) if isinstance(current, dict) else None
            if not isinstance(current, list) or index >= len(current):
                return None
            current = current[index]
        elif isinstance(current, dict):
            current = current.get(part)
        else:
            return None
        if current is None:
            return None
    return current


def extract_first(
    payload: Any,
    keys: Iterable[str],
    kind: Literal["list", "object"] = "list",
) -> Any:
    """
    Return the first value under any of the candidate keys matching `kind`.

    A payload that already is of the requested kind (a bare array for
    "list") is returned as-is. For "object", a bare array yields its first
    element.

    Args:
        payload: Decoded JSON from the backend
        keys: Candidate paths, tried in order ("items", "data.stories", "ads[0]")
        kind: "list" for arrays, "object" for dicts

    Returns:
        The matching value; [] or None when nothing matches
    """
    empty: Any = [] if kind == "list" else None
    if payload is None:
        return empty

    if kind == "list" and isinstance(payload, list):
        return payload
    if kind == "object" and isinstance(payload, list):
        first = payload[0] if payload else None
        return first if isinstance(first, dict) else None

    for key in keys:
        value = resolve_path(payload, key)
        if kind == "list" and isinstance(value, list):
            return value
        if kind == "object" and isinstance(value, dict):
            return value

    return empty


def error_message(data: Any) -> str:
    """Best human-readable message in an error payload (message, error, code)."""
    if not isinstance(data, dict):
        return ""
    for key in ("message", "error", "code"):
        value = data.get(key)
        if value:
            return str(value)
    return ""
