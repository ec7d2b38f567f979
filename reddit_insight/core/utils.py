"""Shared utility functions used across multiple modules."""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Optional, Sequence, Tuple

from reddit_insight.core.errors import MalformedResponse

DEFAULT_CACHE_NAMESPACE = "reddit_insight_"

_FENCE = re.compile(r"```([A-Za-z0-9_+-]*)[ \t]*\r?\n(.*?)\r?\n[ \t]*```", re.DOTALL)

OBJECT_BOUNDARIES: Tuple[Tuple[str, str], ...] = (("{", "}"),)


def normalize_query(query: str) -> str:
    """Trim edge whitespace and case-fold ``query``.

    No deeper folding is applied: "iphone battery" and " iPhone Battery "
    collapse to one subject, "iphone batteries" does not.
    """
    return (query or "").strip().lower()


def cache_key(query: str, namespace: str = DEFAULT_CACHE_NAMESPACE) -> str:
    return f"{namespace}{normalize_query(query)}"


def extract_json(
    raw_text: str,
    boundaries: Sequence[Tuple[str, str]] = OBJECT_BOUNDARIES,
    accept: Optional[Callable[[Any], bool]] = None,
) -> Any:
    """Recover a JSON document from a model reply.

    Attempts run from strictest to most permissive and the first success wins:
    the whole text, a ```` ```json ```` fenced block, an untagged fenced block,
    then the span between the first opening and the last closing boundary
    character for each pair in *boundaries*. When *accept* is given, a parsed
    candidate it rejects counts as a failed attempt. Raises
    ``MalformedResponse`` carrying *raw_text* when every attempt fails.
    """
    text = raw_text or ""
    attempts: list[Callable[[], Optional[str]]] = [
        lambda: text,
        lambda: _fenced(text, tag="json"),
        lambda: _fenced(text, tag=""),
    ]
    for opening, closing in boundaries:
        attempts.append(lambda o=opening, c=closing: _between(text, o, c))

    for attempt in attempts:
        candidate = attempt()
        if candidate is None:
            continue
        try:
            document = json.loads(candidate)
        except ValueError:
            continue
        if accept is not None and not accept(document):
            continue
        return document
    raise MalformedResponse("Failed to parse JSON response", raw_text=raw_text)


def _fenced(text: str, tag: str) -> Optional[str]:
    # Blocks are consumed left to right, so a closing fence never opens a block.
    for match in _FENCE.finditer(text):
        if match.group(1).lower() == tag:
            return match.group(2) or None
    return None


def _between(text: str, opening: str, closing: str) -> Optional[str]:
    start = text.find(opening)
    end = text.rfind(closing)
    if start < 0 or end <= start:
        return None
    return text[start : end + 1]
