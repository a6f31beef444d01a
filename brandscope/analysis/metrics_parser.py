"""Metrics Parser: reads brand metrics from the analysis segment.

Each field is extracted independently; a missing or malformed field falls
back to its default and never blocks the others:
  - Brand_Sentiment     → positive / negative / neutral
  - Brand_Position      → leading integer percent, 0–100
  - Brand_Visibility    → leading integer
  - Competitor_Mentions → lenient JSON object, {} on failure
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from brandscope.analysis.types import ParsedAnalysis, Sentiment

logger = logging.getLogger(__name__)

_SENTIMENT_PATTERN = re.compile(r"Brand_Sentiment:\s*([^\n]+)", re.IGNORECASE)
_POSITION_PATTERN = re.compile(r"Brand_Position:\s*\[?\s*(\d+)\s*%?", re.IGNORECASE)
_VISIBILITY_PATTERN = re.compile(r"Brand_Visibility:\s*\[?\s*(\d+)", re.IGNORECASE)
_MENTIONS_LABEL = re.compile(r"Competitor_Mentions:", re.IGNORECASE)

# key: value pairs inside a broken object, e.g. {Widgetco: 2, 'Gizmo': 1,}
_KV_PATTERN = re.compile(
    r"""["']?([^"'{}:,\n]+?)["']?\s*:\s*("[^"]*"|'[^']*'|-?\d+(?:\.\d+)?|[^,}\n]+)""",
)


def _parse_sentiment(segment: str) -> Sentiment:
    m = _SENTIMENT_PATTERN.search(segment)
    if not m:
        return Sentiment.NEUTRAL
    value = m.group(1).lower()
    if "positive" in value:
        return Sentiment.POSITIVE
    if "negative" in value:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def _parse_int(pattern: re.Pattern[str], segment: str) -> int:
    m = pattern.search(segment)
    if not m:
        return 0
    return int(m.group(1))


# ---------------------------------------------------------------------------
# Competitor mentions
# ---------------------------------------------------------------------------


def _find_object(segment: str) -> str | None:
    """Return the brace-balanced object following the Competitor_Mentions label.

    A truncated object (no closing brace) is returned up to the segment end.
    """
    label = _MENTIONS_LABEL.search(segment)
    if not label:
        return None
    start = segment.find("{", label.end())
    if start == -1:
        return None

    depth = 0
    in_string = False
    prev = ""
    for i in range(start, len(segment)):
        ch = segment[i]
        if ch == '"' and prev != "\\":
            in_string = not in_string
        elif not in_string:
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return segment[start : i + 1]
        prev = ch
    return segment[start:]


def _coerce_value(raw: str) -> Any:
    value = raw.strip().strip("\"'").strip()
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _parse_mentions(segment: str) -> dict[str, Any]:
    """Parse the competitor-mention object leniently.

    Tries strict JSON first, then JSON after removing common LLM quirks
    (code fences, trailing commas, single quotes), then a key: value scan.
    """
    blob = _find_object(segment)
    if blob is None:
        return {}

    try:
        data = json.loads(blob)
    except json.JSONDecodeError:
        data = None

    if data is None:
        cleaned = re.sub(r"```(?:json)?\s*", "", blob).strip()
        cleaned = re.sub(r",\s*([}\]])", r"\1", cleaned)
        cleaned = cleaned.replace("'", '"')
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError:
            data = None

    if data is None:
        inner = blob.strip().lstrip("{").rstrip("}")
        pairs = {
            m.group(1).strip(): _coerce_value(m.group(2))
            for m in _KV_PATTERN.finditer(inner)
            if m.group(1).strip()
        }
        if pairs:
            logger.debug("Competitor mentions recovered by key/value scan: %d entries", len(pairs))
            return pairs
        logger.warning("Could not parse competitor mentions: %s", blob[:200])
        return {}

    if not isinstance(data, dict):
        logger.warning("Competitor mentions is not an object (got %s)", type(data).__name__)
        return {}
    return data


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_analysis(segment: str) -> ParsedAnalysis:
    """Extract sentiment, position, visibility and competitor mentions.

    Never raises for malformed content; an empty segment yields all defaults.
    """
    if not segment:
        return ParsedAnalysis()

    return ParsedAnalysis(
        sentiment=_parse_sentiment(segment),
        position=min(_parse_int(_POSITION_PATTERN, segment), 100),
        visibility=_parse_int(_VISIBILITY_PATTERN, segment),
        competitor_mentions=_parse_mentions(segment),
    )
