"""Resource Extractor: collects cited resources from a provider answer.

Three stages, applied in order, each deduplicated by exact URL against
the previous ones (first occurrence wins):
  1. Structured ``Resources:`` block of the analysis segment
     (URL / Type / Title / Description records)
  2. Bare URLs in the narrative
  3. ``href`` attributes in the narrative

Every kept resource gets a host-derived domain, a normalized type and a
competitor-affiliation flag.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from urllib.parse import urlparse

from brandscope.analysis.types import MAX_URL_LENGTH, ExtractedResource, ResourceType

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Type normalization
# ---------------------------------------------------------------------------

_TYPE_ALIASES: dict[str, ResourceType] = {
    "competitor_website": ResourceType.COMPETITOR,
    "competitor": ResourceType.COMPETITOR,
    "industry_report": ResourceType.INDUSTRY_REPORT,
    "news_article": ResourceType.NEWS,
    "news": ResourceType.NEWS,
    "documentation": ResourceType.DOCUMENTATION,
    "docs": ResourceType.DOCUMENTATION,
    "blog_post": ResourceType.BLOG,
    "blog": ResourceType.BLOG,
    "research_paper": ResourceType.RESEARCH,
    "research": ResourceType.RESEARCH,
    "social_media": ResourceType.SOCIAL,
    "social": ResourceType.SOCIAL,
    "marketplace": ResourceType.MARKETPLACE,
    "review_site": ResourceType.REVIEWS,
    "reviews": ResourceType.REVIEWS,
    "other": ResourceType.OTHER,
}


def normalize_resource_type(value: str | None) -> ResourceType:
    """Map a provider-supplied type label onto the closed enum."""
    if not value:
        return ResourceType.OTHER
    key = value.strip().strip("[]").strip().lower().replace("-", "_").replace(" ", "_")
    return _TYPE_ALIASES.get(key, ResourceType.OTHER)


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

_BARE_URL_PATTERN = re.compile(r"https?://[^\s<>\"]+")
_HREF_PATTERN = re.compile(r"href\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)

_TRAILING_PUNCTUATION = ".,;:!?'"
_CLOSING_PAIRS = {")": "(", "]": "["}


def _trim_url(url: str) -> str:
    """Strip sentence punctuation and unbalanced closing brackets off the end.

    ``https://en.wikipedia.org/wiki/Widget_(gadget)`` keeps its parenthesis,
    ``(see https://example.com/x)`` loses it.
    """
    url = url.strip()
    while url:
        last = url[-1]
        if last in _TRAILING_PUNCTUATION:
            url = url[:-1]
        elif last in _CLOSING_PAIRS and url.count(_CLOSING_PAIRS[last]) < url.count(last):
            url = url[:-1]
        else:
            break
    return url


def is_valid_url(url: str) -> bool:
    """True for a syntactically valid absolute http(s) URL."""
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc) and bool(parsed.hostname)


def extract_domain(url: str) -> str:
    """Lowercased host of a URL, empty when unparsable."""
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_competitor_domain(domain: str, competitor: str) -> bool:
    """Case-insensitive equality or containment in either direction."""
    domain = (domain or "").strip().lower()
    competitor = (competitor or "").strip().lower()
    if not domain or not competitor:
        return False
    return domain == competitor or competitor in domain or domain in competitor


def _is_competitor(domain: str, competitors: Iterable[str]) -> bool:
    return any(is_competitor_domain(domain, name) for name in competitors)


# ---------------------------------------------------------------------------
# Stage 1: structured Resources: block
# ---------------------------------------------------------------------------

# Block runs from the label up to the next metric label or the segment end
_RESOURCES_BLOCK = re.compile(
    r"Resources:\s*(.*?)(?=Brand_Sentiment:|Brand_Position:|Brand_Visibility:|Competitor_Mentions:|\Z)",
    re.IGNORECASE | re.DOTALL,
)

# "- URL: ...", "* Type: ...", "1. Title: ...", "• Description: ..."
_FIELD_LINE = re.compile(
    r"^\s*(?:[-*•]|\d+[.)])?\s*(URL|Type|Title|Description)\s*:\s*(.*)$",
    re.IGNORECASE,
)


@dataclass
class _Record:
    url: str = ""
    type: str = ""
    title: str = ""
    description: str = ""


def _clean_value(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == "[" and value[-1] == "]":
        value = value[1:-1].strip()
    return value


def _clean_url(value: str) -> str:
    value = _clean_value(value).strip("<>")
    # Markdown link as the URL value: [text](https://...)
    md = re.search(r"\((https?://[^\s)]+)\)", value)
    if md:
        value = md.group(1)
    return _trim_url(value)


def _parse_structured_block(segment: str) -> list[_Record]:
    block = _RESOURCES_BLOCK.search(segment or "")
    if not block:
        return []

    records: list[_Record] = []
    current: _Record | None = None
    for line in block.group(1).splitlines():
        if not line.strip() or line.strip() == "-":
            continue
        m = _FIELD_LINE.match(line)
        if not m:
            continue
        label = m.group(1).lower()
        value = m.group(2)

        if label == "url":
            if current is not None:
                records.append(current)
            current = _Record(url=_clean_url(value))
        elif current is None:
            logger.debug("Resource field '%s' before any URL line, ignored", label)
        elif label == "type":
            current.type = _clean_value(value)
        elif label == "title":
            current.title = _clean_value(value)
        else:
            current.description = _clean_value(value)

    if current is not None:
        records.append(current)
    return records


# ---------------------------------------------------------------------------
# Stages 2 and 3: narrative scans
# ---------------------------------------------------------------------------


def _scan_bare_urls(narrative: str) -> list[str]:
    return [_trim_url(m.group(0)) for m in _BARE_URL_PATTERN.finditer(narrative or "")]


def _scan_href_urls(narrative: str) -> list[str]:
    return [_trim_url(m.group(1)) for m in _HREF_PATTERN.finditer(narrative or "")]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_resources(
    analysis_segment: str,
    narrative: str,
    competitors: Sequence[str] = (),
) -> list[ExtractedResource]:
    """Collect, deduplicate and classify cited resources.

    Args:
        analysis_segment: Text between the analysis sentinels ("" if absent).
        narrative: Narrative (HTML) text.
        competitors: Competitor names of the brand.

    Returns:
        Resources in discovery order, unique by URL, all with valid URLs.
    """
    resources: list[ExtractedResource] = []
    seen_urls: set[str] = set()

    def _add(url: str, type_label: str = "", title: str = "", description: str = "") -> None:
        if url in seen_urls:
            return
        if not is_valid_url(url):
            logger.debug("Discarding resource with invalid URL: %r", url[:200])
            return
        if len(url) > MAX_URL_LENGTH:
            logger.debug("Discarding resource with %d-character URL: %s...", len(url), url[:200])
            return
        seen_urls.add(url)
        domain = extract_domain(url)
        resources.append(
            ExtractedResource(
                url=url,
                type=normalize_resource_type(type_label),
                domain=domain,
                title=title,
                description=description,
                is_competitor=_is_competitor(domain, competitors),
            )
        )

    # 1. Structured records
    for record in _parse_structured_block(analysis_segment):
        _add(record.url, record.type, record.title, record.description)

    # 2. Bare URLs in the narrative
    for url in _scan_bare_urls(narrative):
        _add(url)

    # 3. href attributes in the narrative
    for url in _scan_href_urls(narrative):
        _add(url)

    return resources
