"""Core types and DTOs for the brand-prompt analysis pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

# Longest URL kept as a resource; also the width of the stored url column
MAX_URL_LENGTH = 2048


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Sentiment(str, Enum):
    """Brand sentiment bucket reported by the provider."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ResourceType(str, Enum):
    """Closed set of resource classifications."""

    COMPETITOR = "competitor"
    INDUSTRY_REPORT = "industry_report"
    NEWS = "news"
    DOCUMENTATION = "documentation"
    BLOG = "blog"
    RESEARCH = "research"
    SOCIAL = "social"
    MARKETPLACE = "marketplace"
    REVIEWS = "reviews"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Pipeline input
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisRequest:
    """One unit of work: a phrase asked on behalf of a brand."""

    request_id: int
    brand_name: str
    phrase: str
    competitor_names: tuple[str, ...] = ()
    session_id: str = ""


# ---------------------------------------------------------------------------
# Stage results
# ---------------------------------------------------------------------------


@dataclass
class DecomposedResponse:
    """Raw provider text split along the sentinel tokens."""

    narrative: str = ""
    analysis_segment: str = ""  # Empty when the analysis sentinels are absent
    has_narrative_markers: bool = False
    has_analysis_markers: bool = False


@dataclass
class ParsedAnalysis:
    """Brand metrics read from the analysis segment. Every field has a default."""

    sentiment: Sentiment = Sentiment.NEUTRAL
    position: int = 0  # 0–100 (percent)
    visibility: int = 0
    competitor_mentions: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sentiment": self.sentiment.value,
            "position": self.position,
            "visibility": self.visibility,
            "competitor_mentions": dict(self.competitor_mentions),
        }


@dataclass
class ExtractedResource:
    """One cited reference found in a provider response."""

    url: str
    type: ResourceType = ResourceType.OTHER
    domain: str = ""
    title: str = ""
    description: str = ""
    is_competitor: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return data


# ---------------------------------------------------------------------------
# Pipeline output
# ---------------------------------------------------------------------------


@dataclass
class AnalysisOutcome:
    """Result of one pipeline run.

    ``persistence_warning`` is set when the resource set could not be stored;
    the computed narrative, analysis and resources are still returned.
    """

    request_id: int
    narrative: str
    analysis: ParsedAnalysis
    resources: list[ExtractedResource] = field(default_factory=list)
    provider: str = ""
    model: str = ""
    persistence_warning: str | None = None

    @property
    def competitor_resource_count(self) -> int:
        return sum(1 for r in self.resources if r.is_competitor)

    def to_dict(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "narrative": self.narrative,
            "analysis": self.analysis.to_dict(),
            "resources": [r.to_dict() for r in self.resources],
            "provider": self.provider,
            "model": self.model,
            "persistence_warning": self.persistence_warning,
        }
