from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ResourceResponse(BaseModel):
    url: str
    type: str
    domain: str
    title: str = ""
    description: str = ""
    is_competitor: bool = False


class AnalysisMetrics(BaseModel):
    sentiment: str = Field("neutral", pattern=r"^(positive|neutral|negative)$")
    position: int = Field(0, ge=0, le=100)
    visibility: int = 0
    competitor_mentions: dict[str, Any] = {}


class AnalysisOutcomeResponse(BaseModel):
    request_id: int
    narrative: str
    analysis: AnalysisMetrics
    resources: list[ResourceResponse] = []
    provider: str = ""
    model: str = ""
    persistence_warning: str | None = None


class AnalyzeRequest(BaseModel):
    session_id: str = Field("", max_length=100)


class BatchAnalyzeRequest(BaseModel):
    brand_prompt_ids: list[int] = Field(min_length=1, max_length=500)
    session_id: str = Field("", max_length=100)


class BatchAnalyzeResponse(BaseModel):
    dispatched: int
    brand_prompt_ids: list[int]


class CompetitorResource(BaseModel):
    url: str
    type: str
    title: str | None = None
    description: str | None = None
    domain: str | None = None


class PromptWithCompetitorResources(BaseModel):
    id: int
    prompt: str
    ai_response: str | None
    sentiment: str | None
    position: int | None
    visibility: int | None
    analysis_completed_at: datetime | None
    competitor_resources: list[CompetitorResource]


class ProviderTestResponse(BaseModel):
    success: bool
    provider: str
    message: str
    response: str | None = None
    error: str | None = None
