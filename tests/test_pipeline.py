"""End-to-end tests for the analysis pipeline (provider mocked)."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from brandscope.analysis.pipeline import analyze_request
from brandscope.analysis.types import AnalysisRequest, ResourceType, Sentiment
from brandscope.core.exceptions import ConfigurationError, PersistenceError, ProviderError
from brandscope.gateway.types import ProviderConfig, RawProviderResponse
from brandscope.models.brand_prompt_resource import BrandPromptResource


def _providers() -> list[ProviderConfig]:
    return [
        ProviderConfig(name="openai", api_key="sk-test", is_enabled=False),
        ProviderConfig(name="anthropic", api_key="sk-ant-test", model="claude-3-haiku-20240307"),
    ]


def _raw(text: str) -> RawProviderResponse:
    return RawProviderResponse(text=text, provider="anthropic", model="claude-3-haiku-20240307")


def _acme_request(request_id: int = 1) -> AnalysisRequest:
    return AnalysisRequest(
        request_id=request_id,
        brand_name="Acme",
        competitor_names=("Widgetco",),
        phrase="best gadget",
    )


class TestAnalyzeRequest:
    @pytest.mark.asyncio
    async def test_acme_scenario(self, acme_raw_response):
        with patch("brandscope.analysis.pipeline.invoke_provider", AsyncMock(return_value=_raw(acme_raw_response))) as mock_invoke:
            outcome = await analyze_request(_acme_request(), _providers())

        config, prompt = mock_invoke.call_args.args
        assert config.name == "anthropic"
        assert "[Acme]" in prompt and "[Widgetco]" in prompt and "[best gadget]" in prompt

        assert outcome.analysis.to_dict() == {
            "sentiment": "positive",
            "position": 35,
            "visibility": 7,
            "competitor_mentions": {"Widgetco": 2},
        }
        assert len(outcome.resources) == 1
        resource = outcome.resources[0]
        assert resource.url == "https://widgetco.com/product"
        assert resource.type == ResourceType.COMPETITOR
        assert resource.domain == "widgetco.com"
        assert resource.is_competitor is True
        assert outcome.narrative.startswith("<h2>Best gadget</h2>")
        assert outcome.provider == "anthropic"
        assert outcome.persistence_warning is None

    @pytest.mark.asyncio
    async def test_no_sentinels_degrades_to_defaults(self):
        raw = 'Try <a href="https://shop.example.com/g">this shop</a> or https://reviews.example.org/top.'
        with patch("brandscope.analysis.pipeline.invoke_provider", AsyncMock(return_value=_raw(raw))):
            outcome = await analyze_request(_acme_request(), _providers())

        assert outcome.narrative == raw
        assert outcome.analysis.sentiment == Sentiment.NEUTRAL
        assert outcome.analysis.to_dict() == {
            "sentiment": "neutral",
            "position": 0,
            "visibility": 0,
            "competitor_mentions": {},
        }
        assert [r.url for r in outcome.resources] == [
            "https://shop.example.com/g",
            "https://reviews.example.org/top",
        ]
        assert all(r.type == ResourceType.OTHER for r in outcome.resources)

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self):
        error = ProviderError("boom", provider="anthropic", status_code=503, body="busy")
        with patch("brandscope.analysis.pipeline.invoke_provider", AsyncMock(side_effect=error)):
            with pytest.raises(ProviderError) as exc_info:
                await analyze_request(_acme_request(), _providers())
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_no_enabled_provider(self):
        with pytest.raises(ConfigurationError):
            await analyze_request(_acme_request(), [ProviderConfig(name="openai", is_enabled=False)])


class TestPipelinePersistence:
    @pytest.mark.asyncio
    async def test_rerun_is_idempotent(self, db_session, acme_prompt, acme_raw_response):
        request = _acme_request(acme_prompt.id)
        first = acme_raw_response.replace(
            "HTML_RESPONSE_END",
            '<a href="https://old.example.com/x">old</a>\nHTML_RESPONSE_END',
        )

        with patch("brandscope.analysis.pipeline.invoke_provider", AsyncMock(return_value=_raw(first))):
            first_outcome = await analyze_request(request, _providers(), db=db_session)
        assert len(first_outcome.resources) == 2

        with patch("brandscope.analysis.pipeline.invoke_provider", AsyncMock(return_value=_raw(acme_raw_response))):
            await analyze_request(request, _providers(), db=db_session)

        result = await db_session.execute(
            select(BrandPromptResource.url).where(BrandPromptResource.brand_prompt_id == acme_prompt.id)
        )
        assert list(result.scalars().all()) == ["https://widgetco.com/product"]

    @pytest.mark.asyncio
    async def test_persistence_failure_becomes_warning(self, db_session, acme_raw_response):
        failing_store = AsyncMock(side_effect=PersistenceError("Failed to save resources: db down", request_id=1))
        with (
            patch("brandscope.analysis.pipeline.invoke_provider", AsyncMock(return_value=_raw(acme_raw_response))),
            patch("brandscope.analysis.pipeline.replace_resources", failing_store),
        ):
            outcome = await analyze_request(_acme_request(), _providers(), db=db_session)

        assert outcome.persistence_warning == "Failed to save resources: db down"
        assert outcome.analysis.position == 35
        assert len(outcome.resources) == 1
