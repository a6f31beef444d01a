"""Tests for the brand prompt analysis service (SQLite, provider mocked)."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from brandscope.core.encryption import encrypt_credential
from brandscope.core.exceptions import ConfigurationError, NotFoundError
from brandscope.gateway.types import ProviderTestResult, RawProviderResponse
from brandscope.models.ai_provider import AiProvider
from brandscope.models.brand import Brand
from brandscope.models.brand_prompt import BrandPrompt
from brandscope.models.brand_prompt_resource import BrandPromptResource
from brandscope.services.analysis_service import (
    analyze_brand_prompt,
    batch_analyze_prompts,
    check_ai_provider,
    find_prompts_with_competitor_urls,
)
from brandscope.services.providers import load_provider_configs, provider_config_from_model
from brandscope.tasks.analysis_tasks import analyze_brand_prompt_task


class TestProviderConfigs:
    @pytest.mark.asyncio
    async def test_load_decrypts_and_maps_api_config(self, db_session, openai_provider):
        db_session.add(AiProvider(name="anthropic", is_enabled=False, api_key=encrypt_credential("sk-ant-x")))
        await db_session.commit()

        configs = await load_provider_configs(db_session)
        assert len(configs) == 1
        config = configs[0]
        assert config.name == "openai"
        assert config.api_key == "sk-test-key"
        assert config.model == "gpt-4o-mini"
        assert config.temperature == 0.5
        assert config.max_tokens == 1500
        assert config.is_enabled is True

        all_configs = await load_provider_configs(db_session, enabled_only=False)
        assert {c.name for c in all_configs} == {"openai", "anthropic"}

    @pytest.mark.asyncio
    async def test_undecryptable_key_is_configuration_error(self, db_session, openai_provider, set_fernet_key):
        set_fernet_key("3q5Vq1YQm0B2a8Xv6T1l9y0c4n7w2k5j8h1g4f7d0s0=")
        with pytest.raises(ConfigurationError, match="openai"):
            await load_provider_configs(db_session)

    def test_missing_api_config_uses_defaults(self):
        provider = AiProvider(name="ollama", is_enabled=True, api_key=None, api_config=None)
        config = provider_config_from_model(provider)
        assert config.api_key == ""
        assert config.model == ""
        assert config.temperature == 0.7
        assert config.max_tokens == 2000
        assert config.base_url is None


class TestAnalyzeBrandPrompt:
    @pytest.mark.asyncio
    async def test_records_metrics_and_resources(self, db_session, acme_prompt, openai_provider, acme_raw_response):
        prompt_id = acme_prompt.id
        raw = RawProviderResponse(text=acme_raw_response, provider="openai", model="gpt-4o-mini")

        with patch("brandscope.analysis.pipeline.invoke_provider", AsyncMock(return_value=raw)) as mock_invoke:
            outcome = await analyze_brand_prompt(db_session, prompt_id, session_id="sess-1")

        config = mock_invoke.call_args.args[0]
        assert config.api_key == "sk-test-key"
        assert outcome.analysis.position == 35

        db_session.expire_all()
        stored = await db_session.get(BrandPrompt, prompt_id)
        assert stored.sentiment == "positive"
        assert stored.position == 35
        assert stored.visibility == 7
        assert stored.competitor_mentions == {"Widgetco": 2}
        assert stored.ai_provider == "openai"
        assert stored.session_id == "sess-1"
        assert stored.analysis_completed_at is not None
        assert stored.ai_response.startswith("<h2>Best gadget</h2>")

        result = await db_session.execute(
            select(BrandPromptResource).where(BrandPromptResource.brand_prompt_id == prompt_id)
        )
        rows = result.scalars().all()
        assert [(r.url, r.type, r.is_competitor_url) for r in rows] == [
            ("https://widgetco.com/product", "competitor", True)
        ]

    @pytest.mark.asyncio
    async def test_unknown_prompt(self, db_session):
        with pytest.raises(NotFoundError):
            await analyze_brand_prompt(db_session, 999)


class TestBatchAnalyze:
    @pytest.mark.asyncio
    async def test_dispatches_existing_ids_only(self, db_session, acme_prompt):
        prompt_id = acme_prompt.id
        with patch.object(analyze_brand_prompt_task, "apply_async") as mock_apply:
            dispatched = await batch_analyze_prompts(db_session, [prompt_id, 999, prompt_id], session_id="s-9")

        assert dispatched == [prompt_id]
        mock_apply.assert_called_once_with(args=[prompt_id, "s-9"], queue="default")

    @pytest.mark.asyncio
    async def test_empty_batch(self, db_session):
        with patch.object(analyze_brand_prompt_task, "apply_async") as mock_apply:
            assert await batch_analyze_prompts(db_session, []) == []
        mock_apply.assert_not_called()


class TestCompetitorUrlLookup:
    @pytest.mark.asyncio
    async def test_only_analysed_prompts_with_matching_resources(self, db_session, acme_prompt):
        brand_id = acme_prompt.brand_id
        now = datetime.now(timezone.utc)

        acme_prompt.analysis_completed_at = now
        acme_prompt.sentiment = "positive"
        matching_unanalysed = BrandPrompt(brand_id=brand_id, prompt="cheap gadget")
        other_domain = BrandPrompt(brand_id=brand_id, prompt="gadget news", analysis_completed_at=now)
        db_session.add_all([matching_unanalysed, other_domain])
        await db_session.flush()

        db_session.add_all(
            [
                BrandPromptResource(
                    brand_prompt_id=acme_prompt.id,
                    url="https://widgetco.com/product",
                    type="competitor",
                    domain="widgetco.com",
                    is_competitor_url=True,
                ),
                BrandPromptResource(
                    brand_prompt_id=acme_prompt.id,
                    url="https://news.example.com/a",
                    type="news",
                    domain="news.example.com",
                ),
                BrandPromptResource(
                    brand_prompt_id=matching_unanalysed.id,
                    url="https://widgetco.com/deals",
                    type="competitor",
                    domain="widgetco.com",
                ),
                BrandPromptResource(
                    brand_prompt_id=other_domain.id,
                    url="https://news.example.com/b",
                    type="news",
                    domain="news.example.com",
                ),
            ]
        )
        await db_session.commit()

        items = await find_prompts_with_competitor_urls(db_session, brand_id, "WidgetCo.com")

        assert [item["id"] for item in items] == [acme_prompt.id]
        assert items[0]["sentiment"] == "positive"
        assert items[0]["competitor_resources"] == [
            {
                "url": "https://widgetco.com/product",
                "type": "competitor",
                "title": None,
                "description": None,
                "domain": "widgetco.com",
            }
        ]

    @pytest.mark.asyncio
    async def test_other_brand_excluded(self, db_session, acme_prompt):
        other = Brand(name="Other")
        db_session.add(other)
        await db_session.commit()

        assert await find_prompts_with_competitor_urls(db_session, other.id, "widgetco.com") == []

    @pytest.mark.asyncio
    async def test_blank_domain(self, db_session, acme_prompt):
        assert await find_prompts_with_competitor_urls(db_session, acme_prompt.brand_id, "  ") == []


class TestCheckAiProvider:
    @pytest.mark.asyncio
    async def test_runs_diagnostic_on_stored_provider(self, db_session, openai_provider):
        result = ProviderTestResult(success=True, provider="openai", message="AI model is working correctly", response="ok")
        with patch("brandscope.services.analysis_service.check_provider", AsyncMock(return_value=result)) as mock_check:
            outcome = await check_ai_provider(db_session, openai_provider.id)

        assert outcome.success is True
        assert mock_check.call_args.args[0].api_key == "sk-test-key"

    @pytest.mark.asyncio
    async def test_unknown_provider(self, db_session):
        with pytest.raises(NotFoundError):
            await check_ai_provider(db_session, 42)

    @pytest.mark.asyncio
    async def test_missing_fernet_key_reported_as_failure(self, db_session, openai_provider, set_fernet_key):
        set_fernet_key("")
        with patch("brandscope.services.analysis_service.check_provider", AsyncMock()) as mock_check:
            outcome = await check_ai_provider(db_session, openai_provider.id)

        assert outcome.success is False
        assert outcome.provider == "openai"
        assert "FERNET_KEY is not configured" in outcome.error
        assert outcome.message.startswith("AI model test failed:")
        mock_check.assert_not_called()
