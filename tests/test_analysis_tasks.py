"""Tests for the Celery analysis task."""

from unittest.mock import AsyncMock, patch

import pytest

from brandscope.core.exceptions import ConfigurationError, ProviderError
from brandscope.tasks.analysis_tasks import analyze_brand_prompt_task
from brandscope.tasks.celery_app import celery_app


class TestAnalyzeBrandPromptTask:
    def test_registered_with_retry_policy(self):
        assert "analyze_brand_prompt" in celery_app.tasks
        assert analyze_brand_prompt_task.autoretry_for == (ProviderError,)
        assert analyze_brand_prompt_task.max_retries == 3

    def test_success_returns_summary(self):
        summary = {"brand_prompt_id": 5, "resources": 1}
        with patch(
            "brandscope.tasks.analysis_tasks._analyze_brand_prompt_async",
            AsyncMock(return_value=summary),
        ) as mock_run:
            result = analyze_brand_prompt_task(5, "sess")

        assert result == summary
        mock_run.assert_awaited_once_with(5, "sess")

    def test_provider_error_is_reraised_for_retry(self):
        error = ProviderError("rate limited", provider="openai", status_code=429)
        with patch(
            "brandscope.tasks.analysis_tasks._analyze_brand_prompt_async",
            AsyncMock(side_effect=error),
        ):
            with pytest.raises(ProviderError):
                analyze_brand_prompt_task(5, "sess")

    def test_configuration_error_is_final(self):
        with patch(
            "brandscope.tasks.analysis_tasks._analyze_brand_prompt_async",
            AsyncMock(side_effect=ConfigurationError("no enabled provider")),
        ):
            result = analyze_brand_prompt_task(5)

        assert result == {"error": "no enabled provider", "brand_prompt_id": 5}
