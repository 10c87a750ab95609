"""
Test suite for the keyword analysis service.
"""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest

from siteaudit.core.config import ProviderConfig, Settings
from siteaudit.core.exceptions import AnalysisError, ExternalServiceError
from siteaudit.core.models import RegistryRecord, VolumeData
from siteaudit.keywords.analysis import (
    KeywordAnalysisService,
    analyze_keywords,
    create_analysis_service,
    difficulty_histogram,
    minimal_safe_result,
)
from siteaudit.keywords.generator import make_candidate
from siteaudit.providers.companies_house import CompaniesHouseClient
from siteaudit.providers.google_suggest import GoogleSuggestClient
from siteaudit.providers.keywords_everywhere import KeywordsEverywhereClient
from siteaudit.providers.valueserp import ValueSerpClient

DOMAIN = "smithsolicitors.co.uk"


class TestMinimalSafeResult:
    """Test the named fallback analysis."""

    def test_shape(self):
        """Test the fallback fields."""
        result = minimal_safe_result("https://www.acme.co.uk/")

        assert result.domain == "acme.co.uk"
        assert result.brand_name == "Acme"
        assert result.analysis_method == "minimal_safe_fallback"
        assert result.business_type.category == "Business Services"
        assert result.business_type.subcategory == "General"
        assert result.business_type.confidence == "low"
        assert result.api_available is False
        assert result.total_keywords == 0
        assert result.branded_keywords == [] and result.non_branded_keywords == []


class TestAnalyze:
    """Test the analysis pipeline."""

    def test_offline_analysis(self, offline_settings, legal_html):
        """Test a full run without providers."""
        service = KeywordAnalysisService(offline_settings)
        outcome = asyncio.run(service.analyze(DOMAIN, legal_html))

        assert outcome.ok
        analysis = outcome.analysis
        assert analysis.domain == DOMAIN
        assert analysis.brand_name == "Smith Solicitors"
        assert analysis.business_type.category == "Legal Services"
        assert analysis.analysis_method == "enhanced_discovery"
        assert analysis.api_available is False
        assert analysis.location.best_location == "Leeds"

        branded = {k.keyword for k in analysis.branded_keywords}
        non_branded = {k.keyword for k in analysis.non_branded_keywords}
        assert branded and non_branded
        assert not branded & non_branded
        assert all("smith" in k for k in branded)
        assert all(k.search_volume is None for k in analysis.top_keywords)

        assert analysis.total_keywords == analysis.branded_count + analysis.non_branded_count
        assert analysis.keywords_by_difficulty["unknown"] == analysis.total_keywords
        assert sum(analysis.keywords_by_intent.values()) == analysis.total_keywords
        assert 0.0 < analysis.business_relevance_score <= 1.0
        assert len(analysis.top_keywords) <= 20

    def test_relevance_score_averages_the_whole_pool(self, offline_settings, legal_html):
        """Test the summary score covers every discovered candidate, not just the kept ones."""
        service = KeywordAnalysisService(offline_settings)
        discovered = {}
        discover = service.orchestrator.discover

        async def capture(*args, **kwargs):
            discovered["result"] = await discover(*args, **kwargs)
            return discovered["result"]

        service.orchestrator.discover = capture
        outcome = asyncio.run(service.analyze(DOMAIN, legal_html))

        pool = discovered["result"].candidates
        assert len(pool) > outcome.analysis.total_keywords
        assert outcome.analysis.business_relevance_score == pytest.approx(
            round(sum(c.relevance_score for c in pool) / len(pool), 3)
        )

    def test_volume_provider_sets_api_available(self, offline_settings, legal_html):
        """Test volumes flow through to the result."""
        provider = Mock()
        provider.get_search_volumes = AsyncMock(
            return_value=[VolumeData(keyword="conveyancing solicitor", volume=720, competition=0.4)]
        )
        service = KeywordAnalysisService(offline_settings, volume_provider=provider)
        outcome = asyncio.run(service.analyze(DOMAIN, legal_html, country="gb"))

        assert outcome.analysis.api_available is True
        provider.get_search_volumes.assert_awaited_once()
        assert provider.get_search_volumes.await_args.args[1] == "gb"

    def test_failing_volume_provider_degrades(self, offline_settings, legal_html):
        """Test a volume outage is not an analysis failure."""
        provider = Mock()
        provider.get_search_volumes = AsyncMock(side_effect=ExternalServiceError("ke", "HTTP 503", 503))
        service = KeywordAnalysisService(offline_settings, volume_provider=provider)
        outcome = asyncio.run(service.analyze(DOMAIN, legal_html))

        assert outcome.ok
        assert outcome.analysis.api_available is False

    def test_registry_refines_location(self, offline_settings, legal_html):
        """Test the registry locality and SIC terms are used."""
        registry = Mock()
        registry.lookup = AsyncMock(
            return_value=RegistryRecord(company_name="SMITH SOLICITORS LLP", locality="Bradford", sic_codes=["69102"])
        )
        service = KeywordAnalysisService(offline_settings, registry_provider=registry)
        outcome = asyncio.run(service.analyze(DOMAIN, legal_html))

        registry.lookup.assert_awaited_once_with("Smith Solicitors")
        assert outcome.analysis.location.detected_location == "Bradford"

    def test_serp_positions_for_top_keywords_only(self, offline_settings, legal_html):
        """Test SERP lookups stay within the branded and non-branded budgets."""
        serp = Mock()
        serp.check_keyword_position = AsyncMock(return_value=4)
        offline_settings.keywords.batch_delay_seconds = 0
        service = KeywordAnalysisService(offline_settings, serp_provider=serp)
        outcome = asyncio.run(service.analyze(DOMAIN, legal_html))

        analysis = outcome.analysis
        assert serp.check_keyword_position.await_count <= 5 + 8
        assert all(k.position == 4 for k in analysis.branded_keywords[:5])
        assert all(k.position is None for k in analysis.non_branded_keywords[8:])

    def test_failure_returns_minimal_result_with_error(self, offline_settings, legal_html):
        """Test an unexpected error yields the fallback and the failing stage."""
        service = KeywordAnalysisService(offline_settings)
        with patch("siteaudit.keywords.analysis.classify_page", side_effect=RuntimeError("boom")):
            outcome = asyncio.run(service.analyze(DOMAIN, legal_html))

        assert not outcome.ok
        assert isinstance(outcome.error, AnalysisError)
        assert outcome.error.stage == "detect"
        assert outcome.analysis == minimal_safe_result(DOMAIN)

    def test_empty_domain_is_an_error(self, offline_settings):
        """Test a missing domain fails at the first stage."""
        outcome = asyncio.run(KeywordAnalysisService(offline_settings).analyze("", "<p>hi</p>"))
        assert outcome.error is not None
        assert outcome.error.stage == "start"
        assert outcome.analysis.analysis_method == "minimal_safe_fallback"

    def test_empty_html_still_analyses(self, offline_settings):
        """Test an empty page falls back to default classification, not an error."""
        outcome = asyncio.run(KeywordAnalysisService(offline_settings).analyze("acme.co.uk", ""))
        assert outcome.ok
        assert outcome.analysis.business_type.category == "Business Services"
        assert outcome.analysis.brand_name == "Acme"

    def test_analyze_keywords_wrapper(self, offline_settings, acme_html):
        """Test the module-level convenience function."""
        service = KeywordAnalysisService(offline_settings)
        outcome = asyncio.run(analyze_keywords("acme.co.uk", acme_html, service=service))
        assert outcome.analysis.brand_name == "Acme Co"


class TestMetrics:
    """Test summary metrics."""

    def test_difficulty_histogram_has_unknown_bucket(self):
        """Test keywords without difficulty are counted as unknown."""
        keywords = [
            make_candidate("a b", 0.8, "extracted").model_copy(update={"difficulty": "low"}),
            make_candidate("c d", 0.8, "extracted"),
        ]
        assert difficulty_histogram(keywords) == {"low": 1, "medium": 0, "high": 0, "unknown": 1}


class TestCreateAnalysisService:
    """Test provider wiring from settings."""

    def test_configured_providers(self, clean_provider_env):
        """Test every configured provider is built."""
        settings = Settings(
            providers=ProviderConfig(
                KEYWORDS_EVERYWHERE_API_KEY="ke-key",
                VALUESERP_API_KEY="serp-key",
                COMPANIES_HOUSE_API_KEY="ch-key",
            )
        )
        service = create_analysis_service(settings)

        assert isinstance(service.orchestrator.volume_provider, KeywordsEverywhereClient)
        assert isinstance(service.orchestrator.serp_provider, ValueSerpClient)
        assert isinstance(service.orchestrator.suggestion_provider, GoogleSuggestClient)
        assert isinstance(service.registry_provider, CompaniesHouseClient)

    def test_disabled_and_missing_providers(self, clean_provider_env):
        """Test disabled or unconfigured providers are left out."""
        settings = Settings(
            providers=ProviderConfig(
                KEYWORDS_EVERYWHERE_API_KEY="ke-key",
                DISABLED_PROVIDERS="volume,suggestions",
            )
        )
        service = create_analysis_service(settings)

        assert service.orchestrator.volume_provider is None
        assert service.orchestrator.suggestion_provider is None
        assert service.orchestrator.serp_provider is None
        assert service.registry_provider is None

    def test_offline(self, clean_provider_env):
        """Test offline mode builds no providers."""
        settings = Settings(providers=ProviderConfig(KEYWORDS_EVERYWHERE_API_KEY="ke-key"))
        service = create_analysis_service(settings, offline=True)
        assert service.orchestrator.volume_provider is None
