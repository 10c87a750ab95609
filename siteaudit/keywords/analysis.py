"""
Keyword analysis service.

Runs the whole audit for one domain: classify the business, resolve the
brand and location, generate and discover keywords, rank them and collect
summary metrics. A failure anywhere yields the minimal safe result together
with the error instead of raising.
"""

from collections import Counter
from typing import Dict, List, Optional, Sequence

import structlog

from siteaudit.core.config import Settings, get_settings
from siteaudit.core.exceptions import AnalysisError
from siteaudit.core.models import (
    AnalysisOutcome,
    BusinessType,
    EnhancedKeywordAnalysis,
    KeywordCandidate,
    KeywordIntent,
    LocationContext,
)
from siteaudit.detection.brand import domain_brand, identify_brand
from siteaudit.detection.categories import Category
from siteaudit.detection.classifier import classify_page, estimate_business_size
from siteaudit.detection.html_content import normalize_domain, parse_page
from siteaudit.detection.location import build_location_context, lookup_registry, registry_terms
from siteaudit.keywords.discovery import KeywordDiscoveryOrchestrator, extract_content_keywords
from siteaudit.keywords.generator import generate_keyword_set
from siteaudit.keywords.ranking import extract_services, partition_keywords
from siteaudit.providers.companies_house import CompaniesHouseClient
from siteaudit.providers.google_suggest import GoogleSuggestClient
from siteaudit.providers.keywords_everywhere import KeywordsEverywhereClient
from siteaudit.providers.valueserp import ValueSerpClient
from siteaudit.utils.reliability import track_performance

logger = structlog.get_logger(__name__)

DIFFICULTY_BUCKETS = ("low", "medium", "high", "unknown")


def minimal_safe_result(domain: str) -> EnhancedKeywordAnalysis:
    """The analysis returned when the pipeline cannot complete."""
    return EnhancedKeywordAnalysis(
        domain=normalize_domain(domain) or domain or "",
        brand_name=domain_brand(domain) if domain else "",
        business_type=BusinessType.default(),
        location=LocationContext(),
        api_available=False,
        analysis_method="minimal_safe_fallback",
    )


def intent_histogram(keywords: Sequence[KeywordCandidate]) -> Dict[str, int]:
    counts = Counter(k.intent for k in keywords)
    return {intent.value: counts.get(intent.value, 0) for intent in KeywordIntent}


def difficulty_histogram(keywords: Sequence[KeywordCandidate]) -> Dict[str, int]:
    counts = Counter(k.difficulty or "unknown" for k in keywords)
    return {bucket: counts.get(bucket, 0) for bucket in DIFFICULTY_BUCKETS}


def mean_relevance(keywords: Sequence[KeywordCandidate]) -> float:
    if not keywords:
        return 0.0
    return round(sum(k.relevance_score for k in keywords) / len(keywords), 3)


class KeywordAnalysisService:
    """
    Keyword analysis pipeline for audited websites.

    Providers are optional. Without a volume provider the analysis still runs
    and reports ``api_available=False`` with every volume left empty.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        volume_provider=None,
        serp_provider=None,
        suggestion_provider=None,
        registry_provider=None,
    ):
        self.settings = settings or get_settings()
        self.registry_provider = registry_provider
        self.orchestrator = KeywordDiscoveryOrchestrator(
            config=self.settings.keywords,
            volume_provider=volume_provider,
            suggestion_provider=suggestion_provider,
            serp_provider=serp_provider,
        )

        logger.info(
            "Keyword analysis service initialized",
            volume=volume_provider is not None,
            serp=serp_provider is not None,
            suggestions=suggestion_provider is not None,
            registry=registry_provider is not None,
        )

    async def analyze(self, domain: str, html: str, country: Optional[str] = None) -> AnalysisOutcome:
        """
        Analyze one page.

        Args:
            domain: Audited domain
            html: Raw page HTML, already fetched
            country: Market for volume lookups, defaults to the configured one

        Returns:
            AnalysisOutcome; ``error`` is set when the minimal safe result was used
        """
        state = {"stage": "start"}
        try:
            analysis = await self._run(domain, html, country, state)
            return AnalysisOutcome(analysis=analysis)
        except Exception as e:
            logger.error(
                "Keyword analysis failed, returning minimal result",
                domain=domain,
                stage=state["stage"],
                error=str(e),
                error_type=type(e).__name__,
            )
            error = AnalysisError(
                f"Keyword analysis failed: {e}",
                stage=state["stage"],
                details={"domain": domain, "error_type": type(e).__name__},
            )
            return AnalysisOutcome(analysis=minimal_safe_result(domain), error=error)

    @track_performance("keyword_analysis")
    async def _run(
        self, domain: str, html: str, country: Optional[str], state: Dict[str, str]
    ) -> EnhancedKeywordAnalysis:
        keyword_config = self.settings.keywords
        domain = normalize_domain(domain)
        if not domain:
            raise ValueError("domain is required")

        state["stage"] = "parse"
        content = parse_page(html or "", domain)

        state["stage"] = "detect"
        detection = classify_page(content, domain, self.settings.classifier)
        business_type = detection.primary_type
        business_size = estimate_business_size(content.text)

        state["stage"] = "brand"
        brand, _ = identify_brand(content, domain)

        state["stage"] = "location"
        record = await lookup_registry(self.registry_provider, brand)
        location = build_location_context(content.text, record)
        industry_terms = registry_terms(record.sic_codes) if record else []

        state["stage"] = "generate"
        seeds = extract_content_keywords(content.text, keyword_config.content_keyword_limit)
        generated = generate_keyword_set(business_type, location, seeds, brand)

        state["stage"] = "discover"
        discovery = await self.orchestrator.discover(
            generated,
            content.text,
            category=Category.from_label(business_type.category),
            location=location.best_location,
            country=country,
            extra_keywords=industry_terms,
        )

        state["stage"] = "rank"
        services = extract_services(content)
        partition = partition_keywords(
            discovery.candidates, brand, services, business_size, keyword_config
        )

        state["stage"] = "positions"
        branded, non_branded = await self.orchestrator.rank_positions(
            partition.branded, partition.non_branded, domain
        )
        positions = {k.keyword: k.position for k in branded + non_branded}
        top = [k.model_copy(update={"position": positions.get(k.keyword)}) for k in partition.top]

        state["stage"] = "metrics"
        everything: List[KeywordCandidate] = branded + non_branded
        analysis = EnhancedKeywordAnalysis(
            domain=domain,
            brand_name=brand,
            branded_keywords=branded,
            non_branded_keywords=non_branded,
            top_keywords=top,
            total_keywords=len(everything),
            branded_count=len(branded),
            non_branded_count=len(non_branded),
            keywords_by_intent=intent_histogram(everything),
            keywords_by_difficulty=difficulty_histogram(everything),
            business_relevance_score=mean_relevance(discovery.candidates),
            business_type=business_type,
            business_size=business_size,
            location=location,
            api_available=discovery.api_available,
        )

        logger.info(
            "Keyword analysis completed",
            domain=domain,
            brand=brand,
            category=business_type.category,
            branded=analysis.branded_count,
            non_branded=analysis.non_branded_count,
            api_available=analysis.api_available,
        )
        return analysis


def create_analysis_service(settings: Optional[Settings] = None, offline: bool = False) -> KeywordAnalysisService:
    """
    Build an analysis service with every provider that is configured and enabled.

    Args:
        settings: Settings to use, defaults to the global settings
        offline: Build the service without any provider
    """
    settings = settings or get_settings()
    if offline:
        return KeywordAnalysisService(settings)

    providers = settings.providers
    disabled = set(providers.disabled_providers)
    timeout = providers.request_timeout

    volume = None
    if providers.keywords_everywhere_api_key and "volume" not in disabled:
        volume = KeywordsEverywhereClient(
            providers.keywords_everywhere_api_key,
            timeout=timeout,
            batch_delay=settings.keywords.batch_delay_seconds,
        )

    serp = None
    if providers.valueserp_api_key and "serp" not in disabled:
        serp = ValueSerpClient(providers.valueserp_api_key, timeout=timeout)

    suggestions = None
    if providers.suggestions_enabled and "suggestions" not in disabled:
        suggestions = GoogleSuggestClient(country=settings.keywords.country, timeout=min(timeout, 10.0))

    registry = None
    if providers.companies_house_api_key and "registry" not in disabled:
        registry = CompaniesHouseClient(providers.companies_house_api_key, timeout=timeout)

    return KeywordAnalysisService(
        settings,
        volume_provider=volume,
        serp_provider=serp,
        suggestion_provider=suggestions,
        registry_provider=registry,
    )


async def analyze_keywords(
    domain: str,
    html: str,
    country: Optional[str] = None,
    service: Optional[KeywordAnalysisService] = None,
) -> AnalysisOutcome:
    """Analyze a page with the given service, or one built from the global settings."""
    service = service or create_analysis_service()
    return await service.analyze(domain, html, country)
