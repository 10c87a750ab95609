"""
Business classification from combined page signals.

Merges the evidence of every signal extractor into one primary business type
with ranked runners-up, plus company size, locality and UK flags.
"""

import re
from collections import OrderedDict
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from siteaudit.core.config import ClassifierConfig
from siteaudit.core.models import (
    BusinessDetectionResult,
    BusinessSize,
    BusinessType,
    CompanySize,
    ConfidenceLevel,
    EvidenceCandidate,
    ExtractorName,
)
from siteaudit.detection import scoring
from siteaudit.detection.categories import Category
from siteaudit.detection.html_content import PageContent, domain_suffix, parse_page
from siteaudit.detection.signals import contains_term, run_extractors

logger = structlog.get_logger(__name__)

# Checked top down; first tier with a hit wins
COMPANY_SIZE_LADDER: Tuple[Tuple[CompanySize, Tuple[str, ...]], ...] = (
    (CompanySize.ENTERPRISE, ("enterprise", "corporate", "group")),
    (CompanySize.LARGE, ("nationwide", "international")),
    (CompanySize.MEDIUM, ("team of", "staff of")),
    (CompanySize.SMALL, ("family", "local", "independent")),
)

LOCAL_BUSINESS_PHRASES = ("near me", "local", "area", "serving", "coverage", "postcode", "address")

UK_TEXT_MARKERS = ("uk", "united kingdom")

NEW_BUSINESS_INDICATORS = (
    "new business", "recently launched", "just launched", "newly opened", "grand opening",
    "startup", "start-up", "coming soon", "launching soon",
)
LARGE_BUSINESS_INDICATORS = (
    "nationwide", "international", "global", "offices across", "locations nationwide",
    "leading provider", "market leader", "plc",
)
MEDIUM_BUSINESS_INDICATORS = (
    "established", "years of experience", "award winning", "award-winning", "team of",
    "multiple locations", "branches",
)
FOUNDED_YEAR_RE = re.compile(r"\b(?:founded|established|since|est\.?)\s+(?:in\s+)?((?:19|20)\d{2})\b")


def confidence_level(
    score: float,
    high: float = scoring.HIGH_CONFIDENCE_SCORE,
    medium: float = scoring.MEDIUM_CONFIDENCE_SCORE,
) -> ConfidenceLevel:
    if score >= high:
        return ConfidenceLevel.HIGH
    if score >= medium:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def resolve_subcategory(category: Category, text: str) -> str:
    """Return the first subcategory whose refinement terms appear in the text."""
    for subcategory in category.profile.subcategories:
        if not any(contains_term(text, term) for term in subcategory.terms):
            continue
        if subcategory.requires and not any(word in text for word in subcategory.requires):
            continue
        return subcategory.name
    return category.profile.fallback_subcategory


def combine(
    candidates: Sequence[EvidenceCandidate],
    text: str = "",
    config: Optional[ClassifierConfig] = None,
) -> Tuple[BusinessType, List[BusinessType]]:
    """
    Combine extractor evidence into a primary type and up to two runners-up.

    Confidences are summed per category. A structured-markup candidate makes
    its category primary even when another category sums higher.

    Args:
        candidates: Evidence from the signal extractors
        text: Lowercased page text used for subcategory refinement
        config: Optional thresholds for the high/medium levels

    Returns:
        Tuple of (primary, secondary types)
    """
    if not candidates:
        return BusinessType.default(), []

    high = config.high_confidence_score if config else scoring.HIGH_CONFIDENCE_SCORE
    medium = config.medium_confidence_score if config else scoring.MEDIUM_CONFIDENCE_SCORE

    totals: Dict[Category, float] = OrderedDict()
    methods: Dict[Category, set] = {}
    for candidate in candidates:
        totals[candidate.category] = totals.get(candidate.category, 0.0) + candidate.confidence
        methods.setdefault(candidate.category, set()).add(candidate.method.value)

    order = {category: index for index, category in enumerate(Category)}
    ranked = sorted(totals, key=lambda c: (-totals[c], order[c]))

    markup = next((c for c in candidates if c.method == ExtractorName.MARKUP), None)
    if markup is not None and ranked[0] is not markup.category:
        ranked.remove(markup.category)
        ranked.insert(0, markup.category)

    def build(category: Category, subcategory: str, keyword_count: int) -> BusinessType:
        score = round(totals[category], 4)
        return BusinessType(
            category=category.label,
            subcategory=subcategory,
            confidence=confidence_level(score, high, medium),
            score=score,
            detection_methods=sorted(methods[category]),
            relevant_keywords=list(category.profile.keywords[:keyword_count]),
        )

    primary_category = ranked[0]
    primary = build(
        primary_category,
        resolve_subcategory(primary_category, text),
        scoring.PRIMARY_RELEVANT_KEYWORDS,
    )
    secondary = [
        build(category, category.profile.subcategories[0].name, scoring.SECONDARY_RELEVANT_KEYWORDS)
        for category in ranked[1 : 1 + scoring.MAX_SECONDARY_TYPES]
    ]
    return primary, secondary


def estimate_company_size(text: str) -> CompanySize:
    for size, words in COMPANY_SIZE_LADDER:
        if any(contains_term(text, word) for word in words):
            return size
    return CompanySize.MICRO


def is_local_business(text: str) -> bool:
    return any(contains_term(text, phrase) for phrase in LOCAL_BUSINESS_PHRASES)


def is_uk_specific(text: str, domain: str) -> bool:
    suffix = domain_suffix(domain)
    if suffix == "uk" or suffix.endswith(".uk"):
        return True
    return any(contains_term(text, marker) for marker in UK_TEXT_MARKERS)


def estimate_business_size(text: str, today: Optional[date] = None) -> BusinessSize:
    """
    Estimate how large a search footprint the business has.

    Indicator phrases are weighted and a founding year, when stated, shifts the
    estimate towards new or established.
    """
    text = (text or "").lower()
    new_score = sum(scoring.SIZE_NEW_INDICATOR_WEIGHT for p in NEW_BUSINESS_INDICATORS if p in text)
    large_score = sum(scoring.SIZE_LARGE_INDICATOR_WEIGHT for p in LARGE_BUSINESS_INDICATORS if p in text)
    medium_score = sum(scoring.SIZE_MEDIUM_INDICATOR_WEIGHT for p in MEDIUM_BUSINESS_INDICATORS if p in text)

    match = FOUNDED_YEAR_RE.search(text)
    if match:
        current_year = (today or date.today()).year
        age = current_year - int(match.group(1))
        if 0 <= age <= scoring.SIZE_YOUNG_BUSINESS_YEARS:
            new_score += 3
        elif age >= scoring.SIZE_ESTABLISHED_BUSINESS_YEARS:
            medium_score += 2

    if new_score >= scoring.SIZE_NEW_THRESHOLD and new_score > large_score:
        return BusinessSize.NEW
    if large_score >= scoring.SIZE_LARGE_THRESHOLD:
        return BusinessSize.LARGE
    if medium_score >= scoring.SIZE_MEDIUM_THRESHOLD:
        return BusinessSize.MEDIUM
    return BusinessSize.SMALL


def classify_page(
    content: PageContent, domain: str = "", config: Optional[ClassifierConfig] = None
) -> BusinessDetectionResult:
    """Classify an already parsed page."""
    domain = domain or content.domain
    candidates = run_extractors(content, domain)
    primary, secondary = combine(candidates, content.text, config)

    fired = []
    for candidate in candidates:
        if candidate.method.label not in fired:
            fired.append(candidate.method.label)

    result = BusinessDetectionResult(
        primary_type=primary,
        secondary_types=secondary,
        uk_specific=is_uk_specific(content.text, domain),
        local_business=is_local_business(content.text),
        company_size=estimate_company_size(content.text),
        detection_sources=fired,
    )
    logger.info(
        "Business detected",
        domain=domain,
        category=primary.category,
        subcategory=primary.subcategory,
        confidence=primary.confidence,
        score=primary.score,
        sources=fired,
    )
    return result


def detect_business(
    html: str, domain: str, config: Optional[ClassifierConfig] = None
) -> BusinessDetectionResult:
    """
    Classify the business behind a page.

    Never raises: unparseable or empty input yields the low-confidence
    Business Services/General default.
    """
    try:
        return classify_page(parse_page(html, domain), domain, config)
    except Exception as e:
        logger.warning("Business detection failed, using default", domain=domain, error=str(e))
        return BusinessDetectionResult(primary_type=BusinessType.default())
