"""
Signal extractors for business classification.

Each extractor is a pure function of the parsed page and the domain. It
returns one EvidenceCandidate for the category it favours, or None when it
finds nothing.
"""

import re
from functools import lru_cache
from typing import Callable, Dict, List, Optional

import structlog

from siteaudit.core.models import EvidenceCandidate, ExtractorName
from siteaudit.detection import scoring
from siteaudit.detection.categories import SCHEMA_TYPE_INDEX, Category
from siteaudit.detection.html_content import PageContent, domain_label

logger = structlog.get_logger(__name__)

Extractor = Callable[[PageContent, str], Optional[EvidenceCandidate]]


# Bounded: terms also come from page content and generated keywords
TERM_PATTERN_CACHE_SIZE = 1024


@lru_cache(maxsize=TERM_PATTERN_CACHE_SIZE)
def term_pattern(term: str) -> "re.Pattern[str]":
    return re.compile(rf"\b{re.escape(term.lower())}\b")


def count_term(text: str, term: str) -> int:
    return len(term_pattern(term).findall(text))


def contains_term(text: str, term: str) -> bool:
    return term_pattern(term).search(text) is not None


def _best(scores: Dict[Category, float]) -> Optional[Category]:
    # Ties go to the earlier category in declaration order
    best = None
    for category in Category:
        score = scores.get(category, 0)
        if score > 0 and (best is None or score > scores[best]):
            best = category
    return best


def content_signal(content: PageContent, domain: str = "") -> Optional[EvidenceCandidate]:
    """Score every category by weighted keyword and UK term counts in the page text."""
    scores: Dict[Category, float] = {}
    for category in Category:
        profile = category.profile
        score = sum(count_term(content.text, kw) for kw in profile.keywords) * scoring.CONTENT_KEYWORD_WEIGHT
        score += (
            sum(count_term(content.text, term) for term in profile.region_terms)
            * scoring.CONTENT_REGION_TERM_WEIGHT
        )
        if score > 0:
            scores[category] = score

    winner = _best(scores)
    if winner is None:
        return None

    top_score = scores[winner]
    runner_up = max((s for c, s in scores.items() if c is not winner), default=0)
    return EvidenceCandidate(
        category=winner,
        confidence=scoring.content_confidence(top_score, runner_up),
        method=ExtractorName.CONTENT,
    )


def url_signal(content: PageContent, domain: str = "") -> Optional[EvidenceCandidate]:
    """Score categories by how many same-domain links hit their URL fragments."""
    if not content.links:
        return None

    scores: Dict[Category, float] = {}
    for category in Category:
        matches = sum(
            1
            for link in content.links
            for pattern in category.profile.url_patterns
            if pattern in link
        )
        if matches:
            scores[category] = matches * scoring.URL_PATTERN_WEIGHT

    winner = _best(scores)
    if winner is None:
        return None
    return EvidenceCandidate(
        category=winner,
        confidence=scoring.url_confidence(scores[winner]),
        method=ExtractorName.URL,
    )


def markup_signal(content: PageContent, domain: str = "") -> Optional[EvidenceCandidate]:
    """First structured-data type that names a known category wins outright."""
    for schema_type in content.structured_types:
        category = SCHEMA_TYPE_INDEX.get(schema_type.lower())
        if category is not None:
            return EvidenceCandidate(
                category=category,
                confidence=scoring.MARKUP_CONFIDENCE,
                method=ExtractorName.MARKUP,
            )
    return None


def domain_signal(content: PageContent, domain: str = "") -> Optional[EvidenceCandidate]:
    label = domain_label(domain or content.domain)
    if not label:
        return None
    for category in Category:
        if any(term in label for term in category.profile.domain_terms):
            return EvidenceCandidate(
                category=category,
                confidence=scoring.DOMAIN_CONFIDENCE,
                method=ExtractorName.DOMAIN,
            )
    return None


def region_signal(content: PageContent, domain: str = "") -> Optional[EvidenceCandidate]:
    """Fires when at least two distinct UK-specific terms for one category appear."""
    scores: Dict[Category, float] = {}
    for category in Category:
        distinct = sum(1 for term in category.profile.region_terms if contains_term(content.text, term))
        if distinct >= scoring.REGION_MIN_DISTINCT_TERMS:
            scores[category] = distinct

    winner = _best(scores)
    if winner is None:
        return None
    return EvidenceCandidate(
        category=winner, confidence=scoring.REGION_CONFIDENCE, method=ExtractorName.REGION
    )


def navigation_signal(content: PageContent, domain: str = "") -> Optional[EvidenceCandidate]:
    if not content.nav_text:
        return None

    scores: Dict[Category, float] = {}
    for category in Category:
        matches = sum(1 for kw in category.profile.keywords if contains_term(content.nav_text, kw))
        if matches >= scoring.NAVIGATION_MIN_MATCHES:
            scores[category] = matches

    winner = _best(scores)
    if winner is None:
        return None
    return EvidenceCandidate(
        category=winner, confidence=scoring.NAVIGATION_CONFIDENCE, method=ExtractorName.NAVIGATION
    )


EXTRACTORS: List[Extractor] = [
    content_signal,
    url_signal,
    markup_signal,
    domain_signal,
    region_signal,
    navigation_signal,
]


def run_extractors(content: PageContent, domain: str = "") -> List[EvidenceCandidate]:
    """Run every extractor and keep the candidates that fired."""
    candidates = []
    for extractor in EXTRACTORS:
        candidate = extractor(content, domain or content.domain)
        if candidate is not None:
            candidates.append(candidate)
    logger.debug(
        "Signal extraction complete",
        domain=domain or content.domain,
        fired=[c.method.value for c in candidates],
    )
    return candidates
