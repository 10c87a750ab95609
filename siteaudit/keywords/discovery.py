"""
Keyword discovery and external enrichment.

Merges generated candidates with phrases mined from the page, search
suggestions and competitor fillers, deduplicates the pool and enriches it
with search volumes and ranking positions from the external providers.
"""

import re
from collections import Counter
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import structlog

from siteaudit.core.config import KeywordConfig
from siteaudit.core.models import (
    GeneratedKeywordSet,
    KeywordCandidate,
    KeywordSource,
    VolumeData,
)
from siteaudit.detection import scoring
from siteaudit.detection.categories import Category
from siteaudit.detection.location import UK_REGIONS, region_for
from siteaudit.detection.signals import contains_term
from siteaudit.keywords.collections import (
    COMPETITOR_TEMPLATES,
    NON_UK_PLACES,
    STOP_PHRASES,
    STOPWORDS,
    SUGGESTION_BUSINESS_TERMS,
    SUGGESTION_GENERIC_WEB_TERMS,
)
from siteaudit.keywords.generator import collection_for, dedupe_candidates, make_candidate
from siteaudit.utils.reliability import run_in_batches

logger = structlog.get_logger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r"[.!?;:|\n••·,()\[\]\"]+")
_TOKEN_RE = re.compile(r"[a-z][a-z0-9'&\-]*")
MIN_PHRASE_LENGTH = 4
MAX_PHRASE_LENGTH = 50
SUGGESTION_SEED_LIMIT = 5
COMPETITOR_TERM_LIMIT = 2


class DiscoveryResult(NamedTuple):
    candidates: List[KeywordCandidate]
    api_available: bool
    content_keywords: List[str]


def _is_meaningful(word: str) -> bool:
    return len(word) > 2 and word not in STOPWORDS


def extract_content_phrases(text: str, limit: int = 50) -> List[Tuple[str, int]]:
    """
    Mine 2-4 word phrases from page text, most frequent first.

    Phrases must carry at least one meaningful word, may not start or end on a
    stopword and may not contain a stop phrase.
    """
    counts: Counter = Counter()
    first_seen: Dict[str, int] = {}
    position = 0

    for sentence in _SENTENCE_SPLIT_RE.split((text or "").lower()):
        tokens = _TOKEN_RE.findall(sentence)
        for size in (2, 3, 4):
            for start in range(0, len(tokens) - size + 1):
                window = tokens[start : start + size]
                if window[0] in STOPWORDS or window[-1] in STOPWORDS:
                    continue
                if not any(_is_meaningful(w) for w in window):
                    continue
                phrase = " ".join(window)
                if not (MIN_PHRASE_LENGTH <= len(phrase) <= MAX_PHRASE_LENGTH):
                    continue
                if any(stop in phrase for stop in STOP_PHRASES):
                    continue
                counts[phrase] += 1
                if phrase not in first_seen:
                    first_seen[phrase] = position
                    position += 1

    ranked = sorted(counts.items(), key=lambda item: (-item[1], first_seen[item[0]]))
    return ranked[:limit]


def extract_content_keywords(text: str, limit: int = 50) -> List[str]:
    return [phrase for phrase, _ in extract_content_phrases(text, limit)]


def content_candidates(phrases: Sequence[Tuple[str, int]]) -> List[KeywordCandidate]:
    """Page phrases as candidates; relevance scales with how often they appear."""
    if not phrases:
        return []
    top = max(count for _, count in phrases)
    span = scoring.CONTENT_PHRASE_MAX_RELEVANCE - scoring.CONTENT_PHRASE_MIN_RELEVANCE
    return [
        make_candidate(
            phrase,
            scoring.CONTENT_PHRASE_MIN_RELEVANCE + span * (count / top),
            KeywordSource.EXTRACTED,
        )
        for phrase, count in phrases
    ]


def competitor_keywords(category: Optional[Category]) -> List[KeywordCandidate]:
    patterns = collection_for(category).patterns[:COMPETITOR_TERM_LIMIT]
    return [
        make_candidate(template.format(term=term), scoring.COMPETITOR_RELEVANCE, KeywordSource.COMPETITOR)
        for term in patterns
        for template in COMPETITOR_TEMPLATES
    ]


def is_business_relevant_suggestion(suggestion: str, business_terms: Sequence[str] = ()) -> bool:
    text = suggestion.lower()
    if set(text.split()) & SUGGESTION_GENERIC_WEB_TERMS:
        return False
    terms = tuple(SUGGESTION_BUSINESS_TERMS) + tuple(t.lower() for t in business_terms)
    return any(contains_term(text, term) for term in terms)


def mentions_other_location(suggestion: str, location: Optional[str]) -> bool:
    """True when a suggestion targets somewhere other than where the business is."""
    text = suggestion.lower()
    if any(contains_term(text, place) for place in NON_UK_PLACES):
        return True
    home_region = region_for(location)
    if home_region is None:
        return False
    for region, places in UK_REGIONS.items():
        if region == home_region:
            continue
        if location and location.lower() in text:
            continue
        if any(contains_term(text, place) for place in places):
            return True
    return False


async def discover_suggestions(
    seeds: Sequence[str],
    provider,
    location: Optional[str] = None,
    business_terms: Sequence[str] = (),
    batch_size: int = 3,
    delay: float = 0.3,
) -> List[KeywordCandidate]:
    """Ask the suggestion provider about each seed and keep the relevant answers."""
    if provider is None or not seeds:
        return []

    seeds = list(seeds)[:SUGGESTION_SEED_LIMIT]
    responses = await run_in_batches(seeds, provider.suggest, batch_size=batch_size, delay=delay)

    kept: List[KeywordCandidate] = []
    rejected = 0
    for seed, suggestions in zip(seeds, responses):
        for suggestion in suggestions or []:
            if not suggestion or suggestion.lower() == seed.lower():
                continue
            if mentions_other_location(suggestion, location) or not is_business_relevant_suggestion(
                suggestion, business_terms
            ):
                rejected += 1
                continue
            kept.append(make_candidate(suggestion, scoring.SUGGESTION_RELEVANCE, KeywordSource.SUGGESTION))

    logger.info("Suggestions discovered", seeds=len(seeds), kept=len(kept), rejected=rejected)
    return kept


def _volume_row(row) -> Optional[VolumeData]:
    if isinstance(row, VolumeData):
        return row
    if isinstance(row, dict) and row.get("keyword"):
        return VolumeData(**row)
    return None


def _without_volume(candidates: Sequence[KeywordCandidate]) -> List[KeywordCandidate]:
    return [c.model_copy(update={"search_volume": None, "difficulty": None}) for c in candidates]


async def enrich_volumes(
    candidates: Sequence[KeywordCandidate], provider, country: str = "gb"
) -> Tuple[List[KeywordCandidate], bool]:
    """
    Attach search volumes from one provider call covering every unique keyword.

    If the provider is missing or the call fails, the analysis is marked as
    having no volume data and every volume is None. Volumes are never guessed.

    Args:
        candidates: Deduplicated candidates
        provider: Volume provider, or None
        country: Market the volumes are for

    Returns:
        Tuple of (enriched candidates, api_available)
    """
    if provider is None:
        logger.info("No volume provider configured, volumes left empty")
        return _without_volume(candidates), False

    keywords = list(dict.fromkeys(c.keyword.lower() for c in candidates))
    if not keywords:
        # No lookup was made, so no volume data came from the provider
        return [], False

    try:
        rows = await provider.get_search_volumes(keywords, country)
    except Exception as e:
        logger.warning(
            "Volume lookup failed, volumes unavailable", error=str(e), keywords=len(keywords)
        )
        return _without_volume(candidates), False

    volumes: Dict[str, VolumeData] = {}
    for row in rows or []:
        data = _volume_row(row)
        if data is not None:
            volumes[data.keyword.lower()] = data

    enriched = []
    for candidate in candidates:
        data = volumes.get(candidate.keyword.lower())
        if data is None:
            enriched.append(candidate.model_copy(update={"search_volume": None, "difficulty": None}))
            continue
        enriched.append(
            candidate.model_copy(
                update={
                    "search_volume": data.volume,
                    "difficulty": scoring.difficulty_for_competition(data.competition),
                }
            )
        )

    logger.info("Search volumes attached", requested=len(keywords), matched=len(volumes))
    return enriched, True


async def enrich_positions(
    keywords: Sequence[KeywordCandidate],
    provider,
    domain: str,
    limit: int,
    batch_size: int = 3,
    delay: float = 0.3,
) -> List[KeywordCandidate]:
    """Look up ranking positions for the first ``limit`` keywords; the rest are untouched."""
    if provider is None or not keywords or limit <= 0:
        return list(keywords)

    head = list(keywords[:limit])

    async def check(candidate: KeywordCandidate):
        return await provider.check_keyword_position(candidate.keyword, domain)

    positions = await run_in_batches(head, check, batch_size=batch_size, delay=delay)
    ranked = [
        candidate.model_copy(update={"position": position if position and position > 0 else None})
        for candidate, position in zip(head, positions)
    ]
    return ranked + list(keywords[limit:])


class KeywordDiscoveryOrchestrator:
    """
    Builds the enriched candidate pool for one analysis.

    The orchestrator is the only component that talks to the volume and
    position providers.
    """

    def __init__(
        self,
        config: Optional[KeywordConfig] = None,
        volume_provider=None,
        suggestion_provider=None,
        serp_provider=None,
    ):
        self.config = config or KeywordConfig()
        self.volume_provider = volume_provider
        self.suggestion_provider = suggestion_provider
        self.serp_provider = serp_provider

    async def discover(
        self,
        generated: GeneratedKeywordSet,
        text: str,
        category: Optional[Category] = None,
        location: Optional[str] = None,
        country: Optional[str] = None,
        extra_keywords: Sequence[str] = (),
    ) -> DiscoveryResult:
        phrases = extract_content_phrases(text, self.config.content_keyword_limit)
        content_keywords = [phrase for phrase, _ in phrases]

        business_terms = list(collection_for(category).patterns) + list(extra_keywords)
        seeds = [c.keyword for c in generated.primary[:SUGGESTION_SEED_LIMIT]] or content_keywords
        suggestions = await discover_suggestions(
            seeds,
            self.suggestion_provider,
            location=location,
            business_terms=business_terms,
            batch_size=self.config.batch_size,
            delay=self.config.batch_delay_seconds,
        )

        extra = [
            make_candidate(term, scoring.PATTERN_MODIFIER_RELEVANCE, KeywordSource.EXTRACTED)
            for term in extra_keywords
        ]
        pool = dedupe_candidates(
            generated.all_candidates()
            + extra
            + content_candidates(phrases)
            + suggestions
            + competitor_keywords(category)
        )

        enriched, api_available = await enrich_volumes(
            pool, self.volume_provider, country or self.config.country
        )
        logger.info(
            "Keyword pool discovered",
            generated=generated.total_generated,
            content=len(phrases),
            suggestions=len(suggestions),
            pool=len(enriched),
            api_available=api_available,
        )
        return DiscoveryResult(enriched, api_available, content_keywords)

    async def rank_positions(
        self,
        branded: Sequence[KeywordCandidate],
        non_branded: Sequence[KeywordCandidate],
        domain: str,
    ) -> Tuple[List[KeywordCandidate], List[KeywordCandidate]]:
        """Check positions for the top branded and non-branded keywords only."""
        branded_ranked = await enrich_positions(
            branded,
            self.serp_provider,
            domain,
            self.config.serp_branded_limit,
            self.config.batch_size,
            self.config.batch_delay_seconds,
        )
        non_branded_ranked = await enrich_positions(
            non_branded,
            self.serp_provider,
            domain,
            self.config.serp_non_branded_limit,
            self.config.batch_size,
            self.config.batch_delay_seconds,
        )
        return branded_ranked, non_branded_ranked
