"""
Keyword candidate generation.

Four independent strategies turn the detected business category, its
location and keywords pulled from the page into search keyword candidates:
category pattern templates, synonym substitution, location combinations and
question templates.
"""

from typing import Dict, Iterable, List, Optional, Sequence

import structlog

from siteaudit.core.models import (
    BusinessType,
    GeneratedKeywordSet,
    KeywordCandidate,
    KeywordIntent,
    KeywordSource,
    LocationContext,
)
from siteaudit.detection import scoring
from siteaudit.detection.categories import Category
from siteaudit.keywords.collections import (
    DEFAULT_COLLECTION,
    INTENT_PATTERNS,
    KEYWORD_COLLECTIONS,
    QUESTION_STEMS,
    SYNONYMS,
    URGENCY_MODIFIERS,
    KeywordCollection,
)

logger = structlog.get_logger(__name__)

MAX_SEEDS = 10
URGENCY_PATTERN_LIMIT = 4
BRANDED_PATTERN_LIMIT = 3


def classify_intent(keyword: str) -> KeywordIntent:
    """Commercial verbs, then question words, then account verbs; commercial by default."""
    text = (keyword or "").lower()
    for intent, pattern in INTENT_PATTERNS:
        if pattern.search(text):
            return KeywordIntent(intent)
    return KeywordIntent.COMMERCIAL


def make_candidate(
    keyword: str,
    relevance: float,
    source: KeywordSource,
    intent: Optional[KeywordIntent] = None,
) -> KeywordCandidate:
    return KeywordCandidate(
        keyword=keyword,
        relevance_score=relevance,
        intent=intent or classify_intent(keyword),
        source=source,
    )


def dedupe_candidates(candidates: Iterable[KeywordCandidate]) -> List[KeywordCandidate]:
    """
    Collapse candidates by lowercase keyword, keeping the most relevant copy.

    First-seen order is preserved, so running it twice changes nothing.
    """
    best: Dict[str, KeywordCandidate] = {}
    for candidate in candidates:
        key = candidate.keyword.lower()
        current = best.get(key)
        if current is None or candidate.relevance_score > current.relevance_score:
            best[key] = candidate
    return list(best.values())


def collection_for(category: Optional[Category]) -> KeywordCollection:
    if category is None:
        return DEFAULT_COLLECTION
    return KEYWORD_COLLECTIONS.get(category, DEFAULT_COLLECTION)


def pattern_keywords(category: Optional[Category], location: Optional[str] = None) -> List[KeywordCandidate]:
    """Category patterns, crossed with modifiers and the location."""
    collection = collection_for(category)
    candidates = []
    for pattern in collection.patterns:
        candidates.append(make_candidate(pattern, scoring.PATTERN_RELEVANCE, KeywordSource.EXTRACTED))
        for modifier in collection.modifiers:
            candidates.append(
                make_candidate(
                    f"{modifier} {pattern}", scoring.PATTERN_MODIFIER_RELEVANCE, KeywordSource.EXTRACTED
                )
            )
        if location:
            for phrase in (f"{pattern} {location}", f"{pattern} in {location}"):
                candidates.append(
                    make_candidate(phrase, scoring.PATTERN_LOCATION_RELEVANCE, KeywordSource.EXTRACTED)
                )
    return candidates


def urgency_keywords(category: Optional[Category]) -> List[KeywordCandidate]:
    collection = collection_for(category)
    return [
        make_candidate(f"{modifier} {pattern}", scoring.URGENCY_RELEVANCE, KeywordSource.EXTRACTED)
        for pattern in collection.patterns[:URGENCY_PATTERN_LIMIT]
        for modifier in URGENCY_MODIFIERS
    ]


def semantic_keywords(seeds: Sequence[str]) -> List[KeywordCandidate]:
    """Swap each word that has synonyms for each of its synonyms."""
    candidates = []
    for seed in seeds:
        words = seed.lower().split()
        for index, word in enumerate(words):
            for synonym in SYNONYMS.get(word, ()):
                variant = " ".join(words[:index] + [synonym] + words[index + 1 :])
                candidates.append(make_candidate(variant, scoring.SEMANTIC_RELEVANCE, KeywordSource.SEMANTIC))
    return candidates


def location_keywords(seeds: Sequence[str], location: Optional[str] = None) -> List[KeywordCandidate]:
    candidates = []
    for seed in seeds:
        seed = seed.lower()
        suffixes = ["near me"]
        prefixes = ["local"]
        if location:
            loc = location.lower()
            if loc in seed:
                continue
            suffixes += [loc, f"in {loc}"]
            prefixes.append(loc)
        for suffix in suffixes:
            candidates.append(
                make_candidate(f"{seed} {suffix}", scoring.LOCATION_SUFFIX_RELEVANCE, KeywordSource.SEMANTIC)
            )
        for prefix in prefixes:
            candidates.append(
                make_candidate(f"{prefix} {seed}", scoring.LOCATION_PREFIX_RELEVANCE, KeywordSource.SEMANTIC)
            )
    return candidates


def question_keywords(seeds: Sequence[str]) -> List[KeywordCandidate]:
    return [
        make_candidate(
            stem.format(kw=seed.lower()),
            scoring.QUESTION_RELEVANCE,
            KeywordSource.SEMANTIC,
            intent=KeywordIntent.INFORMATIONAL,
        )
        for seed in seeds
        for stem in QUESTION_STEMS
    ]


def branded_keywords(
    brand: str, category: Optional[Category] = None, location: Optional[str] = None
) -> List[KeywordCandidate]:
    """Brand name on its own and paired with the business's main patterns."""
    if not brand:
        return []
    name = brand.lower()
    candidates = [
        make_candidate(name, scoring.BRANDED_RELEVANCE, KeywordSource.EXTRACTED, KeywordIntent.NAVIGATIONAL),
        make_candidate(
            f"{name} reviews", scoring.BRANDED_RELEVANCE, KeywordSource.EXTRACTED, KeywordIntent.NAVIGATIONAL
        ),
        make_candidate(f"{name} contact", scoring.BRANDED_RELEVANCE, KeywordSource.EXTRACTED),
        make_candidate(f"{name} prices", scoring.BRANDED_RELEVANCE, KeywordSource.EXTRACTED),
    ]
    if " " in name:
        candidates.append(
            make_candidate(
                name.replace(" ", ""), scoring.BRANDED_RELEVANCE, KeywordSource.EXTRACTED, KeywordIntent.NAVIGATIONAL
            )
        )
    if location:
        candidates.append(make_candidate(f"{name} {location.lower()}", scoring.BRANDED_RELEVANCE, KeywordSource.EXTRACTED))
    for pattern in collection_for(category).patterns[:BRANDED_PATTERN_LIMIT]:
        candidates.append(make_candidate(f"{name} {pattern}", scoring.BRANDED_RELEVANCE, KeywordSource.EXTRACTED))
    return candidates


def _is_local(candidate: KeywordCandidate, location: Optional[str]) -> bool:
    text = candidate.keyword
    if "near me" in text or text.startswith("local "):
        return True
    return bool(location) and location.lower() in text


def generate_keyword_set(
    business_type: BusinessType,
    location: Optional[LocationContext] = None,
    seeds: Sequence[str] = (),
    brand: Optional[str] = None,
) -> GeneratedKeywordSet:
    """
    Run every generation strategy and group the candidates.

    Args:
        business_type: Primary business classification
        location: Resolved location context, if any
        seeds: Keywords extracted from the page, most frequent first
        brand: Resolved brand name for the branded group

    Returns:
        GeneratedKeywordSet with candidates grouped by use
    """
    category = Category.from_label(business_type.category)
    place = location.best_location if location else None
    collection = collection_for(category)

    seed_list = [s.lower() for s in seeds if s and s.strip()][:MAX_SEEDS]
    if not seed_list:
        seed_list = list(collection.patterns[:5])

    urgency = dedupe_candidates(urgency_keywords(category))
    generated = dedupe_candidates(
        pattern_keywords(category, place)
        + urgency
        + semantic_keywords(seed_list)
        + location_keywords(seed_list, place)
        + question_keywords(seed_list)
    )
    branded = dedupe_candidates(branded_keywords(brand, category, place)) if brand else []

    primary = [c for c in generated if c.relevance_score >= scoring.PRIMARY_SET_MIN_RELEVANCE]
    secondary = [c for c in generated if c.relevance_score < scoring.PRIMARY_SET_MIN_RELEVANCE]

    keyword_set = GeneratedKeywordSet(
        primary=primary,
        secondary=secondary,
        long_tail=[c for c in generated if c.longtail],
        local=[c for c in generated if _is_local(c, place)],
        commercial=[c for c in generated if c.intent == KeywordIntent.COMMERCIAL],
        informational=[c for c in generated if c.intent == KeywordIntent.INFORMATIONAL],
        urgency=urgency,
        branded=branded,
        total_generated=len(generated) + len(branded),
        industry_specific=category is not None,
    )
    logger.info(
        "Keyword candidates generated",
        category=business_type.category,
        location=place,
        seeds=len(seed_list),
        total=keyword_set.total_generated,
    )
    return keyword_set
