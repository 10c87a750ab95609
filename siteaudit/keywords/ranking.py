"""
Relevance filtering and ranking of discovered keywords.

Splits the enriched pool into branded and non-branded lists, keeps only
business-specific non-branded keywords within the volume band for the
business size, then sorts and caps every list.
"""

import re
from typing import List, NamedTuple, Optional, Sequence, Set, Tuple

import structlog

from siteaudit.core.config import KeywordConfig
from siteaudit.core.models import BusinessSize, KeywordCandidate
from siteaudit.detection import scoring
from siteaudit.detection.html_content import PageContent, collapse_whitespace
from siteaudit.detection.location import REGION_NAMES
from siteaudit.detection.signals import contains_term
from siteaudit.keywords.collections import (
    BRAND_DESCRIPTOR_WORDS,
    BUSINESS_MODIFIERS,
    STOPWORDS,
    TOO_GENERIC_TERMS,
)

logger = structlog.get_logger(__name__)

# Two-word generic terms that sink a keyword unless something ties it to the business
GENERIC_PHRASES = tuple(term for term in TOO_GENERIC_TERMS if " " in term)

MIN_BRAND_WORD_LENGTH = 4
MAX_SERVICES = 10

_CAMEL_RE = re.compile(r"(?<=[a-z])(?=[A-Z])")
_SERVICE_SENTENCE_RE = re.compile(
    r"\b(?:our services (?:include|are)|we (?:provide|offer|deliver|speciali[sz]e in)|services:)\s*([^.!?]{4,150})",
    re.I,
)
_LIST_SPLIT_RE = re.compile(r",|\band\b|/|\|")


class KeywordPartition(NamedTuple):
    branded: List[KeywordCandidate]
    non_branded: List[KeywordCandidate]
    top: List[KeywordCandidate]


def brand_variations(brand: Optional[str]) -> List[str]:
    """
    Every form a brand may take inside a search keyword.

    "XYZ Marketing Agency" gives "xyz marketing agency" and "xyzmarketingagency"
    but not "marketing", which describes the business rather than naming it.
    """
    if not brand or not brand.strip():
        return []

    name = collapse_whitespace(brand)
    variations = [name.lower(), name.lower().replace(" ", "")]

    spaced = _CAMEL_RE.sub(" ", name).lower()
    if spaced != name.lower():
        variations.append(spaced)

    for word in re.split(r"[\s\-&]+", spaced):
        if len(word) >= MIN_BRAND_WORD_LENGTH and word not in BRAND_DESCRIPTOR_WORDS:
            variations.append(word)

    return list(dict.fromkeys(v for v in variations if v))


def is_branded(keyword: str, variations: Sequence[str]) -> bool:
    """Substring match, but short variations such as "pro" must be whole words."""
    text = keyword.lower()
    for variation in variations:
        if len(variation) < MIN_BRAND_WORD_LENGTH:
            if contains_term(text, variation):
                return True
        elif variation in text:
            return True
    return False


def _overlaps_service(keyword: str, services: Sequence[str]) -> bool:
    for service in services:
        service = service.lower()
        if contains_term(keyword, service):
            return True
        if " " in keyword and contains_term(service, keyword):
            return True
    return False


def is_business_specific(
    keyword: str, brand: Optional[str] = None, services: Sequence[str] = ()
) -> bool:
    """
    Whether a keyword is specific enough to be worth targeting.

    Exact generic terms are always rejected. A brand, region or service
    overlap rescues anything else. Keywords containing a two-word generic
    term without such an overlap are rejected, and the rest need either two
    words or a business modifier.
    """
    text = collapse_whitespace(keyword).lower()
    if not text or text in TOO_GENERIC_TERMS:
        return False

    if brand and is_branded(text, brand_variations(brand)):
        return True
    if any(contains_term(text, region) for region in REGION_NAMES):
        return True
    if _overlaps_service(text, services):
        return True

    if any(contains_term(text, phrase) for phrase in GENERIC_PHRASES):
        return False

    if len(text.split()) >= 2:
        return True
    return any(contains_term(text, modifier) for modifier in BUSINESS_MODIFIERS)


def volume_band(size) -> Tuple[int, int]:
    key = size.value if isinstance(size, BusinessSize) else str(size or BusinessSize.SMALL.value)
    return scoring.VOLUME_BANDS.get(key, scoring.VOLUME_BANDS[BusinessSize.SMALL.value])


def in_volume_band(candidate: KeywordCandidate, band: Tuple[int, int]) -> bool:
    # Unknown volume is never judged against the band
    if candidate.search_volume is None:
        return True
    low, high = band
    return low <= candidate.search_volume <= high


def _service_items(fragment: str) -> List[str]:
    items = []
    for part in _LIST_SPLIT_RE.split(fragment.lower()):
        words = re.findall(r"[a-z][a-z\-]+", part)
        while words and words[0] in STOPWORDS:
            words.pop(0)
        while words and words[-1] in STOPWORDS:
            words.pop()
        phrase = " ".join(words)
        if 1 <= len(words) <= 4 and 4 <= len(phrase) <= 40:
            items.append(phrase)
    return items


def extract_services(content: PageContent) -> List[str]:
    """Service phrases from "we offer" style sentences, menus and short list items."""
    services: List[str] = []

    for match in _SERVICE_SENTENCE_RE.finditer(content.display_text or ""):
        services.extend(_service_items(match.group(1)))

    soup = content.soup
    if soup is not None:
        for item in soup.select("nav a, nav li, ul li"):
            label = collapse_whitespace(item.get_text(" ")).lower()
            if 4 <= len(label) <= 30 and label not in TOO_GENERIC_TERMS:
                services.extend(_service_items(label))

    unique = [s for s in dict.fromkeys(services) if s not in TOO_GENERIC_TERMS]
    return unique[:MAX_SERVICES]


def _sort_key(candidate: KeywordCandidate):
    return (candidate.relevance_score, candidate.search_volume or 0)


def rank_candidates(candidates: Sequence[KeywordCandidate], cap: int) -> List[KeywordCandidate]:
    """Relevance, then volume, both descending; stable for ties."""
    return sorted(candidates, key=_sort_key, reverse=True)[: max(cap, 0)]


def partition_keywords(
    candidates: Sequence[KeywordCandidate],
    brand: Optional[str],
    services: Sequence[str] = (),
    size=BusinessSize.SMALL,
    config: Optional[KeywordConfig] = None,
) -> KeywordPartition:
    """
    Split the pool into branded and non-branded keywords and build the top list.

    A keyword lands in at most one of the two lists.

    Args:
        candidates: Enriched, deduplicated candidates
        brand: Resolved brand name
        services: Service phrases found on the page
        size: Estimated business size, selects the volume band
        config: Thresholds and caps

    Returns:
        KeywordPartition of branded, non-branded and top keywords
    """
    config = config or KeywordConfig()
    variations = brand_variations(brand)
    band = volume_band(size)

    branded: List[KeywordCandidate] = []
    non_branded: List[KeywordCandidate] = []
    seen: Set[str] = set()
    rejected = {"threshold": 0, "volume": 0, "generic": 0}

    for candidate in candidates:
        key = candidate.keyword.lower()
        if key in seen:
            continue
        seen.add(key)

        if variations and is_branded(key, variations):
            branded.append(candidate)
            continue
        if candidate.relevance_score < config.relevance_threshold:
            rejected["threshold"] += 1
            continue
        if not in_volume_band(candidate, band):
            rejected["volume"] += 1
            continue
        if not is_business_specific(key, brand, services):
            rejected["generic"] += 1
            continue
        non_branded.append(candidate)

    branded = rank_candidates(branded, config.branded_cap)
    non_branded = rank_candidates(non_branded, config.non_branded_cap)
    top = rank_candidates(branded + non_branded, config.top_cap)

    logger.info(
        "Keywords partitioned",
        brand=brand,
        branded=len(branded),
        non_branded=len(non_branded),
        top=len(top),
        volume_band=band,
        **{f"rejected_{reason}": count for reason, count in rejected.items()},
    )
    return KeywordPartition(branded, non_branded, top)
