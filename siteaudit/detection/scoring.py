"""
Scoring weights and thresholds shared by detection and keyword ranking.

Everything that turns evidence into a number lives here so every caller
scores the same way.
"""

from typing import Dict, Tuple

# Content keyword scoring
CONTENT_KEYWORD_WEIGHT = 2
CONTENT_REGION_TERM_WEIGHT = 3
# (minimum score, confidence), checked top down
CONTENT_CONFIDENCE_BANDS: Tuple[Tuple[int, float], ...] = (
    (20, 0.9),
    (10, 0.8),
    (5, 0.7),
    (2, 0.6),
)
CONTENT_BASE_CONFIDENCE = 0.5
CONTENT_CLEAR_WINNER_RATIO = 2.0
CONTENT_CLEAR_WINNER_BONUS = 0.1

# URL structure scoring
URL_PATTERN_WEIGHT = 5
URL_SCORE_DIVISOR = 10.0
URL_MAX_CONFIDENCE = 0.9

# Fixed-confidence extractors
MARKUP_CONFIDENCE = 0.95
DOMAIN_CONFIDENCE = 0.7
REGION_CONFIDENCE = 0.8
REGION_MIN_DISTINCT_TERMS = 2
NAVIGATION_CONFIDENCE = 0.6
NAVIGATION_MIN_MATCHES = 2

# Aggregated score -> confidence level
HIGH_CONFIDENCE_SCORE = 2.0
MEDIUM_CONFIDENCE_SCORE = 1.0
MAX_SECONDARY_TYPES = 2
PRIMARY_RELEVANT_KEYWORDS = 10
SECONDARY_RELEVANT_KEYWORDS = 5

# Brand evidence weights
BRAND_SOURCE_WEIGHTS: Dict[str, float] = {
    "schema_organization": 0.98,
    "og_site_name": 0.96,
    "schema_legal_name": 0.95,
    "schema_org_name": 0.95,
    "schema_brand": 0.94,
    "meta_application_name": 0.94,
    "schema_publisher": 0.92,
    "microdata_organization": 0.92,
    "copyright": 0.90,
    "schema_name": 0.88,
    "schema_alternate_name": 0.85,
    "twitter_site": 0.85,
    "meta_publisher": 0.85,
    "og_title_branded": 0.82,
    "twitter_creator": 0.80,
    "meta_copyright": 0.80,
    "title_branded": 0.80,
    "navbar_brand": 0.78,
    "meta_author": 0.75,
    "og_title": 0.75,
    "h1_branded": 0.72,
    "logo_alt": 0.70,
    "social_profile": 0.70,
    "about_section": 0.68,
    "title": 0.65,
    "h1": 0.65,
    "domain": 0.40,
}
BRAND_TITLE_CASE_BONUS = 0.05
BRAND_COMPOUND_BONUS = 0.03
BRAND_MAX_CONFIDENCE = 0.99
BRAND_MIN_LENGTH = 2
BRAND_MAX_LENGTH = 100

# Keyword relevance by generation strategy
PATTERN_RELEVANCE = 0.9
PATTERN_MODIFIER_RELEVANCE = 0.85
PATTERN_LOCATION_RELEVANCE = 0.85
URGENCY_RELEVANCE = 0.8
SEMANTIC_RELEVANCE = 0.8
LOCATION_SUFFIX_RELEVANCE = 0.85
LOCATION_PREFIX_RELEVANCE = 0.75
QUESTION_RELEVANCE = 0.7
SUGGESTION_RELEVANCE = 0.65
COMPETITOR_RELEVANCE = 0.6
BRANDED_RELEVANCE = 0.95
CONTENT_PHRASE_MAX_RELEVANCE = 0.8
CONTENT_PHRASE_MIN_RELEVANCE = 0.5
PRIMARY_SET_MIN_RELEVANCE = 0.85
LONGTAIL_MIN_WORDS = 3

# Competition -> difficulty
DIFFICULTY_LOW_MAX = 0.34
DIFFICULTY_MEDIUM_MAX = 0.67

# Business size -> volume band (min, max)
VOLUME_BANDS: Dict[str, Tuple[int, int]] = {
    "new": (10, 2500),
    "small": (10, 2500),
    "medium": (10, 5000),
    "large": (10, 50000),
}

# Business size estimation
SIZE_NEW_INDICATOR_WEIGHT = 2
SIZE_LARGE_INDICATOR_WEIGHT = 3
SIZE_MEDIUM_INDICATOR_WEIGHT = 2
SIZE_NEW_THRESHOLD = 3
SIZE_LARGE_THRESHOLD = 3
SIZE_MEDIUM_THRESHOLD = 2
SIZE_YOUNG_BUSINESS_YEARS = 2
SIZE_ESTABLISHED_BUSINESS_YEARS = 15


def content_confidence(top_score: float, runner_up: float) -> float:
    """Map a winning content score to a confidence."""
    confidence = CONTENT_BASE_CONFIDENCE
    for minimum, value in CONTENT_CONFIDENCE_BANDS:
        if top_score >= minimum:
            confidence = value
            break
    if top_score > runner_up * CONTENT_CLEAR_WINNER_RATIO:
        confidence += CONTENT_CLEAR_WINNER_BONUS
    return round(min(confidence, 1.0), 4)


def url_confidence(score: float) -> float:
    return round(min(score / URL_SCORE_DIVISOR, URL_MAX_CONFIDENCE), 4)


def difficulty_for_competition(competition):
    """Bucket 0-1 competition into low/medium/high, or None when unknown."""
    if competition is None:
        return None
    if competition < DIFFICULTY_LOW_MAX:
        return "low"
    if competition < DIFFICULTY_MEDIUM_MAX:
        return "medium"
    return "high"
