"""
Reference phrase collections for keyword generation and filtering.

Per-category search patterns and modifiers, the synonym table, question
stems, intent families and the word lists the relevance filter relies on.
All tables are read-only.
"""

import re
from dataclasses import dataclass
from typing import Dict, Tuple

from siteaudit.detection.categories import Category


@dataclass(frozen=True)
class KeywordCollection:
    patterns: Tuple[str, ...]
    modifiers: Tuple[str, ...]


KEYWORD_COLLECTIONS: Dict[Category, KeywordCollection] = {
    Category.LEGAL: KeywordCollection(
        patterns=(
            "solicitor", "lawyer", "legal advice", "family law", "divorce lawyer",
            "personal injury", "employment law", "conveyancing", "will writing", "probate",
            "estate planning", "immigration law",
        ),
        modifiers=("experienced", "specialist", "qualified", "local", "affordable", "no win no fee"),
    ),
    Category.ARCHITECTURE: KeywordCollection(
        patterns=(
            "architect", "architectural design", "house extension", "loft conversion",
            "planning permission", "building regulations", "residential architect",
            "interior design", "sustainable design",
        ),
        modifiers=("experienced", "riba", "chartered", "award winning", "local", "sustainable"),
    ),
    Category.HEALTHCARE: KeywordCollection(
        patterns=(
            "private healthcare", "medical treatment", "dental treatment", "cosmetic dentistry",
            "physiotherapy", "sports injury", "mental health", "counselling", "eye surgery",
        ),
        modifiers=("private", "nhs", "expert", "experienced", "affordable", "same day"),
    ),
    Category.AUTOMOTIVE: KeywordCollection(
        patterns=(
            "car servicing", "mot test", "car repairs", "brake repair", "tyre fitting",
            "used cars", "vehicle diagnostics", "clutch replacement",
        ),
        modifiers=("cheap", "reliable", "local", "mobile", "same day", "approved"),
    ),
    Category.FOOD_PROCESSING: KeywordCollection(
        patterns=(
            "chocolate tempering machine", "chocolate equipment", "food processing equipment",
            "nut butter machine", "food machinery", "chocolate moulds", "industrial food equipment",
        ),
        modifiers=("industrial", "commercial", "heavy duty", "precision", "automated", "custom"),
    ),
    Category.HOSPITALITY: KeywordCollection(
        patterns=(
            "restaurant", "fine dining", "table booking", "private dining", "sunday lunch",
            "catering service", "hotel rooms", "afternoon tea",
        ),
        modifiers=("best", "family friendly", "local", "independent", "romantic", "dog friendly"),
    ),
    Category.RETAIL: KeywordCollection(
        patterns=(
            "online shop", "gift ideas", "next day delivery", "sale items", "new collection",
            "click and collect",
        ),
        modifiers=("cheap", "discount", "luxury", "handmade", "independent", "uk"),
    ),
    Category.MARKETING: KeywordCollection(
        patterns=(
            "digital marketing", "seo services", "ppc management", "social media marketing",
            "content marketing", "email marketing", "web design", "website development",
            "branding", "graphic design", "marketing strategy",
        ),
        modifiers=("professional", "affordable", "expert", "creative", "data-driven", "results-focused"),
    ),
    Category.CONSTRUCTION: KeywordCollection(
        patterns=(
            "builder", "house extension", "electrician", "plumber", "boiler installation",
            "roofing contractor", "painter and decorator", "kitchen fitting",
        ),
        modifiers=("local", "reliable", "emergency", "qualified", "affordable", "gas safe"),
    ),
    Category.FINANCIAL: KeywordCollection(
        patterns=(
            "financial advisor", "wealth management", "financial planning", "retirement planning",
            "pension advice", "tax planning", "accountant", "bookkeeping services", "mortgage advice",
        ),
        modifiers=("best", "top", "professional", "expert", "certified", "independent"),
    ),
    Category.EDUCATION: KeywordCollection(
        patterns=(
            "training courses", "online courses", "private tutor", "gcse tuition",
            "professional training", "apprenticeships",
        ),
        modifiers=("accredited", "online", "part time", "local", "affordable", "qualified"),
    ),
    Category.BEAUTY: KeywordCollection(
        patterns=(
            "beauty salon", "hair salon", "nail salon", "massage", "facial treatment",
            "spa day", "aesthetic treatments",
        ),
        modifiers=("luxury", "affordable", "local", "mobile", "organic", "award winning"),
    ),
}

DEFAULT_COLLECTION = KeywordCollection(
    patterns=("business services", "professional services", "consultancy"),
    modifiers=("local", "professional", "affordable", "experienced"),
)

SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "service": ("solution", "support", "assistance", "help"),
    "services": ("solutions", "support"),
    "company": ("business", "firm", "agency", "organisation"),
    "expert": ("specialist", "professional", "consultant", "advisor"),
    "best": ("top", "leading", "premier", "excellent"),
    "cheap": ("affordable", "budget", "low cost", "economical"),
    "buy": ("purchase", "order", "get"),
    "help": ("assist", "support", "guide"),
}

QUESTION_STEMS = (
    "how to choose {kw}",
    "what is the best {kw}",
    "where to find {kw}",
    "how much does {kw} cost",
    "why choose {kw}",
    "how does {kw} work",
    "benefits of {kw}",
)

URGENCY_MODIFIERS = ("emergency", "same day", "urgent", "24 hour")

INTENT_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    (
        "commercial",
        re.compile(r"\b(?:buy|purchase|hire|book|order|price|prices|pricing|cost|costs|quote|compare|best|top)\b"),
    ),
    ("informational", re.compile(r"\b(?:how|what|why|when|where|guide|tips|benefits)\b")),
    ("transactional", re.compile(r"\b(?:contact|login|log in|signup|sign up|trial|demo|download)\b")),
)

COMPETITOR_TEMPLATES = (
    "best {term} companies",
    "top {term} providers",
    "{term} alternatives",
    "leading {term} specialists",
    "trusted {term} provider",
    "{term} reviews",
)

STOPWORDS = frozenset(
    """a about above after again all also am an and any are as at be because been before being
    below between both but by can could did do does doing down during each few for from further
    get got had has have having he her here hers him his how i if in into is it its just me more
    most my no nor not now of off on once only or other our out over own same she should so some
    such than that the their them then there these they this those through to too under until up
    us very was we were what when where which while who whom why will with would you your yours
    click here read more""".split()
)

STOP_PHRASES = (
    "this is", "there are", "it is", "you can", "we are", "they are", "click here",
    "read more", "all rights reserved", "cookie policy", "privacy policy",
)

# Exact keywords too broad to be worth targeting on their own
TOO_GENERIC_TERMS = frozenset(
    {
        "marketing", "advertising", "business", "services", "solutions", "company",
        "technology", "software", "digital marketing", "web design", "seo services",
        "seo", "website", "design", "consulting", "agency", "online marketing",
    }
)

BUSINESS_MODIFIERS = (
    "agency", "consultant", "expert", "specialist", "professional", "strategy", "pricing",
    "cost", "quote", "near me", "services", "company", "firm", "hire",
)

# Words that never count as part of a brand on their own
BRAND_DESCRIPTOR_WORDS = frozenset(
    {
        "marketing", "agency", "communications", "company", "ltd", "limited", "group",
        "services", "solutions", "digital", "creative", "design", "media", "advertising",
        "consulting", "partners", "associates", "estate", "agents", "solicitors",
    }
)

# Suggestion filtering
SUGGESTION_BUSINESS_TERMS = (
    "services", "service", "company", "agency", "cost", "price", "prices", "quote", "hire",
    "near me", "best", "local", "specialist", "expert", "consultant", "professional", "uk",
)
SUGGESTION_GENERIC_WEB_TERMS = frozenset(
    {
        "free", "download", "online", "tutorial", "video", "song", "movie", "game", "app",
        "software", "review", "news", "wikipedia", "amazon", "reddit", "youtube", "meaning",
        "pdf", "jobs", "salary",
    }
)
NON_UK_PLACES = (
    "usa", "america", "new york", "california", "texas", "florida", "chicago", "los angeles",
    "canada", "toronto", "australia", "sydney", "melbourne", "india", "dubai", "singapore",
    "ireland", "dublin",
)
