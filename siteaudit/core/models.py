"""
Data models and type definitions for siteaudit.

Provides type-safe data structures with validation for classification,
brand detection and keyword analysis results.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from siteaudit.core.exceptions import AnalysisError
from siteaudit.detection.categories import (
    DEFAULT_CATEGORY_LABEL,
    DEFAULT_SUBCATEGORY,
    Category,
)


class ConfidenceLevel(str, Enum):
    """Confidence band of a business classification."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CompanySize(str, Enum):
    """Company size tier inferred from page wording."""

    MICRO = "micro"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ENTERPRISE = "enterprise"


class BusinessSize(str, Enum):
    """Search-footprint size used to pick a volume band."""

    NEW = "new"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class ExtractorName(str, Enum):
    """Signal extractors that can vote for a category."""

    CONTENT = "content_analysis"
    URL = "url_analysis"
    MARKUP = "schema_markup"
    DOMAIN = "domain_analysis"
    REGION = "region_terms"
    NAVIGATION = "navigation"

    @property
    def label(self) -> str:
        return _EXTRACTOR_LABELS[self]


_EXTRACTOR_LABELS = {
    ExtractorName.CONTENT: "Content Analysis",
    ExtractorName.URL: "URL Structure",
    ExtractorName.MARKUP: "Schema Markup",
    ExtractorName.DOMAIN: "Domain Analysis",
    ExtractorName.REGION: "UK Business Terms",
    ExtractorName.NAVIGATION: "Navigation Analysis",
}


class KeywordIntent(str, Enum):
    """Search intent of a keyword."""

    COMMERCIAL = "commercial"
    INFORMATIONAL = "informational"
    NAVIGATIONAL = "navigational"
    TRANSACTIONAL = "transactional"


class KeywordSource(str, Enum):
    """Where a keyword candidate came from."""

    EXTRACTED = "extracted"
    SEMANTIC = "semantic"
    COMPETITOR = "competitor"
    SUGGESTION = "suggestion"


class Difficulty(str, Enum):
    """Ranking difficulty derived from provider competition data."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Business detection


class EvidenceCandidate(BaseModel):
    """One extractor's category guess."""

    category: Category
    confidence: float = Field(..., ge=0.0, le=1.0)
    method: ExtractorName

    model_config = ConfigDict(frozen=True)


class BusinessType(BaseModel):
    """A resolved business category with its supporting evidence."""

    category: str
    subcategory: str
    confidence: ConfidenceLevel = ConfidenceLevel.LOW
    score: float = Field(default=0.0, ge=0.0)
    detection_methods: List[str] = Field(default_factory=list)
    relevant_keywords: List[str] = Field(default_factory=list)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    @classmethod
    def default(cls) -> "BusinessType":
        """Low-confidence type used when no signal fires."""
        return cls(
            category=DEFAULT_CATEGORY_LABEL,
            subcategory=DEFAULT_SUBCATEGORY,
            confidence=ConfidenceLevel.LOW,
            score=0.0,
        )


class BusinessDetectionResult(BaseModel):
    """Classification of the business behind one audited domain."""

    primary_type: BusinessType
    secondary_types: List[BusinessType] = Field(default_factory=list, max_length=2)
    uk_specific: bool = False
    local_business: bool = False
    company_size: CompanySize = CompanySize.MICRO
    detection_sources: List[str] = Field(default_factory=list)

    model_config = ConfigDict(use_enum_values=True, frozen=True)


class LocationContext(BaseModel):
    """Where the business operates."""

    detected_location: Optional[str] = None
    primary_location: Optional[str] = None
    is_local_business: bool = False
    service_area: List[str] = Field(default_factory=list)
    target_cities: List[str] = Field(default_factory=list, max_length=5)

    @property
    def best_location(self) -> Optional[str]:
        return self.detected_location or self.primary_location


class BrandCandidate(BaseModel):
    """A possible brand name and how much we trust where it was found."""

    source: str
    value: str
    confidence: float = Field(..., ge=0.0, le=1.0)

    model_config = ConfigDict(frozen=True)


# Keywords


class KeywordCandidate(BaseModel):
    """A search keyword proposed for the audited business."""

    keyword: str = Field(..., min_length=1)
    relevance_score: float = Field(..., ge=0.0, le=1.0)
    intent: KeywordIntent = KeywordIntent.COMMERCIAL
    longtail: bool = False
    source: KeywordSource = KeywordSource.EXTRACTED
    search_volume: Optional[int] = Field(default=None, ge=0)
    difficulty: Optional[Difficulty] = None
    position: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(use_enum_values=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def derive_longtail(cls, data):
        if isinstance(data, dict) and "longtail" not in data and data.get("keyword"):
            data = dict(data)
            data["longtail"] = len(str(data["keyword"]).split()) >= 3
        return data

    @field_validator("keyword")
    @classmethod
    def normalize_keyword(cls, v):
        return " ".join(v.lower().split())

    @field_validator("relevance_score", mode="before")
    @classmethod
    def clamp_relevance(cls, v):
        return round(min(max(float(v), 0.0), 1.0), 4)


class GeneratedKeywordSet(BaseModel):
    """Keyword candidates produced by the generator, grouped by use."""

    primary: List[KeywordCandidate] = Field(default_factory=list)
    secondary: List[KeywordCandidate] = Field(default_factory=list)
    long_tail: List[KeywordCandidate] = Field(default_factory=list)
    local: List[KeywordCandidate] = Field(default_factory=list)
    commercial: List[KeywordCandidate] = Field(default_factory=list)
    informational: List[KeywordCandidate] = Field(default_factory=list)
    urgency: List[KeywordCandidate] = Field(default_factory=list)
    branded: List[KeywordCandidate] = Field(default_factory=list)
    total_generated: int = 0
    industry_specific: bool = False
    generation_method: str = "pattern+semantic+location+question"

    def all_candidates(self) -> List[KeywordCandidate]:
        """Every candidate once, primary and secondary first."""
        seen = set()
        ordered = []
        for group in (
            self.primary,
            self.secondary,
            self.urgency,
            self.branded,
        ):
            for candidate in group:
                if candidate.keyword not in seen:
                    seen.add(candidate.keyword)
                    ordered.append(candidate)
        return ordered


class EnhancedKeywordAnalysis(BaseModel):
    """Final keyword analysis for one audited domain."""

    domain: str
    brand_name: str
    branded_keywords: List[KeywordCandidate] = Field(default_factory=list)
    non_branded_keywords: List[KeywordCandidate] = Field(default_factory=list)
    top_keywords: List[KeywordCandidate] = Field(default_factory=list)

    total_keywords: int = 0
    branded_count: int = 0
    non_branded_count: int = 0
    keywords_by_intent: Dict[str, int] = Field(default_factory=dict)
    keywords_by_difficulty: Dict[str, int] = Field(default_factory=dict)
    business_relevance_score: float = 0.0

    business_type: BusinessType = Field(default_factory=BusinessType.default)
    business_size: BusinessSize = BusinessSize.SMALL
    location: LocationContext = Field(default_factory=LocationContext)
    api_available: bool = False
    analysis_method: str = "enhanced_discovery"

    model_config = ConfigDict(use_enum_values=True)


class AnalysisOutcome(BaseModel):
    """Result of an analysis run: always an analysis, plus the error if one occurred."""

    analysis: EnhancedKeywordAnalysis
    error: Optional[AnalysisError] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def ok(self) -> bool:
        return self.error is None


# Provider payloads


class VolumeData(BaseModel):
    """Search volume row returned by a volume provider."""

    keyword: str
    volume: Optional[int] = None
    cpc: float = 0.0
    competition: Optional[float] = None


class RegistryRecord(BaseModel):
    """Company registry entry used to enrich location context."""

    company_name: str
    company_number: Optional[str] = None
    locality: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    sic_codes: List[str] = Field(default_factory=list)
