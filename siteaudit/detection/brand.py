"""
Brand name identification.

Collects brand name candidates from structured data, meta tags, visible page
furniture and the domain itself, each weighted by how trustworthy its source
is, then resolves the single most likely brand.
"""

import re
from typing import Iterable, List, Optional, Tuple

import structlog

from siteaudit.core.models import BrandCandidate
from siteaudit.detection import scoring
from siteaudit.detection.categories import SCHEMA_TYPE_INDEX
from siteaudit.detection.html_content import (
    PageContent,
    collapse_whitespace,
    domain_label,
    iter_json_ld_nodes,
    node_types,
    parse_page,
)

logger = structlog.get_logger(__name__)

GENERIC_BRAND_VALUES = {
    "home", "homepage", "welcome", "index", "main", "website", "site", "page",
    "loading", "error", "test", "untitled",
}

ACRONYM_DESCRIPTORS = {
    "communications", "marketing", "agency", "group", "services", "solutions", "company",
    "ltd", "limited", "corp", "corporation", "inc", "incorporated", "consulting",
    "consultancy", "digital", "creative", "design", "media", "development", "technology",
    "tech", "software", "systems", "network",
}

PROFESSION_DESCRIPTORS = {
    "estate", "property", "homes", "lettings", "sales", "residential", "commercial",
    "associates", "partners", "solicitors", "accountants", "consultants", "architects",
    "surveyors", "engineers", "builders", "contractors",
}

ORGANIZATION_TYPES = {"organization", "corporation", "localbusiness", "professionalservice"}

SOCIAL_PROFILE_RE = re.compile(
    r"(?:facebook\.com|twitter\.com|x\.com|instagram\.com|linkedin\.com/company)/([A-Za-z0-9_.\-]{2,60})",
    re.I,
)
SOCIAL_NON_HANDLES = {"sharer", "share", "intent", "home", "pages", "profile.php", "login", "hashtag"}

COPYRIGHT_RE = re.compile(
    r"(?i:©|\(c\)|copyright)\s*(?i:copyright\s*)?(?:\d{4}\s*(?:[-–]\s*\d{4})?\s*)?"
    r"([A-Z][\w&'.\-]*(?:\s+(?!All\b|Rights\b)[A-Z&][\w&'.\-]*){0,5})"
)
ABOUT_RE = re.compile(r"\babout\s+(?:us\s*[-:|]\s*)?([A-Z][\w&]*(?:\s+[A-Z][\w&]*){0,3})")
TITLE_SEPARATOR_RE = re.compile(r"\s+[|\-–—:·»]\s+")
_CLEAN_RE = re.compile(r"[^\w\s&.\-]")
_ACRONYM_RE = re.compile(r"^([A-Z]{2,5})\s+([A-Za-z]+)")
_PERSON_RE = re.compile(r"^([A-Z][a-z]{2,})\s+([A-Z][a-z]{2,})\s+([A-Za-z]+)")


def clean_brand_value(value: Optional[str]) -> Optional[str]:
    """Normalise a raw brand string, or return None when it cannot be a brand."""
    if not value or not isinstance(value, str):
        return None
    cleaned = collapse_whitespace(_CLEAN_RE.sub("", value)).strip(" .-&")
    if not (scoring.BRAND_MIN_LENGTH <= len(cleaned) <= scoring.BRAND_MAX_LENGTH):
        return None
    if cleaned.lower() in GENERIC_BRAND_VALUES:
        return None
    return cleaned


def domain_brand(domain: str) -> str:
    """Readable brand derived from the domain label: ``the-acme-shop`` -> ``Acme Shop``."""
    label = domain_label(domain)
    label = re.sub(r"^(?:www|the)[-.]?", "", label) or label
    words = [w for w in re.split(r"[-_.]+", label) if w]
    return " ".join(w.capitalize() for w in words)


def _is_title_case(value: str) -> bool:
    words = [w for w in value.split() if w[:1].isalpha()]
    return bool(words) and all(w[0].isupper() for w in words)


def _mentions(value: str, brand: str) -> bool:
    if not brand:
        return False
    squashed = brand.lower().replace(" ", "")
    return brand.lower() in value.lower() or squashed in value.lower().replace(" ", "")


def compound_candidates(candidate: BrandCandidate) -> List[BrandCandidate]:
    """
    Derive the core name from "ACRONYM descriptor" and "First Last profession" forms.

    "XYZ Marketing Agency" yields "XYZ"; "Henry Adams Estate Agents" yields
    "Henry Adams". Derived candidates rank slightly above the raw match.
    """
    derived = []
    boosted = min(candidate.confidence + scoring.BRAND_COMPOUND_BONUS, scoring.BRAND_MAX_CONFIDENCE)

    acronym = _ACRONYM_RE.match(candidate.value)
    if acronym and acronym.group(2).lower() in ACRONYM_DESCRIPTORS:
        derived.append(
            BrandCandidate(source=f"{candidate.source}_acronym", value=acronym.group(1), confidence=boosted)
        )

    person = _PERSON_RE.match(candidate.value)
    if person and person.group(3).lower() in PROFESSION_DESCRIPTORS:
        derived.append(
            BrandCandidate(
                source=f"{candidate.source}_name",
                value=f"{person.group(1)} {person.group(2)}",
                confidence=boosted,
            )
        )
    return derived


def _schema_values(content: PageContent) -> Iterable[Tuple[str, object]]:
    for block in content.json_ld:
        for node in iter_json_ld_nodes(block):
            types = {t.lower() for t in node_types(node)}
            name = node.get("name")
            if types & ORGANIZATION_TYPES or any(t in SCHEMA_TYPE_INDEX for t in types):
                yield "schema_organization", name
            elif not types:
                yield "schema_name", name

            yield "schema_legal_name", node.get("legalName")

            organization = node.get("organization")
            if isinstance(organization, dict):
                yield "schema_org_name", organization.get("name")

            brand = node.get("brand")
            yield "schema_brand", brand.get("name") if isinstance(brand, dict) else brand

            publisher = node.get("publisher")
            if isinstance(publisher, dict):
                yield "schema_publisher", publisher.get("name")

            alternate = node.get("alternateName")
            for alt in alternate if isinstance(alternate, list) else [alternate]:
                yield "schema_alternate_name", alt


def _meta_values(content: PageContent, site_brand: str) -> Iterable[Tuple[str, object]]:
    meta = content.meta
    yield "og_site_name", meta.get("og:site_name")
    yield "meta_application_name", meta.get("application-name")
    for key, source in (("twitter:site", "twitter_site"), ("twitter:creator", "twitter_creator")):
        handle = meta.get(key)
        if handle:
            yield source, handle.lstrip("@")
    yield "meta_publisher", meta.get("publisher")
    yield "meta_copyright", meta.get("copyright")
    yield "meta_author", meta.get("author")

    og_title = meta.get("og:title")
    if og_title:
        segment = _pick_segment(og_title, site_brand)
        yield ("og_title_branded" if _mentions(segment, site_brand) else "og_title"), segment


def _pick_segment(title: str, site_brand: str) -> str:
    segments = [s.strip() for s in TITLE_SEPARATOR_RE.split(title) if s.strip()]
    if not segments:
        return title
    for segment in segments:
        if _mentions(segment, site_brand):
            return segment
    return segments[-1] if len(segments) > 1 else segments[0]


def _page_values(content: PageContent, site_brand: str) -> Iterable[Tuple[str, object]]:
    for match in COPYRIGHT_RE.finditer(content.display_text):
        yield "copyright", match.group(1)

    soup = content.soup
    if soup is not None:
        for tag in soup.select('[itemtype*="Organization"] [itemprop="name"]'):
            yield "microdata_organization", tag.get("content") or tag.get_text(" ", strip=True)
        for tag in soup.select(".navbar-brand, .site-title, .brand, .logo"):
            yield "navbar_brand", tag.get_text(" ", strip=True)
        for img in soup.find_all("img", alt=True):
            marker = " ".join(
                [str(img.get("src", ""))] + list(img.get("class", [])) + [str(img.get("id", ""))]
            ).lower()
            if "logo" in marker:
                yield "logo_alt", re.sub(r"\blogo\b", "", img["alt"], flags=re.I)
        for anchor in soup.find_all("a", href=True):
            match = SOCIAL_PROFILE_RE.search(str(anchor["href"]))
            if match and match.group(1).lower() not in SOCIAL_NON_HANDLES:
                handle = re.sub(r"[-_.]+", " ", match.group(1)).strip()
                yield "social_profile", handle.title() if handle.islower() else handle

    for segment in [s for s in TITLE_SEPARATOR_RE.split(content.title) if s.strip()][:3]:
        source = "title_branded" if _mentions(segment, site_brand) else "title"
        yield source, segment

    if content.headings:
        heading = content.headings[0]
        yield ("h1_branded" if _mentions(heading, site_brand) else "h1"), heading

    about = ABOUT_RE.search(content.display_text)
    if about:
        yield "about_section", about.group(1)


def collect_brand_candidates(domain: str, content: PageContent) -> List[BrandCandidate]:
    """
    Gather weighted brand candidates from every source on the page.

    The domain-derived name is always included at the lowest weight, so the
    result is never empty.

    Args:
        domain: Audited domain
        content: Parsed page

    Returns:
        Candidates in discovery order (not yet deduplicated)
    """
    site_brand = domain_brand(domain or content.domain)
    candidates: List[BrandCandidate] = []
    copyright_hits = 0

    sources = list(_schema_values(content))
    sources.extend(_meta_values(content, site_brand))
    sources.extend(_page_values(content, site_brand))

    for source, raw in sources:
        if source == "copyright":
            copyright_hits += 1
            if copyright_hits > 3:
                continue
        value = clean_brand_value(raw if isinstance(raw, str) else None)
        if value is None:
            continue
        confidence = scoring.BRAND_SOURCE_WEIGHTS[source]
        if source.startswith("title") and _is_title_case(value):
            confidence += scoring.BRAND_TITLE_CASE_BONUS
        candidate = BrandCandidate(source=source, value=value, confidence=min(confidence, 1.0))
        candidates.append(candidate)
        candidates.extend(compound_candidates(candidate))

    fallback = clean_brand_value(site_brand) or (domain_label(domain) or domain or "unknown")
    candidates.append(
        BrandCandidate(source="domain", value=fallback, confidence=scoring.BRAND_SOURCE_WEIGHTS["domain"])
    )
    return candidates


def rank_brand_candidates(candidates: Iterable[BrandCandidate]) -> List[BrandCandidate]:
    """Keep the strongest candidate per case-insensitive value, strongest first."""
    best = {}
    first_seen = {}
    for index, candidate in enumerate(candidates):
        key = candidate.value.lower()
        first_seen.setdefault(key, index)
        if key not in best or candidate.confidence > best[key].confidence:
            best[key] = candidate
    return sorted(best.values(), key=lambda c: (-c.confidence, first_seen[c.value.lower()]))


def resolve_brand(candidates: Iterable[BrandCandidate]) -> Optional[str]:
    ranked = rank_brand_candidates(candidates)
    return ranked[0].value if ranked else None


def identify_brand(content: PageContent, domain: str = "") -> Tuple[str, List[BrandCandidate]]:
    """Resolve the brand for a parsed page, returning it with the ranked evidence."""
    domain = domain or content.domain
    ranked = rank_brand_candidates(collect_brand_candidates(domain, content))
    brand = ranked[0].value
    logger.info(
        "Brand identified",
        domain=domain,
        brand=brand,
        source=ranked[0].source,
        confidence=ranked[0].confidence,
        candidates=len(ranked),
    )
    return brand, ranked


def extract_brand(domain: str, html: str) -> str:
    """Resolve the brand name for a page. Deterministic and never empty."""
    brand, _ = identify_brand(parse_page(html, domain), domain)
    return brand
