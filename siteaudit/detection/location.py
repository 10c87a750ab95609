"""
Location and service-area context for an audited business.

Derives where a business operates from its page text, optionally refined by a
company registry record.
"""

from typing import Dict, List, Optional, Tuple

import structlog

from siteaudit.core.models import LocationContext, RegistryRecord
from siteaudit.detection.classifier import LOCAL_BUSINESS_PHRASES
from siteaudit.detection.signals import contains_term, term_pattern

logger = structlog.get_logger(__name__)

LOCAL_INDICATORS = LOCAL_BUSINESS_PHRASES + ("location", "visit us", "find us", "directions")

MAJOR_CITIES = (
    "london", "manchester", "birmingham", "glasgow", "liverpool", "bristol", "sheffield",
    "edinburgh", "leeds", "cardiff",
)

UK_REGIONS: Dict[str, Tuple[str, ...]] = {
    "scotland": ("scotland", "glasgow", "edinburgh", "aberdeen", "dundee", "inverness"),
    "wales": ("wales", "cardiff", "swansea", "newport"),
    "north_england": ("newcastle", "sunderland", "durham", "yorkshire", "leeds", "sheffield", "york"),
    "midlands": ("birmingham", "coventry", "leicester", "nottingham", "derby", "wolverhampton"),
    "south_east": ("london", "kent", "surrey", "sussex", "essex", "brighton", "reading", "oxford"),
    "south_west": ("bristol", "devon", "cornwall", "bath", "exeter", "plymouth"),
    "east_england": ("norfolk", "suffolk", "cambridge", "norwich", "ipswich"),
    "north_west": ("manchester", "liverpool", "lancashire", "preston", "chester"),
}

# Region names that make a keyword location-specific
REGION_NAMES = (
    "london", "birmingham", "manchester", "sussex", "kent", "surrey", "devon", "cornwall",
    "essex", "yorkshire", "uk", "england",
)

MAX_TARGET_CITIES = 5

SIC_CODE_TERMS: Dict[str, Tuple[str, ...]] = {
    "69101": ("barristers", "legal advice"),
    "69102": ("solicitors", "legal services"),
    "69109": ("legal services", "legal advice"),
    "69201": ("accountants", "accountancy services"),
    "69203": ("tax consultants", "tax advice"),
    "71111": ("architects", "architectural services"),
    "73110": ("advertising agency", "marketing services"),
    "73120": ("media buying", "advertising"),
    "62012": ("software development", "web development"),
    "56101": ("restaurant", "dining"),
    "55100": ("hotel", "accommodation"),
    "45200": ("car repairs", "vehicle servicing"),
    "41202": ("building contractors", "house builders"),
    "43220": ("plumbing", "heating engineers"),
    "86230": ("dentist", "dental practice"),
    "96020": ("hairdresser", "beauty salon"),
    "85590": ("training courses", "tuition"),
    "28930": ("food processing machinery", "food equipment"),
}


def mentioned_cities(text: str) -> List[str]:
    """Cities in order of first mention."""
    positions = []
    for city in MAJOR_CITIES:
        match = term_pattern(city).search(text)
        if match:
            positions.append((match.start(), city))
    return [city for _, city in sorted(positions)]


def region_for(place: Optional[str]) -> Optional[str]:
    if not place:
        return None
    place = place.lower()
    for region, places in UK_REGIONS.items():
        if any(contains_term(place, p) for p in places):
            return region
    return None


def build_location_context(text: str, registry: Optional[RegistryRecord] = None) -> LocationContext:
    """
    Build the location context from lowercased page text.

    A registry locality (or region) takes priority over cities found in the text.
    """
    text = (text or "").lower()
    cities = mentioned_cities(text)
    is_local = any(contains_term(text, phrase) for phrase in LOCAL_INDICATORS)

    primary = cities[0].title() if cities else None
    detected = primary
    if registry is not None and (registry.locality or registry.region):
        detected = (registry.locality or registry.region).title()

    return LocationContext(
        detected_location=detected,
        primary_location=primary,
        is_local_business=is_local,
        service_area=[c.title() for c in cities],
        target_cities=[c.title() for c in cities[:MAX_TARGET_CITIES]],
    )


async def lookup_registry(registry_provider, company_name: str) -> Optional[RegistryRecord]:
    """Ask the registry for the company; failures leave the context text-derived."""
    if registry_provider is None or not company_name:
        return None
    try:
        record = await registry_provider.lookup(company_name)
    except Exception as e:
        logger.warning("Registry lookup failed", company=company_name, error=str(e))
        return None
    if record is not None:
        logger.info(
            "Registry record found",
            company=record.company_name,
            locality=record.locality,
            sic_codes=record.sic_codes,
        )
    return record


def registry_terms(sic_codes: List[str]) -> List[str]:
    """Industry terms for the registered SIC codes."""
    terms: List[str] = []
    for code in sic_codes or []:
        for term in SIC_CODE_TERMS.get(str(code).strip(), ()):
            if term not in terms:
                terms.append(term)
    return terms
