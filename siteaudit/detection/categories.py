"""
Business categories and the reference tables each one carries.

Every category owns its generic keywords, UK-specific terminology, schema.org
types, URL path fragments and ordered subcategories. The tables are read-only
and shared by every extractor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

DEFAULT_CATEGORY_LABEL = "Business Services"
DEFAULT_SUBCATEGORY = "General"


@dataclass(frozen=True)
class Subcategory:
    """A refinement of a category, matched by word-boundary terms.

    When ``requires`` is set, at least one of those words must also appear.
    """

    name: str
    terms: Tuple[str, ...]
    requires: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CategoryProfile:
    label: str
    keywords: Tuple[str, ...]
    region_terms: Tuple[str, ...]
    schema_types: Tuple[str, ...]
    url_patterns: Tuple[str, ...]
    subcategories: Tuple[Subcategory, ...]
    default_subcategory: Optional[str] = None
    extra_domain_terms: Tuple[str, ...] = field(default=())

    @property
    def fallback_subcategory(self) -> str:
        return self.default_subcategory or self.subcategories[0].name

    @property
    def domain_terms(self) -> Tuple[str, ...]:
        # Very short keywords ("pr", "mot") match inside unrelated domain labels
        terms = [kw for kw in self.keywords if len(kw) >= 3 and " " not in kw]
        return tuple(terms) + self.extra_domain_terms


class Category(str, Enum):
    """Closed set of business categories, in tie-break order."""

    LEGAL = "Legal Services"
    ARCHITECTURE = "Architecture & Design"
    HEALTHCARE = "Healthcare & Medical"
    AUTOMOTIVE = "Automotive"
    FOOD_PROCESSING = "Food Processing & Equipment"
    HOSPITALITY = "Food & Hospitality"
    RETAIL = "Retail & E-commerce"
    MARKETING = "Marketing & Digital"
    CONSTRUCTION = "Construction & Trades"
    FINANCIAL = "Financial Services"
    EDUCATION = "Education & Training"
    BEAUTY = "Beauty & Wellness"

    @property
    def profile(self) -> CategoryProfile:
        return CATEGORY_PROFILES[self]

    @property
    def label(self) -> str:
        return self.value

    @property
    def slug(self) -> str:
        return _SLUGS[self]

    @classmethod
    def from_label(cls, label: str) -> Optional["Category"]:
        for category in cls:
            if category.value.lower() == (label or "").strip().lower():
                return category
        return None


_SLUGS = {
    Category.LEGAL: "legal-services",
    Category.ARCHITECTURE: "architecture-design",
    Category.HEALTHCARE: "healthcare-medical",
    Category.AUTOMOTIVE: "automotive",
    Category.FOOD_PROCESSING: "food-processing",
    Category.HOSPITALITY: "food-hospitality",
    Category.RETAIL: "retail-ecommerce",
    Category.MARKETING: "digital-marketing",
    Category.CONSTRUCTION: "construction-trades",
    Category.FINANCIAL: "financial-services",
    Category.EDUCATION: "education-training",
    Category.BEAUTY: "beauty-wellness",
}


CATEGORY_PROFILES: Dict[Category, CategoryProfile] = {
    Category.LEGAL: CategoryProfile(
        label=Category.LEGAL.value,
        keywords=(
            "solicitor", "barrister", "lawyer", "legal", "law", "attorney", "litigation",
            "conveyancing", "will", "probate", "divorce", "employment law",
            "criminal law", "family law",
        ),
        region_terms=("solicitor", "barrister", "chambers", "qc", "silk", "conveyancing", "probate"),
        schema_types=("LegalService", "Attorney", "Notary"),
        url_patterns=("/legal", "/solicitors", "/law", "/conveyancing"),
        subcategories=(
            Subcategory("Family Law", ("family law", "divorce", "child custody", "separation")),
            Subcategory("Commercial Law", ("commercial law", "business law", "contract law", "corporate law")),
            Subcategory("Criminal Law", ("criminal law", "criminal defence", "police station")),
            Subcategory("Conveyancing", ("conveyancing", "remortgage", "property purchase", "probate")),
            Subcategory("Personal Injury", ("personal injury", "accident claim", "no win no fee")),
        ),
        extra_domain_terms=("solicitors", "lawyers"),
    ),
    Category.ARCHITECTURE: CategoryProfile(
        label=Category.ARCHITECTURE.value,
        keywords=(
            "architect", "architecture", "architectural", "design", "designer", "planning",
            "building", "construction", "extension", "renovation", "sustainable",
            "heritage", "conservation",
        ),
        region_terms=("planning permission", "building regulations", "listed building", "conservation area", "riba"),
        schema_types=("Architect", "DesignAgency"),
        url_patterns=("/architecture", "/design", "/planning", "/portfolio"),
        subcategories=(
            Subcategory("Residential Architecture", ("residential", "house extension", "home", "loft")),
            Subcategory("Commercial Architecture", ("commercial", "office", "workplace")),
            Subcategory("Interior Design", ("interior",)),
            Subcategory("Landscape Architecture", ("landscape", "garden design")),
            Subcategory("Conservation Architecture", ("listed building", "conservation", "heritage")),
        ),
    ),
    Category.HEALTHCARE: CategoryProfile(
        label=Category.HEALTHCARE.value,
        keywords=(
            "doctor", "dentist", "medical", "health", "clinic", "surgery", "treatment",
            "therapy", "physiotherapy", "optician", "pharmacy", "hospital",
        ),
        region_terms=("nhs", "private healthcare", "gmc", "bma", "consultation"),
        schema_types=("MedicalOrganization", "MedicalClinic", "Dentist", "Physician", "Hospital", "Pharmacy"),
        url_patterns=("/treatments", "/appointments", "/health", "/patients"),
        subcategories=(
            Subcategory("General Practice", ("gp", "general practice", "family doctor")),
            Subcategory("Dental", ("dentist", "dental", "orthodontic")),
            Subcategory("Veterinary", ("vet", "veterinary", "pets")),
            Subcategory("Mental Health", ("mental health", "counselling", "psychotherapy")),
            Subcategory("Specialist Medicine", ("specialist", "consultant")),
        ),
    ),
    Category.AUTOMOTIVE: CategoryProfile(
        label=Category.AUTOMOTIVE.value,
        keywords=(
            "car", "vehicle", "automotive", "garage", "mot", "repair", "mechanic",
            "parts", "tyres", "brake", "engine",
        ),
        region_terms=("mot test", "dvla", "tax disc", "breakdown"),
        schema_types=("AutoRepair", "AutoDealer", "AutomotiveBusiness", "AutoPartsStore"),
        url_patterns=("/mot", "/repairs", "/parts", "/servicing", "/vehicles"),
        subcategories=(
            Subcategory("Car Repair", ("repair", "mechanic", "servicing")),
            Subcategory("Car Sales", ("used cars", "car sales", "dealership", "finance")),
            Subcategory("MOT Testing", ("mot",)),
            Subcategory("Parts & Accessories", ("parts", "accessories", "tyres")),
            Subcategory("Car Rental", ("rental", "hire")),
        ),
    ),
    Category.FOOD_PROCESSING: CategoryProfile(
        label=Category.FOOD_PROCESSING.value,
        keywords=(
            "chocolate machines", "chocolate equipment", "food processing", "food machinery",
            "tempering", "chocolate moulds", "nut butter machines", "processing equipment",
            "food manufacturing", "chocolate processing", "equipment supplier",
            "machinery supplier", "commercial equipment", "industrial equipment",
        ),
        region_terms=("equipment hire", "machinery finance", "try before you buy", "equipment leasing", "uk supplier"),
        schema_types=(),
        url_patterns=("/equipment", "/machinery", "/chocolate", "/processing", "/supplier"),
        subcategories=(
            Subcategory("Chocolate Equipment", ("chocolate",), requires=("machine", "equipment", "tempering", "mould")),
            Subcategory("Nut Processing Equipment", ("nut butter", "nut processing", "nut grinding")),
            Subcategory("Food Processing Equipment", ("food processing", "food machinery")),
        ),
        default_subcategory="Food Processing Equipment",
        extra_domain_terms=("machinery", "tempering"),
    ),
    Category.HOSPITALITY: CategoryProfile(
        label=Category.HOSPITALITY.value,
        keywords=(
            "restaurant", "cafe", "dining", "menu", "kitchen", "chef", "catering", "hotel",
            "accommodation", "pub", "bar", "bistro", "brasserie", "eatery", "food service",
            "hospitality",
        ),
        region_terms=("takeaway", "gastropub", "bed and breakfast", "guest house", "fine dining", "table booking"),
        schema_types=(
            "Restaurant", "FoodEstablishment", "CafeOrCoffeeShop", "BarOrPub", "Bakery",
            "Hotel", "LodgingBusiness", "BedAndBreakfast",
        ),
        url_patterns=("/menu", "/booking", "/rooms", "/dining", "/restaurant"),
        subcategories=(
            Subcategory("Restaurant", ("restaurant", "bistro", "brasserie", "fine dining")),
            Subcategory("Cafe", ("cafe", "coffee")),
            Subcategory("Catering", ("catering", "events")),
            Subcategory("Hotel", ("hotel", "rooms", "accommodation", "bed and breakfast")),
            Subcategory("Pub/Bar", ("pub", "bar", "gastropub")),
        ),
    ),
    Category.RETAIL: CategoryProfile(
        label=Category.RETAIL.value,
        keywords=(
            "shop", "store", "retail", "shopping", "buy", "sell", "products", "ecommerce",
            "online store", "catalogue",
        ),
        region_terms=("high street", "click and collect", "next day delivery", "free returns"),
        schema_types=("Store", "OnlineStore", "ClothingStore", "ElectronicsStore", "HomeGoodsStore"),
        url_patterns=("/shop", "/products", "/cart", "/checkout", "/basket"),
        subcategories=(
            Subcategory("Online Retail", ("online", "ecommerce", "delivery")),
            Subcategory("Physical Store", ("high street", "visit our store", "opening hours")),
            Subcategory("Fashion", ("clothing", "fashion", "shoes")),
            Subcategory("Electronics", ("electronics", "gadgets", "phones")),
            Subcategory("Home & Garden", ("furniture", "garden", "homeware")),
        ),
    ),
    Category.MARKETING: CategoryProfile(
        label=Category.MARKETING.value,
        keywords=(
            "marketing", "advertising", "digital", "seo", "ppc", "social media", "branding",
            "website", "web design", "agency", "communications", "creative", "strategy",
            "campaign", "brand", "content", "graphic design", "pr", "public relations",
        ),
        region_terms=(
            "digital marketing", "google ads", "facebook ads", "marketing agency",
            "communications agency", "full service",
        ),
        schema_types=("AdvertisingAgency", "MarketingAgency"),
        url_patterns=("/case-studies", "/digital", "/seo", "/ppc", "/branding"),
        subcategories=(
            Subcategory("Digital Marketing", ("digital marketing", "online marketing")),
            Subcategory("SEO Agency", ("seo", "search engine optimisation", "search engine optimization")),
            Subcategory("Web Design", ("web design", "website design", "web development")),
            Subcategory("Advertising", ("advertising", "ppc", "google ads")),
            Subcategory("Social Media", ("social media", "instagram", "tiktok")),
        ),
    ),
    Category.CONSTRUCTION: CategoryProfile(
        label=Category.CONSTRUCTION.value,
        keywords=(
            "builder", "construction", "building", "electrician", "plumber", "heating",
            "roofing", "decorator", "joiner", "carpenter",
        ),
        region_terms=("local authority", "building control", "part p", "gas safe", "corgi"),
        schema_types=("HomeAndConstructionBusiness", "GeneralContractor", "Electrician", "Plumber", "RoofingContractor"),
        url_patterns=("/projects", "/areas", "/building", "/roofing"),
        subcategories=(
            Subcategory("General Building", ("builder", "extension", "renovation")),
            Subcategory("Electrical", ("electrician", "electrical", "rewiring")),
            Subcategory("Plumbing & Heating", ("plumber", "plumbing", "boiler", "heating")),
            Subcategory("Roofing", ("roofing", "roofer", "roof")),
            Subcategory("Decorating", ("decorator", "painting", "decorating")),
        ),
    ),
    Category.FINANCIAL: CategoryProfile(
        label=Category.FINANCIAL.value,
        keywords=(
            "accountant", "accounting", "tax", "finance", "financial", "investment",
            "insurance", "mortgage", "loans", "pension",
        ),
        region_terms=("hmrc", "vat", "corporation tax", "self assessment", "isa"),
        schema_types=("FinancialService", "AccountingService", "InsuranceAgency", "BankOrCreditUnion"),
        url_patterns=("/tax", "/accounts", "/advice", "/mortgages", "/pensions"),
        subcategories=(
            Subcategory("Accountancy", ("accountant", "accountancy", "bookkeeping")),
            Subcategory("Financial Planning", ("financial planning", "financial adviser", "wealth")),
            Subcategory("Insurance", ("insurance",)),
            Subcategory("Mortgages", ("mortgage", "remortgage")),
            Subcategory("Tax Services", ("tax return", "self assessment", "vat")),
        ),
    ),
    Category.EDUCATION: CategoryProfile(
        label=Category.EDUCATION.value,
        keywords=(
            "school", "education", "training", "course", "learning", "tuition",
            "university", "college", "academy",
        ),
        region_terms=("ofsted", "gcse", "a-level", "btec", "nvq"),
        schema_types=("EducationalOrganization", "School", "CollegeOrUniversity", "Course"),
        url_patterns=("/courses", "/admissions", "/subjects", "/students"),
        subcategories=(
            Subcategory("Primary Education", ("primary", "nursery", "infant")),
            Subcategory("Secondary Education", ("secondary", "gcse", "sixth form")),
            Subcategory("Higher Education", ("university", "degree", "undergraduate")),
            Subcategory("Vocational Training", ("vocational", "apprenticeship", "nvq", "btec")),
            Subcategory("Private Tuition", ("tutor", "tuition", "tutoring")),
        ),
    ),
    Category.BEAUTY: CategoryProfile(
        label=Category.BEAUTY.value,
        keywords=(
            "beauty", "salon", "hair", "nails", "massage", "spa", "wellness", "cosmetic",
            "aesthetic", "skincare",
        ),
        region_terms=("beauty therapist", "hairdresser", "nail technician"),
        schema_types=("BeautySalon", "HairSalon", "NailSalon", "DaySpa", "HealthAndBeautyBusiness"),
        url_patterns=("/treatments", "/booking", "/prices", "/salon"),
        subcategories=(
            Subcategory("Hair Salon", ("hair", "hairdresser", "barber")),
            Subcategory("Beauty Therapy", ("beauty therapist", "facial", "waxing")),
            Subcategory("Nail Salon", ("nails", "manicure", "pedicure")),
            Subcategory("Spa", ("spa", "massage")),
            Subcategory("Aesthetic Clinic", ("aesthetic", "botox", "fillers")),
        ),
    ),
}


SCHEMA_TYPE_INDEX: Dict[str, Category] = {
    schema_type.lower(): category
    for category in Category
    for schema_type in category.profile.schema_types
}
