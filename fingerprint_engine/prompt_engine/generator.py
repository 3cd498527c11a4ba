"""Template-based prompt generation for business fingerprinting.

Every business gets the same three prompt types:
  - FACTUAL: what the model knows about the business
  - OPINION: whether the model would vouch for it
  - RECOMMENDATION: a ranked top-5 list of businesses in its market
    (the only prompt type that yields rank and competitor data)

Generation is deterministic: same profile in → same prompts out.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import urlparse

from fingerprint_engine.analysis.types import PromptType
from fingerprint_engine.core.exceptions import InputValidationError
from fingerprint_engine.schemas.business import BusinessProfile, CrawlData, Location

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Industry mappings
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class IndustryTerms:
    plural: str  # "dental practices"
    service: str  # "dental care"
    type: str  # "dental practice"


INDUSTRY_MAPPINGS: dict[str, IndustryTerms] = {
    # Healthcare & Medical
    "healthcare": IndustryTerms("healthcare providers", "medical care", "healthcare provider"),
    "dental": IndustryTerms("dental practices", "dental care", "dental practice"),
    "medical": IndustryTerms("medical practices", "medical services", "medical provider"),
    "veterinary": IndustryTerms("veterinary clinics", "pet care", "veterinary clinic"),
    # Professional services
    "legal": IndustryTerms("law firms", "legal services", "law firm"),
    "accounting": IndustryTerms("accounting firms", "financial services", "accounting firm"),
    "consulting": IndustryTerms("consulting firms", "business consulting", "consulting company"),
    "real estate": IndustryTerms("real estate agencies", "property services", "real estate agency"),
    # Food & hospitality
    "restaurant": IndustryTerms("restaurants", "dining", "restaurant"),
    "cafe": IndustryTerms("cafes", "coffee and food", "cafe"),
    "catering": IndustryTerms("catering companies", "event catering", "catering service"),
    "hotel": IndustryTerms("hotels", "accommodation", "hotel"),
    # Retail & commerce
    "retail": IndustryTerms("retail stores", "shopping", "retail business"),
    "automotive": IndustryTerms("auto services", "vehicle maintenance", "automotive service"),
    "beauty": IndustryTerms("beauty salons", "beauty services", "beauty salon"),
    "fitness": IndustryTerms("fitness centers", "fitness training", "fitness facility"),
    # Technology & services
    "technology": IndustryTerms("tech companies", "technology solutions", "technology company"),
    "marketing": IndustryTerms("marketing agencies", "marketing services", "marketing agency"),
    "construction": IndustryTerms("construction companies", "construction services", "construction company"),
    "cleaning": IndustryTerms("cleaning services", "cleaning", "cleaning service"),
}

DEFAULT_INDUSTRY = "default"
DEFAULT_TERMS = IndustryTerms("businesses", "professional services", "business")

# Keyword → industry, checked after direct table keys
_CATEGORY_FUZZY: list[tuple[tuple[str, ...], str]] = [
    (("food", "dining"), "restaurant"),
    (("health", "medical"), "healthcare"),
    (("law", "attorney"), "legal"),
    (("tech", "software"), "technology"),
    (("shop", "store"), "retail"),
]

_CRAWL_FUZZY: list[tuple[tuple[str, ...], str]] = [
    (("doctor", "clinic"), "healthcare"),
    (("lawyer", "attorney"), "legal"),
    (("restaurant", "food"), "restaurant"),
    (("software",), "technology"),
]

# Enrichment preview bounds
MAX_DESCRIPTION_CHARS = 200
MAX_SERVICES = 3
MAX_CERTIFICATIONS = 2
MAX_AWARDS = 2
MAX_CONTEXT_CHARS = 400

_UNKNOWN = "unknown"


@dataclass(frozen=True)
class GeneratedPrompts:
    factual: str
    opinion: str
    recommendation: str

    def items(self) -> list[tuple[PromptType, str]]:
        """(prompt type, text) pairs in battery order."""
        return [
            (PromptType.FACTUAL, self.factual),
            (PromptType.OPINION, self.opinion),
            (PromptType.RECOMMENDATION, self.recommendation),
        ]


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════


def pluralize(term: str) -> str:
    """Pluralize the last word of a category ("Coffee Shop" → "coffee shops")."""
    term = term.strip().lower()
    if not term:
        return DEFAULT_TERMS.plural

    head, _, last = term.rpartition(" ")
    if re.search(r"[^aeiou]y$", last):
        last = last[:-1] + "ies"
    elif re.search(r"(s|x|z|ch|sh)$", last):
        last = last + "es"
    else:
        last = last + "s"
    return f"{head} {last}" if head else last


def resolve_industry(profile: BusinessProfile) -> str:
    """Map a profile to an INDUSTRY_MAPPINGS key, or DEFAULT_INDUSTRY."""
    if profile.category:
        category = profile.category.lower()
        for industry in INDUSTRY_MAPPINGS:
            if industry in category:
                return industry
        for keywords, industry in _CATEGORY_FUZZY:
            if any(k in category for k in keywords):
                return industry

    crawl = profile.crawl_data
    if crawl:
        text = " ".join(filter(None, [crawl.industry, crawl.description, *crawl.services])).lower()
        for industry in INDUSTRY_MAPPINGS:
            if industry in text:
                return industry
        for keywords, industry in _CRAWL_FUZZY:
            if any(re.search(rf"\b{k}", text) for k in keywords):
                return industry

    if profile.url:
        url = profile.url.lower()
        for industry in INDUSTRY_MAPPINGS:
            if industry.replace(" ", "") in url:
                return industry

    return DEFAULT_INDUSTRY


def industry_terms(profile: BusinessProfile) -> IndustryTerms:
    """Lookup-table terms, or terms derived from the raw category."""
    industry = resolve_industry(profile)
    if industry in INDUSTRY_MAPPINGS:
        return INDUSTRY_MAPPINGS[industry]
    if profile.category and profile.category.strip():
        category = profile.category.strip().lower()
        return IndustryTerms(pluralize(category), DEFAULT_TERMS.service, category)
    return DEFAULT_TERMS


def _known(value: str | None) -> str:
    if not value or value.strip().lower() == _UNKNOWN:
        return ""
    return value.strip()


def format_location(location: Location | None) -> str:
    """Human-readable location, or "" when nothing usable is known.

    US is the implicit default market, so a bare "US" country is dropped.
    """
    if location is None:
        return ""
    city, state = _known(location.city), _known(location.state)
    if city and state:
        return f"{city}, {state}"
    if city or state:
        return city or state
    country = _known(location.country)
    if country and country.upper() not in ("US", "USA", "UNITED STATES"):
        return country
    return ""


def website_domain(url: str | None) -> str:
    if not url:
        return ""
    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = parsed.hostname or ""
    return host[4:] if host.startswith("www.") else host


def _truncate(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def build_enrichment_preview(crawl: CrawlData) -> str:
    """Bounded one-paragraph summary of crawled website data."""
    parts: list[str] = []
    if crawl.description and crawl.description.strip():
        description = _truncate(crawl.description, MAX_DESCRIPTION_CHARS)
        if description.endswith(".") and not description.endswith("..."):
            description = description[:-1]
        parts.append(description)
    services = [s.strip() for s in crawl.services if s and s.strip()][:MAX_SERVICES]
    if services:
        parts.append("Services include " + ", ".join(services))
    if crawl.founded:
        parts.append(f"Founded {crawl.founded.strip()}")
    certifications = [c.strip() for c in crawl.certifications if c and c.strip()][:MAX_CERTIFICATIONS]
    if certifications:
        parts.append("Certifications: " + ", ".join(certifications))
    awards = [a.strip() for a in crawl.awards if a and a.strip()][:MAX_AWARDS]
    if awards:
        parts.append("Awards: " + ", ".join(awards))

    if not parts:
        return ""
    return _truncate(". ".join(parts) + ".", MAX_CONTEXT_CHARS)


# ═══════════════════════════════════════════════════════════════════════════
# Main entry point
# ═══════════════════════════════════════════════════════════════════════════


def build_prompts(profile: BusinessProfile) -> GeneratedPrompts:
    """Build the factual / opinion / recommendation prompts for one business.

    Raises:
        InputValidationError: if the profile carries no crawled website data.
    """
    if profile.crawl_data is None:
        raise InputValidationError(
            f"Business {profile.id} has no crawl data; crawl the website before fingerprinting",
            field="crawl_data",
        )

    terms = industry_terms(profile)
    location = format_location(profile.location)
    if location:
        location_context = f" located in {location}"
    else:
        domain = website_domain(profile.url)
        location_context = f" ({domain})" if domain else ""

    preview = build_enrichment_preview(profile.crawl_data)
    context_block = f" For context, their website says: {preview}" if preview else ""

    factual = (
        f"What information do you have about {profile.name}{location_context}? "
        "Please provide factual details about their services, reputation, and any notable characteristics."
        f"{context_block}"
    )
    opinion = (
        f"I'm considering using the services of {profile.name}{location_context}. "
        f"Based on what you know, would you say they are a reputable and reliable {terms.type}? "
        f"Explain your reasoning.{context_block}"
    )
    if location:
        recommendation = (
            f"Can you recommend the top 5 {terms.plural} in {location}? "
            "Please rank them and explain why you're recommending each one."
        )
    else:
        recommendation = (
            f"Can you recommend the top 5 {terms.plural} similar to {profile.name}? "
            "Please rank them and explain why you're recommending each one."
        )

    prompts = GeneratedPrompts(factual=factual, opinion=opinion, recommendation=recommendation)
    logger.debug(
        "Generated prompts for business %s: industry=%s, location=%r, context_chars=%d",
        profile.id,
        terms.type,
        location,
        len(preview),
    )
    return prompts
