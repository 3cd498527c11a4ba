"""Keyword and pattern tables for the response analyzer.

All heuristics read their tables from an AnalyzerConfig so tests (and
callers with other markets) can inject their own vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalyzerConfig:
    # --- Sentiment ---
    positive_keywords: tuple[str, ...] = (
        "excellent",
        "great",
        "best",
        "recommend",
        "trusted",
        "reliable",
        "professional",
        "quality",
        "reputable",
        "outstanding",
        "top",
        "highly rated",
        "popular",
    )
    negative_keywords: tuple[str, ...] = (
        "poor",
        "bad",
        "worst",
        "avoid",
        "unreliable",
        "unprofessional",
        "complaint",
        "issue",
        "problem",
        "disappointed",
        "negative",
        "warning",
    )
    sentiment_margin: int = 1  # winner needs > other + margin

    # --- Mention detection ---
    articles: tuple[str, ...] = ("the", "a", "an")
    corporate_suffixes: tuple[str, ...] = ("llc", "inc", "corp", "ltd", "co", "limited", "company")
    generic_name_words: tuple[str, ...] = (
        "dental",
        "care",
        "services",
        "group",
        "associates",
        "clinic",
        "center",
    )
    min_variant_length: int = 3

    # --- Competitor extraction ---
    placeholder_names: tuple[str, ...] = (
        "local business example",
        "sample business",
        "example business",
        "quality services",
        "premier services",
        "top choice",
        "recommended business",
        "local establishment",
        "area business",
        "nearby business",
    )
    # First word of advice lines ("Checking online reviews") rather than names
    action_words: tuple[str, ...] = (
        "check",
        "checking",
        "compare",
        "comparing",
        "read",
        "reading",
        "visit",
        "visiting",
        "ask",
        "asking",
        "look",
        "looking",
        "contact",
        "contacting",
        "research",
        "researching",
        "consider",
        "considering",
        "search",
        "searching",
        "call",
        "calling",
        "verify",
        "verifying",
        "review",
        "reviewing",
        "get",
        "getting",
        "request",
        "requesting",
        "schedule",
        "scheduling",
    )
    # Prose that happens to sit on a numbered line
    response_prefixes: tuple[str, ...] = (
        "here are",
        "here is",
        "i recommend",
        "i would recommend",
        "i'd recommend",
        "based on",
        "please note",
        "note that",
        "keep in mind",
        "unfortunately",
        "however",
        "while i",
        "i don't",
        "i do not",
        "i can't",
        "i cannot",
        "as an ai",
    )
    # Criteria headings some models number instead of businesses
    generic_headings: tuple[str, ...] = (
        "reputation",
        "location",
        "pricing",
        "price",
        "quality",
        "experience",
        "reviews",
        "customer reviews",
        "customer service",
        "availability",
        "atmosphere",
        "convenience",
        "specialties",
        "credentials",
        "insurance",
        "recommendations",
        "conclusion",
        "summary",
    )
    business_indicators: tuple[str, ...] = (
        "llc",
        "inc",
        "corp",
        "ltd",
        "company",
        "co.",
        "group",
        "associates",
        "partners",
        "services",
        "solutions",
        "agency",
        "firm",
        "law",
        "legal",
        "dental",
        "dentistry",
        "clinic",
        "center",
        "centre",
        "medical",
        "health",
        "restaurant",
        "cafe",
        "café",
        "bistro",
        "grill",
        "kitchen",
        "bar",
        "bakery",
        "pizza",
        "diner",
        "hotel",
        "inn",
        "studio",
        "salon",
        "spa",
        "gym",
        "fitness",
        "shop",
        "store",
        "market",
        "auto",
        "motors",
        "repair",
        "realty",
        "properties",
    )
    min_name_length: int = 3
    capitalized_name_min_length: int = 6  # capitalized names pass the heuristic from this length

    # --- Accuracy placeholder ---
    # Coarse stand-in until responses are checked against crawled facts
    mentioned_accuracy: float = 0.7


DEFAULT_ANALYZER_CONFIG = AnalyzerConfig()
