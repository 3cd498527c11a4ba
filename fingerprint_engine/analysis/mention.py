"""Mention detection: fuzzy business-name matching.

Models rarely repeat a legal name verbatim ("Joe's Café & Restaurant, LLC"
comes back as "Joe's"), so detection checks a set of name variants:

  1. Exact name
  2. Punctuation stripped
  3. Corporate suffix stripped (LLC, Inc, ...)
  4. First significant word (skips articles, generic words, suffixes)
  5. Leading article stripped
  6. Key terms (generic words like "Dental", "Care" removed)

A variant shorter than ``min_variant_length`` is never used.
"""

from __future__ import annotations

import re

from fingerprint_engine.analysis.config import DEFAULT_ANALYZER_CONFIG, AnalyzerConfig

_PUNCTUATION_RE = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()|]")


def _collapse(text: str) -> str:
    return " ".join(text.split())


def strip_corporate_suffix(name: str, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> str:
    """'Acme Widgets, LLC.' → 'Acme Widgets'."""
    suffixes = "|".join(re.escape(s) for s in config.corporate_suffixes)
    return re.sub(rf",?\s+(?:{suffixes})\.?$", "", name.strip(), flags=re.IGNORECASE).strip()


def strip_leading_article(name: str, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> str:
    """'The Corner Cafe' → 'Corner Cafe'."""
    articles = "|".join(re.escape(a) for a in config.articles)
    return re.sub(rf"^(?:{articles})\s+", "", name.strip(), flags=re.IGNORECASE).strip()


def name_variants(business_name: str, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> list[str]:
    """Lowercased, de-duplicated name variants usable for substring matching."""
    name = _collapse(business_name)
    lower = name.lower()
    candidates = [
        lower,
        _collapse(_PUNCTUATION_RE.sub("", name)).lower(),
        strip_corporate_suffix(name, config).lower(),
    ]

    words = name.split()
    skip = set(config.articles) | set(config.generic_name_words) | set(config.corporate_suffixes)
    for word in words:
        token = word.strip(".,;:!?()").lower()
        if token and token not in skip:
            candidates.append(token)
            break

    without_article = strip_leading_article(name, config).lower()
    if without_article != lower:
        candidates.append(without_article)

    key_words = [w.lower() for w in words if w.strip(".,;:").lower() not in config.generic_name_words]
    if key_words and len(key_words) < len(words):
        candidates.append(" ".join(key_words))

    variants: list[str] = []
    for candidate in candidates:
        candidate = candidate.strip()
        if len(candidate) >= config.min_variant_length and candidate not in variants:
            variants.append(candidate)
    return variants


def detect_mention(
    text: str,
    business_name: str,
    config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG,
) -> bool:
    """True when any name variant appears (case-insensitively) in text."""
    if not text or not business_name:
        return False
    haystack = text.lower()
    return any(variant in haystack for variant in name_variants(business_name, config))
