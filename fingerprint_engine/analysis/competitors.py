"""Competitor extraction from recommendation responses.

Each numbered-list line is reduced to a candidate business name:
  1. Strip markdown emphasis and links
  2. Strip ordinal labels ("#1", "Rank 1:", "First:", "1st place -")
  3. Cut the trailing description (" - ", ":", " (" ...)
  4. Normalize (leading article, corporate suffix)

and then discarded if it is the target business, a placeholder, an advice
fragment ("Checking online reviews"), a criteria heading ("Reputation"), or
fails the business-name heuristic.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from fingerprint_engine.analysis.config import DEFAULT_ANALYZER_CONFIG, AnalyzerConfig
from fingerprint_engine.analysis.mention import detect_mention, strip_corporate_suffix, strip_leading_article
from fingerprint_engine.analysis.ranking_parser import iter_list_items

logger = logging.getLogger(__name__)

_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]*\)")
_EMPHASIS_RE = re.compile(r"\*\*|__|[*`]|(?<!\w)_|_(?!\w)")

_ORDINAL_WORDS = "first|second|third|fourth|fifth|sixth|seventh|eighth|ninth|tenth"
_ORDINAL_RE = re.compile(
    r"^(?:"
    r"#\d+"
    r"|no\.\s*\d+"
    r"|rank(?:ed)?\s*#?\d+"
    r"|\d+(?:st|nd|rd|th)(?:\s+place|(?=\s*[:.\-–—)]))"
    r"|(?:" + _ORDINAL_WORDS + r")(?:\s+place)?(?=\s*[:.\-–—)])"
    r")\s*[:.\-–—)]?\s*",
    re.IGNORECASE,
)

_DESCRIPTION_DELIMITERS = (" - ", " – ", " — ", ":", " (", " | ")


@dataclass(frozen=True)
class CompetitorMention:
    name: str
    position: int  # list number the name appeared under


def clean_list_entry(body: str, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> str:
    """Reduce a numbered-list body to the bare business name it starts with."""
    text = _LINK_RE.sub(r"\1", body)
    text = _EMPHASIS_RE.sub("", text).strip()

    # Labels can stack: "#1 - Rank 1: Acme"
    for _ in range(2):
        text = _ORDINAL_RE.sub("", text, count=1).strip()

    cut = len(text)
    for delimiter in _DESCRIPTION_DELIMITERS:
        idx = text.find(delimiter)
        if idx != -1:
            cut = min(cut, idx)
    text = text[:cut]

    text = text.strip(" \t.,;!?\"'“”")
    text = strip_leading_article(text, config)
    text = strip_corporate_suffix(text, config)
    return " ".join(text.split())


def is_placeholder(name: str, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> bool:
    lower = name.lower()
    return any(placeholder in lower for placeholder in config.placeholder_names)


def is_action_phrase(name: str, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> bool:
    words = name.split()
    return bool(words) and words[0].lower().strip(".,;:") in config.action_words


def is_response_text(name: str, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> bool:
    lower = name.lower()
    return lower in config.generic_headings or any(lower.startswith(p) for p in config.response_prefixes)


def looks_like_business_name(name: str, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> bool:
    """≥3 chars, not purely numeric, and either carries a business keyword or is capitalized."""
    if len(name) < config.min_name_length:
        return False
    if re.fullmatch(r"[\d\s.,#%$-]+", name):
        return False

    lower = name.lower()
    tokens = set(re.findall(r"[\w.&'é]+", lower))
    if any(indicator in tokens for indicator in config.business_indicators):
        return True
    return len(name) >= config.capitalized_name_min_length and name[0].isupper()


def extract_competitor_mentions(
    text: str,
    business_name: str,
    config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG,
) -> list[CompetitorMention]:
    """Competitor names with their list numbers, in list order, de-duplicated."""
    found: list[CompetitorMention] = []
    seen: set[str] = set()

    for item in iter_list_items(text):
        name = clean_list_entry(item.body, config)
        if not name:
            continue

        if detect_mention(name, business_name, config):
            continue
        if is_placeholder(name, config):
            logger.debug("Filtered placeholder competitor name: %r", name)
            continue
        if is_action_phrase(name, config) or is_response_text(name, config):
            continue
        if not looks_like_business_name(name, config):
            continue

        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        found.append(CompetitorMention(name=name, position=item.number))

    if found:
        logger.debug("Extracted %d competitors: %s", len(found), [c.name for c in found[:5]])
    else:
        logger.debug("No competitors extracted from response (%d chars)", len(text))
    return found


def extract_competitors(
    text: str,
    business_name: str,
    config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG,
) -> list[str]:
    return [c.name for c in extract_competitor_mentions(text, business_name, config)]
