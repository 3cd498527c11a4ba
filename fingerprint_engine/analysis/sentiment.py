"""Keyword-margin sentiment classification."""

from __future__ import annotations

import re

from fingerprint_engine.analysis.config import DEFAULT_ANALYZER_CONFIG, AnalyzerConfig
from fingerprint_engine.analysis.types import Sentiment


def count_keywords(text: str, keywords: tuple[str, ...]) -> int:
    """Number of distinct keywords present, matched at a word start.

    "issues" counts for "issue"; "stop" does not count for "top".
    """
    lowered = text.lower()
    return sum(1 for kw in keywords if re.search(rf"\b{re.escape(kw)}", lowered))


def classify_sentiment(text: str, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> Sentiment:
    """Positive or negative only when one side wins by more than the margin."""
    positive = count_keywords(text, config.positive_keywords)
    negative = count_keywords(text, config.negative_keywords)

    if positive > negative + config.sentiment_margin:
        return Sentiment.POSITIVE
    if negative > positive + config.sentiment_margin:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL
