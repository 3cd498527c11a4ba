"""Metrics Aggregator: composite visibility score.

Formula:
    visibility = mention_rate * 0.4          (mention_rate in 0–100)
               + avg_sentiment * 30          (0–1, over mentioned results)
               + avg_accuracy * 20           (0–1, over mentioned results)
               + ranking_component           (0–10)

    ranking_component = max(0, (6 - avg_rank) / 5 * 10)   when any rank exists
                      = no_rank_default (5)                otherwise

Result is rounded and clamped to [0, 100]. A deliberately simple weighted
sum, not a fitted model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fingerprint_engine.analysis.types import SENTIMENT_SCORES, AnalyzedResult, VisibilityMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringWeights:
    mention_weight: float = 0.4
    sentiment_weight: float = 30.0
    accuracy_weight: float = 20.0
    ranking_weight: float = 10.0
    rank_ceiling: float = 6.0  # rank 1 → full ranking weight, rank >= 6 → 0
    rank_span: float = 5.0
    no_rank_default: float = 5.0


DEFAULT_WEIGHTS = ScoringWeights()


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def ranking_component(avg_rank: float | None, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    if avg_rank is None:
        return weights.no_rank_default
    return max(0.0, (weights.rank_ceiling - avg_rank) / weights.rank_span * weights.ranking_weight)


def clamp_score(value: float) -> int:
    return int(max(0, min(100, round(value))))


def compute_metrics(
    results: list[AnalyzedResult],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> VisibilityMetrics:
    """Aggregate analyzed results into visibility metrics.

    Degraded (failed) results count as unmentioned queries.
    """
    total = len(results)
    mentioned = [r for r in results if r.mentioned]

    mention_rate = len(mentioned) / total * 100 if total else 0.0
    avg_sentiment = _mean([SENTIMENT_SCORES[r.sentiment] for r in mentioned])
    avg_accuracy = _mean([r.accuracy for r in mentioned])

    ranks = [r.rank_position for r in results if r.rank_position is not None]
    avg_rank = sum(ranks) / len(ranks) if ranks else None

    raw = (
        mention_rate * weights.mention_weight
        + avg_sentiment * weights.sentiment_weight
        + avg_accuracy * weights.accuracy_weight
        + ranking_component(avg_rank, weights)
    )

    metrics = VisibilityMetrics(
        visibility_score=clamp_score(raw),
        mention_rate=mention_rate,
        sentiment_score=avg_sentiment,
        accuracy_score=avg_accuracy,
        avg_rank_position=avg_rank,
        total_queries=total,
        failed_queries=sum(1 for r in results if r.failed),
    )
    logger.debug(
        "Metrics: score=%d mention_rate=%.1f sentiment=%.2f accuracy=%.2f avg_rank=%s",
        metrics.visibility_score,
        mention_rate,
        avg_sentiment,
        avg_accuracy,
        avg_rank,
    )
    return metrics
