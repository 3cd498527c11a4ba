"""Leaderboard Builder: competitor frequency ranking from recommendation prompts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from fingerprint_engine.analysis.types import (
    AnalyzedResult,
    CompetitiveLeaderboard,
    CompetitorStanding,
    PromptType,
    TargetStanding,
)

logger = logging.getLogger(__name__)

MAX_COMPETITORS = 10


@dataclass
class _Tally:
    name: str
    count: int = 0
    positions: list[int] = field(default_factory=list)


def competitor_position(result: AnalyzedResult, index: int) -> int:
    """List number recorded for the competitor at index, else its 1-based order."""
    positions = result.competitor_positions or []
    return positions[index] if index < len(positions) else index + 1


def build_leaderboard(
    results: list[AnalyzedResult],
    business_name: str,
    avg_rank_position: float | None,
    max_competitors: int = MAX_COMPETITORS,
) -> CompetitiveLeaderboard:
    """Rank competitors by mention count (desc), then average position (asc).

    Returns an empty leaderboard when there are no recommendation results.
    """
    recommendations = [r for r in results if r.prompt_type == PromptType.RECOMMENDATION]

    tallies: dict[str, _Tally] = {}
    for result in recommendations:
        for idx, name in enumerate(result.competitor_mentions or []):
            key = name.lower()
            tally = tallies.setdefault(key, _Tally(name=name))
            tally.count += 1
            tally.positions.append(competitor_position(result, idx))

    competitors = [
        CompetitorStanding(
            name=t.name,
            mention_count=t.count,
            avg_position=sum(t.positions) / len(t.positions),
            appears_with_target=t.count,
        )
        for t in tallies.values()
    ]
    competitors.sort(key=lambda c: (-c.mention_count, c.avg_position))

    target_mentions = sum(1 for r in recommendations if r.mentioned)
    leaderboard = CompetitiveLeaderboard(
        target_business=TargetStanding(
            name=business_name,
            rank=avg_rank_position,
            mention_count=target_mentions,
            avg_position=avg_rank_position,
        ),
        competitors=competitors[:max_competitors],
        total_recommendation_queries=len(recommendations),
    )

    logger.info(
        "Competitive leaderboard built: target_mentions=%d, recommendation_queries=%d, competitors=%d",
        target_mentions,
        len(recommendations),
        len(competitors),
    )
    if recommendations and not competitors:
        logger.warning("No competitors extracted from %d recommendation responses", len(recommendations))
    if recommendations and target_mentions == 0:
        logger.warning("%s not mentioned in any recommendation response", business_name)

    return leaderboard
