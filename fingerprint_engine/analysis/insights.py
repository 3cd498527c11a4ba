"""Competitive insights derived from a finished leaderboard and result set."""

from __future__ import annotations

from fingerprint_engine.analysis.types import (
    AnalyzedResult,
    CompetitiveLeaderboard,
    LeaderboardInsights,
    MarketPosition,
    ModelBreakdown,
    Trend,
)

LEADING_MENTION_RATE = 60.0
COMPETITIVE_MENTION_RATE = 30.0
TREND_THRESHOLD = 5  # visibility points


def determine_market_position(
    target_mentions: int,
    top_competitor_mentions: int | None,
    total_queries: int,
) -> MarketPosition:
    if total_queries == 0:
        return MarketPosition.UNKNOWN

    rate = target_mentions / total_queries * 100
    if target_mentions > 0 and (
        rate >= LEADING_MENTION_RATE
        or not top_competitor_mentions
        or target_mentions > top_competitor_mentions
    ):
        return MarketPosition.LEADING
    if rate >= COMPETITIVE_MENTION_RATE:
        return MarketPosition.COMPETITIVE
    if rate > 0:
        return MarketPosition.EMERGING
    return MarketPosition.UNKNOWN


def strategic_recommendation(
    position: MarketPosition,
    competitive_gap: int | None,
    top_competitor: str | None,
) -> str:
    if position == MarketPosition.LEADING:
        return (
            "Strong AI visibility. Models already recommend this business; keep the website "
            "content and public listings current to hold the position."
        )
    if position == MarketPosition.COMPETITIVE:
        if competitive_gap and top_competitor:
            return (
                f"Competitive with {top_competitor}, which is recommended {competitive_gap} more "
                "time(s). Publishing structured business data and earning reviews can close the gap."
            )
        return "Good visibility. Structured business data and fresh content can lift the ranking further."
    if position == MarketPosition.EMERGING:
        return (
            "Limited AI visibility. Publishing structured business data and building an online "
            "presence will improve how often models recommend this business."
        )
    return "Insufficient data. Run fingerprinting with recommendation prompts to analyze competitive position."


def calculate_trend(current: int, previous: int | None, threshold: int = TREND_THRESHOLD) -> Trend:
    if previous is None:
        return Trend.NEUTRAL
    diff = current - previous
    if diff > threshold:
        return Trend.UP
    if diff < -threshold:
        return Trend.DOWN
    return Trend.NEUTRAL


def model_breakdown(results: list[AnalyzedResult]) -> list[ModelBreakdown]:
    """Per-model stats in first-seen model order."""
    by_model: dict[str, ModelBreakdown] = {}
    for r in results:
        entry = by_model.setdefault(r.model, ModelBreakdown(model=r.model))
        entry.queries += 1
        if r.failed:
            entry.failures += 1
        elif r.mentioned:
            entry.mentions += 1

    for entry in by_model.values():
        answered = entry.queries - entry.failures
        entry.mention_rate = entry.mentions / answered * 100 if answered else 0.0
    return list(by_model.values())


def build_insights(
    leaderboard: CompetitiveLeaderboard,
    results: list[AnalyzedResult],
    visibility_score: int,
    previous_score: int | None = None,
) -> LeaderboardInsights:
    target = leaderboard.target_business
    total = leaderboard.total_recommendation_queries
    top = leaderboard.competitors[0] if leaderboard.competitors else None

    target_rate = target.mention_count / total * 100 if total else 0.0
    all_mentions = target.mention_count + sum(c.mention_count for c in leaderboard.competitors)
    market_share = {
        c.name: (c.mention_count / all_mentions * 100 if all_mentions else 0.0) for c in leaderboard.competitors
    }

    position = determine_market_position(target.mention_count, top.mention_count if top else None, total)
    gap = top.mention_count - target.mention_count if top and top.mention_count > target.mention_count else None

    return LeaderboardInsights(
        market_position=position,
        target_mention_rate=target_rate,
        top_competitor=top.name if top else None,
        competitive_gap=gap,
        market_share=market_share,
        recommendation=strategic_recommendation(position, gap, top.name if top else None),
        model_breakdown=model_breakdown(results),
        trend=calculate_trend(visibility_score, previous_score),
    )
