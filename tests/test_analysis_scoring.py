"""Tests for the metrics aggregator, leaderboard builder and insights."""

import pytest

from fingerprint_engine.analysis.analyzer import analyze_response
from fingerprint_engine.analysis.insights import (
    build_insights,
    calculate_trend,
    determine_market_position,
    model_breakdown,
)
from fingerprint_engine.analysis.leaderboard import build_leaderboard
from fingerprint_engine.analysis.scoring import (
    ScoringWeights,
    clamp_score,
    compute_metrics,
    ranking_component,
)
from fingerprint_engine.analysis.types import (
    AnalyzedResult,
    MarketPosition,
    PromptType,
    Sentiment,
    Trend,
)


def _result(
    prompt_type=PromptType.FACTUAL,
    mentioned=False,
    sentiment=Sentiment.NEUTRAL,
    rank=None,
    competitors=None,
    positions=None,
    raw="",
    model="fake/alpha",
    error=None,
) -> AnalyzedResult:
    return AnalyzedResult(
        model=model,
        prompt_type=prompt_type,
        mentioned=mentioned,
        sentiment=sentiment,
        accuracy=0.7 if mentioned else 0.0,
        rank_position=rank,
        competitor_mentions=competitors,
        competitor_positions=positions,
        raw_response=raw,
        error=error,
    )


# ---------------------------------------------------------------------------
# Metrics aggregator
# ---------------------------------------------------------------------------


class TestRankingComponent:
    def test_first_place_full_weight(self):
        assert ranking_component(1.0) == pytest.approx(10.0)

    def test_fifth_place(self):
        assert ranking_component(5.0) == pytest.approx(2.0)

    def test_beyond_five_is_zero(self):
        assert ranking_component(8.0) == 0.0

    def test_no_rank_neutral_default(self):
        assert ranking_component(None) == 5.0
        assert ranking_component(None, ScoringWeights(no_rank_default=0.0)) == 0.0


class TestComputeMetrics:
    def test_all_mentioned_top_rank(self):
        results = [
            _result(PromptType.FACTUAL, mentioned=True, sentiment=Sentiment.POSITIVE),
            _result(PromptType.OPINION, mentioned=True, sentiment=Sentiment.POSITIVE),
            _result(PromptType.RECOMMENDATION, mentioned=True, sentiment=Sentiment.POSITIVE, rank=1),
        ]
        metrics = compute_metrics(results)
        assert metrics.mention_rate == 100.0
        assert metrics.sentiment_score == 1.0
        assert metrics.accuracy_score == pytest.approx(0.7)
        assert metrics.avg_rank_position == 1.0
        # 40 + 30 + 14 + 10
        assert metrics.visibility_score == 94

    def test_zero_mentions(self):
        results = [_result(pt) for pt in PromptType] * 3
        metrics = compute_metrics(results)
        assert metrics.mention_rate == 0.0
        assert metrics.sentiment_score == 0.0
        assert metrics.accuracy_score == 0.0
        assert metrics.avg_rank_position is None
        # Only the neutral ranking default remains
        assert metrics.visibility_score == 5

    def test_sentiment_only_over_mentioned(self):
        results = [
            _result(mentioned=True, sentiment=Sentiment.NEUTRAL),
            _result(mentioned=False, sentiment=Sentiment.NEGATIVE),
        ]
        metrics = compute_metrics(results)
        assert metrics.mention_rate == 50.0
        assert metrics.sentiment_score == 0.5

    def test_average_rank(self):
        results = [
            _result(PromptType.RECOMMENDATION, mentioned=True, rank=2),
            _result(PromptType.RECOMMENDATION, mentioned=True, rank=4),
            _result(PromptType.RECOMMENDATION, mentioned=False),
        ]
        assert compute_metrics(results).avg_rank_position == 3.0

    def test_empty_results(self):
        metrics = compute_metrics([])
        assert metrics.mention_rate == 0.0
        assert metrics.total_queries == 0
        assert 0 <= metrics.visibility_score <= 100

    def test_failed_queries_counted(self):
        results = [_result(error="fake/alpha: HTTP 503"), _result(mentioned=True)]
        metrics = compute_metrics(results)
        assert metrics.failed_queries == 1
        assert metrics.total_queries == 2

    def test_score_clamped_high(self):
        results = [_result(mentioned=True, sentiment=Sentiment.POSITIVE)]
        metrics = compute_metrics(results, ScoringWeights(mention_weight=2.0))
        assert metrics.visibility_score == 100

    def test_score_clamped_low(self):
        metrics = compute_metrics([_result()], ScoringWeights(no_rank_default=-50.0))
        assert metrics.visibility_score == 0

    def test_clamp_score(self):
        assert clamp_score(-3.2) == 0
        assert clamp_score(101.7) == 100
        assert clamp_score(49.6) == 50


# ---------------------------------------------------------------------------
# Leaderboard builder
# ---------------------------------------------------------------------------


class TestLeaderboard:
    def test_repeated_competitor_ranked_first(self):
        results = [
            _result(
                PromptType.RECOMMENDATION,
                competitors=["Competitor A"],
                raw="1. Competitor A\n2. Acme Cafe",
                mentioned=True,
                rank=2,
            ),
            _result(
                PromptType.RECOMMENDATION,
                competitors=["Competitor A", "Competitor B"],
                raw="1. Competitor A\n2. Competitor B",
            ),
        ]
        board = build_leaderboard(results, "Acme Cafe", 2.0)
        top = board.competitors[0]
        assert top.name == "Competitor A"
        assert top.mention_count == 2
        assert top.avg_position == 1.0
        assert top.appears_with_target == 2
        assert board.competitors[1].name == "Competitor B"
        assert board.total_recommendation_queries == 2
        assert board.target_business.mention_count == 1
        assert board.target_business.rank == 2.0
        assert board.target_business.avg_position == 2.0

    def test_tie_broken_by_position(self):
        results = [
            _result(PromptType.RECOMMENDATION, competitors=["Alpha Group", "Beta Group"], positions=[3, 1]),
            _result(PromptType.RECOMMENDATION, competitors=["Alpha Group", "Beta Group"], positions=[3, 1]),
            _result(PromptType.RECOMMENDATION, competitors=["Gamma Group"], positions=[1]),
        ]
        board = build_leaderboard(results, "Acme Cafe", None)
        assert [c.name for c in board.competitors] == ["Beta Group", "Alpha Group", "Gamma Group"]

    def test_overlapping_names_keep_their_own_list_number(self):
        text = "1. Joe's Pizza Kitchen - family run\n2. Pizza Kitchen - chain\n3. Acme Cafe - us"
        analysis = analyze_response(text, "Acme Cafe", PromptType.RECOMMENDATION)
        result = _result(
            PromptType.RECOMMENDATION,
            mentioned=True,
            rank=analysis.rank_position,
            competitors=analysis.competitor_mentions,
            positions=analysis.competitor_positions,
            raw=text,
        )
        board = build_leaderboard([result], "Acme Cafe", 3.0)
        assert {c.name: c.avg_position for c in board.competitors} == {
            "Joe's Pizza Kitchen": 1.0,
            "Pizza Kitchen": 2.0,
        }

    def test_position_falls_back_to_list_order(self):
        results = [_result(PromptType.RECOMMENDATION, competitors=["X Corp", "Y Group"], raw="")]
        board = build_leaderboard(results, "Acme Cafe", None)
        assert {c.name: c.avg_position for c in board.competitors} == {"X Corp": 1.0, "Y Group": 2.0}

    def test_names_merged_case_insensitively(self):
        results = [
            _result(PromptType.RECOMMENDATION, competitors=["Blue Door Kitchen"]),
            _result(PromptType.RECOMMENDATION, competitors=["blue door kitchen"]),
        ]
        board = build_leaderboard(results, "Acme Cafe", None)
        assert len(board.competitors) == 1
        assert board.competitors[0].name == "Blue Door Kitchen"
        assert board.competitors[0].mention_count == 2

    def test_capped_at_ten(self):
        names = [f"Competitor {chr(65 + i)}" for i in range(12)]
        results = [_result(PromptType.RECOMMENDATION, competitors=names)]
        assert len(build_leaderboard(results, "Acme Cafe", None).competitors) == 10

    def test_ignores_other_prompt_types(self):
        results = [_result(PromptType.FACTUAL, competitors=["Should Not Count"], mentioned=True)]
        board = build_leaderboard(results, "Acme Cafe", None)
        assert board.competitors == []
        assert board.total_recommendation_queries == 0
        assert board.target_business.mention_count == 0
        assert board.target_business.rank is None

    def test_zero_mentions(self):
        results = [_result(PromptType.RECOMMENDATION, competitors=[]) for _ in range(3)]
        board = build_leaderboard(results, "Acme Cafe", None)
        assert board.total_recommendation_queries == 3
        assert board.target_business.mention_count == 0
        assert board.competitors == []


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------


class TestMarketPosition:
    def test_unknown_without_queries(self):
        assert determine_market_position(0, None, 0) == MarketPosition.UNKNOWN

    def test_leading_when_out_mentioning(self):
        assert determine_market_position(2, 1, 5) == MarketPosition.LEADING

    def test_leading_by_rate(self):
        assert determine_market_position(3, 5, 5) == MarketPosition.LEADING

    def test_leading_without_competitors(self):
        assert determine_market_position(1, None, 5) == MarketPosition.LEADING

    def test_competitive(self):
        assert determine_market_position(1, 3, 3) == MarketPosition.COMPETITIVE

    def test_emerging(self):
        assert determine_market_position(1, 5, 5) == MarketPosition.EMERGING

    def test_never_mentioned(self):
        assert determine_market_position(0, 3, 3) == MarketPosition.UNKNOWN
        assert determine_market_position(0, None, 3) == MarketPosition.UNKNOWN


class TestTrend:
    def test_up(self):
        assert calculate_trend(60, 50) == Trend.UP

    def test_within_threshold(self):
        assert calculate_trend(55, 50) == Trend.NEUTRAL
        assert calculate_trend(45, 50) == Trend.NEUTRAL

    def test_down(self):
        assert calculate_trend(40, 50) == Trend.DOWN

    def test_no_previous(self):
        assert calculate_trend(40, None) == Trend.NEUTRAL


class TestInsights:
    def test_model_breakdown(self):
        results = [
            _result(model="fake/alpha", mentioned=True),
            _result(model="fake/alpha"),
            _result(model="fake/beta", error="fake/beta: timeout"),
        ]
        breakdown = {b.model: b for b in model_breakdown(results)}
        assert breakdown["fake/alpha"].queries == 2
        assert breakdown["fake/alpha"].mentions == 1
        assert breakdown["fake/alpha"].mention_rate == 50.0
        assert breakdown["fake/beta"].failures == 1
        assert breakdown["fake/beta"].mention_rate == 0.0

    def test_market_share_and_gap(self):
        results = [
            _result(PromptType.RECOMMENDATION, mentioned=True, rank=3, competitors=["Alpha Group", "Beta Group"]),
            _result(PromptType.RECOMMENDATION, competitors=["Alpha Group"]),
            _result(PromptType.RECOMMENDATION, competitors=[]),
            _result(PromptType.RECOMMENDATION, competitors=[]),
        ]
        board = build_leaderboard(results, "Acme Cafe", 3.0)
        insights = build_insights(board, results, visibility_score=40, previous_score=20)

        # target 1 + Alpha 2 + Beta 1
        assert insights.market_share == {"Alpha Group": 50.0, "Beta Group": 25.0}
        assert insights.top_competitor == "Alpha Group"
        assert insights.competitive_gap == 1
        assert insights.target_mention_rate == 25.0
        assert insights.market_position == MarketPosition.EMERGING
        assert insights.trend == Trend.UP
        assert insights.recommendation

    def test_empty_leaderboard(self):
        board = build_leaderboard([], "Acme Cafe", None)
        insights = build_insights(board, [], visibility_score=5)
        assert insights.market_position == MarketPosition.UNKNOWN
        assert insights.top_competitor is None
        assert insights.competitive_gap is None
        assert insights.market_share == {}
        assert "Insufficient data" in insights.recommendation
