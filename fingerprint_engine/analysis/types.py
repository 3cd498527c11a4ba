"""Core types and DTOs for analysis and aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class PromptType(str, Enum):
    """The fixed battery of prompts sent to every model."""

    FACTUAL = "factual"  # What do you know about X
    OPINION = "opinion"  # Is X reputable
    RECOMMENDATION = "recommendation"  # Rank the top N businesses → rank + competitors


class Sentiment(str, Enum):
    """Coarse sentiment bucket."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class MarketPosition(str, Enum):
    """Target business standing across recommendation prompts."""

    LEADING = "leading"
    COMPETITIVE = "competitive"
    EMERGING = "emerging"
    UNKNOWN = "unknown"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


# Score per sentiment bucket used by the metrics aggregator
SENTIMENT_SCORES: dict[Sentiment, float] = {
    Sentiment.POSITIVE: 1.0,
    Sentiment.NEUTRAL: 0.5,
    Sentiment.NEGATIVE: 0.0,
}

# rawResponse prefix for tasks whose gateway call failed
ERROR_MARKER = "Error:"


# ---------------------------------------------------------------------------
# Per-query result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QueryTask:
    """One (model × prompt type) unit of work."""

    model_id: str
    prompt_type: PromptType
    prompt_text: str
    temperature: float | None = None


@dataclass(frozen=True)
class AnalyzedResult:
    """Analysis of a single model response (or a degraded stand-in for a failed query)."""

    model: str
    prompt_type: PromptType
    mentioned: bool = False
    sentiment: Sentiment = Sentiment.NEUTRAL
    accuracy: float = 0.0  # 0.0–1.0
    rank_position: int | None = None  # Recommendation prompts only
    competitor_mentions: list[str] | None = None  # Recommendation prompts only
    competitor_positions: list[int] | None = None  # List number per competitor, same order
    raw_response: str = ""
    tokens_used: int = 0
    prompt: str = ""
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict for storage/API."""
        data = {
            "model": self.model,
            "promptType": self.prompt_type.value,
            "mentioned": self.mentioned,
            "sentiment": self.sentiment.value,
            "accuracy": self.accuracy,
            "rankPosition": self.rank_position,
            "rawResponse": self.raw_response,
            "tokensUsed": self.tokens_used,
        }
        if self.competitor_mentions is not None:
            data["competitorMentions"] = list(self.competitor_mentions)
        if self.competitor_positions is not None:
            data["competitorPositions"] = list(self.competitor_positions)
        if self.error is not None:
            data["error"] = self.error
        return data


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass
class VisibilityMetrics:
    """Output of the metrics aggregator."""

    visibility_score: int = 0  # 0–100
    mention_rate: float = 0.0  # 0–100
    sentiment_score: float = 0.0  # 0–1
    accuracy_score: float = 0.0  # 0–1
    avg_rank_position: float | None = None
    total_queries: int = 0
    failed_queries: int = 0


@dataclass
class TargetStanding:
    name: str
    rank: float | None = None
    mention_count: int = 0
    avg_position: float | None = None


@dataclass
class CompetitorStanding:
    name: str
    mention_count: int = 0
    avg_position: float = 0.0
    appears_with_target: int = 0


@dataclass
class CompetitiveLeaderboard:
    target_business: TargetStanding
    competitors: list[CompetitorStanding] = field(default_factory=list)
    total_recommendation_queries: int = 0

    def to_dict(self) -> dict:
        return {
            "targetBusiness": {
                "name": self.target_business.name,
                "rank": self.target_business.rank,
                "mentionCount": self.target_business.mention_count,
                "avgPosition": self.target_business.avg_position,
            },
            "competitors": [
                {
                    "name": c.name,
                    "mentionCount": c.mention_count,
                    "avgPosition": c.avg_position,
                    "appearsWithTarget": c.appears_with_target,
                }
                for c in self.competitors
            ],
            "totalRecommendationQueries": self.total_recommendation_queries,
        }


@dataclass
class ModelBreakdown:
    """Per-model query statistics."""

    model: str
    queries: int = 0
    mentions: int = 0
    failures: int = 0
    mention_rate: float = 0.0  # 0–100 over successful queries


@dataclass
class LeaderboardInsights:
    market_position: MarketPosition = MarketPosition.UNKNOWN
    target_mention_rate: float = 0.0  # 0–100 over recommendation queries
    top_competitor: str | None = None
    competitive_gap: int | None = None
    market_share: dict[str, float] = field(default_factory=dict)  # competitor → % of all mentions
    recommendation: str = ""
    model_breakdown: list[ModelBreakdown] = field(default_factory=list)
    trend: Trend = Trend.NEUTRAL

    def to_dict(self) -> dict:
        return {
            "marketPosition": self.market_position.value,
            "targetMentionRate": round(self.target_mention_rate, 2),
            "topCompetitor": self.top_competitor,
            "competitiveGap": self.competitive_gap,
            "marketShare": {k: round(v, 2) for k, v in self.market_share.items()},
            "recommendation": self.recommendation,
            "modelBreakdown": [
                {
                    "model": m.model,
                    "queries": m.queries,
                    "mentions": m.mentions,
                    "failures": m.failures,
                    "mentionRate": round(m.mention_rate, 2),
                }
                for m in self.model_breakdown
            ],
            "trend": self.trend.value,
        }


# ---------------------------------------------------------------------------
# Main output DTO: FingerprintAnalysis
# ---------------------------------------------------------------------------


@dataclass
class FingerprintAnalysis:
    """Complete fingerprint of one business across all models and prompt types.

    Handed to the caller for persistence.
    """

    business_id: int
    business_name: str
    visibility_score: int = 0
    mention_rate: float = 0.0
    sentiment_score: float = 0.0
    accuracy_score: float = 0.0
    avg_rank_position: float | None = None
    results: list[AnalyzedResult] = field(default_factory=list)
    leaderboard: CompetitiveLeaderboard | None = None
    insights: LeaderboardInsights = field(default_factory=LeaderboardInsights)
    total_queries: int = 0
    failed_queries: int = 0
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    processing_time_ms: int = 0

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict for storage/API."""
        return {
            "businessId": self.business_id,
            "businessName": self.business_name,
            "visibilityScore": self.visibility_score,
            "mentionRate": self.mention_rate,
            "sentimentScore": self.sentiment_score,
            "accuracyScore": self.accuracy_score,
            "avgRankPosition": self.avg_rank_position,
            "llmResults": [r.to_dict() for r in self.results],
            "competitiveLeaderboard": self.leaderboard.to_dict() if self.leaderboard else None,
            "insights": self.insights.to_dict(),
            "totalQueries": self.total_queries,
            "failedQueries": self.failed_queries,
            "generatedAt": self.generated_at.isoformat(),
            "processingTimeMs": self.processing_time_ms,
        }
