"""Response Analyzer: turns one model response into an AnalyzedResult.

All functions here are pure: the same (text, business name, prompt type)
always yields the same fields.
"""

from __future__ import annotations

from dataclasses import dataclass

from fingerprint_engine.analysis.competitors import extract_competitor_mentions
from fingerprint_engine.analysis.config import DEFAULT_ANALYZER_CONFIG, AnalyzerConfig
from fingerprint_engine.analysis.mention import detect_mention
from fingerprint_engine.analysis.ranking_parser import extract_rank_position
from fingerprint_engine.analysis.sentiment import classify_sentiment
from fingerprint_engine.analysis.types import (
    ERROR_MARKER,
    AnalyzedResult,
    PromptType,
    QueryTask,
    Sentiment,
)
from fingerprint_engine.gateway.types import ModelResponse


@dataclass(frozen=True)
class ResponseAnalysis:
    mentioned: bool
    sentiment: Sentiment
    accuracy: float
    rank_position: int | None
    competitor_mentions: list[str] | None
    competitor_positions: list[int] | None


def estimate_accuracy(mentioned: bool, config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG) -> float:
    """Placeholder accuracy: a fixed value when mentioned, else 0.

    Not a semantic check of the response against crawled facts.
    """
    return config.mentioned_accuracy if mentioned else 0.0


def analyze_response(
    text: str,
    business_name: str,
    prompt_type: PromptType,
    config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG,
) -> ResponseAnalysis:
    mentioned = detect_mention(text, business_name, config)
    is_recommendation = prompt_type == PromptType.RECOMMENDATION
    competitors = extract_competitor_mentions(text, business_name, config) if is_recommendation else None

    return ResponseAnalysis(
        mentioned=mentioned,
        sentiment=classify_sentiment(text, config),
        accuracy=estimate_accuracy(mentioned, config),
        rank_position=extract_rank_position(text, business_name, config) if is_recommendation else None,
        competitor_mentions=[c.name for c in competitors] if competitors is not None else None,
        competitor_positions=[c.position for c in competitors] if competitors is not None else None,
    )


def build_result(
    task: QueryTask,
    response: ModelResponse,
    business_name: str,
    config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG,
) -> AnalyzedResult:
    analysis = analyze_response(response.content, business_name, task.prompt_type, config)
    return AnalyzedResult(
        model=task.model_id,
        prompt_type=task.prompt_type,
        mentioned=analysis.mentioned,
        sentiment=analysis.sentiment,
        accuracy=analysis.accuracy,
        rank_position=analysis.rank_position,
        competitor_mentions=analysis.competitor_mentions,
        competitor_positions=analysis.competitor_positions,
        raw_response=response.content,
        tokens_used=response.tokens_used,
        prompt=task.prompt_text,
    )


def degraded_result(task: QueryTask, error: BaseException | str) -> AnalyzedResult:
    """Stand-in result for a task whose gateway call failed."""
    message = str(error) or type(error).__name__
    return AnalyzedResult(
        model=task.model_id,
        prompt_type=task.prompt_type,
        mentioned=False,
        sentiment=Sentiment.NEUTRAL,
        accuracy=0.0,
        rank_position=None,
        competitor_mentions=[] if task.prompt_type == PromptType.RECOMMENDATION else None,
        competitor_positions=[] if task.prompt_type == PromptType.RECOMMENDATION else None,
        raw_response=f"{ERROR_MARKER} {message}",
        tokens_used=0,
        prompt=task.prompt_text,
        error=message,
    )
