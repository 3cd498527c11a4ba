"""Fingerprinter: entry point for one AI-visibility run.

    analysis = await fingerprint(business, {"parallel": True, "batchSize": 9})

Flow: validate input → build prompts → orchestrate model × prompt tasks →
aggregate metrics → leaderboard → insights → FingerprintAnalysis.

Only InputValidationError escapes; provider failures are folded into the
results (see ``FingerprintAnalysis.failed_queries``).
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from fingerprint_engine.analysis.config import DEFAULT_ANALYZER_CONFIG, AnalyzerConfig
from fingerprint_engine.analysis.insights import build_insights
from fingerprint_engine.analysis.leaderboard import build_leaderboard
from fingerprint_engine.analysis.scoring import DEFAULT_WEIGHTS, ScoringWeights, compute_metrics
from fingerprint_engine.analysis.types import FingerprintAnalysis, PromptType
from fingerprint_engine.core.config import Settings, settings as default_settings
from fingerprint_engine.core.exceptions import InputValidationError
from fingerprint_engine.core.metrics import FINGERPRINT_RUNS, VISIBILITY_SCORE
from fingerprint_engine.gateway.factory import get_gateway
from fingerprint_engine.gateway.types import ModelGateway
from fingerprint_engine.prompt_engine.generator import build_prompts
from fingerprint_engine.schemas.business import BusinessProfile, FingerprintOptions
from fingerprint_engine.services.orchestrator import QueryOrchestrator, build_tasks

logger = logging.getLogger(__name__)


@dataclass
class FingerprintConfig:
    """Run configuration: which models, how to schedule, how to score."""

    models: list[str] = field(
        default_factory=lambda: ["openai/gpt-4-turbo", "anthropic/claude-3-opus", "google/gemini-2.5-flash"]
    )
    parallel: bool = True
    batch_size: int = 15
    temperatures: dict[PromptType, float] = field(
        default_factory=lambda: {
            PromptType.FACTUAL: 0.3,
            PromptType.OPINION: 0.5,
            PromptType.RECOMMENDATION: 0.7,
        }
    )
    weights: ScoringWeights = DEFAULT_WEIGHTS
    analyzer: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG

    @classmethod
    def from_settings(cls, settings: Settings) -> FingerprintConfig:
        return cls(
            models=settings.model_list,
            parallel=settings.fingerprint_parallel,
            batch_size=settings.fingerprint_batch_size,
            temperatures={
                PromptType.FACTUAL: settings.temperature_factual,
                PromptType.OPINION: settings.temperature_opinion,
                PromptType.RECOMMENDATION: settings.temperature_recommendation,
            },
        )


def _validation_message(exc: ValidationError) -> tuple[str, str]:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first.get('msg', 'invalid value')}", loc


def parse_business(business: BusinessProfile | Mapping[str, Any]) -> BusinessProfile:
    if isinstance(business, BusinessProfile):
        return business
    try:
        return BusinessProfile.model_validate(business)
    except ValidationError as e:
        message, loc = _validation_message(e)
        raise InputValidationError(f"Invalid business profile: {message}", field=loc) from e


def parse_options(
    options: FingerprintOptions | Mapping[str, Any] | None,
    config: FingerprintConfig,
) -> FingerprintOptions:
    if isinstance(options, FingerprintOptions):
        return options
    merged: dict[str, Any] = {"parallel": config.parallel, "batchSize": config.batch_size}
    if options:
        for key, value in options.items():
            if value is None:
                continue
            merged["batchSize" if key == "batch_size" else key] = value
    try:
        return FingerprintOptions.model_validate(merged)
    except ValidationError as e:
        message, loc = _validation_message(e)
        raise InputValidationError(f"Invalid fingerprint options: {message}", field=loc) from e


async def fingerprint(
    business: BusinessProfile | Mapping[str, Any],
    options: FingerprintOptions | Mapping[str, Any] | None = None,
    *,
    gateway: ModelGateway | None = None,
    config: FingerprintConfig | None = None,
    previous: FingerprintAnalysis | None = None,
) -> FingerprintAnalysis:
    """Fingerprint one business across all configured models.

    Args:
        business: crawled business profile (model instance or mapping).
        options: ``{"parallel": bool, "batchSize": int}``; missing keys fall back to config.
        gateway: model gateway; defaults to the one selected from settings.
        config: models, temperatures and scoring weights; defaults to settings.
        previous: the business' last analysis, used for the score trend.

    Raises:
        InputValidationError: malformed profile/options or missing crawl data.
            Raised before any model is queried.
    """
    config = config or FingerprintConfig.from_settings(default_settings)
    profile = parse_business(business)
    run_options = parse_options(options, config)
    prompts = build_prompts(profile)

    if not config.models:
        raise InputValidationError("No models configured for fingerprinting", field="models")

    gateway = gateway or get_gateway()
    start = time.monotonic()

    tasks = build_tasks(config.models, prompts, config.temperatures)
    logger.info(
        "Fingerprinting business %s (%s): %d queries, %d models, mode=%s, batch_size=%d",
        profile.id,
        profile.name,
        len(tasks),
        len(config.models),
        "parallel" if run_options.parallel else "sequential",
        run_options.batch_size,
        extra={"business_id": profile.id},
    )

    orchestrator = QueryOrchestrator(gateway, profile.name, config.analyzer)
    results = await orchestrator.execute(tasks, parallel=run_options.parallel, batch_size=run_options.batch_size)

    metrics = compute_metrics(results, config.weights)
    leaderboard = build_leaderboard(results, profile.name, metrics.avg_rank_position)
    insights = build_insights(
        leaderboard,
        results,
        metrics.visibility_score,
        previous.visibility_score if previous else None,
    )

    analysis = FingerprintAnalysis(
        business_id=profile.id,
        business_name=profile.name,
        visibility_score=metrics.visibility_score,
        mention_rate=metrics.mention_rate,
        sentiment_score=metrics.sentiment_score,
        accuracy_score=metrics.accuracy_score,
        avg_rank_position=metrics.avg_rank_position,
        results=results,
        leaderboard=leaderboard,
        insights=insights,
        total_queries=metrics.total_queries,
        failed_queries=metrics.failed_queries,
        processing_time_ms=int((time.monotonic() - start) * 1000),
    )

    if results and metrics.failed_queries == len(results):
        status = "failed"
        logger.error("All %d queries failed for business %s; score reflects no data", len(results), profile.id)
    elif metrics.failed_queries:
        status = "partial"
    else:
        status = "success"
    FINGERPRINT_RUNS.labels(status=status).inc()
    VISIBILITY_SCORE.observe(analysis.visibility_score)

    logger.info(
        "Fingerprint complete for business %s: score=%d mention_rate=%.1f%% failed=%d/%d in %dms",
        profile.id,
        analysis.visibility_score,
        analysis.mention_rate,
        analysis.failed_queries,
        analysis.total_queries,
        analysis.processing_time_ms,
        extra={"business_id": profile.id},
    )
    return analysis
