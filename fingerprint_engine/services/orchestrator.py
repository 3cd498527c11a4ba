"""Query Orchestrator: fans the prompt battery out to every configured model.

Execution modes:
  - sequential: one task at a time, input order preserved
  - parallel (batch_size >= task count): every task launched at once
  - parallel batched: waves of ``batch_size`` tasks, waves run one after another

Every task is isolated: a gateway failure becomes a degraded AnalyzedResult,
so N tasks always yield N results.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from fingerprint_engine.analysis.analyzer import build_result, degraded_result
from fingerprint_engine.analysis.config import DEFAULT_ANALYZER_CONFIG, AnalyzerConfig
from fingerprint_engine.analysis.types import AnalyzedResult, PromptType, QueryTask
from fingerprint_engine.core.metrics import PROVIDER_QUERIES, QUERY_DURATION
from fingerprint_engine.gateway.types import ModelGateway
from fingerprint_engine.prompt_engine.generator import GeneratedPrompts

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Settle-all combinator
# ---------------------------------------------------------------------------


async def settle_all(
    awaitables: Sequence[Awaitable[T]],
    on_error: Callable[[int, Exception], T],
) -> list[T]:
    """Await everything concurrently; replace each raised Exception with on_error(index, exc).

    Cancellation and other non-Exception BaseExceptions are re-raised.
    """
    outcomes = await asyncio.gather(*awaitables, return_exceptions=True)

    settled: list[T] = []
    for i, outcome in enumerate(outcomes):
        if isinstance(outcome, Exception):
            settled.append(on_error(i, outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            settled.append(outcome)
    return settled


def chunked(items: Sequence[T], size: int) -> list[Sequence[T]]:
    if size < 1:
        raise ValueError("size must be >= 1")
    return [items[i : i + size] for i in range(0, len(items), size)]


# ---------------------------------------------------------------------------
# Task construction
# ---------------------------------------------------------------------------


def build_tasks(
    models: Sequence[str],
    prompts: GeneratedPrompts,
    temperatures: dict[PromptType, float] | None = None,
) -> list[QueryTask]:
    """Cross product models × prompt types, model-major."""
    temperatures = temperatures or {}
    return [
        QueryTask(
            model_id=model,
            prompt_type=prompt_type,
            prompt_text=text,
            temperature=temperatures.get(prompt_type),
        )
        for model in models
        for prompt_type, text in prompts.items()
    ]


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class QueryOrchestrator:
    """Executes QueryTasks against one gateway and analyzes each response."""

    def __init__(
        self,
        gateway: ModelGateway,
        business_name: str,
        analyzer_config: AnalyzerConfig = DEFAULT_ANALYZER_CONFIG,
    ):
        self.gateway = gateway
        self.business_name = business_name
        self.analyzer_config = analyzer_config

    async def run_task(self, task: QueryTask) -> AnalyzedResult:
        """Query + analyze one task. Never raises an Exception."""
        start = time.monotonic()
        try:
            response = await self.gateway.query(task.model_id, task.prompt_text, temperature=task.temperature)
            result = build_result(task, response, self.business_name, self.analyzer_config)
        except Exception as e:
            logger.warning(
                "Query failed: model=%s prompt_type=%s: %s",
                task.model_id,
                task.prompt_type.value,
                e,
            )
            PROVIDER_QUERIES.labels(model=task.model_id, prompt_type=task.prompt_type.value, outcome="error").inc()
            return degraded_result(task, e)

        QUERY_DURATION.labels(model=task.model_id).observe(time.monotonic() - start)
        PROVIDER_QUERIES.labels(
            model=task.model_id,
            prompt_type=task.prompt_type.value,
            outcome="mentioned" if result.mentioned else "not_mentioned",
        ).inc()
        logger.debug(
            "Query done: model=%s prompt_type=%s mentioned=%s sentiment=%s rank=%s",
            task.model_id,
            task.prompt_type.value,
            result.mentioned,
            result.sentiment.value,
            result.rank_position,
        )
        return result

    async def execute(
        self,
        tasks: Sequence[QueryTask],
        parallel: bool = True,
        batch_size: int = 15,
    ) -> list[AnalyzedResult]:
        if not tasks:
            return []
        if not parallel:
            return await self.execute_sequential(tasks)
        return await self.execute_parallel(tasks, batch_size)

    async def execute_sequential(self, tasks: Sequence[QueryTask]) -> list[AnalyzedResult]:
        results: list[AnalyzedResult] = []
        for task in tasks:
            results.append(await self.run_task(task))
        return results

    async def execute_parallel(self, tasks: Sequence[QueryTask], batch_size: int) -> list[AnalyzedResult]:
        batches = chunked(tasks, batch_size) if batch_size < len(tasks) else [tasks]

        results: list[AnalyzedResult] = []
        for n, batch in enumerate(batches, start=1):
            if len(batches) > 1:
                logger.debug("Executing batch %d/%d (%d tasks)", n, len(batches), len(batch))
            results.extend(
                await settle_all(
                    [self.run_task(task) for task in batch],
                    on_error=lambda i, exc, batch=batch: degraded_result(batch[i], exc),
                )
            )
        return results
