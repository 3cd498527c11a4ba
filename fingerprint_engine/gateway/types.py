"""Core types and DTOs for the Model Gateway."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Gateway response (unified DTO)
# ---------------------------------------------------------------------------


@dataclass
class ModelResponse:
    """Unified response from any model provider."""

    content: str = ""
    tokens_used: int = 0
    model: str = ""  # Actual model reported by the provider

    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:16])
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    retry_count: int = 0
    is_mock: bool = False

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict for logging/debugging."""
        return {
            "request_id": self.request_id,
            "model": self.model,
            "content": self.content,
            "tokens_used": self.tokens_used,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "latency_ms": self.latency_ms,
            "retry_count": self.retry_count,
            "is_mock": self.is_mock,
        }


# ---------------------------------------------------------------------------
# Gateway config
# ---------------------------------------------------------------------------


@dataclass
class GatewayConfig:
    """Connection and retry configuration for a gateway."""

    timeout_seconds: float = 60.0  # Per HTTP request
    max_attempts: int = 3  # Total attempts including the first
    base_retry_delay: float = 1.0  # Base delay for exponential backoff (seconds)
    max_retry_delay: float = 30.0  # Cap on retry delay
    max_tokens: int = 2000
    default_temperature: float = 0.7


# ---------------------------------------------------------------------------
# Gateway interface
# ---------------------------------------------------------------------------


@runtime_checkable
class ModelGateway(Protocol):
    """Invokes one model with one prompt.

    Implementations raise ``ProviderQueryError`` on any failure; they never
    return partial or error-marked content.
    """

    async def query(
        self,
        model_id: str,
        prompt: str,
        *,
        temperature: float | None = None,
    ) -> ModelResponse: ...
