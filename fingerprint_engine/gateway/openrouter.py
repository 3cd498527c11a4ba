"""OpenRouter gateway: one OpenAI-compatible endpoint for every provider.

Model ids are provider-qualified (``openai/gpt-4-turbo``,
``anthropic/claude-3-opus``, ``google/gemini-2.5-flash``), so adding a
provider is a configuration change, not a new adapter.

Retry policy:
  - 429 / 5xx / timeouts / transport errors are retried
  - other 4xx and malformed payloads fail immediately
  - delay = min(base * 2^attempt + jitter, max_delay), jitter = random(0, base * 0.5)

After ``max_attempts`` the last error is raised as ProviderQueryError.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time

import httpx

from fingerprint_engine.core.exceptions import ProviderQueryError
from fingerprint_engine.gateway.types import GatewayConfig, ModelResponse

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def calculate_backoff(
    attempt: int,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
) -> float:
    """Calculate exponential backoff with jitter.

    Formula: min(base * 2^attempt + jitter, max_delay)
    Jitter: random(0, base * 0.5)
    """
    exponential = base_delay * (2**attempt)
    jitter = random.uniform(0, base_delay * 0.5)
    return min(exponential + jitter, max_delay)


class OpenRouterGateway:
    """OpenRouter chat completions gateway."""

    api_url = "https://openrouter.ai/api/v1/chat/completions"

    def __init__(
        self,
        api_key: str,
        config: GatewayConfig | None = None,
        api_url: str | None = None,
        referer: str = "",
        app_title: str = "",
    ):
        if not api_key:
            raise ValueError("OpenRouter API key is required")
        self.api_key = api_key
        self.config = config or GatewayConfig()
        if self.config.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if api_url:
            self.api_url = api_url
        self.referer = referer
        self.app_title = app_title

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.app_title:
            headers["X-Title"] = self.app_title
        return headers

    async def query(
        self,
        model_id: str,
        prompt: str,
        *,
        temperature: float | None = None,
    ) -> ModelResponse:
        """Query one model, retrying transient failures.

        Raises:
            ProviderQueryError: when all attempts fail or the error is not retryable.
        """
        last_error = ProviderQueryError(model_id, "No attempts made")

        for attempt in range(self.config.max_attempts):
            try:
                response = await self._send(model_id, prompt, temperature)
                response.retry_count = attempt
                return response
            except ProviderQueryError as e:
                last_error = e
                if not e.retryable or attempt + 1 >= self.config.max_attempts:
                    break

                delay = calculate_backoff(
                    attempt=attempt,
                    base_delay=self.config.base_retry_delay,
                    max_delay=self.config.max_retry_delay,
                )
                if e.status_code == 429:
                    delay = max(delay, 5.0)  # Minimum 5s when the provider throttles us

                logger.info(
                    "Retrying %s (attempt %d/%d) in %.1fs: %s",
                    model_id,
                    attempt + 1,
                    self.config.max_attempts,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)

        logger.warning("Query to %s failed: %s", model_id, last_error)
        raise last_error

    async def _send(self, model_id: str, prompt: str, temperature: float | None) -> ModelResponse:
        """Single HTTP round-trip. Raises ProviderQueryError on any failure."""
        payload = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature if temperature is not None else self.config.default_temperature,
            "max_tokens": self.config.max_tokens,
        }
        timeout = self.config.timeout_seconds
        start = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await client.post(self.api_url, json=payload, headers=self._headers())

            if resp.status_code in _RETRYABLE_STATUS:
                raise ProviderQueryError(
                    model_id,
                    f"HTTP {resp.status_code} from OpenRouter",
                    status_code=resp.status_code,
                    retryable=True,
                )

            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as e:
            raise ProviderQueryError(model_id, f"Timeout after {timeout}s", retryable=True) from e
        except httpx.HTTPStatusError as e:
            raise ProviderQueryError(
                model_id,
                str(e),
                status_code=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            raise ProviderQueryError(model_id, f"Transport error: {e}", retryable=True) from e
        except ValueError as e:
            raise ProviderQueryError(model_id, f"Invalid JSON payload: {e}") from e

        if "error" in data:
            error = data["error"] or {}
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            code = error.get("code", 0) if isinstance(error, dict) else 0
            raise ProviderQueryError(
                model_id,
                message,
                status_code=code if isinstance(code, int) else 0,
                retryable=code in _RETRYABLE_STATUS,
            )

        choices = data.get("choices") or []
        if not choices:
            raise ProviderQueryError(model_id, "No choices in response")

        content = (choices[0].get("message") or {}).get("content") or ""
        if not content.strip():
            raise ProviderQueryError(model_id, "Empty completion")

        usage = data.get("usage") or {}
        input_tokens = usage.get("prompt_tokens", 0)
        output_tokens = usage.get("completion_tokens", 0)
        total = usage.get("total_tokens") or input_tokens + output_tokens

        response = ModelResponse(
            content=content,
            tokens_used=total,
            model=data.get("model", model_id),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            latency_ms=int((time.monotonic() - start) * 1000),
        )
        if data.get("id"):
            response.request_id = data["id"]

        logger.debug(
            "OpenRouter query completed: model=%s, tokens=%d, latency=%dms",
            response.model,
            response.tokens_used,
            response.latency_ms,
        )
        return response
