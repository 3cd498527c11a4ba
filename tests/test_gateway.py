"""Tests for the model gateways: OpenRouter adapter, mock gateway, factory."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from fingerprint_engine.core.config import Settings
from fingerprint_engine.core.exceptions import ProviderQueryError
from fingerprint_engine.gateway.factory import gateway_config_from_settings, get_gateway
from fingerprint_engine.gateway.mock import MockGateway
from fingerprint_engine.gateway.openrouter import OpenRouterGateway, calculate_backoff
from fingerprint_engine.gateway.types import GatewayConfig, ModelGateway, ModelResponse


def _make_httpx_response(status_code: int, json_data: dict | None = None, text: str = "") -> httpx.Response:
    """Create a proper httpx.Response with request set (needed for raise_for_status)."""
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    if json_data is not None:
        return httpx.Response(status_code, json=json_data, request=request)
    return httpx.Response(status_code, text=text, request=request)


def _completion(text="1. Acme Cafe", model="openai/gpt-4-turbo", prompt_tokens=12, completion_tokens=30):
    return _make_httpx_response(
        200,
        json_data={
            "id": "gen-abc123",
            "model": model,
            "choices": [{"message": {"role": "assistant", "content": text}, "finish_reason": "stop"}],
            "usage": {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
        },
    )


def _patched_client(mock_client_cls, post_result=None, side_effect=None) -> AsyncMock:
    mock_client = AsyncMock()
    if side_effect is not None:
        mock_client.post.side_effect = side_effect
    else:
        mock_client.post.return_value = post_result
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    mock_client_cls.return_value = mock_client
    return mock_client


def _gateway(**config) -> OpenRouterGateway:
    return OpenRouterGateway(api_key="test-key", config=GatewayConfig(**config), app_title="Test")


class TestBackoff:
    def test_exponential_growth(self):
        assert 1.0 <= calculate_backoff(0, base_delay=1.0) <= 1.5
        assert 4.0 <= calculate_backoff(2, base_delay=1.0) <= 4.5

    def test_capped(self):
        assert calculate_backoff(10, base_delay=1.0, max_delay=30.0) == 30.0


class TestOpenRouterGateway:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            OpenRouterGateway(api_key="")

    def test_requires_at_least_one_attempt(self):
        with pytest.raises(ValueError, match="max_attempts"):
            OpenRouterGateway(api_key="test-key", config=GatewayConfig(max_attempts=0))

    def test_satisfies_protocol(self):
        assert isinstance(_gateway(), ModelGateway)

    @pytest.mark.asyncio
    async def test_success(self):
        gateway = _gateway()
        with patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls:
            mock_client = _patched_client(mock_client_cls, _completion())
            resp = await gateway.query("openai/gpt-4-turbo", "Hello", temperature=0.3)

        assert isinstance(resp, ModelResponse)
        assert resp.content == "1. Acme Cafe"
        assert resp.tokens_used == 42
        assert resp.input_tokens == 12
        assert resp.output_tokens == 30
        assert resp.request_id == "gen-abc123"
        assert resp.retry_count == 0

        _, kwargs = mock_client.post.call_args
        assert kwargs["json"]["model"] == "openai/gpt-4-turbo"
        assert kwargs["json"]["temperature"] == 0.3
        assert kwargs["json"]["messages"] == [{"role": "user", "content": "Hello"}]
        assert kwargs["headers"]["Authorization"] == "Bearer test-key"
        assert kwargs["headers"]["X-Title"] == "Test"

    @pytest.mark.asyncio
    async def test_default_temperature(self):
        gateway = _gateway(default_temperature=0.9)
        with patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls:
            mock_client = _patched_client(mock_client_cls, _completion())
            await gateway.query("openai/gpt-4-turbo", "Hello")

        _, kwargs = mock_client.post.call_args
        assert kwargs["json"]["temperature"] == 0.9

    @pytest.mark.asyncio
    async def test_retries_rate_limit_then_succeeds(self):
        gateway = _gateway(max_attempts=3)
        with (
            patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls,
            patch("fingerprint_engine.gateway.openrouter.asyncio.sleep", new_callable=AsyncMock) as mock_sleep,
        ):
            mock_client = _patched_client(
                mock_client_cls,
                side_effect=[_make_httpx_response(429, text="rate limited"), _completion()],
            )
            resp = await gateway.query("openai/gpt-4-turbo", "Hello")

        assert resp.content == "1. Acme Cafe"
        assert resp.retry_count == 1
        assert mock_client.post.await_count == 2
        # 429 waits at least 5s
        assert mock_sleep.await_args.args[0] >= 5.0

    @pytest.mark.asyncio
    async def test_server_errors_exhaust_attempts(self):
        gateway = _gateway(max_attempts=3)
        with (
            patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls,
            patch("fingerprint_engine.gateway.openrouter.asyncio.sleep", new_callable=AsyncMock) as mock_sleep,
        ):
            mock_client = _patched_client(mock_client_cls, _make_httpx_response(503, text="unavailable"))
            with pytest.raises(ProviderQueryError) as exc_info:
                await gateway.query("openai/gpt-4-turbo", "Hello")

        assert exc_info.value.status_code == 503
        assert exc_info.value.retryable is True
        assert mock_client.post.await_count == 3
        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        gateway = _gateway(max_attempts=3)
        with (
            patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls,
            patch("fingerprint_engine.gateway.openrouter.asyncio.sleep", new_callable=AsyncMock) as mock_sleep,
        ):
            mock_client = _patched_client(mock_client_cls, _make_httpx_response(401, text="bad key"))
            with pytest.raises(ProviderQueryError) as exc_info:
                await gateway.query("openai/gpt-4-turbo", "Hello")

        assert exc_info.value.status_code == 401
        assert exc_info.value.retryable is False
        assert mock_client.post.await_count == 1
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_timeout_is_retryable(self):
        gateway = _gateway(max_attempts=2)
        with (
            patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls,
            patch("fingerprint_engine.gateway.openrouter.asyncio.sleep", new_callable=AsyncMock),
        ):
            mock_client = _patched_client(mock_client_cls, side_effect=httpx.TimeoutException("timeout"))
            with pytest.raises(ProviderQueryError) as exc_info:
                await gateway.query("openai/gpt-4-turbo", "Hello")

        assert "Timeout" in str(exc_info.value)
        assert mock_client.post.await_count == 2

    @pytest.mark.asyncio
    async def test_error_payload(self):
        gateway = _gateway(max_attempts=1)
        payload = {"error": {"message": "model not found", "code": 404}}
        with patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls:
            _patched_client(mock_client_cls, _make_httpx_response(200, json_data=payload))
            with pytest.raises(ProviderQueryError) as exc_info:
                await gateway.query("nope/model", "Hello")

        assert "model not found" in str(exc_info.value)
        assert exc_info.value.model == "nope/model"

    @pytest.mark.asyncio
    async def test_empty_completion(self):
        gateway = _gateway(max_attempts=1)
        with patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls:
            _patched_client(mock_client_cls, _completion(text="   "))
            with pytest.raises(ProviderQueryError, match="Empty completion"):
                await gateway.query("openai/gpt-4-turbo", "Hello")

    @pytest.mark.asyncio
    async def test_no_choices(self):
        gateway = _gateway(max_attempts=1)
        with patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls:
            _patched_client(mock_client_cls, _make_httpx_response(200, json_data={"choices": []}))
            with pytest.raises(ProviderQueryError, match="No choices"):
                await gateway.query("openai/gpt-4-turbo", "Hello")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        gateway = _gateway(max_attempts=3)
        with patch("fingerprint_engine.gateway.openrouter.httpx.AsyncClient") as mock_client_cls:
            mock_client = _patched_client(mock_client_cls, _make_httpx_response(200, text="<html>oops</html>"))
            with pytest.raises(ProviderQueryError, match="Invalid JSON"):
                await gateway.query("openai/gpt-4-turbo", "Hello")
        assert mock_client.post.await_count == 1


class TestMockGateway:
    @pytest.mark.asyncio
    async def test_deterministic(self):
        gateway = MockGateway()
        prompt = "What information do you have about Acme Cafe located in Austin, TX?"
        first = await gateway.query("openai/gpt-4-turbo", prompt)
        second = await gateway.query("openai/gpt-4-turbo", prompt)
        assert first.content == second.content
        assert first.is_mock is True
        assert first.tokens_used == 150

    @pytest.mark.asyncio
    async def test_recommendation_is_numbered_list(self):
        gateway = MockGateway()
        resp = await gateway.query(
            "google/gemini-2.5-flash",
            "Can you recommend the top 5 restaurants in Austin, TX? Please rank them.",
        )
        numbered = [line for line in resp.content.splitlines() if line[:1].isdigit()]
        assert len(numbered) >= 3

    @pytest.mark.asyncio
    async def test_opinion_prompt(self):
        gateway = MockGateway(tokens_per_response=10)
        resp = await gateway.query("anthropic/claude-3-opus", "I'm considering using the services of Acme Cafe.")
        assert resp.content
        assert resp.tokens_used == 10


class TestFactory:
    def test_mock_without_key(self):
        settings = Settings(_env_file=None, openrouter_api_key="")
        assert isinstance(get_gateway(settings), MockGateway)

    def test_openrouter_with_key(self):
        settings = Settings(_env_file=None, openrouter_api_key="sk-or-test", max_attempts=5, request_timeout_seconds=10)
        gateway = get_gateway(settings)
        assert isinstance(gateway, OpenRouterGateway)
        assert gateway.config.max_attempts == 5
        assert gateway.config.timeout_seconds == 10

    def test_gateway_config_from_settings(self):
        settings = Settings(_env_file=None, max_tokens=512, base_retry_delay=0.5)
        config = gateway_config_from_settings(settings)
        assert config.max_tokens == 512
        assert config.base_retry_delay == 0.5

    def test_model_list_parsing(self):
        settings = Settings(_env_file=None, fingerprint_models=" a/one ,, b/two ")
        assert settings.model_list == ["a/one", "b/two"]
