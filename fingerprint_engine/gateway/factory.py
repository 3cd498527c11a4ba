"""Gateway selection from settings."""

from __future__ import annotations

import logging

from fingerprint_engine.core.config import Settings, settings as default_settings
from fingerprint_engine.gateway.mock import MockGateway
from fingerprint_engine.gateway.openrouter import OpenRouterGateway
from fingerprint_engine.gateway.types import GatewayConfig, ModelGateway

logger = logging.getLogger(__name__)


def gateway_config_from_settings(settings: Settings) -> GatewayConfig:
    return GatewayConfig(
        timeout_seconds=settings.request_timeout_seconds,
        max_attempts=settings.max_attempts,
        base_retry_delay=settings.base_retry_delay,
        max_retry_delay=settings.max_retry_delay,
        max_tokens=settings.max_tokens,
        default_temperature=settings.temperature_recommendation,
    )


def get_gateway(settings: Settings | None = None) -> ModelGateway:
    """Return an OpenRouter gateway, or the mock gateway when no key is configured."""
    settings = settings or default_settings

    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY not configured, using mock responses")
        return MockGateway()

    return OpenRouterGateway(
        api_key=settings.openrouter_api_key,
        config=gateway_config_from_settings(settings),
        api_url=settings.openrouter_api_url,
        referer=settings.openrouter_referer,
        app_title=settings.openrouter_app_title,
    )
