import asyncio

import pytest

from fingerprint_engine.core.config import settings

# Tests never talk to a real provider
settings.openrouter_api_key = ""
settings.app_env = "development"
settings.log_json = False

from fingerprint_engine.core.exceptions import ProviderQueryError  # noqa: E402
from fingerprint_engine.gateway.types import ModelResponse  # noqa: E402
from fingerprint_engine.schemas.business import BusinessProfile  # noqa: E402
from fingerprint_engine.services.fingerprinter import FingerprintConfig  # noqa: E402

FAKE_MODELS = ["fake/alpha", "fake/beta", "fake/gamma"]

RECOMMENDATION_TEXT = """Here are the top 5 restaurants in Austin, TX:

1. **Franklin Barbecue** - Famous brisket with long lines.
2. **Acme Cafe** - Cozy spot with great coffee and excellent pastries.
3. Uchi Austin: Upscale sushi.
4. The Salt Lick BBQ (Driftwood) - Classic Texas barbecue.
5. Checking online reviews - always a good idea.
"""

FACTUAL_TEXT = (
    "Acme Cafe is a popular, highly rated cafe in Austin known for quality coffee "
    "and professional, friendly staff."
)

OPINION_TEXT = "Acme Cafe appears to be a reputable and reliable choice. I would recommend it."

UNKNOWN_TEXT = "I don't have information about that business. Local directories may help."


def canned_response(model_id: str, prompt: str) -> str:
    lowered = prompt.lower()
    if "recommend the top" in lowered:
        return RECOMMENDATION_TEXT
    if "considering using" in lowered:
        return OPINION_TEXT
    return FACTUAL_TEXT


class FakeGateway:
    """In-memory ModelGateway: canned text per prompt, optional failing models.

    Tracks calls and peak concurrency.
    """

    def __init__(self, responder=canned_response, fail_models=(), delay: float = 0.0, tokens: int = 42):
        self.responder = responder
        self.fail_models = set(fail_models)
        self.delay = delay
        self.tokens = tokens
        self.calls: list[tuple[str, str, float | None]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def query(self, model_id, prompt, *, temperature=None):
        self.calls.append((model_id, prompt, temperature))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if model_id in self.fail_models:
                raise ProviderQueryError(model_id, "HTTP 503 from OpenRouter", status_code=503, retryable=True)
            return ModelResponse(content=self.responder(model_id, prompt), tokens_used=self.tokens, model=model_id)
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def fingerprint_config():
    return FingerprintConfig(models=list(FAKE_MODELS))


@pytest.fixture
def profile_data():
    return {
        "id": 7,
        "name": "Acme Cafe",
        "url": "https://www.acmecafe.com",
        "category": "Restaurant",
        "location": {"city": "Austin", "state": "TX", "country": "US"},
        "crawlData": {
            "description": "Neighborhood cafe serving espresso, pastries and brunch since 2012.",
            "services": ["Espresso bar", "Brunch", "Catering", "Private events"],
            "foundedDate": "2012",
            "certifications": ["Organic certified"],
            "awards": ["Best Brunch Austin 2023"],
        },
    }


@pytest.fixture
def profile(profile_data):
    return BusinessProfile.model_validate(profile_data)
