"""Offline mock gateway: canned responses when no API key is configured.

Responses are seeded from (model, prompt), so the same run replays the same
answers. Prompt type is inferred from the prompt wording produced by the
prompt generator.
"""

from __future__ import annotations

import hashlib
import logging
import random
import re

from fingerprint_engine.gateway.types import ModelResponse

logger = logging.getLogger(__name__)

_POSITIVE_DESCRIPTORS = [
    "reputable",
    "professional",
    "reliable",
    "experienced",
    "trusted",
    "established",
    "excellent",
    "outstanding",
]

_COMPETITORS = {
    "restaurant": ["Local Bistro", "Corner Cafe", "Family Kitchen", "Downtown Grill"],
    "dental": ["Family Dental", "Modern Dentistry", "Gentle Care Dental", "Smile Center"],
    "law": ["Smith & Associates", "Harbor Legal Group", "Community Law Partners", "Pike Street Law"],
    "default": ["Summit Partners Group", "Northside Services", "Riverbend Company", "Oakridge Solutions"],
}

_NAME_PATTERNS = [
    re.compile(r"about\s+(.+?)(?:\?|\.|\s+(?:located\s+)?in\s+|\s+\()", re.IGNORECASE),
    re.compile(r"services of\s+(.+?)(?:\?|\.|\s+(?:located\s+)?in\s+|\s+\()", re.IGNORECASE),
    re.compile(r"similar to\s+(.+?)(?:\?|\.)", re.IGNORECASE),
]
_INDUSTRY_PATTERN = re.compile(r"(?:best|top\s+\d+)\s+([A-Za-z][A-Za-z\s]+?)(?:\s+in\s+|\s+similar\s+to\s+|\?)", re.IGNORECASE)


def _extract_business_name(prompt: str) -> str:
    for pattern in _NAME_PATTERNS:
        match = pattern.search(prompt)
        if match:
            return match.group(1).strip()
    return "this business"


def _extract_industry(prompt: str) -> str:
    match = _INDUSTRY_PATTERN.search(prompt)
    return match.group(1).strip().lower() if match else "businesses"


class MockGateway:
    """Deterministic stand-in for a real provider gateway."""

    def __init__(self, tokens_per_response: int = 150):
        self.tokens_per_response = tokens_per_response

    async def query(
        self,
        model_id: str,
        prompt: str,
        *,
        temperature: float | None = None,
    ) -> ModelResponse:
        seed = int(hashlib.sha256(f"{model_id}\n{prompt}".encode()).hexdigest()[:12], 16)
        rng = random.Random(seed)
        lowered = prompt.lower()

        if "recommend the top" in lowered:
            content = self._recommendation(rng, prompt)
        elif "considering using" in lowered:
            content = self._opinion(rng, prompt)
        else:
            content = self._factual(rng, prompt)

        logger.debug("Mock response for %s (%d chars)", model_id, len(content))
        return ModelResponse(
            content=content,
            tokens_used=self.tokens_per_response,
            model=model_id,
            is_mock=True,
        )

    @staticmethod
    def _factual(rng: random.Random, prompt: str) -> str:
        name = _extract_business_name(prompt)
        if rng.random() > 0.3:
            descriptor = rng.choice(_POSITIVE_DESCRIPTORS)
            return (
                f"{name} is a {descriptor} business that has been serving its community for years. "
                "Customers describe the staff as professional and the service as high quality."
            )
        return (
            "I don't have specific detailed information about that business in my knowledge base. "
            "I'd suggest checking their official website or recent customer reviews."
        )

    @staticmethod
    def _opinion(rng: random.Random, prompt: str) -> str:
        name = _extract_business_name(prompt)
        roll = rng.random()
        if roll > 0.6:
            return (
                f"{name} appears to be an excellent choice. They are well regarded, reliable and "
                "professional, and many reviewers recommend them."
            )
        if roll > 0.3:
            return (
                f"{name} appears to be a legitimate business. I'd suggest comparing recent customer "
                "feedback with other local options before deciding."
            )
        return (
            "I have limited information to provide a strong opinion. Look at recent reviews and "
            "ask for references before making a decision."
        )

    @staticmethod
    def _recommendation(rng: random.Random, prompt: str) -> str:
        industry = _extract_industry(prompt)
        key = next((k for k in _COMPETITORS if k in industry), "default")
        names = list(_COMPETITORS[key][: rng.randint(3, 4)])

        name = _extract_business_name(prompt)
        if name != "this business" and rng.random() > 0.4:
            names.insert(rng.randint(0, len(names)), name)

        lines = [f"Here are some top {industry} I'd recommend:", ""]
        for idx, entry in enumerate(names[:5], start=1):
            lines.append(f"{idx}. **{entry}** - Well reviewed for consistent, quality service.")
        lines.append("")
        lines.append("Consider checking recent reviews before choosing.")
        return "\n".join(lines)
