"""Exception hierarchy for the fingerprinting engine.

Only InputValidationError ever reaches callers of ``fingerprint()``.
ProviderQueryError is raised by gateways and absorbed per task by the
orchestrator.
"""

from __future__ import annotations


class FingerprintError(Exception):
    """Base class for all engine errors."""


class InputValidationError(FingerprintError):
    """Business profile or run options are missing or malformed."""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.field = field


class ProviderQueryError(FingerprintError):
    """A single model query failed (HTTP error, timeout, empty payload)."""

    def __init__(self, model: str, message: str, status_code: int = 0, retryable: bool = False):
        super().__init__(f"{model}: {message}")
        self.model = model
        self.status_code = status_code
        self.retryable = retryable
