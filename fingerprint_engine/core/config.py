from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # OpenRouter
    openrouter_api_key: str = ""
    openrouter_api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    openrouter_referer: str = "https://github.com/fingerprint-engine"
    openrouter_app_title: str = "AI Visibility Fingerprint"

    # Models probed on every run (comma-separated in env: FINGERPRINT_MODELS)
    fingerprint_models: str = "openai/gpt-4-turbo,anthropic/claude-3-opus,google/gemini-2.5-flash"

    # Execution
    fingerprint_parallel: bool = True
    fingerprint_batch_size: int = 15  # >= task count means no batching

    # Per prompt-type sampling temperature
    temperature_factual: float = 0.3
    temperature_opinion: float = 0.5
    temperature_recommendation: float = 0.7
    max_tokens: int = 2000

    # Gateway resilience
    request_timeout_seconds: float = 60.0
    max_attempts: int = 3
    base_retry_delay: float = 1.0  # seconds, doubled per attempt
    max_retry_delay: float = 30.0

    # App
    app_env: str = "development"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    @property
    def model_list(self) -> list[str]:
        return [m.strip() for m in self.fingerprint_models.split(",") if m.strip()]


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called by entry points in non-test environments."""
    errors: list[str] = []

    if not settings.model_list:
        errors.append("FINGERPRINT_MODELS must list at least one model id")

    if settings.fingerprint_batch_size < 1:
        errors.append("FINGERPRINT_BATCH_SIZE must be >= 1")

    if settings.max_attempts < 1:
        errors.append("MAX_ATTEMPTS must be >= 1")

    if settings.app_env == "production" and not settings.openrouter_api_key:
        errors.append("OPENROUTER_API_KEY must be set in production (mock responses are dev-only)")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
