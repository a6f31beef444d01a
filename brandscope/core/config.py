from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROVIDER_PREFERENCE = (
    "openai,gemini,google,anthropic,claude,groq,mistral,xai,x-ai,grok,"
    "perplexity,deepseek,openrouter,ollama,google-ai,google-ai-review"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "brandscope"
    postgres_password: str = "changeme"
    postgres_db: str = "brandscope"

    @property
    def postgres_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Redis (Celery broker + result backend)
    redis_url: str = "redis://localhost:6379/0"

    # Encryption for stored provider credentials
    fernet_key: str = ""

    # LLM providers
    provider_timeout_seconds: float = 60.0  # same upper bound for every provider
    provider_preference: str = DEFAULT_PROVIDER_PREFERENCE  # comma-separated, first match wins
    provider_check_prompt: str = "Test prompt: What is artificial intelligence? Please respond briefly."

    @property
    def provider_preference_list(self) -> list[str]:
        return [p.strip() for p in self.provider_preference.split(",") if p.strip()]

    # Analysis job runner
    analysis_queue: str = "default"
    analysis_max_retries: int = 3
    analysis_retry_backoff_max: int = 600  # seconds

    # App
    app_env: str = "development"
    app_debug: bool = True

    # CORS
    allowed_origins: str = "*"  # comma-separated

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if not settings.fernet_key:
        errors.append(
            'FERNET_KEY must be set (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")'
        )

    if settings.provider_timeout_seconds <= 0:
        errors.append("PROVIDER_TIMEOUT_SECONDS must be positive")

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
