import os
from functools import lru_cache
from pydantic import BaseModel


class Settings(BaseModel):
    env: str = os.getenv("ENV", "dev")
    port: int = int(os.getenv("PORT", "8080"))
    log_level: str = os.getenv("LOG_LEVEL", "info")

    # Application URLs
    app_url: str = os.getenv("APP_URL", "http://localhost:3000")

    # Database
    db_url: str | None = os.getenv("DB_URL")

    # Embedding provider ("openai" is the only supported backend)
    ai_embedding_provider: str = os.getenv("AI_EMBEDDING_PROVIDER", "openai")
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_embedding_model: str = os.getenv(
        "OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"
    )
    # Must match the dimension of the stored item vectors
    embedding_dimensions: int = int(os.getenv("EMBEDDING_DIMENSIONS", "1536"))
    # Upper bound for a single query embedding call; on expiry search falls back
    embedding_timeout_seconds: float = float(
        os.getenv("EMBEDDING_TIMEOUT_SECONDS", "10")
    )

    # Observability
    otel_exporter_otlp_endpoint: str | None = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")


@lru_cache
def get_settings() -> Settings:
    return Settings()
