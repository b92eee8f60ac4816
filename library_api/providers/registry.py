"""Central registry for runtime provider resolution."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..adapters.ai import AIProviderError
from ..config import get_settings

if TYPE_CHECKING:
    from ..adapters.ai import EmbeddingProvider
    from ..adapters.events import SearchEventSink
    from ..config.settings import Settings
    from ..services.embedding_gateway import EmbeddingGateway
    from ..services.semantic_search import SemanticSearchService

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Resolve provider implementations from runtime settings."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def _require_openai_config(self, operation: str) -> None:
        if self._settings.openai_api_key:
            return
        raise AIProviderError(
            message="OPENAI_API_KEY is required when OpenAI provider is selected",
            retryable=False,
            code="auth_error",
            provider="openai",
            operation=operation,
        )

    def get_embedding_provider(self) -> EmbeddingProvider:
        """Return the configured embedding provider instance."""
        provider = self._settings.ai_embedding_provider

        if provider == "openai":
            self._require_openai_config(operation="embed_texts")
            from ..adapters.openai import OpenAIProvider

            return OpenAIProvider(
                api_key=self._settings.openai_api_key or "",
                base_url=self._settings.openai_base_url,
                default_embedding_model=self._settings.openai_embedding_model,
                timeout_seconds=self._settings.embedding_timeout_seconds,
            )

        raise AIProviderError(
            message=f"Unsupported embedding provider configured: {provider}",
            retryable=False,
            code="invalid_request",
            provider=provider,
            operation="embed_texts",
        )

    def get_embedding_gateway(
        self, events: SearchEventSink | None = None
    ) -> EmbeddingGateway:
        """Return a gateway; without a usable provider it reports unavailable."""
        from ..services.embedding_gateway import EmbeddingGateway

        provider: EmbeddingProvider | None
        try:
            provider = self.get_embedding_provider()
        except AIProviderError as exc:
            logger.warning(
                "providers.embedding_unavailable",
                extra={"provider": exc.provider, "error_code": exc.code},
            )
            provider = None

        return EmbeddingGateway(
            provider=provider,
            model_id=self._settings.openai_embedding_model,
            dimensions=self._settings.embedding_dimensions,
            timeout_seconds=self._settings.embedding_timeout_seconds,
            events=events,
        )

    def get_search_service(
        self, events: SearchEventSink | None = None
    ) -> SemanticSearchService:
        """Return the workflow/skill search service."""
        from ..services.semantic_search import SemanticSearchService

        return SemanticSearchService(
            gateway=self.get_embedding_gateway(events=events),
            events=events,
        )


_provider_registry: ProviderRegistry | None = None
_provider_registry_signature: tuple[str, ...] | None = None


def _settings_signature(settings: Settings) -> tuple[str, ...]:
    return (
        settings.ai_embedding_provider,
        settings.openai_api_key or "",
        settings.openai_base_url,
        settings.openai_embedding_model,
        str(settings.embedding_dimensions),
        str(settings.embedding_timeout_seconds),
    )


def get_provider_registry() -> ProviderRegistry:
    """Get singleton provider registry for current settings."""
    global _provider_registry
    global _provider_registry_signature

    settings = get_settings()
    signature = _settings_signature(settings)

    if _provider_registry is None or _provider_registry_signature != signature:
        _provider_registry = ProviderRegistry(settings=settings)
        _provider_registry_signature = signature

    return _provider_registry
