"""Provider registry and search service wiring."""

from .registry import ProviderRegistry, get_provider_registry

__all__ = ["ProviderRegistry", "get_provider_registry"]
