"""Provider contracts and the shared error type for AI backends."""

from typing import Protocol


class AIProviderError(Exception):
    """Normalized failure raised at an AI provider boundary."""

    def __init__(
        self,
        message: str,
        retryable: bool = False,
        code: str = "unknown",
        provider: str | None = None,
        operation: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.retryable = retryable
        self.code = code
        self.provider = provider
        self.operation = operation


class EmbeddingProvider(Protocol):
    async def embed_texts(
        self,
        texts: list[str],
        model_id: str | None = None,
        dimensions: int | None = None,
    ) -> list[list[float]]: ...
