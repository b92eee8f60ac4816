"""Query embedding gateway that never raises into the search path."""

import asyncio
import logging
import math
from typing import Any

from opentelemetry import trace

from ..adapters.ai import AIProviderError, EmbeddingProvider
from ..adapters.events import LoggingSearchEventSink, SearchEventSink
from ..observability.metrics import EMBEDDING_FAILURES

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("library-api.embedding_gateway")


def normalize_query(query: str) -> str:
    """Normalize query text so case-only variants embed identically."""
    return query.strip().lower()


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class EmbeddingGateway:
    """Wrap one embedding provider call and normalize its failures.

    ``embed_query`` returns either the query vector or ``None``. ``None`` covers
    a missing provider, provider errors, timeouts and malformed responses.
    """

    def __init__(
        self,
        provider: EmbeddingProvider | None,
        model_id: str | None = None,
        dimensions: int | None = None,
        timeout_seconds: float = 10.0,
        events: SearchEventSink | None = None,
    ):
        self.provider = provider
        self.model_id = model_id
        self.dimensions = dimensions
        self.timeout_seconds = timeout_seconds
        self.events = events or LoggingSearchEventSink()

    @property
    def is_configured(self) -> bool:
        return self.provider is not None

    def _unavailable(self, reason: str, **fields: Any) -> None:
        EMBEDDING_FAILURES.labels(reason=reason).inc()
        self.events.emit("embedding.unavailable", reason=reason, **fields)
        return None

    async def embed_query(self, query: str) -> list[float] | None:
        with tracer.start_as_current_span("embedding_gateway.embed_query") as span:
            text = normalize_query(query)
            span.set_attribute("query_length", len(text))

            if self.provider is None:
                span.set_attribute("embedding.available", False)
                return self._unavailable("not_configured")
            if not text:
                span.set_attribute("embedding.available", False)
                return self._unavailable("empty_query")

            try:
                vectors = await asyncio.wait_for(
                    self.provider.embed_texts(
                        [text],
                        model_id=self.model_id,
                        dimensions=self.dimensions,
                    ),
                    timeout=self.timeout_seconds,
                )
            except asyncio.TimeoutError:
                span.set_attribute("embedding.available", False)
                return self._unavailable(
                    "timeout", timeout_seconds=self.timeout_seconds
                )
            except AIProviderError as exc:
                span.set_attribute("embedding.available", False)
                return self._unavailable(
                    "provider_error",
                    error_code=exc.code,
                    retryable=exc.retryable,
                    error=exc.message,
                )
            except Exception as exc:
                span.set_attribute("embedding.available", False)
                span.record_exception(exc)
                return self._unavailable("provider_error", error=str(exc))

            if not vectors or not isinstance(vectors[0], (list, tuple)):
                span.set_attribute("embedding.available", False)
                return self._unavailable("malformed_response")

            vector = vectors[0]
            if not vector or not all(_is_number(v) for v in vector):
                span.set_attribute("embedding.available", False)
                return self._unavailable(
                    "malformed_response", vector_length=len(vector)
                )

            span.set_attribute("embedding.available", True)
            span.set_attribute("embedding.dimensions", len(vector))
            logger.debug(
                "embedding.query_embedded",
                extra={"query_length": len(text), "dimensions": len(vector)},
            )
            return [float(v) for v in vector]
