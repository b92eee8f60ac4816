"""Direct OpenAI adapter for query embeddings."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from opentelemetry import trace

from .ai import AIProviderError
from ..observability.metrics import EMBEDDING_DURATION
from .telemetry import (
    AI_ERROR_TYPE,
    AI_LATENCY_MS,
    AI_MODEL,
    AI_OPERATION,
    AI_PROVIDER,
    AI_RETRYABLE,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("library-api.openai")


def _http_status_to_error(status_code: int) -> tuple[str, bool]:
    if status_code == 429:
        return "rate_limit", True
    if status_code in {500, 502, 503, 504}:
        return "provider_unavailable", True
    if status_code in {401, 403}:
        return "auth_error", False
    if status_code == 400:
        return "invalid_request", False
    return "unknown", False


class OpenAIProvider:
    """OpenAI embeddings provider."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        default_embedding_model: str = "text-embedding-3-small",
        timeout_seconds: float = 10.0,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.default_embedding_model = default_embedding_model
        self.timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def _client(self) -> AsyncGenerator[httpx.AsyncClient, None]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.timeout_seconds),
        ) as client:
            yield client

    async def _read_error_message(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
            error = payload.get("error", {})
            message = error.get("message")
            if isinstance(message, str) and message:
                return message
        except ValueError:
            pass
        return response.text or "OpenAI request failed"

    async def embed_texts(
        self,
        texts: list[str],
        model_id: str | None = None,
        dimensions: int | None = None,
    ) -> list[list[float]]:
        resolved_model = model_id or self.default_embedding_model
        started = time.perf_counter()

        with tracer.start_as_current_span("ai.openai.embed") as span:
            span.set_attribute(AI_PROVIDER, "openai")
            span.set_attribute(AI_OPERATION, "embed_texts")
            span.set_attribute(AI_MODEL, resolved_model)
            span.set_attribute("text_count", len(texts))

            payload: dict[str, Any] = {
                "model": resolved_model,
                "input": texts,
                "encoding_format": "float",
            }

            if dimensions is not None:
                payload["dimensions"] = dimensions

            try:
                async with self._client() as client:
                    response = await client.post("/embeddings", json=payload)
                    if response.status_code >= 400:
                        message = await self._read_error_message(response)
                        code, retryable = _http_status_to_error(response.status_code)
                        raise AIProviderError(
                            message=message,
                            retryable=retryable,
                            code=code,
                            provider="openai",
                            operation="embed_texts",
                        )

                    data = response.json()
                    rows = data.get("data", [])
                    embeddings = [row.get("embedding", []) for row in rows]

                    return [e for e in embeddings if isinstance(e, list)]

            except AIProviderError as e:
                span.set_attribute(AI_RETRYABLE, e.retryable)
                span.set_attribute(AI_ERROR_TYPE, e.code)
                raise
            except httpx.TimeoutException as e:
                span.set_attribute("error", True)
                span.record_exception(e)
                span.set_attribute(AI_RETRYABLE, True)
                span.set_attribute(AI_ERROR_TYPE, "timeout")
                raise AIProviderError(
                    message="OpenAI embedding request timed out",
                    retryable=True,
                    code="timeout",
                    provider="openai",
                    operation="embed_texts",
                ) from e
            except httpx.HTTPError as e:
                span.set_attribute("error", True)
                span.record_exception(e)
                span.set_attribute(AI_RETRYABLE, True)
                span.set_attribute(AI_ERROR_TYPE, "provider_unavailable")
                raise AIProviderError(
                    message="OpenAI embedding request failed",
                    retryable=True,
                    code="provider_unavailable",
                    provider="openai",
                    operation="embed_texts",
                ) from e
            except Exception as e:
                span.set_attribute("error", True)
                span.record_exception(e)
                span.set_attribute(AI_RETRYABLE, False)
                span.set_attribute(AI_ERROR_TYPE, "unknown")
                raise AIProviderError(
                    message="Embedding generation failed",
                    retryable=False,
                    code="unknown",
                    provider="openai",
                    operation="embed_texts",
                ) from e
            finally:
                elapsed = time.perf_counter() - started
                span.set_attribute(
                    AI_LATENCY_MS,
                    int(elapsed * 1000),
                )
                EMBEDDING_DURATION.labels(
                    provider="openai",
                    model=resolved_model,
                ).observe(elapsed)
