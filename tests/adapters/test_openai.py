"""Tests for OpenAI embedding adapter."""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from library_api.adapters.ai import AIProviderError
from library_api.adapters.openai import OpenAIProvider


def _client_cm(mock_client: AsyncMock) -> AsyncMock:
    mock_client_cm = AsyncMock()
    mock_client_cm.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client_cm.__aexit__ = AsyncMock(return_value=None)
    return mock_client_cm


def _response(status_code: int, payload: dict) -> Mock:
    mock_response = Mock()
    mock_response.status_code = status_code
    mock_response.json.return_value = payload
    mock_response.text = ""
    return mock_response


class TestOpenAIProvider:
    """Tests for OpenAIProvider.embed_texts."""

    @pytest.fixture
    def provider(self) -> OpenAIProvider:
        return OpenAIProvider(
            api_key="test-key",
            base_url="https://api.openai.com/v1/",
            default_embedding_model="text-embedding-3-small",
            timeout_seconds=5.0,
        )

    def test_base_url_is_normalized(self, provider: OpenAIProvider) -> None:
        assert provider.base_url == "https://api.openai.com/v1"

    @pytest.mark.asyncio
    async def test_embed_texts_returns_embeddings(
        self, provider: OpenAIProvider
    ) -> None:
        """Embeddings endpoint response should parse into vectors."""
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(
            return_value=_response(
                200,
                {
                    "data": [
                        {"embedding": [0.1, 0.2, 0.3]},
                        {"embedding": [0.4, 0.5, 0.6]},
                    ]
                },
            )
        )

        with patch.object(provider, "_client", return_value=_client_cm(mock_client)):
            vectors = await provider.embed_texts(["one", "two"])

        assert vectors == [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]

    @pytest.mark.asyncio
    async def test_embed_texts_sends_model_and_dimensions(
        self, provider: OpenAIProvider
    ) -> None:
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(
            return_value=_response(200, {"data": [{"embedding": [0.1]}]})
        )

        with patch.object(provider, "_client", return_value=_client_cm(mock_client)):
            await provider.embed_texts(["hello"], dimensions=1536)

        mock_client.post.assert_awaited_once_with(
            "/embeddings",
            json={
                "model": "text-embedding-3-small",
                "input": ["hello"],
                "encoding_format": "float",
                "dimensions": 1536,
            },
        )

    @pytest.mark.asyncio
    async def test_embed_texts_drops_rows_without_vectors(
        self, provider: OpenAIProvider
    ) -> None:
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(
            return_value=_response(200, {"data": [{"index": 0}, {"embedding": None}]})
        )

        with patch.object(provider, "_client", return_value=_client_cm(mock_client)):
            vectors = await provider.embed_texts(["one", "two"])

        assert vectors == [[]]

    @pytest.mark.asyncio
    async def test_embed_texts_raises_provider_error_on_http_failure(
        self,
        provider: OpenAIProvider,
    ) -> None:
        """HTTP failure should raise AIProviderError."""
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(
            return_value=_response(429, {"error": {"message": "Rate limited"}})
        )

        with patch.object(provider, "_client", return_value=_client_cm(mock_client)):
            with pytest.raises(AIProviderError) as exc:
                await provider.embed_texts(["one"])

        assert exc.value.retryable is True
        assert "Rate limited" in exc.value.message
        assert exc.value.code == "rate_limit"
        assert exc.value.provider == "openai"

    @pytest.mark.asyncio
    async def test_auth_failure_is_not_retryable(
        self, provider: OpenAIProvider
    ) -> None:
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(
            return_value=_response(401, {"error": {"message": "Bad key"}})
        )

        with patch.object(provider, "_client", return_value=_client_cm(mock_client)):
            with pytest.raises(AIProviderError) as exc:
                await provider.embed_texts(["one"])

        assert exc.value.retryable is False
        assert exc.value.code == "auth_error"

    @pytest.mark.asyncio
    async def test_network_error_maps_to_provider_unavailable(
        self, provider: OpenAIProvider
    ) -> None:
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with patch.object(provider, "_client", return_value=_client_cm(mock_client)):
            with pytest.raises(AIProviderError) as exc:
                await provider.embed_texts(["one"])

        assert exc.value.code == "provider_unavailable"
        assert exc.value.retryable is True

    @pytest.mark.asyncio
    async def test_timeout_maps_to_timeout_code(
        self, provider: OpenAIProvider
    ) -> None:
        mock_client = AsyncMock()
        mock_client.post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        with patch.object(provider, "_client", return_value=_client_cm(mock_client)):
            with pytest.raises(AIProviderError) as exc:
                await provider.embed_texts(["one"])

        assert exc.value.code == "timeout"
