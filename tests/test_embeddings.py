"""Tests for the embedding client."""
import os
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

from circular_democracy.config import get_settings
from circular_democracy.exceptions import EmbeddingError
from circular_democracy.pipeline.embeddings import generate_embedding, get_embedder


def _client_returning(payload=None, error=None):
    response = MagicMock()
    response.json.return_value = payload
    client = AsyncMock()
    if error:
        client.post.side_effect = error
    else:
        client.post.return_value = response
    client_cls = MagicMock()
    client_cls.return_value.__aenter__.return_value = client
    return client_cls, client


class TestGenerateEmbedding:
    @pytest.mark.asyncio
    async def test_returns_vector(self):
        client_cls, client = _client_returning({"data": [{"embedding": [0.1, 0.2]}]})

        with patch("circular_democracy.pipeline.embeddings.httpx.AsyncClient", client_cls):
            embedding = await generate_embedding("Save the river")

        assert embedding == [0.1, 0.2]
        settings = get_settings()
        kwargs = client.post.call_args.kwargs
        assert kwargs["json"] == {
            "model": settings.embedding_model,
            "input": "Save the river",
            "dimensions": settings.embedding_dimension,
        }
        assert kwargs["headers"]["Authorization"] == f"Bearer {settings.openai_api_key}"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client_cls, _ = _client_returning(error=httpx.ConnectError("connection refused"))

        with patch("circular_democracy.pipeline.embeddings.httpx.AsyncClient", client_cls):
            with pytest.raises(EmbeddingError, match="Failed to generate message embedding"):
                await generate_embedding("Save the river")

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        client_cls, _ = _client_returning({"error": "quota"})

        with patch("circular_democracy.pipeline.embeddings.httpx.AsyncClient", client_cls):
            with pytest.raises(EmbeddingError, match="Malformed"):
                await generate_embedding("Save the river")

    @pytest.mark.asyncio
    async def test_empty_vector(self):
        client_cls, _ = _client_returning({"data": [{"embedding": []}]})

        with patch("circular_democracy.pipeline.embeddings.httpx.AsyncClient", client_cls):
            with pytest.raises(EmbeddingError):
                await generate_embedding("Save the river")

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        unconfigured = get_settings().model_copy(update={"openai_api_key": ""})

        with patch("circular_democracy.pipeline.embeddings.get_settings", return_value=unconfigured):
            with pytest.raises(EmbeddingError, match="No embedding API key"):
                await generate_embedding("Save the river")


def test_get_embedder_returns_generate_embedding():
    assert get_embedder() is generate_embedding
