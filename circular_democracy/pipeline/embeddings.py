"""Text embeddings for campaign classification.

Calls an OpenAI-compatible embeddings endpoint. The vector width must match
the pgvector columns of campaigns.reference_vector and messages.message_embedding.
"""
import httpx
from loguru import logger
from circular_democracy.config import get_settings
from circular_democracy.exceptions import EmbeddingError


async def generate_embedding(text: str) -> list[float]:
    """Generate an embedding vector for the given text.

    The caller is responsible for truncating the text to the model limit.

    Raises:
        EmbeddingError: if the service is not configured, unreachable, or
            returns something that is not an embedding.
    """
    settings = get_settings()
    if not settings.openai_api_key:
        raise EmbeddingError("No embedding API key configured")

    try:
        async with httpx.AsyncClient(timeout=settings.embedding_timeout_seconds) as client:
            resp = await client.post(
                settings.embedding_api_url,
                headers={
                    "Authorization": f"Bearer {settings.openai_api_key}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": settings.embedding_model,
                    "input": text,
                    "dimensions": settings.embedding_dimension,
                },
            )
            resp.raise_for_status()
            data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Embedding request failed: {e}")
        raise EmbeddingError(f"Failed to generate message embedding: {e}") from e

    try:
        embedding = data["data"][0]["embedding"]
    except (KeyError, IndexError, TypeError) as e:
        raise EmbeddingError("Malformed embedding response") from e

    if not embedding:
        raise EmbeddingError("Embedding service returned an empty vector")
    return embedding


def get_embedder():
    """FastAPI dependency returning the embedding function."""
    return generate_embedding
