"""Embedding infrastructure: OpenAI-compatible client."""

from .client import EmbeddingClient
from .deps import get_embedding_client

__all__ = [
    "EmbeddingClient",
    "get_embedding_client",
]
