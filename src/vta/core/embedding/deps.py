"""FastAPI dependency factory for the embedding client."""

from typing import Annotated

from fastapi import Depends

from vta.configs.config import get_embedding_config
from vta.configs.system import EmbeddingConfig

from .client import EmbeddingClient


def get_embedding_client(
    config: Annotated[EmbeddingConfig, Depends(get_embedding_config)],
) -> EmbeddingClient:
    return EmbeddingClient(config)
