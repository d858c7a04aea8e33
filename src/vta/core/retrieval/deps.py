"""Vector index client: lifespan construction and per-request access."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from pinecone import Pinecone

from vta.configs.config import AppConfig, get_app_config, get_rag_config
from vta.configs.system import RagConfig
from vta.infra.lifespan import get_app

from .index import CourseMaterialIndex

logger = logging.getLogger(__name__)


async def build_vector_index(
    app: Annotated[FastAPI, Depends(get_app)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> AsyncGenerator[None, None]:
    """Create the Pinecone client once and attach it to ``app.state``."""
    api_key = config.third_party.pinecone_api_key or os.environ.get(
        "PINECONE_API_KEY", ""
    )
    if api_key:
        app.state.pinecone = Pinecone(api_key=api_key)
    else:
        logger.warning("No Pinecone API key configured; chat requests will fail")
        app.state.pinecone = None
    yield


def get_pinecone_client(request: Request) -> Pinecone | None:
    """Return the Pinecone client from ``app.state``, if one was created."""
    return getattr(request.app.state, "pinecone", None)


def get_course_index(
    client: Annotated[Pinecone | None, Depends(get_pinecone_client)],
    config: Annotated[RagConfig, Depends(get_rag_config)],
) -> CourseMaterialIndex:
    return CourseMaterialIndex(client, config)
