"""Course-material lookups against the hosted Pinecone index.

The Pinecone SDK is synchronous; every call runs in a worker thread so
the event loop stays free while the index answers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pinecone import Pinecone

from vta.configs.system import RagConfig
from vta.infra.telemetry import (
    ATTR_RAG_NAMESPACE,
    ATTR_RAG_RESULT_COUNT,
    ATTR_RAG_TOP_K,
    SPAN_INDEX_QUERY,
    tracer,
)

logger = logging.getLogger(__name__)

Metadata = dict[str, Any]


class VectorIndexUnavailable(RuntimeError):
    """Raised when no Pinecone client was created at startup."""


class CourseMaterialIndex:
    """Top-K metadata search in one namespace of the course index."""

    def __init__(self, client: Pinecone | None, config: RagConfig) -> None:
        self._client = client
        self._config = config

    @property
    def namespace(self) -> str:
        return self._config.namespace

    async def open_index(self) -> Any:
        """Return a data-plane handle for the configured index."""
        if self._client is None:
            raise VectorIndexUnavailable("Vector index client is not configured")
        return await asyncio.to_thread(self._client.Index, self._config.index_name)

    async def query(self, index: Any, vector: list[float]) -> list[Metadata]:
        """Metadata of the ``top_k`` nearest matches, best first.

        Matches without metadata contribute an empty dict so the
        context keeps one entry per hit.
        """
        with tracer.start_as_current_span(SPAN_INDEX_QUERY) as span:
            span.set_attribute(ATTR_RAG_NAMESPACE, self._config.namespace)
            span.set_attribute(ATTR_RAG_TOP_K, self._config.top_k)
            response = await asyncio.to_thread(
                index.query,
                vector=vector,
                top_k=self._config.top_k,
                include_metadata=True,
                namespace=self._config.namespace,
            )
            matches = response.matches or []
            span.set_attribute(ATTR_RAG_RESULT_COUNT, len(matches))
            logger.debug(
                "Index %s/%s returned %d matches",
                self._config.index_name,
                self._config.namespace,
                len(matches),
            )
            return [dict(match.metadata or {}) for match in matches]
