"""EmbeddingClient: OpenAI embeddings for student questions."""

from __future__ import annotations

import logging
import os
import time

import openai

from vta.configs.system import EmbeddingConfig
from vta.core.service.metrics import EMBEDDING_LATENCY_SECONDS
from vta.infra.telemetry import (
    ATTR_EMBEDDING_MODEL,
    ATTR_EMBEDDING_TEXT_LEN,
    SPAN_EMBEDDING_EMBED,
    tracer,
)
from vta.infra.tokens import truncate_to_tokens

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Single method: ``embed(text) -> list[float]``."""

    def __init__(
        self,
        config: EmbeddingConfig,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self._config = config
        self._openai = client or openai.AsyncOpenAI(
            base_url=config.endpoint,
            api_key=config.api_key or os.environ.get("OPENAI_API_KEY") or "unused",
            max_retries=config.max_retries,
        )

    @property
    def model_name(self) -> str:
        return self._config.model_name

    async def embed(self, text: str) -> list[float]:
        """Return the embedding vector for *text*.

        Input is truncated to ``max_input_tokens`` before the API call.
        """
        text = truncate_to_tokens(text, self._config.max_input_tokens)
        with tracer.start_as_current_span(SPAN_EMBEDDING_EMBED) as span:
            span.set_attribute(ATTR_EMBEDDING_MODEL, self._config.model_name)
            span.set_attribute(ATTR_EMBEDDING_TEXT_LEN, len(text))
            logger.debug(
                "Embedding text (model=%s, len=%d)",
                self._config.model_name,
                len(text),
            )
            start = time.monotonic()
            response = await self._openai.embeddings.create(
                input=text,
                model=self._config.model_name,
            )
            EMBEDDING_LATENCY_SECONDS.observe(time.monotonic() - start)
            return list(response.data[0].embedding)
