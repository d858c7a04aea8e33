"""Query clean-up before retrieval.

Students type quickly; a short deterministic completion strips
stopwords and fixes spelling so the embedding lands closer to the
course material.  Any failure here is not fatal: the original
question is used instead.
"""

import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import SystemMessage

from vta.configs.system import PromptConfig
from vta.infra.telemetry import ATTR_RAG_REWRITTEN, SPAN_RAG_REWRITE, tracer

from .metrics import QUERY_REWRITES_TOTAL

logger = logging.getLogger(__name__)

RESULT_REWRITTEN = "rewritten"
RESULT_FALLBACK = "fallback"
RESULT_SKIPPED = "skipped"


class QueryRewriter:
    def __init__(
        self, llm: BaseChatModel, prompt: PromptConfig, enabled: bool = True
    ) -> None:
        self._llm = llm
        self._prompt = prompt
        self._enabled = enabled

    async def rewrite(self, message: str) -> str:
        """Return the cleaned-up question, or *message* when that fails."""
        if not self._enabled:
            QUERY_REWRITES_TOTAL.labels(result=RESULT_SKIPPED).inc()
            return message

        with tracer.start_as_current_span(SPAN_RAG_REWRITE) as span:
            try:
                response = await self._llm.ainvoke(
                    [SystemMessage(content=self._prompt.render_rewrite_prompt(message))]
                )
            except Exception:
                logger.warning(
                    "Query rewrite failed, using the original message", exc_info=True
                )
                QUERY_REWRITES_TOTAL.labels(result=RESULT_FALLBACK).inc()
                span.set_attribute(ATTR_RAG_REWRITTEN, False)
                return message

            content = response.content if isinstance(response.content, str) else ""
            rewritten = content.strip()
            if not rewritten:
                QUERY_REWRITES_TOTAL.labels(result=RESULT_FALLBACK).inc()
                span.set_attribute(ATTR_RAG_REWRITTEN, False)
                return message

            QUERY_REWRITES_TOTAL.labels(result=RESULT_REWRITTEN).inc()
            span.set_attribute(ATTR_RAG_REWRITTEN, True)
            logger.debug("Rewrote query %r -> %r", message, rewritten)
            return rewritten
