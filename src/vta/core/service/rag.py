"""RAG chat service: a LangGraph StateGraph over course material.

Pipeline nodes:
    load_history → rewrite_query → retrieve → build_prompt
                 → generate → record → END

``retrieve`` embeds the rewritten question and opens the index handle
concurrently, then queries the course namespace for the top-K matches.
The matches' metadata is handed to the model as one extra user
message after the student's question.  Nothing is cached and nothing
is retried: the first failing node aborts the run and surfaces as
``ChatServiceError``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, TypedDict

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langgraph.graph import END, START, StateGraph

from vta.configs.config import AppConfig
from vta.core.embedding.client import EmbeddingClient
from vta.core.retrieval.index import CourseMaterialIndex
from vta.infra.db.converters import stored_to_messages
from vta.infra.db.repository import InteractionRepository
from vta.infra.telemetry import (
    ATTR_RAG_QUERY_LEN,
    ATTR_RAG_RESULT_COUNT,
    SPAN_RAG_PIPELINE,
    SPAN_RAG_RETRIEVE,
    tracer,
)

from .metrics import (
    RAG_MATCHES_RETURNED,
    RAG_RETRIEVAL_LATENCY_SECONDS,
    observe_reply,
)
from .models import ChatContext, ChatService, ChatServiceError, ChatTurn, EmptyReplyError
from .prompt import build_context_message, build_conversation
from .rewrite import QueryRewriter

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Node constants
# ---------------------------------------------------------------------------

NODE_LOAD_HISTORY = "load_history"
NODE_REWRITE_QUERY = "rewrite_query"
NODE_RETRIEVE = "retrieve"
NODE_BUILD_PROMPT = "build_prompt"
NODE_GENERATE = "generate"
NODE_RECORD = "record"

# State field keys
KEY_MESSAGE = "message"
KEY_SESSION_ID = "session_id"
KEY_HISTORY = "history"
KEY_SEARCH_QUERY = "search_query"
KEY_MATCHES = "matches"
KEY_CONVERSATION = "conversation"
KEY_PROMPT = "prompt"
KEY_REPLY = "reply"
KEY_INTERACTION_ID = "interaction_id"

# ---------------------------------------------------------------------------
# Graph state
# ---------------------------------------------------------------------------


class RagState(TypedDict, total=False):
    """Typed state threaded through every node in the RAG graph."""

    message: str
    session_id: str
    history: list[BaseMessage]

    search_query: str
    matches: list[dict[str, Any]]

    conversation: list[BaseMessage]
    prompt: list[BaseMessage]

    reply: str
    interaction_id: str


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class RagChatService(ChatService):
    """Answers course questions with retrieved course material.

    The graph is compiled once at construction.  Node functions are bound
    methods so they have access to the clients and config.
    """

    chat_service_name = "rag"

    def __init__(
        self,
        llm: BaseChatModel,
        rewriter: QueryRewriter,
        embedder: EmbeddingClient,
        course_index: CourseMaterialIndex,
        repository: InteractionRepository,
        config: AppConfig,
    ) -> None:
        self._llm = llm
        self._rewriter = rewriter
        self._embedder = embedder
        self._course_index = course_index
        self._repository = repository
        self._config = config
        self._graph = self._build_graph()

    # ------------------------------------------------------------------
    # Graph construction
    # ------------------------------------------------------------------

    def _build_graph(self):
        builder: StateGraph = StateGraph(RagState)

        builder.add_node(NODE_LOAD_HISTORY, self._load_history_node)
        builder.add_node(NODE_REWRITE_QUERY, self._rewrite_query_node)
        builder.add_node(NODE_RETRIEVE, self._retrieve_node)
        builder.add_node(NODE_BUILD_PROMPT, self._build_prompt_node)
        builder.add_node(NODE_GENERATE, self._generate_node)
        builder.add_node(NODE_RECORD, self._record_node)

        builder.add_edge(START, NODE_LOAD_HISTORY)
        builder.add_edge(NODE_LOAD_HISTORY, NODE_REWRITE_QUERY)
        builder.add_edge(NODE_REWRITE_QUERY, NODE_RETRIEVE)
        builder.add_edge(NODE_RETRIEVE, NODE_BUILD_PROMPT)
        builder.add_edge(NODE_BUILD_PROMPT, NODE_GENERATE)
        builder.add_edge(NODE_GENERATE, NODE_RECORD)
        builder.add_edge(NODE_RECORD, END)

        return builder.compile()

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    async def _load_history_node(self, state: RagState) -> dict:
        stored = await self._repository.session_messages(
            state[KEY_SESSION_ID], self._config.chat.max_history_turns
        )
        return {KEY_HISTORY: stored_to_messages(stored)}

    async def _rewrite_query_node(self, state: RagState) -> dict:
        rewritten = await self._rewriter.rewrite(state[KEY_MESSAGE])
        return {KEY_SEARCH_QUERY: rewritten.lower()}

    async def _retrieve_node(self, state: RagState) -> dict:
        with tracer.start_as_current_span(SPAN_RAG_RETRIEVE) as span:
            start = time.monotonic()
            embedding, index = await asyncio.gather(
                self._embedder.embed(state[KEY_SEARCH_QUERY]),
                self._course_index.open_index(),
            )
            matches = await self._course_index.query(index, embedding)

            RAG_RETRIEVAL_LATENCY_SECONDS.observe(time.monotonic() - start)
            RAG_MATCHES_RETURNED.observe(len(matches))
            span.set_attribute(ATTR_RAG_RESULT_COUNT, len(matches))
            logger.info(
                "RAG: retrieved %d matches from namespace %s",
                len(matches),
                self._course_index.namespace,
            )
            return {KEY_MATCHES: matches}

    def _build_prompt_node(self, state: RagState) -> dict:
        conversation = build_conversation(
            self._config.prompt.system_prompt,
            state.get(KEY_HISTORY, []),
            state[KEY_MESSAGE],
        )
        context = build_context_message(
            self._config.prompt, state.get(KEY_MATCHES, [])
        )
        return {KEY_CONVERSATION: conversation, KEY_PROMPT: [*conversation, context]}

    async def _generate_node(self, state: RagState) -> dict:
        response = await self._llm.ainvoke(state[KEY_PROMPT])
        content = response.content if isinstance(response.content, str) else ""
        if not content.strip():
            raise EmptyReplyError()
        return {KEY_REPLY: content}

    async def _record_node(self, state: RagState) -> dict:
        interaction_id = await self._repository.append(
            state[KEY_SESSION_ID], state[KEY_MESSAGE], state[KEY_REPLY]
        )
        return {KEY_INTERACTION_ID: interaction_id}

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    @observe_reply(chat_service_name)
    async def reply(self, ctx: ChatContext) -> ChatTurn:
        with tracer.start_as_current_span(SPAN_RAG_PIPELINE) as span:
            span.set_attribute(ATTR_RAG_QUERY_LEN, len(ctx.message))
            graph_input: RagState = {
                KEY_MESSAGE: ctx.message,
                KEY_SESSION_ID: ctx.session_id,
            }
            try:
                state = await self._graph.ainvoke(graph_input)
            except ChatServiceError:
                logger.warning("Chat pipeline failed", exc_info=True)
                raise
            except Exception as exc:
                logger.error("Chat pipeline failed", exc_info=True)
                raise ChatServiceError(str(exc)) from exc

            return ChatTurn(
                reply=state[KEY_REPLY],
                session_id=ctx.session_id,
                interaction_id=state[KEY_INTERACTION_ID],
                history=state[KEY_CONVERSATION],
            )
