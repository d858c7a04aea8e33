"""FastAPI dependency factory for the chat service.

``get_chat_service`` is a per-request ``Depends`` factory with an
explicit parameter chain.
"""

from typing import Annotated

from fastapi import Depends
from langchain_core.language_models import BaseChatModel

from vta.configs.config import AppConfig, get_app_config
from vta.core.embedding import EmbeddingClient, get_embedding_client
from vta.core.llm import get_llm, get_rewrite_llm
from vta.core.retrieval import CourseMaterialIndex, get_course_index
from vta.infra.db.deps import get_interaction_repository
from vta.infra.db.repository import InteractionRepository

from .models import ChatService
from .rag import RagChatService
from .rewrite import QueryRewriter


def get_query_rewriter(
    llm: Annotated[BaseChatModel, Depends(get_rewrite_llm)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> QueryRewriter:
    return QueryRewriter(llm, config.prompt, enabled=config.chat.rewrite_query)


def get_chat_service(
    llm: Annotated[BaseChatModel, Depends(get_llm)],
    rewriter: Annotated[QueryRewriter, Depends(get_query_rewriter)],
    embedder: Annotated[EmbeddingClient, Depends(get_embedding_client)],
    course_index: Annotated[CourseMaterialIndex, Depends(get_course_index)],
    repository: Annotated[
        InteractionRepository, Depends(get_interaction_repository)
    ],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> ChatService:
    """Create a configured chat service per request."""
    return RagChatService(llm, rewriter, embedder, course_index, repository, config)
