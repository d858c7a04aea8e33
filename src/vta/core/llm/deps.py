"""Completion model factories."""

import os
from typing import Annotated

from fastapi import Depends
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI

from vta.configs.config import get_chat_config, get_llm_config
from vta.configs.system import ChatConfig, LLMConfig


def _chat_openai(config: LLMConfig, temperature: float, max_tokens: int) -> ChatOpenAI:
    return ChatOpenAI(
        base_url=config.endpoint,
        api_key=config.api_key or os.environ.get("OPENAI_API_KEY") or "unused",
        model=config.model_name,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=config.model_timeout.total_seconds(),
        max_retries=config.max_retries,
    )


def get_llm(
    config: Annotated[LLMConfig, Depends(get_llm_config)],
) -> BaseChatModel:
    """Model that answers the student."""
    return _chat_openai(config, config.temperature, config.max_tokens)


def get_rewrite_llm(
    config: Annotated[LLMConfig, Depends(get_llm_config)],
    chat: Annotated[ChatConfig, Depends(get_chat_config)],
) -> BaseChatModel:
    """Same model, tuned for deterministic short query clean-up."""
    return _chat_openai(config, chat.rewrite_temperature, chat.rewrite_max_tokens)
