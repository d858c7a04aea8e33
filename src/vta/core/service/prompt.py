"""Prompt assembly for the teaching assistant."""

import json
from typing import Any

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from vta.configs.system import PromptConfig


def build_conversation(
    system_prompt: str, history: list[BaseMessage], message: str
) -> list[BaseMessage]:
    """System instructions, then replayed turns, then the new question."""
    return [
        SystemMessage(content=system_prompt),
        *history,
        HumanMessage(content=message),
    ]


def format_context(matches: list[dict[str, Any]]) -> str:
    """Compact JSON of the retrieved match metadata."""
    return json.dumps(matches, ensure_ascii=False, separators=(",", ":"), default=str)


def build_context_message(
    prompt: PromptConfig, matches: list[dict[str, Any]]
) -> HumanMessage:
    return HumanMessage(content=prompt.render_context_prompt(format_context(matches)))
