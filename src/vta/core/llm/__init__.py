"""LLM client objects as LangChain chat models."""

from .deps import get_llm, get_rewrite_llm  # noqa: F401
