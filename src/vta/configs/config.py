"""Configuration management using pydantic-settings.

**Not a singleton**: each call to ``get_app_config()`` re-reads config
from disk so that edits to the YAML files are picked up without a
restart.

Priority order (highest first):

1. Environment variables (``VTA_`` prefix, ``__`` for nesting)
2. ``.env`` dotenv file
3. Static YAML (``configs/config.yaml``)
4. Prompt YAML (``configs/prompt.yml``)
5. Init defaults / field defaults
6. File secrets
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from .system import (
    ChatConfig,
    EmbeddingConfig,
    LLMConfig,
    LoggingConfig,
    MetricsConfig,
    PromptConfig,
    RagConfig,
    ThirdPartyConfig,
    TracingConfig,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_PY_PATH = Path(__file__).resolve()
PROJECT_ROOT = CONFIG_PY_PATH.parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "configs"

STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"
PROMPT_CONFIG_FILE = CONFIG_DIR / "prompt.yml"

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"
ENV_PREFIX = "VTA_"

DEFAULT_ENCODING = "utf-8"

# Keys of prompt.yml copied into the ``prompt`` section.
_PROMPT_KEYS = ("system_prompt", "rewrite_prompt", "context_prompt")


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    third_party: ThirdPartyConfig = Field(
        default_factory=ThirdPartyConfig,
        description="Third-party service configurations",
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="Completion model settings",
    )

    embedding: EmbeddingConfig = Field(
        default_factory=EmbeddingConfig,
        description="Embedding model settings",
    )

    rag: RagConfig = Field(
        default_factory=RagConfig,
        description="Course-material retrieval settings",
    )

    chat: ChatConfig = Field(
        default_factory=ChatConfig, description="Chat endpoint settings"
    )

    prompt: PromptConfig = Field(
        default_factory=PromptConfig,
        description="Prompt templates",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    tracing: TracingConfig = Field(default_factory=TracingConfig)

    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            _PromptYamlSettingsSource(settings_cls),
            init_settings,
            file_secret_settings,
        )


class _PromptYamlSettingsSource(PydanticBaseSettingsSource):
    """Loads prompt templates from ``prompt.yml``."""

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        if not PROMPT_CONFIG_FILE.exists():
            return {}

        try:
            with open(PROMPT_CONFIG_FILE, encoding=DEFAULT_ENCODING) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            logger.warning(
                "Ignoring unreadable prompt file %s", PROMPT_CONFIG_FILE, exc_info=True
            )
            return {}

        if not isinstance(data, dict):
            return {}
        prompt = {k: data[k] for k in _PROMPT_KEYS if data.get(k)}
        return {"prompt": prompt} if prompt else {}


def get_app_config() -> AppConfig:
    """Get the application configuration, re-read on every call."""
    return AppConfig()


def get_llm_config() -> LLMConfig:
    return get_app_config().llm


def get_embedding_config() -> EmbeddingConfig:
    return get_app_config().embedding


def get_rag_config() -> RagConfig:
    return get_app_config().rag


def get_chat_config() -> ChatConfig:
    return get_app_config().chat
