"""Test configuration reading from multiple sources."""

import os
from unittest.mock import patch

from vta.configs import config as config_module
from vta.configs.config import AppConfig, get_chat_config
from vta.configs.system import DEFAULT_CONTEXT_PROMPT, PromptConfig


class TestConfigSources:
    """Test configuration loading from multiple sources."""

    def test_defaults_from_static_yaml(self):
        config = AppConfig()

        assert config.llm.model_name == "gpt-4o-mini"
        assert config.embedding.model_name == "text-embedding-3-small"
        assert config.rag.namespace == "MCY660"
        assert config.rag.top_k == 5
        assert config.chat.history_display_limit == 20

    def test_env_vars_override_yaml(self):
        env_vars = {
            "VTA_RAG__TOP_K": "3",
            "VTA_CHAT__REWRITE_QUERY": "false",
            "VTA_LLM__MAX_TOKENS": "400",
        }

        with patch.dict(os.environ, env_vars, clear=False):
            config = AppConfig()

            assert config.rag.top_k == 3
            assert config.chat.rewrite_query is False
            assert config.llm.max_tokens == 400

    def test_config_is_reread_on_every_call(self):
        with patch.dict(os.environ, {"VTA_CHAT__HISTORY_DISPLAY_LIMIT": "7"}):
            assert get_chat_config().history_display_limit == 7
        assert get_chat_config().history_display_limit != 7

    def test_prompt_yaml_is_loaded(self):
        config = AppConfig()

        assert "teaching assistant" in config.prompt.system_prompt
        assert "{input}" in config.prompt.rewrite_prompt

    def test_missing_prompt_file_keeps_defaults(self, tmp_path):
        with patch.object(
            config_module, "PROMPT_CONFIG_FILE", tmp_path / "missing.yml"
        ):
            config = AppConfig()

        assert config.prompt.context_prompt == DEFAULT_CONTEXT_PROMPT

    def test_unreadable_prompt_file_is_ignored(self, tmp_path):
        broken = tmp_path / "prompt.yml"
        broken.write_text("system_prompt: [unclosed\n", encoding="utf-8")

        with patch.object(config_module, "PROMPT_CONFIG_FILE", broken):
            config = AppConfig()

        assert config.prompt.context_prompt == DEFAULT_CONTEXT_PROMPT


class TestPromptConfig:
    def test_render_rewrite_prompt(self):
        prompt = PromptConfig(rewrite_prompt='Input: "{input}"')

        assert prompt.render_rewrite_prompt("wat is risk") == 'Input: "wat is risk"'

    def test_render_context_prompt(self):
        rendered = PromptConfig().render_context_prompt('[{"text":"x"}]')

        assert rendered.startswith('Context: [{"text":"x"}]\n')
        assert "latest message" in rendered
