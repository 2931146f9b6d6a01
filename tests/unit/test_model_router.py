"""
promptsig Unit Tests: Model Router and Client Helpers
=====================================================

Tests:
- Provider selection by model name
- Client construction and missing-key errors
- Generation option mapping
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from promptsig.core.config import LLMProvider, PromptsigConfig
from promptsig.core.errors import ConfigurationError
from promptsig.integrations import (
    ClaudeClient,
    GeminiClient,
    GenerationConfig,
    OpenAIClient,
    TokenUsage,
    provider_for,
    resolve_client,
)


@pytest.mark.unit
class TestProviderFor:
    """Tests for model name routing"""

    @pytest.mark.parametrize("model,provider", [
        ("gpt-4o-mini", LLMProvider.OPENAI),
        ("gpt-3.5-turbo", LLMProvider.OPENAI),
        ("o1-mini", LLMProvider.OPENAI),
        ("claude-3-5-sonnet-20241022", LLMProvider.ANTHROPIC),
        ("Claude-3-opus", LLMProvider.ANTHROPIC),
        ("gemini-1.5-flash", LLMProvider.GOOGLE),
    ])
    def test_routing(self, model, provider):
        """Test prefixes pick the provider and everything else is OpenAI"""
        assert provider_for(model) == provider


@pytest.mark.unit
class TestResolveClient:
    """Tests for client construction"""

    def test_missing_key(self, config_without_keys):
        """Test a missing key is a configuration error naming the variable"""
        with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
            resolve_client("claude-3-5-haiku-20241022")

    def test_openai_client(self, config_without_keys):
        """Test an explicit key builds the OpenAI client"""
        client = resolve_client("gpt-4o-mini", api_key="sk-test")

        assert isinstance(client, OpenAIClient)
        assert client.model_name == "gpt-4o-mini"

    def test_claude_client(self, config_without_keys):
        """Test Claude clients take the configured completion budget"""
        config_without_keys.llm.max_output_tokens = 512
        client = resolve_client("claude-3-5-haiku-20241022", api_key="sk-ant-test")

        assert isinstance(client, ClaudeClient)
        assert client._default_max_tokens == 512

    def test_gemini_client(self, config_without_keys):
        """Test Gemini models build the Gemini client"""
        client = resolve_client("gemini-1.5-flash", api_key="g-test")

        assert isinstance(client, GeminiClient)
        assert client.model_name == "gemini-1.5-flash"

    def test_key_from_config(self, monkeypatch):
        """Test configured keys are used when none is passed"""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-env")
        client = resolve_client("gpt-4o", config=PromptsigConfig.from_env())

        assert client.api_key == "sk-from-env"


@pytest.mark.unit
class TestGenerationConfig:
    """Tests for option mapping"""

    def test_from_options(self):
        """Test aliases map onto config fields and extras pass through"""
        config = GenerationConfig.from_options({
            "temperature": 0.1,
            "max_tokens": 64,
            "stop": "END",
            "seed": 3,
        })

        assert config.temperature == 0.1
        assert config.max_output_tokens == 64
        assert config.stop_sequences == ["END"]
        assert config.extra == {"seed": 3}

    def test_empty_options(self):
        """Test no options leaves provider defaults in place"""
        config = GenerationConfig.from_options(None)

        assert config.temperature is None
        assert config.stop_sequences == []
        assert config.extra == {}

    def test_usage_accumulates(self):
        """Test token usage adds up field by field"""
        total = TokenUsage(10, 4, 14) + TokenUsage(2, 1, 3)
        assert total == TokenUsage(prompt_tokens=12, completion_tokens=5, total_tokens=17)
