"""
promptsig Unit Tests: Configuration
===================================

Tests:
- Environment-derived defaults
- Global config accessors
- Per-call option resolution
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from promptsig.core.config import (
    LLMProvider,
    PredictOptions,
    PromptsigConfig,
    get_config,
    set_config,
)
from promptsig.core.errors import ConfigurationError


@pytest.mark.unit
class TestPromptsigConfig:
    """Tests for environment configuration"""

    def test_defaults(self):
        """Test defaults without environment overrides"""
        config = PromptsigConfig.from_env()

        assert config.llm.default_model == "gpt-3.5-turbo"
        assert config.streaming.debounce_ms == 100
        assert config.validate_by_default is True
        assert config.validate() == []

    def test_environment_overrides(self, monkeypatch):
        """Test PROMPTSIG_* variables are read"""
        monkeypatch.setenv("PROMPTSIG_MODEL", "claude-3-5-haiku-20241022")
        monkeypatch.setenv("PROMPTSIG_DEBOUNCE_MS", "250")
        monkeypatch.setenv("PROMPTSIG_VALIDATE", "off")

        config = PromptsigConfig.from_env()

        assert config.llm.default_model == "claude-3-5-haiku-20241022"
        assert config.streaming.debounce_ms == 250
        assert config.validate_by_default is False

    def test_api_keys(self, monkeypatch):
        """Test provider keys come from their usual variables"""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        config = PromptsigConfig.from_env()

        assert config.llm.api_key_for(LLMProvider.ANTHROPIC) == "sk-ant-test"

    def test_validate_reports_issues(self):
        """Test unusable settings are listed"""
        config = PromptsigConfig.from_env()
        config.streaming.debounce_ms = -5
        config.streaming.queue_size = 0

        issues = config.validate()
        assert len(issues) == 2

    def test_global_config(self):
        """Test set_config replaces and None resets the global instance"""
        custom = PromptsigConfig.from_env()
        set_config(custom)
        assert get_config() is custom

        set_config(None)
        assert get_config() is not custom


@pytest.mark.unit
class TestPredictOptions:
    """Tests for per-call option resolution"""

    def test_defaults_from_config(self):
        """Test unset options fall back to configuration"""
        opts = PredictOptions.from_mapping(None)

        assert opts.model == "gpt-3.5-turbo"
        assert opts.validate is True
        assert opts.debounce_ms == 100
        assert opts.api_key is None
        assert opts.provider_options == {}

    def test_recognized_and_passthrough_keys(self):
        """Test recognized keys are consumed and the rest passed through"""
        opts = PredictOptions.from_mapping({
            "model": "gpt-4o-mini",
            "validate": False,
            "debounce_ms": 20,
            "api_key": "sk-test",
            "temperature": 0.2,
            "seed": 7,
        })

        assert opts.model == "gpt-4o-mini"
        assert opts.validate is False
        assert opts.debounce_ms == 20
        assert opts.api_key == "sk-test"
        assert opts.provider_options == {"temperature": 0.2, "seed": 7}

    def test_config_validate_default(self):
        """Test the configured validation default applies"""
        config = PromptsigConfig.from_env()
        config.validate_by_default = False

        assert PredictOptions.from_mapping({}, config).validate is False

    @pytest.mark.parametrize("bad", [-1, "soon"])
    def test_bad_debounce(self, bad):
        """Test unusable debounce values are rejected"""
        with pytest.raises(ConfigurationError):
            PredictOptions.from_mapping({"debounce_ms": bad})

    def test_options_instance_passthrough(self):
        """Test an existing PredictOptions is used as is"""
        opts = PredictOptions(model="m")
        assert PredictOptions.from_mapping(opts) is opts
