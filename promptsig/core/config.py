"""
promptsig Configuration
Environment-based defaults plus per-call prediction options
"""

import os
from typing import Optional, Dict, Any, Mapping, Union
from dataclasses import dataclass, field
from enum import Enum

from .errors import ConfigurationError


class LLMProvider(str, Enum):
    """Providers a model name can route to"""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


@dataclass
class LLMConfig:
    """Configuration for LLM providers"""
    default_model: str = "gpt-3.5-turbo"

    # Provider credentials
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    google_api_key: Optional[str] = None

    # Anthropic requires an explicit completion budget
    max_output_tokens: int = 4096

    def __post_init__(self):
        """Load from environment variables"""
        self.default_model = os.getenv("PROMPTSIG_MODEL", self.default_model)
        self.openai_api_key = os.getenv("OPENAI_API_KEY", self.openai_api_key)
        self.openai_base_url = os.getenv("OPENAI_BASE_URL", self.openai_base_url)
        self.anthropic_api_key = os.getenv("ANTHROPIC_API_KEY", self.anthropic_api_key)
        self.google_api_key = os.getenv("GOOGLE_API_KEY", self.google_api_key)

    def api_key_for(self, provider: LLMProvider) -> Optional[str]:
        return {
            LLMProvider.OPENAI: self.openai_api_key,
            LLMProvider.ANTHROPIC: self.anthropic_api_key,
            LLMProvider.GOOGLE: self.google_api_key,
        }[provider]


@dataclass
class StreamingConfig:
    """Configuration for streaming predictions"""
    debounce_ms: int = 100

    # Chunks buffered between the transport and the reassembler
    queue_size: int = 256

    def __post_init__(self):
        """Load from environment variables"""
        self.debounce_ms = int(os.getenv("PROMPTSIG_DEBOUNCE_MS", self.debounce_ms))


@dataclass
class PromptsigConfig:
    """Master configuration for promptsig"""
    llm: LLMConfig = field(default_factory=LLMConfig)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)
    validate_by_default: bool = True

    def __post_init__(self):
        flag = os.getenv("PROMPTSIG_VALIDATE")
        if flag is not None:
            self.validate_by_default = flag.strip().lower() not in ("0", "false", "no", "off")

    @classmethod
    def from_env(cls) -> "PromptsigConfig":
        """Create configuration from environment variables"""
        return cls(
            llm=LLMConfig(),
            streaming=StreamingConfig(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of issues"""
        issues = []

        if self.streaming.debounce_ms < 0:
            issues.append("PROMPTSIG_DEBOUNCE_MS must not be negative")
        if self.streaming.queue_size < 1:
            issues.append("streaming queue_size must be at least 1")
        if not self.llm.default_model:
            issues.append("PROMPTSIG_MODEL is empty")

        return issues


# Global configuration instance
_config: Optional[PromptsigConfig] = None


def get_config() -> PromptsigConfig:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = PromptsigConfig.from_env()
    return _config


def set_config(config: Optional[PromptsigConfig]) -> None:
    """Set (or with None, reset) the global configuration instance"""
    global _config
    _config = config


# Keys PredictOptions consumes itself; everything else goes to the provider
_RECOGNIZED_KEYS = ("model", "validate", "debounce_ms", "api_key")


@dataclass
class PredictOptions:
    """
    Options for a single predict / predict_stream call.

    A small set of recognized keys plus a pass-through bag
    (`provider_options`) forwarded opaquely to the transport.
    """
    model: str
    validate: bool = True
    debounce_ms: int = 100
    api_key: Optional[str] = None
    provider_options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls,
        options: Union["PredictOptions", Mapping[str, Any], None] = None,
        config: Optional[PromptsigConfig] = None,
    ) -> "PredictOptions":
        """Resolve caller options against configured defaults"""
        if isinstance(options, PredictOptions):
            return options

        config = config or get_config()
        options = dict(options or {})

        debounce_ms = options.get("debounce_ms")
        if debounce_ms is None:
            debounce_ms = config.streaming.debounce_ms
        try:
            debounce_ms = int(debounce_ms)
        except (TypeError, ValueError):
            raise ConfigurationError(f"debounce_ms must be an integer, got {debounce_ms!r}")
        if debounce_ms < 0:
            raise ConfigurationError(f"debounce_ms must not be negative, got {debounce_ms}")

        validate = options.get("validate")
        if validate is None:
            validate = config.validate_by_default

        return cls(
            model=options.get("model") or config.llm.default_model,
            validate=bool(validate),
            debounce_ms=debounce_ms,
            api_key=options.get("api_key"),
            provider_options={
                k: v for k, v in options.items() if k not in _RECOGNIZED_KEYS
            },
        )
