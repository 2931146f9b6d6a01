"""
LLM Client Interfaces and Base Classes

Defines the transport interface promptsig sends rendered prompts through.
Every provider implements:
- generate(): one complete reply
- generate_stream(): the reply as an async stream of text chunks

Clients are stateless with respect to prompts; the only state they keep is
token usage accounting.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, AsyncIterator, Mapping
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Token counts reported by the provider"""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens
        )


@dataclass
class LLMMessage:
    """Standard message format across all providers"""
    role: str  # "system", "user", "assistant"
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Standard response format across all providers"""
    content: str
    model: str
    token_usage: TokenUsage = field(default_factory=TokenUsage)
    finish_reason: str = "stop"
    latency_ms: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    raw_response: Optional[Dict[str, Any]] = None

    @property
    def success(self) -> bool:
        return self.finish_reason in ("stop", "end_turn", "STOP")


# Option names accepted as aliases for GenerationConfig fields
_GENERATION_ALIASES = {
    "temperature": "temperature",
    "max_tokens": "max_output_tokens",
    "max_output_tokens": "max_output_tokens",
    "top_p": "top_p",
    "top_k": "top_k",
    "stop": "stop_sequences",
    "stop_sequences": "stop_sequences",
}


@dataclass
class GenerationConfig:
    """
    Configuration for text generation.

    Unset values are left to the provider's defaults. `extra` holds
    provider-specific options, passed through to the SDK call untouched.
    """
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    stop_sequences: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "GenerationConfig":
        """Split an open option map into known generation keys and extras"""
        config = cls()
        for key, value in (options or {}).items():
            target = _GENERATION_ALIASES.get(key)
            if target is None:
                config.extra[key] = value
            elif target == "stop_sequences":
                config.stop_sequences = [value] if isinstance(value, str) else list(value or [])
            else:
                setattr(config, target, value)
        return config


class BaseLLMClient(ABC):
    """
    Abstract base class for all LLM providers.

    Each provider must implement:
    - generate(): Single completion
    - generate_stream(): Streaming completion
    """

    def __init__(self):
        self._total_usage = TokenUsage()
        self._request_count = 0

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier"""
        pass

    @property
    def total_usage(self) -> TokenUsage:
        """Get cumulative token usage"""
        return self._total_usage

    @property
    def request_count(self) -> int:
        """Get total request count"""
        return self._request_count

    @abstractmethod
    async def generate(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> LLMResponse:
        """
        Generate a completion from the model.

        Args:
            messages: List of conversation messages
            config: Generation configuration

        Returns:
            LLMResponse with generated content
        """
        pass

    @abstractmethod
    def generate_stream(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> AsyncIterator[str]:
        """
        Generate a streaming completion from the model.

        Implementations are async generators.

        Args:
            messages: List of conversation messages
            config: Generation configuration

        Yields:
            String chunks as they're generated
        """
        pass

    def _track_usage(self, usage: TokenUsage) -> None:
        """Accumulate token usage across requests"""
        self._total_usage = self._total_usage + usage
        self._request_count += 1

        logger.debug(
            f"[{self.model_name}] Request #{self._request_count}: "
            f"{usage.total_tokens} tokens"
        )

    def reset_usage(self) -> TokenUsage:
        """Reset and return usage statistics"""
        usage = self._total_usage
        self._total_usage = TokenUsage()
        self._request_count = 0
        return usage
