"""
promptsig Model Integrations

Transport clients that carry a rendered prompt to a model provider and
bring back its reply, whole or as a stream of text chunks.
"""

# LLM Client Base Classes
from .llm_clients import (
    BaseLLMClient,
    TokenUsage,
    LLMMessage,
    LLMResponse,
    GenerationConfig,
)

# Provider clients
from .openai_client import OpenAIClient
from .claude_client import ClaudeClient
from .gemini_client import GeminiClient

# Model Router
from .model_router import (
    PROVIDER_ROUTING,
    provider_for,
    resolve_client,
)

__all__ = [
    # LLM Base
    "BaseLLMClient",
    "TokenUsage",
    "LLMMessage",
    "LLMResponse",
    "GenerationConfig",
    # Providers
    "OpenAIClient",
    "ClaudeClient",
    "GeminiClient",
    # Router
    "PROVIDER_ROUTING",
    "provider_for",
    "resolve_client",
]
