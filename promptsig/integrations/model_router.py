"""
Model Router - Provider Dispatch by Model Name

Maps a model name to the provider that serves it and builds the matching
transport client:
- "claude-*" models go to Anthropic
- "gemini-*" models go to Google
- everything else goes to OpenAI (or an OpenAI-compatible endpoint)
"""

import logging
from typing import Optional

from ..core.config import LLMProvider, PromptsigConfig, get_config
from ..core.errors import ConfigurationError
from .llm_clients import BaseLLMClient
from .openai_client import OpenAIClient
from .claude_client import ClaudeClient
from .gemini_client import GeminiClient

logger = logging.getLogger(__name__)


# Model name prefix to provider; first match wins
PROVIDER_ROUTING = (
    ("claude", LLMProvider.ANTHROPIC),
    ("gemini", LLMProvider.GOOGLE),
)

_KEY_ENV_VARS = {
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.GOOGLE: "GOOGLE_API_KEY",
}


def provider_for(model: str) -> LLMProvider:
    """Decide which provider serves a model name"""
    name = model.lower()
    for prefix, provider in PROVIDER_ROUTING:
        if name.startswith(prefix):
            return provider
    return LLMProvider.OPENAI


def resolve_client(
    model: str,
    api_key: Optional[str] = None,
    config: Optional[PromptsigConfig] = None,
) -> BaseLLMClient:
    """
    Build the transport client for a model.

    Args:
        model: Model name, e.g. "gpt-4o-mini" or "claude-3-5-haiku-20241022"
        api_key: Explicit key; falls back to the configured key for the provider
        config: Configuration to read keys from (defaults to the global one)

    Raises:
        ConfigurationError: if no API key is available for the provider
    """
    config = config or get_config()
    provider = provider_for(model)
    key = api_key or config.llm.api_key_for(provider)

    if not key:
        raise ConfigurationError(
            f"No API key for {provider.value} (model {model!r}); "
            f"pass api_key or set {_KEY_ENV_VARS[provider]}"
        )

    logger.debug(f"Routing model {model} to {provider.value}")

    if provider == LLMProvider.ANTHROPIC:
        return ClaudeClient(
            api_key=key,
            model=model,
            default_max_tokens=config.llm.max_output_tokens,
        )
    if provider == LLMProvider.GOOGLE:
        return GeminiClient(api_key=key, model=model)
    return OpenAIClient(api_key=key, model=model, base_url=config.llm.openai_base_url)
