"""
Claude Client

Anthropic Messages API transport. Selected for model names starting with
"claude".
"""

import os
import time
import logging
from typing import Optional, List, Dict, Any, AsyncIterator, Tuple

import anthropic
from anthropic import AsyncAnthropic

from .llm_clients import (
    BaseLLMClient,
    TokenUsage,
    LLMMessage,
    LLMResponse,
    GenerationConfig,
)

logger = logging.getLogger(__name__)


class ClaudeClient(BaseLLMClient):
    """
    Claude client.

    The Messages API requires max_tokens on every request, so requests that
    do not set one use `default_max_tokens`.
    """

    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        default_max_tokens: int = 4096,
    ):
        super().__init__()
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY not found in environment")

        self._model = model or self.DEFAULT_MODEL
        self._default_max_tokens = default_max_tokens
        self._client = AsyncAnthropic(api_key=self.api_key)

        logger.info(f"Initialized Claude client with model {self._model}")

    @property
    def model_name(self) -> str:
        return self._model

    def _convert_messages(
        self, messages: List[LLMMessage]
    ) -> Tuple[Optional[str], List[Dict[str, str]]]:
        """Split out the system message; Anthropic takes it as a separate argument"""
        system_message = None
        anthropic_messages = []

        for msg in messages:
            if msg.role == "system":
                system_message = msg.content
            else:
                anthropic_messages.append({
                    "role": msg.role,
                    "content": msg.content
                })
        return system_message, anthropic_messages

    def _request_kwargs(
        self,
        messages: List[LLMMessage],
        config: GenerationConfig,
    ) -> Dict[str, Any]:
        system_message, anthropic_messages = self._convert_messages(messages)
        kwargs: Dict[str, Any] = {
            "model": self._model,
            "max_tokens": config.max_output_tokens or self._default_max_tokens,
            "messages": anthropic_messages,
        }
        if system_message:
            kwargs["system"] = system_message
        if config.temperature is not None:
            kwargs["temperature"] = config.temperature
        if config.top_p is not None:
            kwargs["top_p"] = config.top_p
        if config.top_k is not None:
            kwargs["top_k"] = config.top_k
        if config.stop_sequences:
            kwargs["stop_sequences"] = config.stop_sequences
        kwargs.update(config.extra)
        return kwargs

    async def generate(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> LLMResponse:
        """Generate a completion using Claude."""
        config = config or GenerationConfig()
        start_time = time.time()

        try:
            response = await self._client.messages.create(
                **self._request_kwargs(messages, config)
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            raise

        latency_ms = (time.time() - start_time) * 1000

        content = ""
        for block in response.content:
            if hasattr(block, "text"):
                content += block.text

        usage = TokenUsage(
            prompt_tokens=response.usage.input_tokens,
            completion_tokens=response.usage.output_tokens,
            total_tokens=response.usage.input_tokens + response.usage.output_tokens
        )
        self._track_usage(usage)

        return LLMResponse(
            content=content,
            model=self._model,
            token_usage=usage,
            finish_reason=response.stop_reason or "stop",
            latency_ms=latency_ms,
            raw_response={"id": response.id, "model": response.model}
        )

    async def generate_stream(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> AsyncIterator[str]:
        """Generate a streaming completion using Claude."""
        config = config or GenerationConfig()

        async with self._client.messages.stream(
            **self._request_kwargs(messages, config)
        ) as stream:
            async for text in stream.text_stream:
                yield text
