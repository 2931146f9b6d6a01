"""
OpenAI Client

Chat Completions transport for OpenAI and OpenAI-compatible endpoints.
This is the default route for model names that are not claimed by another
provider.
"""

import os
import time
import logging
from typing import Optional, List, Dict, Any, AsyncIterator

import openai
from openai import AsyncOpenAI

from .llm_clients import (
    BaseLLMClient,
    TokenUsage,
    LLMMessage,
    LLMResponse,
    GenerationConfig,
)

logger = logging.getLogger(__name__)


class OpenAIClient(BaseLLMClient):
    """OpenAI chat completions client"""

    DEFAULT_MODEL = "gpt-3.5-turbo"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__()
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY not found in environment")

        self._model = model or self.DEFAULT_MODEL
        self._client = AsyncOpenAI(api_key=self.api_key, base_url=base_url)

        logger.info(f"Initialized OpenAI client with model {self._model}")

    @property
    def model_name(self) -> str:
        return self._model

    def _request_kwargs(
        self,
        messages: List[LLMMessage],
        config: GenerationConfig,
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "model": self._model,
            "messages": [msg.to_dict() for msg in messages],
        }
        if config.temperature is not None:
            kwargs["temperature"] = config.temperature
        if config.max_output_tokens is not None:
            kwargs["max_tokens"] = config.max_output_tokens
        if config.top_p is not None:
            kwargs["top_p"] = config.top_p
        if config.stop_sequences:
            kwargs["stop"] = config.stop_sequences
        kwargs.update(config.extra)
        return kwargs

    async def generate(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> LLMResponse:
        """Generate a completion using OpenAI."""
        config = config or GenerationConfig()
        start_time = time.time()

        try:
            response = await self._client.chat.completions.create(
                **self._request_kwargs(messages, config)
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise

        latency_ms = (time.time() - start_time) * 1000

        choice = response.choices[0] if response.choices else None
        content = (choice.message.content if choice else None) or ""

        usage = TokenUsage()
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )
        self._track_usage(usage)

        return LLMResponse(
            content=content,
            model=self._model,
            token_usage=usage,
            finish_reason=(choice.finish_reason if choice else None) or "stop",
            latency_ms=latency_ms,
            raw_response={"id": response.id, "model": response.model}
        )

    async def generate_stream(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> AsyncIterator[str]:
        """Generate a streaming completion using OpenAI."""
        config = config or GenerationConfig()

        try:
            stream = await self._client.chat.completions.create(
                stream=True,
                **self._request_kwargs(messages, config)
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI streaming error: {e}")
            raise

        # The HTTP response is released on exit, including an early close
        async with stream:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
