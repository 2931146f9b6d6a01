"""
Gemini Client

Google Generative AI transport. Selected for model names starting with
"gemini". The SDK is synchronous, so calls run in a worker thread.
"""

import os
import time
import asyncio
import logging
from typing import Optional, List, Dict, Any, AsyncIterator

import google.generativeai as genai

from .llm_clients import (
    BaseLLMClient,
    LLMMessage,
    LLMResponse,
    GenerationConfig,
    TokenUsage,
)

logger = logging.getLogger(__name__)

# Marks the end of a streamed reply crossing the thread boundary
_STREAM_END = object()


class GeminiClient(BaseLLMClient):
    """Gemini client"""

    DEFAULT_MODEL = "gemini-1.5-flash"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Google API key (or from GOOGLE_API_KEY env)
            model: Model to use (gemini-1.5-pro, gemini-1.5-flash, ...)
        """
        super().__init__()

        self._model_name = model or self.DEFAULT_MODEL
        self._api_key = api_key or os.getenv("GOOGLE_API_KEY")
        if not self._api_key:
            raise ValueError("GOOGLE_API_KEY not found in environment")

        genai.configure(api_key=self._api_key)
        self._model = genai.GenerativeModel(model_name=self._model_name)

        logger.info(f"Gemini client initialized with model: {self._model_name}")

    @property
    def model_name(self) -> str:
        return self._model_name

    def _generation_config(self, config: GenerationConfig):
        return genai.types.GenerationConfig(
            temperature=config.temperature,
            max_output_tokens=config.max_output_tokens,
            top_p=config.top_p,
            top_k=config.top_k,
            stop_sequences=config.stop_sequences or None,
            **config.extra
        )

    async def generate(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> LLMResponse:
        """
        Generate a completion using Gemini.

        Args:
            messages: Conversation messages
            config: Generation configuration

        Returns:
            LLMResponse with generated content
        """
        config = config or GenerationConfig()
        start_time = time.time()

        try:
            response = await asyncio.to_thread(
                self._model.generate_content,
                self._convert_messages(messages),
                generation_config=self._generation_config(config)
            )
        except Exception as e:
            logger.error(f"Gemini generation error: {e}")
            raise

        content = ""
        if response.candidates:
            content = "".join(
                part.text for part in response.candidates[0].content.parts
                if getattr(part, "text", None)
            )

        metadata = getattr(response, "usage_metadata", None)
        prompt_tokens = metadata.prompt_token_count if metadata else 0
        completion_tokens = metadata.candidates_token_count if metadata else 0

        usage = TokenUsage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens
        )
        self._track_usage(usage)

        latency_ms = (time.time() - start_time) * 1000

        return LLMResponse(
            content=content,
            model=self._model_name,
            token_usage=usage,
            finish_reason="stop",
            latency_ms=latency_ms,
            raw_response={"candidates": len(response.candidates) if response.candidates else 0}
        )

    async def generate_stream(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> AsyncIterator[str]:
        """
        Generate streaming completion using Gemini.

        The SDK's streaming iterator blocks, so each chunk is pulled in a
        worker thread.
        """
        config = config or GenerationConfig()

        try:
            response = await asyncio.to_thread(
                self._model.generate_content,
                self._convert_messages(messages),
                generation_config=self._generation_config(config),
                stream=True
            )
        except Exception as e:
            logger.error(f"Gemini streaming error: {e}")
            raise

        chunks = iter(response)
        while True:
            chunk = await asyncio.to_thread(next, chunks, _STREAM_END)
            if chunk is _STREAM_END:
                break
            if chunk.text:
                yield chunk.text

    def _convert_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert LLMMessage format to Gemini format"""
        gemini_messages = []

        # Combine system message with first user message
        system_content = ""
        for msg in messages:
            if msg.role == "system":
                system_content = msg.content + "\n\n"
            elif msg.role == "user":
                content = system_content + msg.content if system_content else msg.content
                gemini_messages.append({"role": "user", "parts": [content]})
                system_content = ""
            elif msg.role == "assistant":
                gemini_messages.append({"role": "model", "parts": [msg.content]})

        return gemini_messages
