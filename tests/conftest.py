"""
promptsig Test Configuration
============================

Fixtures:
- FakeLLMClient: scripted transport with a canned reply or chunk list
- Sample modules: question answering, typed outputs, schema-declared
- Isolated configuration (environment-derived settings reset per test)
"""

import pytest
import asyncio
import sys
import os
from typing import List, Optional, AsyncIterator

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import BaseModel, Field as SchemaField

from promptsig.core.fields import Field, Module
from promptsig.core.config import PromptsigConfig, set_config
from promptsig.integrations.llm_clients import (
    BaseLLMClient,
    GenerationConfig,
    LLMMessage,
    LLMResponse,
    TokenUsage,
)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (may use real services)")
    config.addinivalue_line("markers", "e2e: End-to-end tests (full workflow)")
    config.addinivalue_line("markers", "slow: Slow tests (>5s)")


_ENV_KEYS = (
    "PROMPTSIG_MODEL",
    "PROMPTSIG_DEBOUNCE_MS",
    "PROMPTSIG_VALIDATE",
)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Fresh global configuration for every test"""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def config_without_keys(monkeypatch) -> PromptsigConfig:
    """Configuration with no provider credentials at all"""
    for key in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    config = PromptsigConfig.from_env()
    set_config(config)
    return config


# =============================================================================
# Fake transport
# =============================================================================

class FakeLLMClient(BaseLLMClient):
    """
    Scripted transport.

    generate() returns `reply`; generate_stream() yields `chunks` (or the
    reply as one chunk), sleeping `delay` seconds before each one. Every
    request is recorded so tests can inspect the rendered prompt.
    """

    def __init__(
        self,
        reply: str = "",
        chunks: Optional[List[str]] = None,
        delay: float = 0.0,
        fail_after: Optional[int] = None,
    ):
        super().__init__()
        self.reply = reply
        self.chunks = chunks if chunks is not None else [reply]
        self.delay = delay
        self.fail_after = fail_after
        self.requests: List[List[LLMMessage]] = []
        self.configs: List[GenerationConfig] = []
        self.chunks_sent = 0
        self.stream_closed = False

    @property
    def model_name(self) -> str:
        return "fake-model"

    @property
    def last_prompt(self) -> str:
        return self.requests[-1][-1].content

    async def generate(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> LLMResponse:
        self.requests.append(messages)
        self.configs.append(config)
        self._track_usage(TokenUsage(total_tokens=1))
        return LLMResponse(content=self.reply, model=self.model_name)

    async def generate_stream(
        self,
        messages: List[LLMMessage],
        config: Optional[GenerationConfig] = None,
    ) -> AsyncIterator[str]:
        self.requests.append(messages)
        self.configs.append(config)
        try:
            for chunk in self.chunks:
                if self.fail_after is not None and self.chunks_sent >= self.fail_after:
                    raise ConnectionError("transport dropped")
                if self.delay:
                    await asyncio.sleep(self.delay)
                self.chunks_sent += 1
                yield chunk
        finally:
            self.stream_closed = True


@pytest.fixture
def fake_client():
    """Factory for scripted transports"""
    def _make(reply: str = "", **kwargs) -> FakeLLMClient:
        return FakeLLMClient(reply=reply, **kwargs)
    return _make


# =============================================================================
# Sample modules
# =============================================================================

@pytest.fixture
def qa_module() -> Module:
    """question -> answer, both strings"""
    return Module(
        inputs=[Field("question", "string", "The question to answer")],
        outputs=[Field("answer", "string", "The answer")],
    )


@pytest.fixture
def typed_module() -> Module:
    """One output of every primitive type"""
    return Module(
        inputs=[Field("text", "str", "Source text")],
        outputs=[
            Field("summary", "str", "One sentence summary"),
            Field("count", "int", "Number of sentences"),
            Field("score", "float", "Sentiment score"),
            Field("positive", "bool", "Whether the tone is positive"),
        ],
        instructions="Summarize the text.",
    )


class CityQuery(BaseModel):
    country: str = SchemaField(description="A country name")


class CityAnswer(BaseModel):
    city: str = SchemaField(description="The capital city")
    population: int = SchemaField(description="Approximate population")


@pytest.fixture
def schema_module() -> Module:
    """Both sides declared through pydantic schemas"""
    return Module(
        input_schema=CityQuery,
        output_schema=CityAnswer,
        instructions="Name the capital.",
    )
