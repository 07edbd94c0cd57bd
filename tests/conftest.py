"""Pytest configuration and fixtures for the Agent Execution Engine tests."""

from collections.abc import AsyncIterator, Sequence

import pytest

from agent_execution_engine.application.factories import ModelRegistry
from agent_execution_engine.domain.cancellation import CancellationToken
from agent_execution_engine.domain.interfaces import IChatCompletionProvider, IProgressSink
from agent_execution_engine.domain.models import (
    ChatOptions,
    ChatRole,
    Message,
    ModelConfig,
    ProgressEvent,
    ResponseFragment,
    TextContent,
)


class ScriptedProvider(IChatCompletionProvider):
    """Fake provider that answers each call with the next scripted response.

    A response is either a string (streamed word by word), a list of
    fragments, an exception instance that is raised, or a callable that
    returns an async iterator of fragments (streaming only).
    """

    def __init__(self, responses: Sequence, model_name: str = "test-model"):
        self._responses = list(responses)
        self._model_name = model_name
        self.calls: list[tuple[Message, ...]] = []
        self.options: list[ChatOptions | None] = []
        self.closed = False

    @property
    def model_name(self) -> str:
        return self._model_name

    def _next(self, messages: Sequence[Message], options: ChatOptions | None):
        self.calls.append(tuple(messages))
        self.options.append(options)
        if not self._responses:
            raise AssertionError("ScriptedProvider ran out of responses")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def get_response(
        self,
        messages: Sequence[Message],
        options: ChatOptions | None = None,
        cancellation: CancellationToken | None = None,
    ) -> Message:
        response = self._next(messages, options)
        if isinstance(response, str):
            return Message.from_text(ChatRole.ASSISTANT, response)
        contents = tuple(item for fragment in response for item in fragment.contents)
        return Message(role=ChatRole.ASSISTANT, contents=contents)

    async def get_streaming_response(
        self,
        messages: Sequence[Message],
        options: ChatOptions | None = None,
        cancellation: CancellationToken | None = None,
    ) -> AsyncIterator[ResponseFragment]:
        response = self._next(messages, options)
        if isinstance(response, str):
            words = response.split(" ")
            for index, word in enumerate(words):
                text = word if index == len(words) - 1 else word + " "
                yield ResponseFragment(role=ChatRole.ASSISTANT, contents=(TextContent(text=text),))
        elif callable(response):
            async for fragment in response():
                yield fragment
        else:
            for fragment in response:
                yield fragment

    async def aclose(self) -> None:
        self.closed = True


class RecordingProgressSink(IProgressSink):
    """Progress sink that records events and can run a hook on each delivery."""

    def __init__(self, on_event=None):
        self.events: list[tuple[str, ProgressEvent]] = []
        self._on_event = on_event

    async def send(self, session_id: str, event: ProgressEvent) -> None:
        self.events.append((session_id, event))
        if self._on_event is not None:
            self._on_event(event)

    @property
    def stages(self) -> list[str]:
        return [event.stage for _, event in self.events]


@pytest.fixture
def model_configs():
    """Create sample model configurations for testing."""
    return [
        ModelConfig(name="ZAI-GLM-4.5", model_path="/models/glm.gguf", system_prompt="You are GLM."),
        ModelConfig(name="Qwen2.5-Coder-7B", model_path="/models/qwen.gguf", system_prompt="You are Qwen."),
        ModelConfig(name="Qwen3-Coder", model_path="/models/qwen3.gguf", system_prompt="You are Qwen3."),
        ModelConfig(name="Deepseek-Coder-v2", model_path="/models/ds.gguf", system_prompt="You are Deepseek."),
    ]


@pytest.fixture
def category_models():
    """Category routing table matching the sample models."""
    return {
        "code": "Qwen2.5-Coder-7B",
        "agent": "Qwen3-Coder",
        "analysis": "Deepseek-Coder-v2",
        "default": "ZAI-GLM-4.5",
    }


@pytest.fixture
def registry(model_configs):
    """Create a model registry over the sample models."""
    return ModelRegistry(model_configs, provider_factory=lambda config: ScriptedProvider([], config.name))


@pytest.fixture
def progress_sink():
    """Create a recording progress sink."""
    return RecordingProgressSink()


@pytest.fixture
def make_provider():
    """Factory for scripted providers."""
    return ScriptedProvider


@pytest.fixture
def make_sink():
    """Factory for recording progress sinks with an optional hook."""
    return RecordingProgressSink


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
