"""Streaming update aggregation: response fragments to a final message and a step trace."""

import json
import logging
from collections.abc import AsyncIterable
from dataclasses import dataclass, field
from typing import assert_never

from agent_execution_engine.domain.cancellation import CancellationToken
from agent_execution_engine.domain.exceptions import (
    OperationCancelledError,
    ProviderError,
)
from agent_execution_engine.domain.models import (
    TOOL_NOT_EXECUTED,
    ChatRole,
    Content,
    DataContent,
    ExecutionStep,
    FunctionCallContent,
    FunctionResultContent,
    Message,
    ResponseFragment,
    TextContent,
    UsageContent,
    UsageDetails,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregatedResponse:
    """Final message, usage and derived steps of one provider response."""

    message: Message
    usage: UsageDetails | None = None
    steps: tuple[ExecutionStep, ...] = ()
    response_id: str | None = None

    @property
    def text(self) -> str:
        return self.message.text


@dataclass
class _AggregationState:
    iteration: int
    role: ChatRole | None = None
    contents: list[Content] = field(default_factory=list)
    steps: list[ExecutionStep] = field(default_factory=list)
    message_id: str | None = None
    author_name: str | None = None
    response_id: str | None = None
    usage: UsageDetails | None = None
    has_thought: bool = False


def serialize_arguments(arguments: object) -> str | None:
    """JSON form of tool-call arguments, or their str() when they are not JSON serializable."""
    if arguments is None:
        return None
    try:
        return json.dumps(arguments)
    except (TypeError, ValueError):
        return str(arguments)


class StreamingUpdateAggregator:
    """Folds a fragment stream into one message while deriving execution steps."""

    async def aggregate(
        self,
        fragments: AsyncIterable[ResponseFragment],
        iteration: int = 1,
        cancellation: CancellationToken | None = None,
    ) -> AggregatedResponse:
        """
        Consume a fragment stream to completion.

        Args:
            fragments: Finite, single-pass stream of response fragments
            iteration: Loop iteration recorded on derived steps
            cancellation: Checked before every pull from the stream

        Returns:
            AggregatedResponse with the final message, last usage seen and steps

        Raises:
            OperationCancelledError: If cancelled; partial output is discarded
            ProviderError: If the stream fails; the output aggregated so far is
                attached as its ``partial`` response
        """
        state = _AggregationState(iteration=iteration)
        iterator = aiter(fragments)
        try:
            while True:
                try:
                    if cancellation is not None:
                        fragment = await cancellation.race(anext(iterator))
                    else:
                        fragment = await anext(iterator)
                except StopAsyncIteration:
                    break
                except (OperationCancelledError, ProviderError):
                    raise
                except Exception as e:
                    raise ProviderError(
                        f"Response stream failed: {e}",
                        iteration=iteration,
                        partial=self._finish(state),
                    ) from e
                self._fold(state, fragment)
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

        return self._finish(state)

    def aggregate_message(self, message: Message, iteration: int = 1) -> AggregatedResponse:
        """Aggregate a complete, non-streamed response as a single fragment."""
        state = _AggregationState(iteration=iteration)
        self._fold(state, ResponseFragment.from_message(message))
        return self._finish(state)

    def _fold(self, state: _AggregationState, fragment: ResponseFragment) -> None:
        if fragment.role is not None:
            state.role = fragment.role
        if fragment.message_id is not None:
            state.message_id = fragment.message_id
        if fragment.author_name is not None:
            state.author_name = fragment.author_name
        if fragment.response_id is not None:
            state.response_id = fragment.response_id

        for content in fragment.contents:
            state.contents.append(content)
            step = self._classify(state, content)
            if step is not None:
                state.steps.append(step)

    def _classify(self, state: _AggregationState, content: Content) -> ExecutionStep | None:
        match content:
            case TextContent(text=text):
                if state.has_thought or not text:
                    return None
                state.has_thought = True
                return ExecutionStep(iteration=state.iteration, thought=text)
            case FunctionCallContent(name=name, arguments=arguments):
                return ExecutionStep(
                    iteration=state.iteration,
                    thought="",
                    action=name,
                    action_input=serialize_arguments(arguments),
                    observation=TOOL_NOT_EXECUTED,
                )
            case FunctionResultContent(result=result):
                return ExecutionStep(
                    iteration=state.iteration,
                    observation="" if result is None else str(result),
                )
            case UsageContent(details=details):
                state.usage = details
                return None
            case DataContent():
                return None
            case _:
                assert_never(content)

    def _finish(self, state: _AggregationState) -> AggregatedResponse:
        contents = tuple(
            content for content in state.contents if not (isinstance(content, TextContent) and not content.text)
        )
        message = Message(
            role=state.role or ChatRole.ASSISTANT,
            contents=contents,
            message_id=state.message_id,
            author_name=state.author_name,
        )
        logger.debug(
            "Aggregated %d content item(s) into %d step(s) for iteration %d",
            len(contents),
            len(state.steps),
            state.iteration,
        )
        return AggregatedResponse(
            message=message,
            usage=state.usage,
            steps=tuple(state.steps),
            response_id=state.response_id,
        )
