"""Conversation loop controller: bounded multi-turn dialogue with a termination policy."""

import logging
import time

from pydantic import BaseModel, ConfigDict, Field

from agent_execution_engine.application.services.stream_aggregator import (
    AggregatedResponse,
    StreamingUpdateAggregator,
)
from agent_execution_engine.domain.cancellation import CancellationToken
from agent_execution_engine.domain.exceptions import (
    OperationCancelledError,
    ProviderError,
)
from agent_execution_engine.domain.interfaces import IChatCompletionProvider, IProgressSink
from agent_execution_engine.domain.models import (
    ChatOptions,
    ChatRole,
    ConversationThread,
    ExecutionResult,
    ExecutionStep,
    LoopState,
    Message,
    ProgressEvent,
    UsageDetails,
)

logger = logging.getLogger(__name__)

COMPLETED_STAGE = "Completed"
MAX_ITERATION_PROGRESS = 95
PROGRESS_PER_ITERATION = 20


class LoopOptions(BaseModel):
    """Termination policy and inference options of the conversation loop."""

    model_config = ConfigDict(frozen=True)

    max_iterations: int = Field(default=5, ge=1)
    completion_marker: str = Field(default="[DONE]", min_length=1)
    continuation_prompt: str = "Proceed to the next step."
    use_streaming: bool = True
    chat_options: ChatOptions | None = None

    @classmethod
    def from_settings(cls) -> "LoopOptions":
        """Build options from the engine settings."""
        from agent_execution_engine.config import settings

        engine = settings.engine
        return cls(
            max_iterations=engine.max_iterations,
            completion_marker=engine.completion_marker,
            continuation_prompt=engine.continuation_prompt,
            use_streaming=engine.use_streaming,
            chat_options=engine.to_chat_options(),
        )


def iteration_progress(iteration: int) -> int:
    """Progress percentage reported after an iteration, always below 100."""
    return min(MAX_ITERATION_PROGRESS, iteration * PROGRESS_PER_ITERATION)


class _Run:
    """Mutable bookkeeping of one loop execution."""

    def __init__(self, thread: ConversationThread):
        self.thread = thread
        self.state = LoopState.SEEDING
        self.iteration = 0
        self.final_answer = ""
        self.steps: list[ExecutionStep] = []
        self.usage: UsageDetails | None = None

    def add_usage(self, usage: UsageDetails | None) -> None:
        if usage is not None:
            self.usage = usage if self.usage is None else self.usage + usage

    def result(self, success: bool, cancelled: bool = False, error_message: str | None = None) -> ExecutionResult:
        return ExecutionResult(
            success=success,
            final_answer=self.final_answer,
            steps=tuple(self.steps),
            error_message=error_message,
            cancelled=cancelled,
            iterations=self.iteration,
            thread_id=self.thread.thread_id,
            usage=self.usage,
        )


class ConversationLoopController:
    """Drives repeated provider turns until the completion marker or the iteration cap."""

    def __init__(
        self,
        provider: IChatCompletionProvider,
        progress_sink: IProgressSink | None = None,
        aggregator: StreamingUpdateAggregator | None = None,
        options: LoopOptions | None = None,
    ):
        self._provider = provider
        self._progress_sink = progress_sink
        self._aggregator = aggregator or StreamingUpdateAggregator()
        self._options = options or LoopOptions()

    @property
    def options(self) -> LoopOptions:
        return self._options

    async def run(
        self,
        thread: ConversationThread,
        system_message: str,
        dialogue_turn: str,
        session_id: str = "",
        cancellation: CancellationToken | None = None,
        max_iterations: int | None = None,
    ) -> ExecutionResult:
        """
        Execute one task over the given thread.

        Args:
            thread: Conversation thread, mutated in place
            system_message: System message used when the thread is empty
            dialogue_turn: User message that starts this execution
            session_id: Receiver of progress events
            cancellation: Optional cancellation signal
            max_iterations: Overrides the configured iteration cap

        Returns:
            ExecutionResult. Provider failures and cancellation are reported in
            the result rather than raised.

        Raises:
            ValueError: If max_iterations is lower than 1
        """
        limit = self._options.max_iterations if max_iterations is None else max_iterations
        if limit < 1:
            raise ValueError(f"max_iterations must be at least 1, got {limit}")

        run = _Run(thread)
        start_time = time.time()

        if thread.is_empty:
            thread.add_message(Message.from_text(ChatRole.SYSTEM, system_message))
        thread.add_message(Message.from_text(ChatRole.USER, dialogue_turn))
        run.iteration = 1

        try:
            while True:
                self._transition(run, LoopState.AWAITING_RESPONSE)
                if cancellation is not None:
                    cancellation.raise_if_cancelled()
                response = await self._request(run, cancellation)

                run.final_answer = response.text.strip()
                run.steps.extend(response.steps)
                run.add_usage(response.usage)
                await self._notify(
                    session_id,
                    ProgressEvent(
                        stage=f"Iteration {run.iteration}",
                        message=run.final_answer,
                        progress_percentage=iteration_progress(run.iteration),
                    ),
                )

                self._transition(run, LoopState.EVALUATING)
                if self._should_stop(run.final_answer, run.iteration, limit):
                    thread.add_message(response.message)
                    break

                if cancellation is not None and cancellation.is_cancelled:
                    raise OperationCancelledError()

                thread.add_message(response.message)
                thread.add_message(Message.from_text(ChatRole.USER, self._options.continuation_prompt))
                run.iteration += 1
        except OperationCancelledError:
            self._transition(run, LoopState.CANCELLED)
            logger.info("Execution cancelled during iteration %d of thread %s", run.iteration, thread.thread_id)
            return run.result(success=False, cancelled=True, error_message="Execution was cancelled")
        except ProviderError as e:
            self._transition(run, LoopState.FAILED)
            logger.error("Provider failed during iteration %d: %s", run.iteration, e)
            if isinstance(e.partial, AggregatedResponse):
                run.steps.extend(e.partial.steps)
                run.add_usage(e.partial.usage)
                partial_answer = e.partial.text.strip()
                if partial_answer:
                    run.final_answer = partial_answer
            return run.result(success=False, error_message=str(e))

        self._transition(run, LoopState.COMPLETED)
        await self._notify(
            session_id,
            ProgressEvent(stage=COMPLETED_STAGE, message=run.final_answer, progress_percentage=100),
        )
        logger.info(
            "Execution completed after %d iteration(s) in %.2fs",
            run.iteration,
            time.time() - start_time,
        )
        return run.result(success=True)

    def _should_stop(self, answer: str, iteration: int, limit: int) -> bool:
        return self._options.completion_marker in answer or iteration >= limit

    async def _request(self, run: _Run, cancellation: CancellationToken | None) -> AggregatedResponse:
        history = run.thread.messages
        options = self._options.chat_options
        try:
            if self._options.use_streaming:
                fragments = self._provider.get_streaming_response(history, options, cancellation)
                return await self._aggregator.aggregate(fragments, iteration=run.iteration, cancellation=cancellation)

            pending = self._provider.get_response(history, options, cancellation)
            message = await (cancellation.race(pending) if cancellation is not None else pending)
            return self._aggregator.aggregate_message(message, iteration=run.iteration)
        except (OperationCancelledError, ProviderError):
            raise
        except Exception as e:
            raise ProviderError(
                f"Chat completion failed: {e}",
                model_name=self._provider.model_name,
                iteration=run.iteration,
            ) from e

    async def _notify(self, session_id: str, event: ProgressEvent) -> None:
        if self._progress_sink is None:
            return
        try:
            await self._progress_sink.send(session_id, event)
        except Exception as e:
            logger.warning("Progress event '%s' was not delivered: %s", event.stage, e)

    @staticmethod
    def _transition(run: _Run, state: LoopState) -> None:
        logger.debug(
            "Loop %s: %s -> %s (iteration %d)",
            run.thread.thread_id,
            run.state.value,
            state.value,
            run.iteration,
        )
        run.state = state
