"""Agent backed by a local chat completion provider that keeps one conversation thread."""

import logging
from typing import Any

from agent_execution_engine.application.services.conversation_loop import (
    ConversationLoopController,
    LoopOptions,
)
from agent_execution_engine.domain.cancellation import CancellationToken
from agent_execution_engine.domain.interfaces import (
    IAgent,
    IChatCompletionProvider,
    IProgressSink,
)
from agent_execution_engine.domain.models import ConversationThread, ExecutionResult

logger = logging.getLogger(__name__)


class LocalModelAgent(IAgent):
    """Executes tasks against one provider, continuing the same thread across calls."""

    def __init__(
        self,
        provider: IChatCompletionProvider,
        instructions: str,
        progress_sink: IProgressSink | None = None,
        options: LoopOptions | None = None,
        name: str | None = None,
    ):
        self._provider = provider
        self._instructions = instructions
        self._name = name or f"{provider.model_name} agent"
        self._controller = ConversationLoopController(
            provider=provider,
            progress_sink=progress_sink,
            options=options,
        )
        self._thread: ConversationThread | None = None

    @property
    def name(self) -> str:
        """Get the agent's name."""
        return self._name

    @property
    def thread(self) -> ConversationThread | None:
        """The active thread, or None when no conversation is active."""
        return self._thread

    def use_thread(self, thread: ConversationThread) -> None:
        """Continue an existing (for example deserialized) thread."""
        self._thread = thread

    async def execute(
        self,
        task: str,
        max_iterations: int = 5,
        session_id: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ExecutionResult:
        """Execute a task on the active thread, creating one when needed."""
        if self._thread is None:
            self._thread = self.get_new_thread()
            logger.debug("Agent '%s' started thread %s", self._name, self._thread.thread_id)

        return await self._controller.run(
            thread=self._thread,
            system_message=self._instructions,
            dialogue_turn=task,
            session_id=session_id or self._thread.thread_id,
            cancellation=cancellation,
            max_iterations=max_iterations,
        )

    def reset_conversation(self) -> None:
        """Drop the active thread; the next execution starts a fresh one."""
        if self._thread is not None:
            logger.debug("Agent '%s' discarded thread %s", self._name, self._thread.thread_id)
        self._thread = None

    def serialize_thread(self) -> dict[str, Any] | None:
        """Serialize the active thread, or None when no conversation is active."""
        return self._thread.serialize() if self._thread is not None else None
