"""Agent interface definitions."""

from abc import ABC, abstractmethod
from typing import Any

from ..cancellation import CancellationToken
from ..models.conversation_models import ConversationThread
from ..models.execution_models import ExecutionResult


class IAgent(ABC):
    """Interface for agents that execute tasks over a conversation thread."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the agent's name."""
        pass

    @abstractmethod
    async def execute(
        self,
        task: str,
        max_iterations: int = 5,
        session_id: str | None = None,
        cancellation: CancellationToken | None = None,
    ) -> ExecutionResult:
        """
        Execute a task, continuing the agent's current conversation.

        Args:
            task: User task to execute
            max_iterations: Maximum dialogue iterations
            session_id: Receiver of progress events
            cancellation: Optional cancellation signal

        Returns:
            ExecutionResult summarising the run
        """
        pass

    @abstractmethod
    def reset_conversation(self) -> None:
        """Drop the current conversation; the next execution starts a fresh thread."""
        pass

    def get_new_thread(self) -> ConversationThread:
        """
        Create a new conversation thread for this agent.

        Returns:
            New ConversationThread instance
        """
        return ConversationThread()

    def deserialize_thread(self, data: dict[str, Any]) -> ConversationThread:
        """
        Deserialize a conversation thread from data.

        Args:
            data: Serialized thread data

        Returns:
            ConversationThread instance

        Raises:
            ThreadDeserializationError: If the data is malformed
        """
        return ConversationThread.deserialize(data)
