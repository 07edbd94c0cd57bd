"""Repository interface for conversation thread persistence."""

from abc import ABC, abstractmethod

from agent_execution_engine.domain.models.conversation_models import ConversationThread


class IThreadRepository(ABC):
    """Stores serialized threads so a dialogue can be resumed later."""

    @abstractmethod
    async def save_thread(self, thread: ConversationThread) -> None:
        """Persist a thread, replacing any stored copy with the same ID."""
        pass

    @abstractmethod
    async def load_thread(self, thread_id: str) -> ConversationThread | None:
        """
        Load a stored thread.

        Returns:
            The thread, or None when nothing is stored under the ID

        Raises:
            ThreadDeserializationError: If the stored data is malformed
        """
        pass

    @abstractmethod
    async def delete_thread(self, thread_id: str) -> bool:
        """Remove a stored thread; False when there was nothing to remove."""
        pass

    @abstractmethod
    async def list_thread_ids(self) -> list[str]:
        """List the IDs of stored threads, newest first."""
        pass
