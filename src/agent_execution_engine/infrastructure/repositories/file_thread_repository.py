"""File-based implementation of the conversation thread repository."""

import json
import logging
from pathlib import Path

from agent_execution_engine.domain.exceptions import ThreadDeserializationError
from agent_execution_engine.domain.interfaces.conversation_repository_interface import (
    IThreadRepository,
)
from agent_execution_engine.domain.models.conversation_models import ConversationThread

logger = logging.getLogger(__name__)


class FileThreadRepository(IThreadRepository):
    """Stores each thread as one JSON file."""

    def __init__(self, storage_dir: str | Path = "conversations"):
        """Initialize with storage directory."""
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _get_thread_path(self, thread_id: str) -> Path:
        """Get the file path for a thread."""
        if not thread_id or Path(thread_id).name != thread_id:
            raise ValueError(f"Invalid thread id: {thread_id!r}")
        return self.storage_dir / f"{thread_id}.json"

    async def save_thread(self, thread: ConversationThread) -> None:
        """Save a conversation thread to file."""
        thread_path = self._get_thread_path(thread.thread_id)
        serialized_data = thread.serialize()

        tmp_path = thread_path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(serialized_data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(thread_path)
        logger.debug("Saved thread %s (%d messages)", thread.thread_id, len(thread))

    async def load_thread(self, thread_id: str) -> ConversationThread | None:
        """
        Load a conversation thread from file.

        Returns:
            The thread, or None if no file exists for the ID

        Raises:
            ThreadDeserializationError: If the file is corrupted
        """
        thread_path = self._get_thread_path(thread_id)

        if not thread_path.exists():
            return None

        try:
            with open(thread_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ThreadDeserializationError(
                f"Thread file {thread_path.name} is not valid JSON: {e}",
                details={"thread_id": thread_id},
            ) from e

        return ConversationThread.deserialize(data)

    async def delete_thread(self, thread_id: str) -> bool:
        """Delete a conversation thread file."""
        thread_path = self._get_thread_path(thread_id)

        if thread_path.exists():
            try:
                thread_path.unlink()
                return True
            except OSError as e:
                logger.warning("Could not delete thread %s: %s", thread_id, e)
                return False

        return False

    async def list_thread_ids(self) -> list[str]:
        """List stored thread IDs, newest first."""
        json_files = list(self.storage_dir.glob("*.json"))
        json_files.sort(key=lambda x: x.stat().st_mtime, reverse=True)
        return [path.stem for path in json_files]
