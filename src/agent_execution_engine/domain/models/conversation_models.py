"""Conversation thread: the append-only message history of one conversation."""

from collections.abc import Iterable
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, PrivateAttr, TypeAdapter, ValidationError

from ..exceptions import ThreadDeserializationError
from .messages import Message

_MESSAGE_LIST = TypeAdapter(list[Message])


class ConversationThread(BaseModel):
    """Ordered, append-only message history owned by one logical conversation."""

    thread_id: str = Field(default_factory=lambda: str(uuid4()))
    _messages: list[Message] = PrivateAttr(default_factory=list)

    @property
    def messages(self) -> tuple[Message, ...]:
        """Read-only view of the history in append order."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def is_empty(self) -> bool:
        return not self._messages

    def add_message(self, message: Message) -> None:
        """Append a single message."""
        if not isinstance(message, Message):
            raise TypeError(f"Expected Message, got {type(message).__name__}")
        self._messages.append(message)

    def add_messages(self, messages: Iterable[Message]) -> None:
        """Append several messages; nothing is appended if any item is not a Message."""
        batch = list(messages)
        for message in batch:
            if not isinstance(message, Message):
                raise TypeError(f"Expected Message, got {type(message).__name__}")
        self._messages.extend(batch)

    def reset(self) -> None:
        """Discard the history and start over under a new thread id."""
        self._messages = []
        self.thread_id = str(uuid4())

    def export_messages(self) -> list[dict[str, Any]]:
        """Export the history as JSON-compatible records."""
        return _MESSAGE_LIST.dump_python(self._messages, mode="json", exclude_none=True)

    def import_messages(self, data: Any) -> None:
        """
        Append messages previously produced by export_messages.

        Args:
            data: List of message records

        Raises:
            ThreadDeserializationError: If the records are malformed. The thread
                is left exactly as it was.
        """
        try:
            messages = _MESSAGE_LIST.validate_python(data)
        except ValidationError as e:
            raise ThreadDeserializationError(
                f"Invalid thread data: {e.error_count()} validation error(s)",
                details={"errors": e.errors(include_url=False, include_input=False)},
            ) from e
        self._messages.extend(messages)

    def serialize(self) -> dict[str, Any]:
        """Serialize the thread to a dictionary for persistence."""
        return {
            "thread_id": self.thread_id,
            "messages": self.export_messages(),
        }

    @classmethod
    def deserialize(cls, data: Any) -> "ConversationThread":
        """Deserialize a thread from a dictionary."""
        if not isinstance(data, dict):
            raise ThreadDeserializationError(f"Invalid thread data: expected an object, got {type(data).__name__}")

        thread_id = data.get("thread_id")
        if thread_id is not None and not isinstance(thread_id, str):
            raise ThreadDeserializationError("Invalid thread data: thread_id must be a string")

        thread = cls(thread_id=thread_id) if thread_id else cls()
        thread.import_messages(data.get("messages", []))
        return thread
