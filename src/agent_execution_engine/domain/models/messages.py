"""Chat messages, streamed response fragments and inference options."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .content import Content, TextContent


class ChatRole(str, Enum):
    """Message roles in conversations."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Message(BaseModel):
    """Immutable chat message made of typed content items."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    contents: tuple[Content, ...] = ()
    message_id: str | None = None
    author_name: str | None = None

    @classmethod
    def from_text(cls, role: ChatRole, text: str, **kwargs) -> "Message":
        """Create a message holding a single text item."""
        return cls(role=role, contents=(TextContent(text=text),), **kwargs)

    @property
    def text(self) -> str:
        """Concatenated text of all text items."""
        return "".join(item.text for item in self.contents if isinstance(item, TextContent))


class ResponseFragment(BaseModel):
    """One incremental update of a streamed model response."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole | None = None
    contents: tuple[Content, ...] = ()
    message_id: str | None = None
    author_name: str | None = None
    response_id: str | None = None

    @classmethod
    def from_message(cls, message: Message) -> "ResponseFragment":
        """Wrap a complete message as a single fragment."""
        return cls(
            role=message.role,
            contents=message.contents,
            message_id=message.message_id,
            author_name=message.author_name,
        )


class ChatOptions(BaseModel):
    """Inference options; unset fields fall back to provider defaults."""

    model_config = ConfigDict(frozen=True)

    max_output_tokens: int | None = Field(default=None, gt=0)
    temperature: float | None = Field(default=None, ge=0.0)
    top_p: float | None = Field(default=None, gt=0.0, le=1.0)
    stop_sequences: tuple[str, ...] | None = None
