"""Domain models."""

from .content import (
    Content,
    DataContent,
    FunctionCallContent,
    FunctionResultContent,
    TextContent,
    UsageContent,
    UsageDetails,
)
from .conversation_models import ConversationThread
from .execution_models import (
    TOOL_NOT_EXECUTED,
    ExecutionResult,
    ExecutionStep,
    LoopState,
    ProgressEvent,
)
from .messages import ChatOptions, ChatRole, Message, ResponseFragment
from .model_config import ModelConfig

__all__ = [
    "TOOL_NOT_EXECUTED",
    "ChatOptions",
    "ChatRole",
    "Content",
    "ConversationThread",
    "DataContent",
    "ExecutionResult",
    "ExecutionStep",
    "FunctionCallContent",
    "FunctionResultContent",
    "LoopState",
    "Message",
    "ModelConfig",
    "ProgressEvent",
    "ResponseFragment",
    "TextContent",
    "UsageContent",
    "UsageDetails",
]
