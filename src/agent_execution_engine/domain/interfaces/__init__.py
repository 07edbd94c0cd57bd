"""Domain interfaces and abstract base classes."""

from .agent_interface import IAgent
from .conversation_repository_interface import IThreadRepository
from .progress_interface import IProgressSink
from .provider_interface import IChatCompletionProvider

__all__ = [
    "IAgent",
    "IChatCompletionProvider",
    "IProgressSink",
    "IThreadRepository",
]
