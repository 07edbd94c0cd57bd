"""Application services."""

from .conversation_loop import ConversationLoopController, LoopOptions
from .request_processor import AgentRequestProcessor
from .request_router import RequestRouter, RoutedRequest
from .stream_aggregator import AggregatedResponse, StreamingUpdateAggregator

__all__ = [
    "AgentRequestProcessor",
    "AggregatedResponse",
    "ConversationLoopController",
    "LoopOptions",
    "RequestRouter",
    "RoutedRequest",
    "StreamingUpdateAggregator",
]
