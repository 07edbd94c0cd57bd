"""Progress sink implementations."""

from .sinks import InMemoryProgressSink, LoggingProgressSink

__all__ = ["InMemoryProgressSink", "LoggingProgressSink"]
