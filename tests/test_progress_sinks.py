"""Unit tests for progress sinks."""

import logging

import pytest

from agent_execution_engine.domain.models import ProgressEvent
from agent_execution_engine.infrastructure.progress import InMemoryProgressSink, LoggingProgressSink


class TestInMemoryProgressSink:
    """Test cases for InMemoryProgressSink."""

    @pytest.mark.asyncio
    async def test_events_per_session(self):
        """Test that events are kept per session in order."""
        sink = InMemoryProgressSink()
        first = ProgressEvent(stage="Iteration 1", message="a", progress_percentage=20)
        second = ProgressEvent(stage="Completed", message="a", progress_percentage=100)
        other = ProgressEvent(stage="Iteration 1", message="b", progress_percentage=20)

        await sink.send("s-1", first)
        await sink.send("s-2", other)
        await sink.send("s-1", second)

        assert sink.events("s-1") == [first, second]
        assert sink.events("s-2") == [other]
        assert sink.events("unknown") == []

    @pytest.mark.asyncio
    async def test_clear(self):
        """Test discarding recorded events."""
        sink = InMemoryProgressSink()
        await sink.send("s-1", ProgressEvent(stage="Iteration 1", message="", progress_percentage=20))

        sink.clear()

        assert sink.events("s-1") == []


class TestLoggingProgressSink:
    """Test cases for LoggingProgressSink."""

    @pytest.mark.asyncio
    async def test_logs_event(self, caplog):
        """Test the logged progress line."""
        sink = LoggingProgressSink(logger_name="progress.test")

        event = ProgressEvent(stage="Iteration 2", message="line one\nline two", progress_percentage=40)

        with caplog.at_level(logging.INFO, logger="progress.test"):
            await sink.send("s-1", event)

        assert "[s-1] Iteration 2 (40%) line one line two" in caplog.text

    @pytest.mark.asyncio
    async def test_truncates_long_messages(self, caplog):
        """Test that long answers are shortened in the log."""
        sink = LoggingProgressSink(logger_name="progress.test", preview_length=10)

        with caplog.at_level(logging.INFO, logger="progress.test"):
            await sink.send("s-1", ProgressEvent(stage="Completed", message="x" * 50, progress_percentage=100))

        assert "x" * 10 + "..." in caplog.text
        assert "x" * 11 not in caplog.text
