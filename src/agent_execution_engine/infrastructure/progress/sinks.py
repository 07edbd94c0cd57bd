"""Progress sinks that log or record events in process."""

import logging
from collections import defaultdict

from agent_execution_engine.domain.interfaces import IProgressSink
from agent_execution_engine.domain.models import ProgressEvent


class LoggingProgressSink(IProgressSink):
    """Writes every progress event to a logger."""

    def __init__(self, logger_name: str | None = None, preview_length: int = 120):
        self.logger = logging.getLogger(logger_name or __name__)
        self.preview_length = preview_length

    async def send(self, session_id: str, event: ProgressEvent) -> None:
        preview = event.message.replace("\n", " ")
        if len(preview) > self.preview_length:
            preview = preview[: self.preview_length] + "..."
        self.logger.info(
            "[%s] %s (%d%%) %s",
            session_id,
            event.stage,
            event.progress_percentage,
            preview,
        )


class InMemoryProgressSink(IProgressSink):
    """Keeps delivered events per session, in delivery order."""

    def __init__(self):
        self._events: dict[str, list[ProgressEvent]] = defaultdict(list)

    async def send(self, session_id: str, event: ProgressEvent) -> None:
        self._events[session_id].append(event)

    def events(self, session_id: str) -> list[ProgressEvent]:
        return list(self._events.get(session_id, []))

    def clear(self) -> None:
        self._events.clear()
