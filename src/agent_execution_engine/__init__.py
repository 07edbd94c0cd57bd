"""Agent Execution Engine - routed, bounded dialogues with local language models."""

from agent_execution_engine.observability import setup_logging

from .config import settings

# Root handlers are installed only when CONFIGURE_LOGGING is set
if settings.app.configure_logging:
    setup_logging(level=settings.app.log_level, log_file=settings.app.log_file)

__all__ = ["settings", "setup_logging"]
