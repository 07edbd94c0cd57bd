"""Domain exceptions and error handling."""

import time
from typing import Any


class AgentEngineError(Exception):
    """Base exception for all agent execution engine errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        is_retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.is_retryable = is_retryable
        self.timestamp = time.time()

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
            "is_retryable": self.is_retryable,
            "timestamp": self.timestamp,
        }


class ConfigurationError(AgentEngineError):
    """Raised when there's a configuration issue."""

    pass


class UnknownModelError(ConfigurationError):
    """Raised when a model name is not present in the registry."""

    def __init__(self, model_name: str, **kwargs):
        super().__init__(f"Unknown model: {model_name}", error_code="UNKNOWN_MODEL", **kwargs)
        self.model_name = model_name
        self.details["model_name"] = model_name


class DuplicateModelError(ConfigurationError):
    """Raised when two registry records share a model name."""

    def __init__(self, model_name: str, **kwargs):
        super().__init__(f"Duplicate model configuration: {model_name}", error_code="DUPLICATE_MODEL", **kwargs)
        self.model_name = model_name
        self.details["model_name"] = model_name


class ProviderError(AgentEngineError):
    """Raised when the chat completion provider fails or its stream ends abnormally."""

    def __init__(
        self,
        message: str,
        model_name: str | None = None,
        iteration: int | None = None,
        partial: Any = None,
        **kwargs,
    ):
        super().__init__(message, is_retryable=True, **kwargs)
        self.model_name = model_name
        self.iteration = iteration
        # Output aggregated before the failure, if any
        self.partial = partial
        if model_name:
            self.details["model_name"] = model_name
        if iteration is not None:
            self.details["iteration"] = iteration


class ProgressDeliveryError(AgentEngineError):
    """Raised by progress sinks when an event cannot be delivered."""

    def __init__(self, message: str, session_id: str | None = None, **kwargs):
        super().__init__(message, is_retryable=True, **kwargs)
        self.session_id = session_id
        if session_id:
            self.details["session_id"] = session_id


class ThreadDeserializationError(AgentEngineError):
    """Raised when persisted thread content is malformed."""

    pass


class OperationCancelledError(AgentEngineError):
    """Raised inside the engine when a cancellation signal is observed."""

    def __init__(self, message: str = "Operation was cancelled", **kwargs):
        super().__init__(message, error_code="CANCELLED", **kwargs)
