"""Unit tests for domain exceptions."""

import pytest

from agent_execution_engine.domain.exceptions import (
    AgentEngineError,
    ConfigurationError,
    DuplicateModelError,
    OperationCancelledError,
    ProgressDeliveryError,
    ProviderError,
    ThreadDeserializationError,
    UnknownModelError,
)


class TestExceptions:
    """Test cases for domain exceptions."""

    def test_agent_engine_error_base(self):
        """Test base AgentEngineError."""
        error = AgentEngineError("Base error")
        assert str(error) == "Base error"
        assert isinstance(error, Exception)
        assert error.details == {}
        assert not error.is_retryable

    def test_configuration_error(self):
        """Test ConfigurationError."""
        error = ConfigurationError("Config issue")
        assert str(error) == "Config issue"
        assert isinstance(error, AgentEngineError)

    def test_unknown_model_error(self):
        """Test UnknownModelError carries the model name."""
        error = UnknownModelError("Mystery-7B")
        assert str(error) == "Unknown model: Mystery-7B"
        assert isinstance(error, ConfigurationError)
        assert error.model_name == "Mystery-7B"
        assert error.error_code == "UNKNOWN_MODEL"
        assert error.details["model_name"] == "Mystery-7B"

    def test_duplicate_model_error(self):
        """Test DuplicateModelError."""
        error = DuplicateModelError("Qwen3-Coder")
        assert "Qwen3-Coder" in str(error)
        assert isinstance(error, ConfigurationError)
        assert error.error_code == "DUPLICATE_MODEL"

    def test_provider_error_is_retryable(self):
        """Test ProviderError details and retry flag."""
        error = ProviderError("Inference failed", model_name="Qwen3-Coder", iteration=2)
        assert error.is_retryable
        assert error.details == {"model_name": "Qwen3-Coder", "iteration": 2}

    def test_provider_error_without_details(self):
        """Test ProviderError without optional details."""
        error = ProviderError("Inference failed")
        assert error.model_name is None
        assert error.iteration is None
        assert error.partial is None
        assert error.details == {}

    def test_provider_error_carries_partial_output(self):
        """Test that ProviderError keeps the output produced before the failure."""
        partial = object()
        error = ProviderError("Stream failed", iteration=3, partial=partial)
        assert error.partial is partial
        assert "partial" not in error.details

    def test_progress_delivery_error(self):
        """Test ProgressDeliveryError."""
        error = ProgressDeliveryError("Hub unavailable", session_id="user-1")
        assert error.is_retryable
        assert error.details["session_id"] == "user-1"

    def test_thread_deserialization_error(self):
        """Test ThreadDeserializationError."""
        error = ThreadDeserializationError("Bad thread", details={"thread_id": "t-1"})
        assert isinstance(error, AgentEngineError)
        assert error.details["thread_id"] == "t-1"

    def test_operation_cancelled_error_default_message(self):
        """Test OperationCancelledError defaults."""
        error = OperationCancelledError()
        assert str(error) == "Operation was cancelled"
        assert error.error_code == "CANCELLED"


class TestExceptionSerialization:
    """Test exception serialization."""

    def test_to_dict(self):
        """Test converting an exception to a dictionary."""
        error = ProviderError("Inference failed", model_name="Qwen3-Coder", error_code="PROVIDER")
        data = error.to_dict()

        assert data["error_type"] == "ProviderError"
        assert data["message"] == "Inference failed"
        assert data["error_code"] == "PROVIDER"
        assert data["details"] == {"model_name": "Qwen3-Coder"}
        assert data["is_retryable"] is True
        assert isinstance(data["timestamp"], float)

    def test_exception_chaining(self):
        """Test wrapping a low-level failure."""

        def failing_call():
            raise RuntimeError("CUDA out of memory")

        def wrapper():
            try:
                failing_call()
            except RuntimeError as e:
                raise ProviderError(f"Chat completion failed: {e}") from e

        with pytest.raises(ProviderError) as exc_info:
            wrapper()

        assert "CUDA out of memory" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
