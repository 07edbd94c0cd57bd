"""Unit tests for configuration and logging setup."""

import logging

import pytest
from pydantic import ValidationError

from agent_execution_engine.application.services import LoopOptions
from agent_execution_engine.config import (
    DEFAULT_CATEGORY_MODELS,
    ApplicationConfig,
    EngineConfig,
    Environment,
    ModelsConfig,
    Settings,
    settings,
)
from agent_execution_engine.domain.models import ChatOptions
from agent_execution_engine.observability import setup_logging


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run each test away from any local .env file."""
    monkeypatch.chdir(tmp_path)
    yield
    settings.reload()


class TestApplicationConfig:
    """Test cases for ApplicationConfig."""

    def test_defaults(self):
        """Test default application settings."""
        config = ApplicationConfig()

        assert config.environment == Environment.DEVELOPMENT
        assert config.is_development
        assert config.log_level == "INFO"
        assert not config.configure_logging

    def test_from_environment(self, monkeypatch):
        """Test reading settings from environment variables."""
        monkeypatch.setenv("ENVIRONMENT", "Production")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = ApplicationConfig()

        assert config.is_production
        assert config.log_level == "DEBUG"


class TestEngineConfig:
    """Test cases for EngineConfig."""

    def test_defaults(self):
        """Test default loop settings."""
        config = EngineConfig()

        assert config.max_iterations == 5
        assert config.completion_marker == "[DONE]"
        assert config.continuation_prompt == "Proceed to the next step."
        assert config.use_streaming
        assert config.request_delimiter == "#"
        assert config.to_chat_options() == ChatOptions()

    def test_from_environment(self, monkeypatch):
        """Test prefixed environment variables."""
        monkeypatch.setenv("ENGINE_MAX_ITERATIONS", "3")
        monkeypatch.setenv("ENGINE_TEMPERATURE", "0.3")
        monkeypatch.setenv("ENGINE_STOP_SEQUENCES", '["</s>"]')

        config = EngineConfig()

        assert config.max_iterations == 3
        assert config.to_chat_options() == ChatOptions(temperature=0.3, stop_sequences=("</s>",))

    def test_invalid_max_iterations(self, monkeypatch):
        """Test that the iteration cap must be positive."""
        monkeypatch.setenv("ENGINE_MAX_ITERATIONS", "0")

        with pytest.raises(ValidationError):
            EngineConfig()

    def test_empty_completion_marker(self, monkeypatch):
        """Test that an empty completion marker is rejected."""
        monkeypatch.setenv("ENGINE_COMPLETION_MARKER", "")

        with pytest.raises(ValidationError):
            EngineConfig()

    def test_loop_options_from_settings(self, monkeypatch):
        """Test building loop options from the environment."""
        monkeypatch.setenv("ENGINE_COMPLETION_MARKER", "<<END>>")
        monkeypatch.setenv("ENGINE_USE_STREAMING", "false")
        settings.reload()

        options = LoopOptions.from_settings()

        assert options.completion_marker == "<<END>>"
        assert not options.use_streaming
        assert options.max_iterations == 5


class TestModelsConfig:
    """Test cases for ModelsConfig."""

    def test_default_category_table(self):
        """Test the built-in routing table."""
        assert ModelsConfig().category_models == DEFAULT_CATEGORY_MODELS

    def test_category_table_from_environment(self, monkeypatch):
        """Test a JSON routing table with mixed-case keys."""
        monkeypatch.setenv("MODELS_CATEGORY_MODELS", '{"Default": "A", "CODE": "B"}')

        assert ModelsConfig().category_models == {"default": "A", "code": "B"}

    def test_category_table_requires_default(self, monkeypatch):
        """Test that the routing table needs a default entry."""
        monkeypatch.setenv("MODELS_CATEGORY_MODELS", '{"code": "B"}')

        with pytest.raises(ValidationError):
            ModelsConfig()


class TestSettings:
    """Test cases for the settings container."""

    def test_lazy_sections_are_cached(self):
        """Test that sections are created once until reload."""
        container = Settings()

        assert container.engine is container.engine

    def test_reload(self, monkeypatch):
        """Test that reload picks up environment changes."""
        container = Settings()
        assert container.engine.max_iterations == 5

        monkeypatch.setenv("ENGINE_MAX_ITERATIONS", "7")
        container.reload()

        assert container.engine.max_iterations == 7


class TestSetupLogging:
    """Test cases for logging setup."""

    def test_setup_logging_with_file(self, tmp_path, monkeypatch):
        """Test that a log file handler is installed next to the console handler."""
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        log_file = tmp_path / "logs" / "engine.log"

        setup_logging(level="debug", log_file=log_file)

        kwargs = calls[0]
        assert kwargs["level"] == "DEBUG"
        assert kwargs["force"] is True
        assert [type(handler) for handler in kwargs["handlers"]] == [logging.StreamHandler, logging.FileHandler]
        assert log_file.parent.is_dir()
        kwargs["handlers"][1].close()

    def test_setup_logging_console_only(self, monkeypatch):
        """Test the default console-only setup."""
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        setup_logging()

        assert calls[0]["level"] == "INFO"
        assert len(calls[0]["handlers"]) == 1
