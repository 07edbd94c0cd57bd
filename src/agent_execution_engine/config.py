"""Configuration management with proper validation and environment handling."""

from enum import Enum
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agent_execution_engine.domain.models.messages import ChatOptions

DEFAULT_CATEGORY_MODELS = {
    "code": "Qwen2.5-Coder-7B",
    "agent": "Qwen3-Coder",
    "analysis": "Deepseek-Coder-v2",
    "default": "ZAI-GLM-4.5",
}


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class ApplicationConfig(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Application environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Path | None = Field(default=None, description="Log file path")
    configure_logging: bool = Field(
        default=False,
        description="Install root log handlers when the package is imported",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v: str) -> Environment:
        """Parse environment from string."""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Log levels are upper-case names."""
        return v.upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION


class EngineConfig(BaseSettings):
    """Conversation loop and inference option defaults."""

    model_config = SettingsConfigDict(env_prefix="ENGINE_", env_file=".env", extra="ignore")

    max_iterations: int = Field(default=5, ge=1, description="Maximum dialogue iterations per request")
    completion_marker: str = Field(default="[DONE]", min_length=1, description="Marker that ends the dialogue")
    continuation_prompt: str = Field(
        default="Proceed to the next step.",
        description="User message appended between iterations",
    )
    use_streaming: bool = Field(default=True, description="Consume provider output as a fragment stream")
    request_delimiter: str = Field(default="#", min_length=1, description="Separator of raw request fields")

    # Inference options; unset values fall back to provider defaults
    max_output_tokens: int | None = Field(default=None, gt=0, description="Maximum tokens per response")
    temperature: float | None = Field(default=None, ge=0.0, description="Sampling temperature")
    top_p: float | None = Field(default=None, gt=0.0, le=1.0, description="Nucleus sampling mass")
    stop_sequences: list[str] | None = Field(default=None, description="Sequences that stop generation")

    def to_chat_options(self) -> ChatOptions:
        """Build the inference options passed to providers."""
        return ChatOptions(
            max_output_tokens=self.max_output_tokens,
            temperature=self.temperature,
            top_p=self.top_p,
            stop_sequences=tuple(self.stop_sequences) if self.stop_sequences else None,
        )


class ModelsConfig(BaseSettings):
    """Model registry source and category routing table."""

    model_config = SettingsConfigDict(env_prefix="MODELS_", env_file=".env", extra="ignore")

    models_file: Path | None = Field(default=None, description="JSON file listing model records")
    models_dir: Path | None = Field(default=None, description="Base directory for relative model paths")
    category_models: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_MODELS),
        description="Request category to model name",
    )

    @field_validator("category_models")
    @classmethod
    def validate_category_models(cls, v: dict[str, str]) -> dict[str, str]:
        """Categories are matched case-insensitively and need a default entry."""
        normalized = {key.strip().lower(): value for key, value in v.items()}
        if "default" not in normalized:
            raise ValueError("category_models must contain a 'default' entry")
        return normalized


class Settings:
    """Centralized settings management."""

    def __init__(self):
        self._app: ApplicationConfig | None = None
        self._engine: EngineConfig | None = None
        self._models: ModelsConfig | None = None

    @property
    def app(self) -> ApplicationConfig:
        """Get application configuration."""
        if self._app is None:
            self._app = ApplicationConfig()
        return self._app

    @property
    def engine(self) -> EngineConfig:
        """Get conversation engine configuration."""
        if self._engine is None:
            self._engine = EngineConfig()
        return self._engine

    @property
    def models(self) -> ModelsConfig:
        """Get model registry configuration."""
        if self._models is None:
            self._models = ModelsConfig()
        return self._models

    def reload(self) -> None:
        """Reload all configurations."""
        self._app = None
        self._engine = None
        self._models = None


# Global settings instance
settings = Settings()
