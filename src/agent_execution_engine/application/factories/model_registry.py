"""Model registry: model name to local model configuration."""

import json
import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from agent_execution_engine.domain.exceptions import (
    ConfigurationError,
    DuplicateModelError,
    UnknownModelError,
)
from agent_execution_engine.domain.interfaces import IChatCompletionProvider
from agent_execution_engine.domain.models import ModelConfig
from agent_execution_engine.domain.prompts.model_prompts import get_system_prompt

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ModelConfig], IChatCompletionProvider]

_MODEL_LIST = TypeAdapter(list[ModelConfig])


def _default_provider_factory(config: ModelConfig) -> IChatCompletionProvider:
    from agent_execution_engine.infrastructure.providers.llama_cpp_provider import (
        LlamaCppChatProvider,
    )

    return LlamaCppChatProvider(config)


class ModelRegistry:
    """Immutable lookup of model configurations by name."""

    def __init__(
        self,
        configs: Iterable[ModelConfig],
        provider_factory: ProviderFactory | None = None,
    ):
        """
        Build the registry.

        Args:
            configs: Model configuration records
            provider_factory: Creates a provider for a configuration, defaults to llama.cpp

        Raises:
            DuplicateModelError: If two records share a name
        """
        self._configs: dict[str, ModelConfig] = {}
        for config in configs:
            if config.name in self._configs:
                raise DuplicateModelError(config.name)
            self._configs[config.name] = config
        self._provider_factory = provider_factory or _default_provider_factory

    @classmethod
    def from_file(
        cls,
        path: Path,
        models_dir: Path | None = None,
        provider_factory: ProviderFactory | None = None,
    ) -> "ModelRegistry":
        """
        Load model records from a JSON list.

        Records without a system_prompt receive the built-in prompt for their
        name; relative model paths are resolved against models_dir.

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read model registry file {path}: {e}") from e

        if not isinstance(raw, list):
            raise ConfigurationError(f"Model registry file {path} must contain a JSON list")

        records = []
        for record in raw:
            if isinstance(record, dict):
                record = dict(record)
                if "system_prompt" not in record and isinstance(record.get("name"), str):
                    record["system_prompt"] = get_system_prompt(record["name"])
                model_path = record.get("model_path")
                if models_dir and isinstance(model_path, str) and not Path(model_path).is_absolute():
                    record["model_path"] = str(Path(models_dir) / model_path)
            records.append(record)

        try:
            configs = _MODEL_LIST.validate_python(records)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid model registry file {path}: {e}") from e

        logger.info("Loaded %d model configuration(s) from %s", len(configs), path)
        return cls(configs, provider_factory=provider_factory)

    @property
    def names(self) -> list[str]:
        """Registered model names in registration order."""
        return list(self._configs)

    def __contains__(self, name: object) -> bool:
        return name in self._configs

    def __len__(self) -> int:
        return len(self._configs)

    def get_config(self, name: str) -> ModelConfig:
        """
        Get a model configuration by name.

        Raises:
            UnknownModelError: If no model has that name
        """
        try:
            return self._configs[name]
        except KeyError:
            raise UnknownModelError(name) from None

    def create_provider(self, name: str) -> IChatCompletionProvider:
        """Create a chat completion provider for a registered model."""
        return self._provider_factory(self.get_config(name))
