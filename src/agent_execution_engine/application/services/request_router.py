"""Request routing: raw composite request to model configuration and system message."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from agent_execution_engine.application.factories.model_registry import ModelRegistry
from agent_execution_engine.domain.exceptions import ConfigurationError
from agent_execution_engine.domain.models import ModelConfig

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "default"
SYSTEM_MESSAGE_TEMPLATE = "{system_prompt}\n\n[Additional context: {context}]"


@dataclass(frozen=True)
class RoutedRequest:
    """Outcome of routing one raw request."""

    dialogue_turn: str
    auxiliary_context: str
    category: str
    model_config: ModelConfig
    system_message: str


class RequestRouter:
    """Splits raw requests and resolves the model that should serve them."""

    def __init__(
        self,
        registry: ModelRegistry,
        category_models: Mapping[str, str] | None = None,
        delimiter: str = "#",
    ):
        """
        Create a router.

        Args:
            registry: Model registry used to resolve model names
            category_models: Category to model name table; must contain "default".
                Defaults to the configured table.
            delimiter: Separator between dialogue turn, context and category

        Raises:
            ConfigurationError: If the table has no default entry or the delimiter is empty
        """
        if category_models is None:
            from agent_execution_engine.config import settings

            category_models = settings.models.category_models

        table = {category.strip().lower(): model for category, model in category_models.items()}
        if DEFAULT_CATEGORY not in table:
            raise ConfigurationError(
                "Category table must contain a 'default' entry",
                details={"categories": sorted(table)},
            )
        if not delimiter:
            raise ConfigurationError("Request delimiter must not be empty")

        self._registry = registry
        self._category_models = table
        self._delimiter = delimiter

    @property
    def category_models(self) -> dict[str, str]:
        return dict(self._category_models)

    def parse(self, raw_request: str | None) -> tuple[str, str, str]:
        """Split a raw request into dialogue turn, auxiliary context and normalized category."""
        parts = (raw_request or "").split(self._delimiter)
        dialogue_turn = parts[0] if len(parts) > 0 else ""
        auxiliary_context = parts[1] if len(parts) > 1 else ""
        category = parts[2].strip().lower() if len(parts) > 2 else ""
        return dialogue_turn, auxiliary_context, category or DEFAULT_CATEGORY

    def resolve_model_name(self, category: str) -> str:
        """Map a category to a model name; unknown categories use the default model."""
        return self._category_models.get(category.strip().lower(), self._category_models[DEFAULT_CATEGORY])

    def route(self, raw_request: str | None) -> RoutedRequest:
        """
        Route a raw request of the form "turn#context#category".

        Returns:
            RoutedRequest with the resolved model configuration and system message

        Raises:
            UnknownModelError: If the resolved model is not registered
        """
        dialogue_turn, auxiliary_context, category = self.parse(raw_request)
        model_name = self.resolve_model_name(category)
        model_config = self._registry.get_config(model_name)

        logger.debug("Routed category '%s' to model '%s'", category, model_name)
        return RoutedRequest(
            dialogue_turn=dialogue_turn,
            auxiliary_context=auxiliary_context,
            category=category,
            model_config=model_config,
            system_message=SYSTEM_MESSAGE_TEMPLATE.format(
                system_prompt=model_config.system_prompt,
                context=auxiliary_context,
            ),
        )
