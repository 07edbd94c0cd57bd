"""Application factories."""

from .model_registry import ModelRegistry, ProviderFactory

__all__ = ["ModelRegistry", "ProviderFactory"]
