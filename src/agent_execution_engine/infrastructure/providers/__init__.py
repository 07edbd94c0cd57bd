"""Chat completion provider implementations."""

from .llama_cpp_provider import LlamaCppChatProvider

__all__ = ["LlamaCppChatProvider"]
