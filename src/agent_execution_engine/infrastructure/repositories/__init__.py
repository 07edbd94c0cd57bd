"""Repository implementations."""

from .file_thread_repository import FileThreadRepository

__all__ = ["FileThreadRepository"]
