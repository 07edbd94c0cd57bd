"""Chat completion provider interface."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence

from ..cancellation import CancellationToken
from ..models.messages import ChatOptions, Message, ResponseFragment


class IChatCompletionProvider(ABC):
    """Interface for inference engines that complete a chat history."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Name of the model served by this provider."""
        pass

    @abstractmethod
    async def get_response(
        self,
        messages: Sequence[Message],
        options: ChatOptions | None = None,
        cancellation: CancellationToken | None = None,
    ) -> Message:
        """
        Complete the history in one call.

        Args:
            messages: Ordered message history
            options: Inference options, provider defaults when None
            cancellation: Optional cancellation signal

        Returns:
            The complete response message
        """
        pass

    @abstractmethod
    def get_streaming_response(
        self,
        messages: Sequence[Message],
        options: ChatOptions | None = None,
        cancellation: CancellationToken | None = None,
    ) -> AsyncIterator[ResponseFragment]:
        """
        Complete the history as a finite, single-pass stream of fragments.

        Args:
            messages: Ordered message history
            options: Inference options, provider defaults when None
            cancellation: Optional cancellation signal

        Returns:
            Async iterator over response fragments
        """
        pass

    async def aclose(self) -> None:
        """Release resources held by the provider."""
        pass

    async def __aenter__(self) -> "IChatCompletionProvider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
