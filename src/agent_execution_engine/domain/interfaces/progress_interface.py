"""Progress sink interface."""

from abc import ABC, abstractmethod

from ..models.execution_models import ProgressEvent


class IProgressSink(ABC):
    """Interface for receivers of per-iteration progress events."""

    @abstractmethod
    async def send(self, session_id: str, event: ProgressEvent) -> None:
        """
        Deliver a progress event.

        Args:
            session_id: User or session the event belongs to
            event: Progress event to deliver

        Raises:
            ProgressDeliveryError: If delivery fails
        """
        pass
