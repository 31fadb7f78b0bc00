"""
Metrics and user messaging interfaces.

Both collaborators are fire-and-await: the orchestrator awaits them in
sequence with the rest of a lifecycle operation.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..domain.events import StatusMessage


class IMetricsReporter(ABC):
    """Interface for metrics transports."""

    @abstractmethod
    async def report(self, event: str, payload: Dict[str, Any]) -> None:
        """
        Report a lifecycle metric.

        Args:
            event: Operation name (``start``, ``stop``, ``uninstall``)
            payload: App description, see ``metrics_payload``
        """
        pass


class IMessenger(ABC):
    """Interface for user-facing status messaging."""

    @abstractmethod
    async def notify(self, message: StatusMessage) -> None:
        """
        Deliver a status message to the user.

        Args:
            message: Status message for one app
        """
        pass
