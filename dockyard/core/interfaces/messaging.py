"""
Event bus interface for lifecycle hooks.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Union

from ..domain.events import DEFAULT_WEIGHT

EventHandler = Callable[..., Union[Awaitable[Any], Any]]


class IEventBus(ABC):
    """Interface for hook dispatchers."""

    @abstractmethod
    def on(self, event_name: str, handler: EventHandler,
           weight: int = DEFAULT_WEIGHT) -> str:
        """
        Register a handler.

        Args:
            event_name: Hook name, e.g. ``pre-start``
            handler: Sync or async callable receiving the emit arguments
            weight: Ordering weight, lower runs first

        Returns:
            Subscription ID for ``off``
        """
        pass

    @abstractmethod
    def off(self, subscription_id: str) -> bool:
        """
        Remove a handler.

        Args:
            subscription_id: ID returned from ``on``

        Returns:
            True if a handler was removed
        """
        pass

    @abstractmethod
    async def emit(self, event_name: str, *args: Any) -> None:
        """
        Run every handler for an event, one after another.

        Args:
            event_name: Hook name
            *args: Passed to every handler

        Raises:
            HandlerError: If a handler raises; later handlers do not run
        """
        pass
