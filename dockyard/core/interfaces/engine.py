"""
Container engine interface.

The engine performs the actual container work for an app. The orchestrator
treats it as opaque: any exception it raises is reported as an
``EngineError`` without inspecting engine internals.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..services.orchestrator import Orchestrator


class IEngine(ABC):
    """Interface for container engine implementations."""

    @abstractmethod
    async def start(self, app: "Orchestrator") -> None:
        """
        Start every service of an initialized app.

        Args:
            app: Initialized orchestrator whose assembled compose file
                describes the services
        """
        pass

    @abstractmethod
    async def stop(self, app: "Orchestrator") -> None:
        """
        Stop every running service of an app.

        Args:
            app: Initialized orchestrator
        """
        pass

    @abstractmethod
    async def destroy(self, app: "Orchestrator", purge: bool = False) -> None:
        """
        Remove the app's containers.

        Args:
            app: Orchestrator to tear down
            purge: Also remove volumes and networks when True
        """
        pass

    @abstractmethod
    async def build(self, app: "Orchestrator") -> None:
        """
        Pull and build the app's images.

        Args:
            app: Initialized orchestrator
        """
        pass
