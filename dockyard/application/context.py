"""
Process-wide runtime context.

One ``AppContext`` is shared by every orchestrator in a process. It holds
the application configuration, the external collaborators and the plugin
and global event registries.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..core.domain.events import DEFAULT_WEIGHT
from ..core.interfaces.engine import IEngine
from ..core.interfaces.messaging import EventHandler
from ..core.interfaces.reporting import IMessenger, IMetricsReporter
from ..core.services.event_bus import EventRegistry
from ..infrastructure.config.models import ApplicationConfig
from ..infrastructure.engine.compose import ComposeEngine
from ..infrastructure.reporting import LogMessenger, LogMetricsReporter
from ..plugins.registry import PluginRegistry


@dataclass
class AppContext:
    """Shared collaborators for all apps of one process."""

    config: ApplicationConfig = field(default_factory=ApplicationConfig)
    engine: Optional[IEngine] = None
    metrics: Optional[IMetricsReporter] = None
    messenger: Optional[IMessenger] = None
    plugins: PluginRegistry = field(default_factory=PluginRegistry)
    events: EventRegistry = field(default_factory=EventRegistry)

    def __post_init__(self) -> None:
        if self.engine is None:
            self.engine = ComposeEngine(self.config.engine)
        if self.metrics is None:
            self.metrics = LogMetricsReporter()
        if self.messenger is None:
            self.messenger = LogMessenger()

    def on_global(self, event_name: str, handler: EventHandler, weight: int = DEFAULT_WEIGHT) -> str:
        """Register a handler that runs for every app in this process."""
        return self.events.on(event_name, handler, weight)
