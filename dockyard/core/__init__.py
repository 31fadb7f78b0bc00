"""
Core module containing the lifecycle logic, domain models and interfaces.

Nothing in here talks to the container engine directly; collaborators are
reached only through the interfaces in ``core.interfaces``.
"""

from .domain.errors import ConfigError, DockyardError, EngineError, HandlerError, PluginLoadError
from .domain.events import LifecycleEvent, StatusMessage
from .domain.fragments import Extension, Fragment
from .interfaces.engine import IEngine
from .interfaces.messaging import IEventBus
from .interfaces.reporting import IMessenger, IMetricsReporter

__all__ = [
    "ConfigError",
    "DockyardError",
    "EngineError",
    "HandlerError",
    "PluginLoadError",
    "LifecycleEvent",
    "StatusMessage",
    "Extension",
    "Fragment",
    "IEngine",
    "IEventBus",
    "IMessenger",
    "IMetricsReporter",
]
