"""
Dockyard - plugin-driven lifecycle orchestration for Docker Compose apps.

An app is described by a project file and by the fragments plugins add to
it. Dockyard assembles those fragments into one compose file and drives the
container engine through hookable lifecycle operations.
"""

__version__ = "0.1.0"

# Public API exports
from .application.bootstrap import create_context, load_app
from .application.context import AppContext
from .core.domain.errors import ConfigError, DockyardError, EngineError, HandlerError, PluginLoadError
from .core.domain.events import LifecycleEvent
from .core.domain.fragments import Extension, Fragment
from .core.services.orchestrator import Orchestrator
from .plugins.base import BasePlugin
from .plugins.registry import PluginDescriptor, PluginRegistry

__all__ = [
    "AppContext",
    "BasePlugin",
    "ConfigError",
    "DockyardError",
    "EngineError",
    "Extension",
    "Fragment",
    "HandlerError",
    "LifecycleEvent",
    "Orchestrator",
    "PluginDescriptor",
    "PluginLoadError",
    "PluginRegistry",
    "create_context",
    "load_app",
]
