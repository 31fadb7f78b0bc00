"""
Domain models for projects, fragments and lifecycle events.

This module contains plain value objects with no dependency on the
container engine or any other collaborator.
"""

from .errors import ConfigError, DockyardError, EngineError, HandlerError, PluginLoadError
from .events import DEFAULT_WEIGHT, LifecycleEvent, StatusMessage
from .fragments import AssembledCompose, Extension, Fragment
from .identity import ProjectIdentity, composify, identity_hash, slugify

__all__ = [
    "DockyardError",
    "ConfigError",
    "PluginLoadError",
    "HandlerError",
    "EngineError",
    "DEFAULT_WEIGHT",
    "LifecycleEvent",
    "StatusMessage",
    "AssembledCompose",
    "Extension",
    "Fragment",
    "ProjectIdentity",
    "composify",
    "identity_hash",
    "slugify",
]
