"""
Plugin loader: turns the registry into app state.

Each app plugin's loader is awaited in registry order with
``(config, app, context)``. Its result is narrowed to an ``Extension`` and
reduced into the app before the next plugin runs, so a later plugin sees
and overrides what earlier plugins contributed.
"""

import copy
import inspect
from typing import TYPE_CHECKING, Any, List, Mapping

from loguru import logger

from ..core.domain.errors import PluginLoadError
from ..core.domain.fragments import EXTENSION_FIELDS, Extension
from ..core.utils import deep_merge
from .registry import PluginDescriptor, PluginRegistry

if TYPE_CHECKING:
    from ..core.services.orchestrator import Orchestrator


class PluginLoader:
    """Sequential, fail-fast loader for app plugins."""

    def __init__(self, registry: PluginRegistry, context: Any = None) -> None:
        self._registry = registry
        self._context = context

    async def load(self, app: "Orchestrator") -> List[str]:
        """
        Run every app plugin against ``app``.

        Returns:
            Names of the plugins applied, in order

        Raises:
            PluginLoadError: If a plugin's loader raises. Plugins applied
                before it stay applied.
            ConfigError: If a plugin returns a malformed extension
        """
        applied: List[str] = []
        for descriptor in self._registry.app_plugins():
            extension = await self.run(descriptor, app)
            self.apply(app, extension)
            applied.append(descriptor.name)

        logger.debug(f"App {app.name} loaded plugins {applied}")
        return applied

    async def run(self, descriptor: PluginDescriptor, app: "Orchestrator") -> Extension:
        """Invoke one plugin's loader and normalize its result."""
        logger.debug(f"Loading plugin {descriptor.name} for app {app.name}")
        try:
            result = descriptor.app_loader(copy.deepcopy(descriptor.config), app, self._context)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Failed to load plugin {descriptor.name}: {e}")
            raise PluginLoadError(descriptor.name, str(e)) from e

        if isinstance(result, Mapping):
            dropped = set(result) - set(EXTENSION_FIELDS) - {"compose_data"}
            if dropped:
                logger.debug(f"Plugin {descriptor.name} output ignored keys: {sorted(dropped)}")

        return Extension.from_result(descriptor.name, result)

    @staticmethod
    def apply(app: "Orchestrator", extension: Extension) -> None:
        """Reduce an extension into app state, last write wins per key."""
        app.config = deep_merge(app.config, extension.config)
        app.env = deep_merge(app.env, extension.env)
        app.labels = deep_merge(app.labels, extension.labels)
        for fragment in extension.fragments:
            app.add(fragment)
