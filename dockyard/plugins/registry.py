"""
Ordered plugin registry and directory discovery.

Registry order is load order. A plugin contributes to apps only when it
carries an ``app_loader``; plugins without one are kept in the registry
(they may serve global tooling) but the loader skips them.
"""

import importlib.util
import inspect
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from loguru import logger

from ..core.domain.errors import ConfigError

AppLoader = Callable[[Dict[str, Any], Any, Any], Any]


@dataclass
class PluginDescriptor:
    """Registry entry for one plugin."""

    name: str
    app_loader: Optional[AppLoader] = None
    config: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None

    @property
    def is_app_plugin(self) -> bool:
        return self.app_loader is not None


class PluginRegistry:
    """Ordered collection of plugin descriptors."""

    def __init__(self, descriptors: Optional[List[PluginDescriptor]] = None) -> None:
        self._descriptors: List[PluginDescriptor] = []
        for descriptor in descriptors or []:
            self.register(descriptor)

    def __iter__(self) -> Iterator[PluginDescriptor]:
        return iter(list(self._descriptors))

    def __len__(self) -> int:
        return len(self._descriptors)

    @property
    def names(self) -> List[str]:
        return [descriptor.name for descriptor in self._descriptors]

    def register(self, descriptor: PluginDescriptor) -> PluginDescriptor:
        """Append a descriptor; names must be unique."""
        if descriptor.name in self.names:
            raise ConfigError(f"Plugin '{descriptor.name}' is already registered")
        self._descriptors.append(descriptor)
        logger.debug(f"Registered plugin: {descriptor.name}")
        return descriptor

    def register_loader(self, name: str, app_loader: AppLoader,
                        config: Optional[Dict[str, Any]] = None) -> PluginDescriptor:
        """Shorthand for registering an app plugin from a function."""
        return self.register(PluginDescriptor(name=name, app_loader=app_loader, config=dict(config or {})))

    def get(self, name: str) -> Optional[PluginDescriptor]:
        for descriptor in self._descriptors:
            if descriptor.name == name:
                return descriptor
        return None

    def app_plugins(self) -> List[PluginDescriptor]:
        """Descriptors that contribute to apps, in registry order."""
        return [descriptor for descriptor in self._descriptors if descriptor.is_app_plugin]

    def discover(self, directory: str,
                 settings: Optional[Mapping[str, Dict[str, Any]]] = None) -> List[str]:
        """
        Register plugins found in a directory.

        Every ``*.py`` file not starting with ``_`` is imported, in file name
        order. A module provides a plugin through a ``PLUGIN`` descriptor, a
        top-level ``app_loader`` function (named after the module) or a
        concrete ``BasePlugin`` subclass.

        Args:
            directory: Directory to scan
            settings: Per-plugin config keyed by plugin name

        Returns:
            Names of the plugins registered
        """
        plugin_dir = Path(directory)
        settings = settings or {}
        registered: List[str] = []

        if not plugin_dir.is_dir():
            logger.warning(f"Plugin directory does not exist: {directory}")
            return registered

        for file_path in sorted(plugin_dir.glob("*.py")):
            if file_path.name.startswith("_"):
                continue

            module = self._load_module(file_path)
            descriptor = self._find_descriptor(module, file_path)
            if descriptor is None:
                logger.debug(f"No plugin found in {file_path}")
                continue

            descriptor.source = str(file_path)
            if descriptor.name in settings:
                descriptor.config = {**descriptor.config, **settings[descriptor.name]}
            self.register(descriptor)
            registered.append(descriptor.name)

        logger.info(f"Discovered {len(registered)} plugin(s) in {directory}")
        return registered

    def _find_descriptor(self, module: Any, file_path: Path) -> Optional[PluginDescriptor]:
        """Find the plugin a module provides, in PLUGIN / app_loader / class order."""
        from .base import BasePlugin

        descriptor = getattr(module, "PLUGIN", None)
        if descriptor is not None:
            if not isinstance(descriptor, PluginDescriptor):
                raise ConfigError(f"PLUGIN in {file_path} is not a PluginDescriptor")
            return descriptor

        app_loader = getattr(module, "app_loader", None)
        if callable(app_loader):
            return PluginDescriptor(name=file_path.stem, app_loader=app_loader)

        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if (isinstance(attr, type) and
                    issubclass(attr, BasePlugin) and
                    attr is not BasePlugin and
                    not inspect.isabstract(attr)):
                return attr().as_descriptor()

        return None

    def _load_module(self, file_path: Path) -> Any:
        """Import a plugin module from file."""
        spec = importlib.util.spec_from_file_location(f"dockyard_plugin_{file_path.stem}", file_path)
        if not spec or not spec.loader:
            raise ConfigError(f"Cannot load plugin from {file_path}")

        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise ConfigError(f"Error importing plugin {file_path}: {e}") from e
        return module
