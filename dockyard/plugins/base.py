"""
Base class for class-based plugins.

Function plugins only need an ``app_loader``. Plugins that want shared
state or helpers can subclass ``BasePlugin`` and override ``load_app``;
``as_descriptor`` turns an instance into a registry entry.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from loguru import logger

from ..core.domain.fragments import Extension, Fragment
from .registry import PluginDescriptor


class BasePlugin(ABC):
    """
    Base plugin class.

    Subclasses set ``name`` and implement ``load_app``.
    """

    name: str = ""
    default_config: Dict[str, Any] = {}

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config = {**self.default_config, **(config or {})}
        if not self.name:
            self.name = self.__class__.__name__.lower()

    @property
    def logger(self) -> Any:
        return logger.bind(plugin=self.name)

    @abstractmethod
    async def load_app(self, config: Dict[str, Any], app: Any, context: Any) -> Optional[Extension]:
        """
        Produce this plugin's contribution to an app.

        Args:
            config: Copy of the descriptor config
            app: Orchestrator being initialized
            context: Process-wide runtime context

        Returns:
            Extension record, or None to contribute nothing
        """
        pass

    def fragment(self, data: Dict[str, Any], suffix: str = "") -> Fragment:
        """Inline fragment named after this plugin."""
        return Fragment.inline(f"{self.name}-{suffix}" if suffix else self.name, data)

    def as_descriptor(self) -> PluginDescriptor:
        return PluginDescriptor(name=self.name, app_loader=self.load_app, config=dict(self.config))
