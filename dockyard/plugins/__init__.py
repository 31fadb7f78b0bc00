"""
Plugin system: ordered registry, loader and class-based plugin base.
"""

from .base import BasePlugin
from .loader import PluginLoader
from .registry import AppLoader, PluginDescriptor, PluginRegistry

__all__ = [
    "AppLoader",
    "BasePlugin",
    "PluginDescriptor",
    "PluginLoader",
    "PluginRegistry",
]
