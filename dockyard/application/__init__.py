"""
Application layer: runtime context and bootstrap.
"""

from .bootstrap import create_context, load_app, plugin_directory
from .context import AppContext

__all__ = [
    "AppContext",
    "create_context",
    "load_app",
    "plugin_directory",
]
