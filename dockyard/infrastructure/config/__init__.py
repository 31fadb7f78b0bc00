"""
Configuration management infrastructure.

This module provides loading and validation of the application
configuration and of per-project files.
"""

from .loader import ConfigLoader
from .models import ApplicationConfig, EngineConfig, LoggingConfig, PluginConfig
from .project import ProjectFile, find_project_file, load_project

__all__ = [
    "ApplicationConfig",
    "ConfigLoader",
    "EngineConfig",
    "LoggingConfig",
    "PluginConfig",
    "ProjectFile",
    "find_project_file",
    "load_project",
]
