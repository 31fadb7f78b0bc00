"""
Application bootstrap.

Builds the shared ``AppContext`` from an ``ApplicationConfig`` and turns a
project file into an ``Orchestrator``.
"""

from pathlib import Path
from typing import Optional, Union

from loguru import logger

from ..core.domain.errors import ConfigError
from ..core.interfaces.engine import IEngine
from ..core.interfaces.reporting import IMessenger, IMetricsReporter
from ..core.services.orchestrator import Orchestrator
from ..infrastructure.config.models import ApplicationConfig
from ..infrastructure.config.project import find_project_file, load_project
from ..plugins.registry import PluginRegistry
from .context import AppContext


def plugin_directory(config: ApplicationConfig) -> Path:
    """Plugin directory, relative paths resolved against the user config root."""
    directory = Path(config.plugins.plugin_directory).expanduser()
    if not directory.is_absolute():
        directory = Path(config.user_conf_root).expanduser() / directory
    return directory


def create_context(config: Optional[ApplicationConfig] = None,
                   engine: Optional[IEngine] = None,
                   metrics: Optional[IMetricsReporter] = None,
                   messenger: Optional[IMessenger] = None,
                   registry: Optional[PluginRegistry] = None) -> AppContext:
    """
    Create the process-wide context.

    Args:
        config: Application configuration, defaults when omitted
        engine: Engine to use instead of ``ComposeEngine``
        metrics: Metrics reporter to use instead of ``LogMetricsReporter``
        messenger: Messenger to use instead of ``LogMessenger``
        registry: Pre-populated plugin registry

    Returns:
        The context, with plugins discovered when plugins are enabled
    """
    config = config or ApplicationConfig()
    registry = registry if registry is not None else PluginRegistry()

    if config.plugins.enabled:
        registry.discover(str(plugin_directory(config)), config.plugins.settings)
    else:
        logger.debug("Plugin discovery disabled")

    context = AppContext(
        config=config,
        engine=engine,
        metrics=metrics,
        messenger=messenger,
        plugins=registry,
    )
    logger.debug(f"Context ready with plugins: {registry.names}")
    return context


def load_app(context: AppContext, start_dir: Union[str, Path] = ".") -> Orchestrator:
    """
    Create the orchestrator for the project containing ``start_dir``.

    Raises:
        ConfigError: If no project file is found or it is invalid
    """
    filename = context.config.project_file
    path = find_project_file(start_dir, filename)
    if path is None:
        raise ConfigError(f"Could not find {filename} in {Path(start_dir).resolve()} or its parents")

    project, data = load_project(path)
    logger.debug(f"Loaded project {project.name} from {path}")
    return Orchestrator(project.name, str(path), data, context)
