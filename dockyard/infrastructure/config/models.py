"""
Configuration models and data structures.

This module defines the process-wide configuration shared by every app the
runtime creates: where assembled compose files go, the env and labels every
service gets, logging and plugin settings.
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ...core.domain.errors import ConfigError

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


def _default_conf_root() -> str:
    return str(Path.home() / ".dockyard")


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = False


@dataclass
class PluginConfig:
    """Plugin system configuration."""
    enabled: bool = True
    plugin_directory: str = "plugins"
    settings: Dict[str, Dict[str, Any]] = field(default_factory=dict)


@dataclass
class EngineConfig:
    """Container engine configuration."""
    command: List[str] = field(default_factory=lambda: ["docker", "compose"])
    timeout: Optional[float] = None


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    # Basic application settings
    name: str = "Dockyard"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"

    # Project handling
    user_conf_root: str = field(default_factory=_default_conf_root)
    project_file: str = ".dockyard.yml"
    compose_version: str = "3.6"
    app_env: Dict[str, Any] = field(default_factory=lambda: {"DOCKYARD": "ON"})
    app_labels: Dict[str, Any] = field(default_factory=lambda: {"io.dockyard.container": "TRUE"})

    # Component configurations
    engine: EngineConfig = field(default_factory=EngineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    plugins: PluginConfig = field(default_factory=PluginConfig)

    # Additional settings
    config_file_path: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate_mappings()
        self._validate_values()

    @property
    def compose_root(self) -> Path:
        """Directory holding one assembled compose directory per project."""
        return Path(self.user_conf_root) / "compose"

    def _validate_mappings(self) -> None:
        """Validate env and label tables."""
        for name, value in (("app_env", self.app_env), ("app_labels", self.app_labels),
                            ("plugins.settings", self.plugins.settings)):
            if not isinstance(value, Mapping):
                raise ConfigError(f"{name} must be a mapping, got {type(value).__name__}")

    def _validate_values(self) -> None:
        """Validate scalar settings."""
        if not self.project_file:
            raise ConfigError("project_file cannot be empty")
        if not self.compose_version:
            raise ConfigError("compose_version cannot be empty")
        if self.logging.level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {self.logging.level}")
        if self.logging.backup_count < 0:
            raise ConfigError(f"backup_count must not be negative, got {self.logging.backup_count}")
        if not self.engine.command:
            raise ConfigError("engine.command cannot be empty")
        if self.engine.timeout is not None and self.engine.timeout <= 0:
            raise ConfigError(f"engine.timeout must be positive, got {self.engine.timeout}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        try:
            engine_config = EngineConfig(**data.get('engine', {}))
            logging_config = LoggingConfig(**data.get('logging', {}))
            plugin_config = PluginConfig(**data.get('plugins', {}))
        except TypeError as e:
            raise ConfigError(f"Invalid configuration section: {e}") from e

        return cls(
            name=data.get('name', 'Dockyard'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', 'production'),
            user_conf_root=data.get('user_conf_root') or _default_conf_root(),
            project_file=data.get('project_file', '.dockyard.yml'),
            compose_version=str(data.get('compose_version', '3.6')),
            app_env=data.get('app_env', {"DOCKYARD": "ON"}),
            app_labels=data.get('app_labels', {"io.dockyard.container": "TRUE"}),
            engine=engine_config,
            logging=logging_config,
            plugins=plugin_config,
            config_file_path=data.get('config_file_path'),
        )
