"""
Exception taxonomy for the orchestration core.

None of these errors are recovered inside the core: every lifecycle
operation raises the originating error to its caller. Wrapping errors keep
the underlying exception as ``__cause__``.
"""

from typing import Optional


class DockyardError(Exception):
    """Base class for all orchestration errors."""

    default_code = "DOCKYARD_ERROR"

    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code or self.default_code
        super().__init__(self.message)


class ConfigError(DockyardError):
    """Malformed fragment, project or application configuration."""

    default_code = "CONFIG_ERROR"


class PluginLoadError(DockyardError):
    """A plugin's app loader raised."""

    default_code = "PLUGIN_LOAD_ERROR"

    def __init__(self, plugin: str, message: str):
        super().__init__(f"Plugin '{plugin}' failed to load: {message}")
        self.plugin = plugin


class HandlerError(DockyardError):
    """An event handler raised while an event was being emitted."""

    default_code = "HANDLER_ERROR"

    def __init__(self, event: str, handler: str, message: str):
        super().__init__(f"Handler {handler} for '{event}' failed: {message}")
        self.event = event
        self.handler = handler


class EngineError(DockyardError):
    """The container engine rejected an operation."""

    default_code = "ENGINE_ERROR"

    def __init__(self, operation: str, message: str):
        super().__init__(f"Engine {operation} failed: {message}")
        self.operation = operation
