"""
Lifecycle event names and user-facing status messages.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

DEFAULT_WEIGHT = 5


class LifecycleEvent(str, Enum):
    """Hook points emitted around every lifecycle phase."""

    PRE_INIT = "pre-init"
    POST_INIT = "post-init"
    PRE_START = "pre-start"
    POST_START = "post-start"
    PRE_STOP = "pre-stop"
    POST_STOP = "post-stop"
    PRE_UNINSTALL = "pre-uninstall"
    POST_UNINSTALL = "post-uninstall"
    PRE_DESTROY = "pre-destroy"
    POST_DESTROY = "post-destroy"
    PRE_REBUILD = "pre-rebuild"
    POST_REBUILD = "post-rebuild"

    @classmethod
    def pre(cls, phase: str) -> "LifecycleEvent":
        return cls(f"pre-{phase}")

    @classmethod
    def post(cls, phase: str) -> "LifecycleEvent":
        return cls(f"post-{phase}")


@dataclass(frozen=True)
class StatusMessage:
    """Status line sent to the messaging collaborator."""

    app: str
    message: str
    context: str = "app"
    type: str = "info"
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "app": self.app,
            "context": self.context,
            "message": self.message,
            "type": self.type,
            **self.extra,
        }
