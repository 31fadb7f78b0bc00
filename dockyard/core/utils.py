"""
Helpers shared by the loader, the fragment store and the orchestrator.
"""

import copy
from typing import TYPE_CHECKING, Any, Dict, Mapping

if TYPE_CHECKING:
    from .services.orchestrator import Orchestrator


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two mappings into a new dict.

    Nested mappings are merged key by key; any other value in ``override``
    replaces the one in ``base``. Neither input is modified.
    """
    result = copy.deepcopy(dict(base))

    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


def metrics_payload(app: "Orchestrator") -> Dict[str, Any]:
    """Describe an app for the metrics collaborator."""
    payload: Dict[str, Any] = {
        "app": app.id,
        "type": app.config.get("recipe") or "none",
    }
    services = app.config.get("services")
    if isinstance(services, Mapping):
        payload["services"] = [
            definition.get("type", name) if isinstance(definition, Mapping) else name
            for name, definition in services.items()
        ]
    return payload
