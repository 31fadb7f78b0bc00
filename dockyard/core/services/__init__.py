"""
Core services: event bus, fragment store and the app orchestrator.
"""

from .event_bus import EventBus, EventRegistry, EventSubscription
from .fragment_store import COMPOSE_FILENAME, FragmentStore
from .orchestrator import Orchestrator

__all__ = [
    "COMPOSE_FILENAME",
    "EventBus",
    "EventRegistry",
    "EventSubscription",
    "FragmentStore",
    "Orchestrator",
]
