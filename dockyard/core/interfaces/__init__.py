"""
Contracts for the collaborators the orchestrator drives.
"""

from .engine import IEngine
from .messaging import EventHandler, IEventBus
from .reporting import IMessenger, IMetricsReporter

__all__ = [
    "IEngine",
    "IEventBus",
    "EventHandler",
    "IMessenger",
    "IMetricsReporter",
]
