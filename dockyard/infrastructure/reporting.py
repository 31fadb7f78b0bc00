"""
Log-backed metrics and messaging collaborators.
"""

from collections import deque
from typing import Any, Deque, Dict, Tuple

from loguru import logger

from ..core.domain.events import StatusMessage
from ..core.interfaces.reporting import IMessenger, IMetricsReporter

MESSAGE_LEVELS = ("INFO", "SUCCESS", "WARNING", "ERROR")


class LogMetricsReporter(IMetricsReporter):
    """Metrics reporter that records reports in the log and in memory."""

    def __init__(self, history_size: int = 100) -> None:
        self.history: Deque[Tuple[str, Dict[str, Any]]] = deque(maxlen=history_size)

    async def report(self, event: str, payload: Dict[str, Any]) -> None:
        logger.bind(metrics=True).debug(f"metrics {event}: {payload}")
        self.history.append((event, dict(payload)))


class LogMessenger(IMessenger):
    """Messenger that writes status messages to the log."""

    async def notify(self, message: StatusMessage) -> None:
        level = message.type.upper()
        if level not in MESSAGE_LEVELS:
            level = "INFO"
        logger.bind(app=message.app, context=message.context).log(level, message.message)
