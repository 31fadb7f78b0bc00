"""
Ordered hook dispatcher for lifecycle events.

Handlers live in two independent registries: a global one shared by every
app created from the same runtime context, and one private to each app.
``emit`` runs the handlers of both, strictly one after another, so a handler
can rely on state changes made by the handlers before it.
"""

import inspect
import itertools
import time
import uuid
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from ..domain.errors import DockyardError, HandlerError
from ..domain.events import DEFAULT_WEIGHT
from ..interfaces.messaging import EventHandler, IEventBus

GLOBAL_SCOPE = 0
INSTANCE_SCOPE = 1


class EventSubscription:
    """Represents one registered handler."""

    def __init__(self, subscription_id: str, event_name: str, handler: EventHandler,
                 weight: int, sequence: int):
        self.subscription_id = subscription_id
        self.event_name = event_name
        self.handler = handler
        self.weight = weight
        self.sequence = sequence
        self.created_at = time.time()
        self.call_count = 0
        self.last_called: Optional[float] = None
        self.error_count = 0

    @property
    def handler_name(self) -> str:
        return getattr(self.handler, "__qualname__", repr(self.handler))


class EventRegistry:
    """
    Ordered subscriber table.

    Registration order is preserved; ``handlers_for`` sorts by weight and
    falls back to registration order for equal weights.
    """

    def __init__(self) -> None:
        self._subscriptions: Dict[str, List[EventSubscription]] = {}
        self._sequence = itertools.count()

    def on(self, event_name: str, handler: EventHandler, weight: int = DEFAULT_WEIGHT) -> str:
        """Register a handler and return its subscription id."""
        if not event_name:
            raise ValueError("Event name cannot be empty")
        if not callable(handler):
            raise TypeError(f"Handler for '{event_name}' is not callable")

        subscription = EventSubscription(
            subscription_id=str(uuid.uuid4()),
            event_name=event_name,
            handler=handler,
            weight=weight,
            sequence=next(self._sequence),
        )
        self._subscriptions.setdefault(event_name, []).append(subscription)

        logger.debug(f"Added subscription for '{event_name}' (ID: {subscription.subscription_id})")
        return subscription.subscription_id

    def off(self, subscription_id: str) -> bool:
        """Remove a handler by subscription id."""
        for event_name, subscriptions in self._subscriptions.items():
            for i, subscription in enumerate(subscriptions):
                if subscription.subscription_id == subscription_id:
                    subscriptions.pop(i)
                    logger.debug(f"Removed subscription {subscription_id} for '{event_name}'")
                    return True
        return False

    def handlers_for(self, event_name: str) -> List[EventSubscription]:
        subscriptions = self._subscriptions.get(event_name, [])
        return sorted(subscriptions, key=lambda s: (s.weight, s.sequence))

    def count(self, event_name: Optional[str] = None) -> int:
        if event_name is not None:
            return len(self._subscriptions.get(event_name, []))
        return sum(len(subs) for subs in self._subscriptions.values())


class EventBus(IEventBus):
    """
    Sequential, fail-fast event bus for one app.

    Handlers registered with ``on`` only fire for this bus. Handlers in the
    injected global registry fire for every bus sharing it, ahead of
    instance handlers of the same weight.
    """

    def __init__(self, global_registry: Optional[EventRegistry] = None) -> None:
        self._global = global_registry if global_registry is not None else EventRegistry()
        self._local = EventRegistry()

        # Metrics
        self._metrics: Dict[str, Any] = {
            'events_emitted': 0,
            'handlers_invoked': 0,
            'handlers_failed': 0,
        }

    @property
    def global_registry(self) -> EventRegistry:
        return self._global

    def on(self, event_name: str, handler: EventHandler, weight: int = DEFAULT_WEIGHT) -> str:
        """Register an instance-scoped handler."""
        return self._local.on(event_name, handler, weight)

    def off(self, subscription_id: str) -> bool:
        """Remove an instance-scoped handler."""
        return self._local.off(subscription_id)

    def handlers_for(self, event_name: str) -> List[EventSubscription]:
        """All handlers an ``emit`` of this event would run, in run order."""
        ranked: List[Tuple[int, int, int, EventSubscription]] = []
        for scope, registry in ((GLOBAL_SCOPE, self._global), (INSTANCE_SCOPE, self._local)):
            for subscription in registry.handlers_for(event_name):
                ranked.append((subscription.weight, scope, subscription.sequence, subscription))
        ranked.sort(key=lambda item: item[:3])
        return [item[3] for item in ranked]

    async def emit(self, event_name: str, *args: Any) -> None:
        """Run every handler for ``event_name`` in order, stopping at the first failure."""
        subscriptions = self.handlers_for(event_name)
        self._metrics['events_emitted'] += 1
        if not subscriptions:
            return

        logger.debug(f"Emitting '{event_name}' to {len(subscriptions)} handler(s)")

        for subscription in subscriptions:
            self._metrics['handlers_invoked'] += 1
            try:
                result = subscription.handler(*args)
                if inspect.isawaitable(result):
                    await result
            except DockyardError:
                subscription.error_count += 1
                self._metrics['handlers_failed'] += 1
                raise
            except Exception as e:
                subscription.error_count += 1
                self._metrics['handlers_failed'] += 1
                logger.error(f"Handler error for event {event_name}: {e}")
                raise HandlerError(event_name, subscription.handler_name, str(e)) from e
            finally:
                subscription.call_count += 1
                subscription.last_called = time.time()

    def get_metrics(self) -> Dict[str, Any]:
        """Get event bus metrics."""
        return {
            **self._metrics,
            'global_subscriptions': self._global.count(),
            'instance_subscriptions': self._local.count(),
        }
