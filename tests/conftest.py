"""
Shared fixtures: recording collaborators and a ready-to-use runtime context.
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from dockyard.application.context import AppContext
from dockyard.core.domain.events import LifecycleEvent, StatusMessage
from dockyard.core.interfaces.engine import IEngine
from dockyard.core.interfaces.reporting import IMessenger, IMetricsReporter
from dockyard.core.services.orchestrator import Orchestrator
from dockyard.infrastructure.config.models import ApplicationConfig, PluginConfig
from dockyard.plugins.registry import PluginRegistry


class RecordingEngine(IEngine):
    """Engine that records every call and can be told to fail."""

    def __init__(self, timeline: List[str]) -> None:
        self.timeline = timeline
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.failures: Dict[str, Exception] = {}

    async def _record(self, operation: str, app: Any, **kwargs: Any) -> None:
        self.calls.append((operation, app.name, kwargs))
        self.timeline.append(f"engine:{operation}")
        if operation in self.failures:
            raise self.failures[operation]

    async def start(self, app: Any) -> None:
        await self._record("start", app)

    async def stop(self, app: Any) -> None:
        await self._record("stop", app)

    async def destroy(self, app: Any, purge: bool = False) -> None:
        await self._record("destroy", app, purge=purge)

    async def build(self, app: Any) -> None:
        await self._record("build", app)


class RecordingMetrics(IMetricsReporter):
    def __init__(self) -> None:
        self.reports: List[Tuple[str, Dict[str, Any]]] = []

    async def report(self, event: str, payload: Dict[str, Any]) -> None:
        self.reports.append((event, payload))


class RecordingMessenger(IMessenger):
    def __init__(self) -> None:
        self.messages: List[StatusMessage] = []

    async def notify(self, message: StatusMessage) -> None:
        self.messages.append(message)


@pytest.fixture
def timeline() -> List[str]:
    return []


@pytest.fixture
def engine(timeline: List[str]) -> RecordingEngine:
    return RecordingEngine(timeline)


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()


@pytest.fixture
def messenger() -> RecordingMessenger:
    return RecordingMessenger()


@pytest.fixture
def registry() -> PluginRegistry:
    return PluginRegistry()


@pytest.fixture
def settings(tmp_path: Path) -> ApplicationConfig:
    """Application config writing compose files under the test directory."""
    return ApplicationConfig(
        user_conf_root=str(tmp_path / "conf"),
        plugins=PluginConfig(enabled=False),
    )


@pytest.fixture
def context(settings: ApplicationConfig, engine: RecordingEngine, metrics: RecordingMetrics,
            messenger: RecordingMessenger, registry: PluginRegistry) -> AppContext:
    return AppContext(
        config=settings,
        engine=engine,
        metrics=metrics,
        messenger=messenger,
        plugins=registry,
    )


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "project"
    directory.mkdir()
    return directory


@pytest.fixture
def make_app(context: AppContext, project_dir: Path) -> Callable[..., Orchestrator]:
    """Factory for orchestrators rooted in ``project_dir``."""

    def _make(name: str = "My Site", config: Optional[Dict[str, Any]] = None) -> Orchestrator:
        if config is None:
            config = {"name": name, "services": {"web": {"image": "nginx"}}}
        return Orchestrator(name, str(project_dir / ".dockyard.yml"), config, context)

    return _make


@pytest.fixture
def track(timeline: List[str]) -> Callable[..., None]:
    """Record every lifecycle event an app emits into ``timeline``."""

    def _track(app: Orchestrator, include_init: bool = False) -> None:
        for event in LifecycleEvent:
            if not include_init and event in (LifecycleEvent.PRE_INIT, LifecycleEvent.POST_INIT):
                continue
            app.events.on(event.value, lambda _app, name=event.value: timeline.append(name))

    return _track
