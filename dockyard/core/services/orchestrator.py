"""
App lifecycle orchestrator.

An ``Orchestrator`` owns the state of one project: its identity, its
fragments and the hooks registered on it. Every lifecycle operation is a
fixed, awaited sequence of hook emissions and engine calls; the first
failure aborts the rest of the sequence and is raised to the caller. There
is no automatic rollback; ``reset`` forces a fresh initialization.
"""

import asyncio
import copy
from pathlib import Path
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

from loguru import logger

from ..domain.errors import DockyardError, EngineError
from ..domain.events import LifecycleEvent, StatusMessage
from ..domain.fragments import AssembledCompose, Fragment
from ..domain.identity import ProjectIdentity
from ..utils import metrics_payload
from ...plugins.loader import PluginLoader
from .event_bus import EventBus
from .fragment_store import FragmentStore

if TYPE_CHECKING:
    from ...application.context import AppContext


class Orchestrator:
    """
    Lifecycle state machine for a single project.

    The only persistent state is ``initialized``. It flips to True once
    ``init`` has completed and back to False only through ``reset``. Every
    other operation runs its full sequence on each call.
    """

    def __init__(self, name: str, config_file: str, config: Optional[Dict[str, Any]],
                 context: "AppContext") -> None:
        self.identity = ProjectIdentity.create(name, str(config_file))
        self._raw_config: Dict[str, Any] = copy.deepcopy(dict(config or {}))
        self._context = context
        self._loader = PluginLoader(context.plugins, context)
        self._init_lock = asyncio.Lock()

        self.config: Dict[str, Any] = copy.deepcopy(self._raw_config)
        self.events = EventBus(context.events)
        self.compose_dir: Path = context.config.compose_root / self.identity.project
        self.initialized = False

        # Populated by init()
        self.env: Dict[str, Any] = {}
        self.labels: Dict[str, Any] = {}
        self.root: Optional[Path] = None
        self.fragments: Optional[FragmentStore] = None
        self.services: Dict[str, Dict[str, Any]] = {}
        self.info: List[Dict[str, Any]] = []
        self.compose: Optional[AssembledCompose] = None
        self.plugins_loaded: List[str] = []

    @property
    def name(self) -> str:
        return self.identity.slug

    @property
    def project(self) -> str:
        return self.identity.project

    @property
    def id(self) -> str:
        return self.identity.id

    @property
    def config_file(self) -> str:
        return self.identity.config_file

    @property
    def context(self) -> "AppContext":
        return self._context

    def add(self, fragment: Fragment, front: bool = False) -> None:
        """Add a fragment to the app; only valid while or after initializing."""
        if self.fragments is None:
            raise RuntimeError(f"App {self.name} has no fragment store yet, call init() first")
        self.fragments.add(fragment, front=front)

    async def message(self, template: str, *args: Any) -> None:
        """Send a status message for this app and log it."""
        content = template % args if args else template
        await self._context.messenger.notify(StatusMessage(app=self.name, message=content))
        logger.info(content)

    async def init(self) -> None:
        """
        Initialize the app once.

        Loads plugins, emits ``pre-init``/``post-init`` and assembles the
        compose file. Later calls return immediately until ``reset``. A
        failed init leaves the app uninitialized so it can be retried.
        """
        async with self._init_lock:
            if self.initialized:
                return
            await self._initialize()

    async def _initialize(self) -> None:
        settings = self._context.config

        self.config = copy.deepcopy(self._raw_config)
        self.env = copy.deepcopy(dict(settings.app_env))
        self.labels = copy.deepcopy(dict(settings.app_labels))
        self.root = Path(self.identity.config_file).parent
        self.services = {}
        self.info = []
        self.compose = None
        self.fragments = FragmentStore(self.root)

        base = Fragment.from_project_config(self.config)
        logger.debug(f"Initializing app {self.name} from {self.root}")
        logger.trace(f"App {self.name} uses config {self.config}")

        self.plugins_loaded = await self._loader.load(self)
        self.fragments.add(base)
        await self.events.emit(LifecycleEvent.PRE_INIT.value, self)

        self.services = self.fragments.flatten_services()
        self.info = self.fragments.default_info(self)
        await self.events.emit(LifecycleEvent.POST_INIT.value, self)

        self.fragments.add(self._globals_fragment(), front=True)
        self.compose = self.fragments.assemble(self.compose_dir)

        self.initialized = True
        logger.info(f"App {self.name} is ready!")
        logger.debug(f"App {self.project} has compose file {self.compose.path} "
                     f"with services {self.compose.services}")

    def reset(self) -> None:
        """Force a full re-initialization on the next operation."""
        self.initialized = False

    async def start(self) -> None:
        """Start the app: ``pre-start``, engine start, ``post-start``."""
        await self.message("Starting app %s", self.name)
        await self._init_and_report("start")
        await self._phase("start", self._engine, "start")

    async def stop(self) -> None:
        """Stop the app: ``pre-stop``, engine stop, ``post-stop``."""
        await self.message("Stopping %s", self.name)
        await self._init_and_report("stop")
        await self._phase("stop", self._engine, "stop")

    async def uninstall(self, purge: bool = False) -> None:
        """
        Remove the app's containers.

        Volumes and networks survive unless ``purge`` is True. Does not
        initialize the app.
        """
        await self.message("Uninstalling %s", self.name)
        await self._context.metrics.report("uninstall", metrics_payload(self))
        await self._phase("uninstall", self._engine, "destroy", purge=purge)

    async def destroy(self) -> None:
        """Stop the app and uninstall it with purge."""
        await self.message("Destroying %s", self.name)
        await self._phase("destroy", self._stop_and_purge)

    async def rebuild(self) -> None:
        """Stop, uninstall, rebuild images and start again."""
        await self.message("Rebuilding %s", self.name)
        await self.stop()
        await self._phase("rebuild", self._uninstall_and_build)
        await self.start()

    async def restart(self) -> None:
        """Stop and then start the app."""
        await self.message("Restarting %s", self.name)
        await self.stop()
        await self.start()

    async def _phase(self, phase: str, action: Callable[..., Awaitable[Any]],
                     *args: Any, **kwargs: Any) -> None:
        """Run ``action`` between the ``pre-<phase>`` and ``post-<phase>`` hooks."""
        await self.events.emit(LifecycleEvent.pre(phase).value, self)
        await action(*args, **kwargs)
        await self.events.emit(LifecycleEvent.post(phase).value, self)

    async def _stop_and_purge(self) -> None:
        await self.stop()
        await self.uninstall(purge=True)

    async def _uninstall_and_build(self) -> None:
        await self.uninstall()
        await self._engine("build")

    async def _init_and_report(self, operation: str) -> None:
        await self.init()
        await self._context.metrics.report(operation, metrics_payload(self))

    async def _engine(self, operation: str, **kwargs: Any) -> None:
        method = getattr(self._context.engine, operation)
        try:
            await method(self, **kwargs)
        except DockyardError:
            raise
        except Exception as e:
            logger.error(f"Engine {operation} failed for app {self.name}: {e}")
            raise EngineError(operation, str(e)) from e

    def _globals_fragment(self) -> Fragment:
        """Fragment giving every service the app-wide env and labels."""
        return Fragment.inline("globals", {
            "version": self._context.config.compose_version,
            "services": {
                name: {
                    "environment": copy.deepcopy(self.env),
                    "labels": copy.deepcopy(self.labels),
                }
                for name in self.services
            },
        })

    def __repr__(self) -> str:
        return f"Orchestrator(name={self.name!r}, initialized={self.initialized})"
