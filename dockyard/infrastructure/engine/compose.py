"""
Docker Compose engine adapter.

Drives ``docker compose`` against the file an app assembled during init.
Each operation is one subprocess; a non-zero exit is reported as an
``EngineError`` carrying the command's stderr.
"""

import asyncio
from typing import TYPE_CHECKING, List, Optional

from loguru import logger

from ...core.domain.errors import EngineError
from ...core.interfaces.engine import IEngine
from ..config.models import EngineConfig

if TYPE_CHECKING:
    from ...core.services.orchestrator import Orchestrator


class ComposeEngine(IEngine):
    """Engine backed by the docker compose CLI."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self._config = config or EngineConfig()

    async def start(self, app: "Orchestrator") -> None:
        await self._compose(app, "start", ["up", "--detach", "--remove-orphans"])

    async def stop(self, app: "Orchestrator") -> None:
        await self._compose(app, "stop", ["stop"])

    async def destroy(self, app: "Orchestrator", purge: bool = False) -> None:
        args = ["down", "--remove-orphans"]
        if purge:
            args.append("--volumes")
        await self._compose(app, "destroy", args)

    async def build(self, app: "Orchestrator") -> None:
        await self._compose(app, "build", ["build", "--pull"])

    def command_for(self, app: "Orchestrator", args: List[str]) -> List[str]:
        """Full command line for a compose subcommand."""
        if app.compose is None:
            raise EngineError("compose", f"App {app.name} has no assembled compose file")
        command = [*self._config.command, "--project-name", app.project]
        # Relative paths in the project's compose files resolve against app.root
        if app.root is not None:
            command += ["--project-directory", str(app.root)]
        return [*command, "--file", str(app.compose.path), *args]

    async def _compose(self, app: "Orchestrator", operation: str, args: List[str]) -> None:
        command = self.command_for(app, args)
        logger.debug(f"Running {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=str(app.root) if app.root else None,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EngineError(operation, f"Cannot run {command[0]}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self._config.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise EngineError(operation, f"Timed out after {self._config.timeout}s") from e

        if stdout:
            logger.debug(stdout.decode(errors="replace").rstrip())
        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip() if stderr else ""
            raise EngineError(operation, message or f"exit status {process.returncode}")
