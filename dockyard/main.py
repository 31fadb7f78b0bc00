"""
Main entry point for Dockyard.

This module provides the command-line interface. Every lifecycle command
loads the application configuration, finds the project file from the
working directory upwards and runs one orchestrator operation.
"""

import asyncio
import json
import sys
from typing import Any, Optional

import typer
from loguru import logger

from .application.bootstrap import create_context, load_app
from .core.domain.errors import DockyardError
from .core.domain.events import StatusMessage
from .core.interfaces.reporting import IMessenger
from .core.services.orchestrator import Orchestrator
from .infrastructure.config.loader import ConfigLoader
from .infrastructure.config.models import ApplicationConfig
from .infrastructure.logging.setup import setup_logging

# Create CLI application
cli = typer.Typer(
    name="dockyard",
    help="Plugin-driven lifecycle management for Docker Compose apps"
)

MESSAGE_COLORS = {
    "info": typer.colors.CYAN,
    "success": typer.colors.GREEN,
    "warning": typer.colors.YELLOW,
    "error": typer.colors.RED,
}


class EchoMessenger(IMessenger):
    """Messenger that prints status messages to the terminal."""

    async def notify(self, message: StatusMessage) -> None:
        typer.secho(message.message, fg=MESSAGE_COLORS.get(message.type, typer.colors.CYAN))


def load_settings(config_file: Optional[str], log_level: Optional[str], debug: bool) -> ApplicationConfig:
    """Load configuration, apply command line overrides and set up logging."""
    config = ConfigLoader().load_config(config_file)

    if log_level:
        config.logging.level = log_level.upper()
    if debug:
        config.debug = True
        config.logging.level = "DEBUG"

    setup_logging(config.logging)
    return config


async def run_operation(config: ApplicationConfig, directory: str, operation: str,
                        **kwargs: Any) -> Orchestrator:
    """
    Run one lifecycle operation on the app found from ``directory``.

    Args:
        config: Application configuration
        directory: Directory to search for the project file from
        operation: Orchestrator method name
        **kwargs: Arguments for the operation

    Returns:
        The orchestrator the operation ran on
    """
    context = create_context(config, messenger=EchoMessenger())
    app = load_app(context, directory)
    await getattr(app, operation)(**kwargs)
    return app


def execute(operation: str, config_file: Optional[str], directory: str,
            log_level: Optional[str], debug: bool, **kwargs: Any) -> Orchestrator:
    """Run an operation from the CLI, exiting with status 1 on failure."""
    try:
        config = load_settings(config_file, log_level, debug)
        return asyncio.run(run_operation(config, directory, operation, **kwargs))
    except DockyardError as e:
        logger.debug(f"{operation} failed: {e!r}")
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        sys.exit(1)


@cli.command()
def start(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    directory: str = typer.Option(
        ".", "--dir", "-d", help="Directory to search for the project file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Start the app."""
    app = execute("start", config_file, directory, log_level, debug)
    typer.secho(f"App {app.name} started", fg=typer.colors.GREEN)


@cli.command()
def stop(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    directory: str = typer.Option(
        ".", "--dir", "-d", help="Directory to search for the project file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Stop the app."""
    app = execute("stop", config_file, directory, log_level, debug)
    typer.secho(f"App {app.name} stopped", fg=typer.colors.GREEN)


@cli.command()
def restart(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    directory: str = typer.Option(
        ".", "--dir", "-d", help="Directory to search for the project file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Stop and start the app."""
    app = execute("restart", config_file, directory, log_level, debug)
    typer.secho(f"App {app.name} restarted", fg=typer.colors.GREEN)


@cli.command()
def rebuild(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    directory: str = typer.Option(
        ".", "--dir", "-d", help="Directory to search for the project file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Remove the app's containers, rebuild its images and start it."""
    app = execute("rebuild", config_file, directory, log_level, debug)
    typer.secho(f"App {app.name} rebuilt", fg=typer.colors.GREEN)


@cli.command()
def destroy(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    directory: str = typer.Option(
        ".", "--dir", "-d", help="Directory to search for the project file"
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Do not ask for confirmation"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Stop the app and remove its containers, volumes and networks."""
    if not yes and not typer.confirm("Destroy the app and all of its data?"):
        typer.echo("Destroy aborted")
        raise typer.Exit(0)

    app = execute("destroy", config_file, directory, log_level, debug)
    typer.secho(f"App {app.name} destroyed", fg=typer.colors.GREEN)


@cli.command()
def info(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    directory: str = typer.Option(
        ".", "--dir", "-d", help="Directory to search for the project file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Print information about the app's services."""
    app = execute("init", config_file, directory, log_level, debug)
    typer.echo(json.dumps(app.info, indent=2, default=str))


@cli.command()
def init_config(
    output: str = typer.Option(
        "config.yaml", "--output", "-o", help="Output configuration file"
    ),
    format: str = typer.Option(
        "yaml", "--format", "-f", help="Configuration format (yaml/json)"
    )
) -> None:
    """Generate a default configuration file."""

    config = ApplicationConfig()
    config_loader = ConfigLoader()

    try:
        config_loader.save_config(config, output, format)
        typer.echo(f"Default configuration saved to {output}")
    except (DockyardError, OSError) as e:
        typer.echo(f"Error saving configuration: {e}", err=True)
        sys.exit(1)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
