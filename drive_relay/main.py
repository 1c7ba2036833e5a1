"""
Command-line interface for Drive Relay.

``drive-relay start`` serves the relay API; the remaining commands help
prepare and inspect a deployment.
"""

import asyncio
import logging
import secrets
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp
import typer
import uvicorn

from .application.startup import ApplicationStartup
from .infrastructure.config.loader import ConfigLoader
from .infrastructure.config.models import ApplicationConfig
from .infrastructure.logging.setup import setup_logging
from .infrastructure.services.upload.chunking import iter_ranges
from .presentation.api.app import create_app

DEFAULT_CONFIG_FILE = "config.yaml"

cli = typer.Typer(
    name="drive-relay",
    help="Relay for resumable uploads to Google Drive"
)

logger = logging.getLogger(__name__)


def _load(config_file: Optional[str]) -> ApplicationConfig:
    if config_file is None and Path(DEFAULT_CONFIG_FILE).exists():
        config_file = DEFAULT_CONFIG_FILE
    return ConfigLoader().load_config(config_file)


@cli.command()
def start(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="YAML or JSON configuration file"
    ),
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
    folder_id: Optional[str] = typer.Option(
        None, "--folder-id", help="Drive folder that receives uploaded files"
    ),
    allow_origin: Optional[List[str]] = typer.Option(
        None, "--allow-origin", help="Browser origin allowed by CORS (repeatable)"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level"),
    debug: bool = typer.Option(False, "--debug", help="Verbose logging and error bodies")
) -> None:
    """Serve the relay API."""

    config = ConfigLoader().load_config(config_file)

    if host:
        config.server.host = host
    if port:
        config.server.port = port
    if folder_id:
        config.drive.parent_folder_id = folder_id
    if allow_origin:
        config.security.allowed_origins = list(allow_origin)
    if log_level:
        config.logging.level = log_level.upper()
    if debug:
        config.debug = True
        config.logging.level = "DEBUG"

    setup_logging(config.logging)

    logger.info(
        f"{config.name} v{config.version} ({config.environment}) "
        f"listening on {config.server.host}:{config.server.port}")
    if not config.security.shared_secret:
        logger.warning("No shared secret configured; session creation will be rejected")
    if not config.drive.parent_folder_id:
        logger.warning("No Drive folder configured; files land in the account root")

    try:
        asyncio.run(run_application(config))
    except KeyboardInterrupt:
        logger.info("Relay interrupted")
    except Exception as e:
        logger.error(f"Relay stopped with an error: {e}")
        sys.exit(1)


@cli.command()
def dev(
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(True, "--reload/--no-reload", help="Restart on source changes")
) -> None:
    """Run a local relay with debug logging, reading ./config.yaml when present."""

    config = _load(None)
    config.debug = True
    config.environment = "development"
    config.logging.level = "DEBUG"

    setup_logging(config.logging)
    logger.info(f"Development relay on {config.server.host}:{port}")

    uvicorn.run(
        "drive_relay.presentation.api.app:create_app_from_config",
        factory=True,
        host=config.server.host,
        port=port,
        reload=reload,
        reload_dirs=["drive_relay"],
        log_level="debug",
        access_log=True
    )


@cli.command()
def init_config(
    output: str = typer.Option(DEFAULT_CONFIG_FILE, "--output", "-o", help="File to write"),
    format: str = typer.Option("yaml", "--format", "-f", help="yaml or json"),
    with_secret: bool = typer.Option(
        False, "--with-secret", help="Fill security.shared_secret with a random value"
    )
) -> None:
    """Write a configuration file with default settings."""

    config = ApplicationConfig()
    if with_secret:
        config.security.shared_secret = secrets.token_urlsafe(32)

    try:
        ConfigLoader().save_config(config, output, format)
    except (OSError, ValueError) as e:
        typer.echo(f"Could not write {output}: {e}", err=True)
        sys.exit(1)

    typer.echo(f"Wrote {output}")
    if with_secret:
        typer.echo("A shared secret was generated; hand it to the upload client")


@cli.command()
def validate_config(
    config_file: str = typer.Argument(..., help="Configuration file to check")
) -> None:
    """Load a configuration file and print the upload profile it yields."""

    try:
        config = ConfigLoader().load_config(config_file)
    except (OSError, ValueError) as e:
        typer.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)

    upload = config.upload
    typer.echo(f"{config_file} is valid")
    typer.echo(f"single-shot threshold: {upload.single_shot_threshold} bytes")
    typer.echo(f"chunk size: {upload.chunk_size} bytes")
    typer.echo(f"session max age: {upload.session_max_age} s")
    typer.echo(f"credential provider: {config.credentials.provider}")
    typer.echo(f"shared secret: {'set' if config.security.shared_secret else 'missing'}")


@cli.command()
def plan(
    file_size: int = typer.Argument(..., help="File size in bytes"),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="YAML or JSON configuration file"
    )
) -> None:
    """Show how a file of the given size would be relayed."""

    if file_size <= 0:
        typer.echo("File size must be positive", err=True)
        sys.exit(1)

    upload = _load(config_file).upload
    if file_size <= upload.single_shot_threshold:
        typer.echo(f"single-shot upload of {file_size} bytes")
        return

    ranges = list(iter_ranges(file_size, upload.chunk_size))
    typer.echo(f"chunked upload: {len(ranges)} chunks of up to {upload.chunk_size} bytes")
    for index, byte_range in enumerate(ranges):
        typer.echo(f"  {index}: {byte_range.content_range(file_size)}")


def _describe_components(components: Dict[str, Any]) -> List[str]:
    return [
        f"  {name}: {info.get('status', 'unknown')}"
        for name, info in sorted(components.items())
    ]


@cli.command()
def health_check(
    host: str = typer.Option("localhost", "--host", help="Relay host"),
    port: int = typer.Option(8000, "--port", help="Relay port"),
    timeout: float = typer.Option(10.0, "--timeout", help="Request timeout in seconds")
) -> None:
    """Query /health on a running relay."""

    async def fetch() -> Optional[Dict[str, Any]]:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
            async with session.get(f"http://{host}:{port}/health") as response:
                if response.status != 200:
                    typer.echo(f"Relay answered {response.status}")
                    return None
                return await response.json()  # type: ignore[no-any-return]

    try:
        report = asyncio.run(fetch())
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        typer.echo(f"Relay unreachable: {e}")
        sys.exit(1)

    if report is None:
        sys.exit(1)

    status = report.get("status", "unknown")
    typer.echo(f"Relay is {status}")
    for line in _describe_components(report.get("components", {})):
        typer.echo(line)
    if status != "healthy":
        sys.exit(1)


async def run_application(config: ApplicationConfig) -> None:
    """
    Start the relay components, serve the API until shutdown, then stop them.

    Args:
        config: Application configuration
    """
    startup = ApplicationStartup(config)

    try:
        await startup.start_application()

        server = uvicorn.Server(uvicorn.Config(
            app=create_app(config, startup),
            host=config.server.host,
            port=config.server.port,
            log_level=config.logging.level.lower(),
            access_log=config.debug
        ))
        # uvicorn installs its own SIGINT/SIGTERM handlers
        await server.serve()
    finally:
        await startup.stop_application()


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
