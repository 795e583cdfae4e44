"""Command-line entry point for secrets-fetch.

Runs a single Doppler API operation and prints the result as JSON on stdout.
Logs go to stderr (or a file) so the output can be piped.

    secrets-fetch secrets --token "$DOPPLER_TOKEN" --project backend --config prd
    secrets-fetch oidc --identity "$IDENTITY_ID" --token "$OIDC_TOKEN"
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from secrets_fetch import __version__
from secrets_fetch.api.doppler import DopplerClient
from secrets_fetch.core.config import ClientConfig, LogConfig
from secrets_fetch.core.errors import SecretsFetchError
from secrets_fetch.core.logging import configure_logging

console = Console(stderr=True)

app = typer.Typer(
    name="secrets-fetch",
    help="Fetch secrets from Doppler",
    add_completion=False,
)


@dataclass
class CliLoggingConfig:
    """Logging options collected from global CLI flags."""

    level: str = "WARNING"
    format: str = "console"
    file: Path | None = None
    explicit: bool = False
    configured: bool = False


_log_config = CliLoggingConfig()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"secrets-fetch v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-L",
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
            envvar="SECRETS_FETCH_LOG_LEVEL",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Path for log file output",
            envvar="SECRETS_FETCH_LOG_FILE",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            help="Log format: json, console, or both",
            envvar="SECRETS_FETCH_LOG_FORMAT",
        ),
    ] = None,
) -> None:
    """secrets-fetch - Doppler secrets and OIDC token exchange."""
    if log_level:
        _log_config.level = log_level.upper()
        _log_config.explicit = True
    if log_format:
        _log_config.format = log_format.lower()
        _log_config.explicit = True
    if log_file:
        _log_config.file = log_file
        _log_config.explicit = True


def _configure_global_logging(config: LogConfig | None = None) -> None:
    """Configure logging once per session.

    Explicit CLI flags win over the ``logging`` section of a config file.
    """
    if _log_config.configured:
        return
    try:
        if config is None or _log_config.explicit:
            config = LogConfig(
                level=_log_config.level,
                format=_log_config.format,
                file_path=_log_config.file,
            )
        configure_logging(
            level=config.level,
            format=config.format,
            file_path=config.file_path,
            max_file_size_mb=config.max_file_size_mb,
            backup_count=config.backup_count,
            include_timestamps=config.include_timestamps,
            include_context=config.include_context,
        )
    except (ValueError, ValidationError) as e:
        console.print(f"[red]Logging configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None
    _log_config.configured = True


def _load_config(config_file: Path | None, api_host: str | None) -> ClientConfig:
    """Load client config from YAML (if given) with CLI overrides applied."""
    try:
        config = ClientConfig.from_yaml(config_file) if config_file else ClientConfig()
        if api_host:
            config = ClientConfig.model_validate(
                {**config.model_dump(), "api_host": api_host}
            )
    except (OSError, yaml.YAMLError, ValidationError) as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None

    _configure_global_logging(config.logging if config_file else None)
    return config


def _fail(error: SecretsFetchError) -> typer.Exit:
    console.print(str(error), style="red", markup=False, highlight=False)
    return typer.Exit(1)


ConfigFileOption = Annotated[
    Path | None,
    typer.Option(
        "--config-file",
        exists=True,
        dir_okay=False,
        help="YAML client configuration",
        envvar="SECRETS_FETCH_CONFIG",
    ),
]
ApiHostOption = Annotated[
    str | None,
    typer.Option("--api-host", help="Doppler API host", envvar="DOPPLER_API_HOST"),
]


@app.command()
def secrets(
    token: Annotated[
        str,
        typer.Option("--token", "-t", help="Doppler access token", envvar="DOPPLER_TOKEN"),
    ],
    project: Annotated[
        str | None,
        typer.Option("--project", "-p", help="Project slug (requires --config)"),
    ] = None,
    config: Annotated[
        str | None,
        typer.Option("--config", "-c", help="Config name (requires --project)"),
    ] = None,
    api_host: ApiHostOption = None,
    config_file: ConfigFileOption = None,
    raw: Annotated[
        bool,
        typer.Option("--raw", help="Print full secret records instead of computed values"),
    ] = False,
) -> None:
    """Fetch secrets and print them as a JSON object."""
    if bool(project) != bool(config):
        console.print(
            "[yellow]Both --project and --config are required to select a config; "
            "using the token's default scope.[/yellow]"
        )
    client_config = _load_config(config_file, api_host)

    async def _run() -> dict:
        async with DopplerClient.from_config(client_config) as client:
            return await client.fetch_secrets(token, project, config)

    try:
        records = asyncio.run(_run())
    except SecretsFetchError as e:
        raise _fail(e) from None

    if raw:
        output = records
    else:
        output = {name: record.get("computed") for name, record in records.items()}
    typer.echo(json.dumps(output, indent=2, sort_keys=True))


@app.command()
def oidc(
    identity: Annotated[
        str,
        typer.Option("--identity", "-i", help="Service account identity id", envvar="DOPPLER_IDENTITY_ID"),
    ],
    token: Annotated[
        str,
        typer.Option("--token", "-t", help="OIDC identity token", envvar="DOPPLER_OIDC_TOKEN"),
    ],
    api_host: ApiHostOption = None,
    config_file: ConfigFileOption = None,
) -> None:
    """Exchange an OIDC token for a Doppler service token and print it."""
    client_config = _load_config(config_file, api_host)

    async def _run() -> str:
        async with DopplerClient.from_config(client_config) as client:
            return await client.oidc_auth(identity, token)

    try:
        service_token = asyncio.run(_run())
    except SecretsFetchError as e:
        raise _fail(e) from None

    typer.echo(service_token)


if __name__ == "__main__":
    app()
