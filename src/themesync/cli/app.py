"""Command line interface for Themesync."""

from __future__ import annotations

import asyncio
import json
import logging
import pathlib
from collections.abc import Awaitable, Callable
from typing import Any, Optional, TypeVar

import typer
import yaml
from dotenv import load_dotenv

from themesync import get_version
from themesync.config import Config, load_config
from themesync.core import (
    SyncContext,
    WatchDispatcher,
    deploy,
    download,
    download_theme,
    open_context,
    remove,
    sync,
    sync_theme,
    themes,
    upload,
    watch_theme,
)
from themesync.errors import ThemeSyncError
from themesync.logging import configure_logging

T = TypeVar("T")


def _load_environment(env_file: Optional[pathlib.Path]) -> None:
    """Load environment variables from .env files."""

    if env_file is not None:
        load_dotenv(dotenv_path=env_file, override=True)
    else:
        load_dotenv(override=False)


def _prepare_logging(
    config: Config,
    override_path: Optional[pathlib.Path],
    override_level: Optional[str],
) -> logging.Logger:
    """Configure logging based on configuration and overrides."""

    configured_path = override_path or config.logging.path
    configured_level = (override_level or config.logging.level).upper()
    return configure_logging(
        log_path=configured_path,
        level=configured_level,
        mirror_to_console=True,
    )


def _run(
    ctx: typer.Context,
    action: Callable[[SyncContext], Awaitable[T]],
    *,
    dry_run: bool = False,
) -> T:
    """Open a sync context, run ``action`` in it, and turn failures into exit code 1."""

    config: Config = ctx.obj["config"]
    logger: logging.Logger = ctx.obj["logger"]

    async def _main() -> T:
        async with open_context(config, logger=logger, dry_run=dry_run) as context:
            return await action(context)

    try:
        return asyncio.run(_main())
    except (ThemeSyncError, OSError) as exc:
        logger.debug("Command failed", exc_info=True)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


app = typer.Typer(
    name="themesync",
    help="Synchronize a local theme directory with a storefront's theme assets.",
    invoke_without_command=True,
    add_completion=False,
)

config_app = typer.Typer(help="Configuration utilities.", no_args_is_help=True)
app.add_typer(config_app, name="config")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


@app.callback()
def main(  # pragma: no cover - exercised via CLI invocation
    ctx: typer.Context,
    config: Optional[pathlib.Path] = typer.Option(
        None,
        "--config",
        metavar="PATH",
        help="Path to YAML configuration file (used exclusively).",
    ),
    env_file: Optional[pathlib.Path] = typer.Option(
        None,
        "--env-file",
        metavar="PATH",
        help="Load environment variables from .env-style file before execution.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        metavar="LEVEL",
        help="Override the configured log level (debug, info, warn, error).",
    ),
    log_path: Optional[pathlib.Path] = typer.Option(
        None,
        "--log-path",
        metavar="PATH",
        help="Override the base directory or file for log output.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show Themesync version and exit.",
    ),
) -> None:
    """Watch for changes with `themesync watch`; upload the whole theme with `themesync upload`."""

    ctx.ensure_object(dict)
    if ctx.invoked_subcommand is None:
        return

    _load_environment(env_file)
    try:
        config_obj = load_config(config)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    logger = _prepare_logging(config_obj, log_path, log_level)

    ctx.obj.update({"config": config_obj, "config_path": config, "logger": logger})


@app.command("download")
def download_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(
        None, help="Theme file to download; the whole theme when omitted."
    ),
    no_write: bool = typer.Option(
        False, "--no-write", help="Print the retrieved asset instead of writing it to disk."
    ),
) -> None:
    """Download a single theme file, or the entire theme if no file is given."""

    if path:
        _run(ctx, lambda context: download(context, path), dry_run=no_write)
    else:
        _run(ctx, download_theme, dry_run=no_write)


@app.command("sync")
def sync_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(
        None, help="Theme file to pull; the whole sync theme when omitted."
    ),
    no_write: bool = typer.Option(
        False, "--no-write", help="Print the retrieved asset instead of writing it to disk."
    ),
) -> None:
    """Download from the configured sync theme, one file or all of it."""

    if path:
        _run(ctx, lambda context: sync(context, path), dry_run=no_write)
    else:
        _run(ctx, sync_theme, dry_run=no_write)


@app.command("themes")
def themes_command(ctx: typer.Context) -> None:
    """Display the list of available themes."""

    _run(ctx, themes)


@app.command("upload")
def upload_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(
        None, help="Theme file to upload; the whole theme when omitted."
    ),
    no_json: bool = typer.Option(
        False, "--no-json", help="Leave settings_data.json out of a full deploy."
    ),
) -> None:
    """Upload a single theme file, or deploy the entire theme if no file is given."""

    if path:
        _run(ctx, lambda context: upload(context, path))
    else:
        _run(ctx, lambda context: deploy(context, skip_json=no_json))


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Theme file to remove from the store."),
) -> None:
    """Remove a theme file from the store."""

    _run(ctx, lambda context: remove(context, path))


@app.command("watch")
def watch_command(ctx: typer.Context) -> None:  # pragma: no cover - long-running
    """Upload files as they change and remove them when deleted, until interrupted."""

    async def _watch(context: SyncContext) -> None:
        await watch_theme(WatchDispatcher(context))

    try:
        _run(ctx, _watch)
    except KeyboardInterrupt:
        typer.echo("Received interrupt; stopping watch.", err=True)


@config_app.command("show")
def config_show(
    ctx: typer.Context,
    output_format: str = typer.Option(
        "yaml",
        "--format",
        "-f",
        help="Output format (yaml or json).",
    ),
) -> None:
    """Display the effective configuration, credentials masked."""

    config: Config = ctx.obj["config"]
    fmt = output_format.lower()
    if fmt not in {"yaml", "json"}:
        raise typer.BadParameter("Format must be 'yaml' or 'json'.", param_hint="--format")

    typer.echo("Loaded configuration from:", err=True)
    for entry in config.loaded_from:
        typer.echo(f"- {entry}", err=True)

    data: Any = config.model_dump()
    if fmt == "json":
        typer.echo(json.dumps(data, indent=2))
    else:
        typer.echo(yaml.safe_dump(data, sort_keys=False))


@app.command()
def version() -> None:
    """Show the installed Themesync version."""

    typer.echo(get_version())
