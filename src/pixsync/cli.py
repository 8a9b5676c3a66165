"""pixsync CLI - typer application entry point.

Acts as the host for the lifecycle hooks: it reads a saved metadata bag
(or a deleted record) from JSON, runs the matching hook against the
configured upload directories and prints the result.
"""

from __future__ import annotations

import atexit
import json
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pixsync import __version__
from pixsync.assets.naming import preview_name, thumbnail_name
from pixsync.assets.reaper import project_layer_files
from pixsync.assets.store import AssetStore
from pixsync.config import DEFAULT_CONFIG_FILE, ConfigError, SyncConfig, load_config, write_default_config
from pixsync.lifecycle import AssetLifecycle, DeleteContext, SaveContext, StaticCapabilities
from pixsync.models.project import AssetCategory
from pixsync.observability import close_file_logging, configure_logging, get_logger

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="pixsync",
    help="pixsync: keep project image assets in step with saved project documents.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True, soft_wrap=True)

# Global state set by the callback, used by commands
_config_path: Path | None = None

log = get_logger(__name__)


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log-dir",
            help="Also write all log events to {dir}/debug.jsonl.",
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file (default: ./pixsync.yaml if present).",
            envvar="PIXSYNC_CONFIG",
        ),
    ] = None,
) -> None:
    """pixsync: keep project image assets in step with saved project documents."""
    global _config_path
    _config_path = config

    configure_logging(verbosity=verbose, log_dir=log_dir)
    if log_dir is not None:
        atexit.register(close_file_logging)


def _load_config() -> SyncConfig:
    """Load configuration, exiting with an error message on failure."""
    try:
        return load_config(_config_path)
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


def _build_lifecycle(config: SyncConfig) -> AssetLifecycle:
    store = AssetStore(config.upload_root, config.base_url)
    return AssetLifecycle(store, StaticCapabilities(config.capabilities), config=config)


def _read_json(path: Path) -> dict[str, Any]:
    """Read a JSON object from a file, or stdin for ``-``."""
    try:
        text = sys.stdin.read() if str(path) == "-" else path.read_text(encoding="utf-8")
        data = json.loads(text)
    except (OSError, json.JSONDecodeError) as e:
        err_console.print(f"[red]Error:[/red] Cannot read {escape(str(path))}: {escape(str(e))}")
        raise typer.Exit(1) from e

    if not isinstance(data, dict):
        err_console.print(f"[red]Error:[/red] {escape(str(path))} must contain a JSON object")
        raise typer.Exit(1)
    return data


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"pixsync v{__version__}")


@app.command()
def init(
    path: Annotated[
        Path,
        typer.Option("--path", "-p", help="Directory to create the config file in."),
    ] = Path(),
    upload_root: Annotated[
        Path | None,
        typer.Option("--upload-root", help="Upload directory to record in the config."),
    ] = None,
    base_url: Annotated[
        str | None,
        typer.Option("--base-url", help="Public URL prefix of the upload directory."),
    ] = None,
) -> None:
    """Write a default pixsync.yaml."""
    config_file = path / DEFAULT_CONFIG_FILE
    if config_file.exists():
        console.print(f"[red]Error:[/red] {escape(str(config_file))} already exists")
        raise typer.Exit(1)

    config = SyncConfig()
    if upload_root is not None:
        config.upload_root = upload_root
    if base_url:
        config.base_url = base_url

    write_default_config(config_file, config)
    console.print(f"[green]Created config:[/green] {escape(str(config_file))}")


@app.command()
def save(
    document: Annotated[
        Path,
        typer.Argument(help="JSON metadata bag (or request params with a 'meta' key); '-' for stdin."),
    ],
    project_id: Annotated[int, typer.Option("--id", help="Stored record id of the project.")],
    update: Annotated[
        bool,
        typer.Option("--update/--create", help="Whether this save updates an existing project."),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the rewritten bag here instead of stdout."),
    ] = None,
) -> None:
    """Materialize inline images of a saved project and print the rewritten bag."""
    config = _load_config()
    data = _read_json(document)

    if isinstance(data.get("meta"), dict):
        ctx = SaveContext.from_request(project_id, data, creating=not update)
    else:
        ctx = SaveContext(project_id=project_id, creating=not update, meta=data)

    result = _build_lifecycle(config).on_save(ctx)

    for failure in result.failures:
        err_console.print(
            f"[yellow]Warning:[/yellow] "
            f"{escape(failure.field)} left inline ({failure.kind}): {escape(failure.message)}"
        )
    if result.reaped:
        err_console.print(f"[dim]Removed {len(result.reaped)} stale layer file(s)[/dim]")

    rendered = json.dumps(result.meta, indent=2, ensure_ascii=False)
    if output is not None:
        output.write_text(rendered + "\n", encoding="utf-8")
        err_console.print(f"[green]Wrote[/green] {escape(str(output))}")
    else:
        typer.echo(rendered)


def _existing_assets(store: AssetStore, project_id: int) -> set[tuple[str, str]]:
    """(category, filename) of every asset file of a project currently on disk."""
    found = {
        (category.value, filename)
        for category, filename in (
            (AssetCategory.THUMBNAILS, thumbnail_name(project_id)),
            (AssetCategory.PREVIEWS, preview_name(project_id)),
        )
        if store.exists(category, filename)
    }
    found.update((AssetCategory.LAYERS.value, filename) for filename, _ in project_layer_files(store, project_id))
    return found


@app.command()
def delete(
    previous: Annotated[
        Path,
        typer.Argument(help="JSON delete payload {'previous': {...}} or bare record; '-' for stdin."),
    ],
) -> None:
    """Remove every asset file of a deleted project."""
    config = _load_config()
    ctx = DeleteContext.from_response(_read_json(previous))
    if not ctx.project_id:
        err_console.print("[yellow]Warning:[/yellow] record has no id; nothing to delete")
        return

    lifecycle = _build_lifecycle(config)
    before = _existing_assets(lifecycle.store, ctx.project_id)
    lifecycle.on_delete(ctx)
    removed = len(before - _existing_assets(lifecycle.store, ctx.project_id))

    if removed:
        console.print(f"Removed {removed} asset file(s) of project {ctx.project_id}")
    else:
        console.print(f"No asset files removed for project {ctx.project_id}")


@app.command()
def status(
    project_id: Annotated[int, typer.Option("--id", help="Stored record id of the project.")],
) -> None:
    """List the materialized assets of a project."""
    config = _load_config()
    store = AssetStore(config.upload_root, config.base_url)

    table = Table(title=f"Assets of project {project_id}")
    table.add_column("Category", style="cyan")
    table.add_column("File")
    table.add_column("Layer id")
    table.add_column("Status")

    for category, filename in (
        (AssetCategory.THUMBNAILS, thumbnail_name(project_id)),
        (AssetCategory.PREVIEWS, preview_name(project_id)),
    ):
        present = store.exists(category, filename)
        table.add_row(
            category.value,
            filename,
            "",
            "[green]present[/green]" if present else "[dim]missing[/dim]",
        )

    layer_files = project_layer_files(store, project_id)
    for filename, parsed in layer_files:
        table.add_row(AssetCategory.LAYERS.value, filename, parsed.layer_id, "[green]present[/green]")

    console.print(table)
    log.debug("status_listed", project_id=project_id, layer_files=len(layer_files))


if __name__ == "__main__":
    app()
