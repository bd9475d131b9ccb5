"""Typer CLI entrypoint for page-tracker.

Reads a Cloudflare Workers KV namespace holding page view counters and writes
it to CSV. The KV is visible at
https://dash.cloudflare.com/$PT_ACCOUNT_ID/workers/kv/namespaces/$PT_KV_ID and
the token needs the ``Account.Workers KV Storage`` permission.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table
from typer import BadParameter

from .config import ClientSettings, Credential, build_destination, load_settings
from .config.loader import CONFIG_ENV_VAR
from .engine import KVClient
from .errors import ConfigError, FetchBatchError, PageTrackerError
from .logging_conf import ERROR_LOG_NAME, INFO_LOG_NAME, configure_logging, default_log_dir, tail_log
from .pipeline import ExportPipeline, ExportSummary
from .ui import ProgressObserver

app = typer.Typer(
    help="Page Tracker commands: manage a Cloudflare KV page tracker.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Inspect page-tracker log files.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()

MAX_FAILURES_SHOWN = 10


@dataclass
class AppState:
    settings: ClientSettings
    client_factory: Callable[[ClientSettings], KVClient] = KVClient


def build_state(verbose: bool, config_path: Path | None) -> AppState:
    settings = load_settings(config_path)
    configure_logging(verbose=verbose)
    return AppState(settings=settings)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False, config_path=None)
        ctx.obj = state
    return state


# Progress bar only on an interactive terminal
def _progress_default_enabled() -> bool:
    return bool(getattr(sys.stderr, "isatty", lambda: False)())


def _render_summary(summary: ExportSummary) -> Table:
    table = Table(title="Export summary", box=box.SIMPLE_HEAD, show_header=False)
    table.add_column("Field", style="dim")
    table.add_column("Value", style="cyan", overflow="fold")
    table.add_row("Keys found", str(summary.key_count))
    table.add_row("Rows written", str(summary.record_count))
    if summary.skipped:
        table.add_row("Skipped keys", ", ".join(summary.skipped))
    table.add_row("Output", str(summary.path))
    return table


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        envvar=CONFIG_ENV_VAR,
        help="YAML or JSON settings file (API base URL, timeout, workers, output format).",
    ),
) -> None:
    try:
        ctx.obj = build_state(verbose, config)
    except (ConfigError, FileNotFoundError) as exc:
        raise BadParameter(str(exc), param_hint="--config") from exc


@app.command("download", help="Download the page tracker KV data into a CSV file.")
def download(
    ctx: typer.Context,
    jwt: str = typer.Option(..., "--jwt", envvar="PT_JWT", help="Cloudflare API token."),
    account_id: str = typer.Option(
        ..., "--account-id", envvar="PT_ACCOUNT_ID", help="Owner account id of the KV."
    ),
    kv_id: str = typer.Option(..., "--kv-id", envvar="PT_KV_ID", help="KV namespace id."),
    output: Optional[Path] = typer.Option(
        None, "--output", help="File to write the CSV to.", dir_okay=False
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", help="Folder to write the CSV to, named by --output-format.", file_okay=False
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--output-format",
        help="strftime pattern for the file name under --output-dir, evaluated in UTC.",
    ),
    best_effort: Optional[bool] = typer.Option(
        None,
        "--best-effort/--strict",
        help="Skip keys whose value cannot be fetched, or fail the export (default: from settings).",
    ),
    max_workers: Optional[int] = typer.Option(
        None, "--max-workers", min=1, help="Bound concurrent value fetches (default: one per key)."
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Print only the output path."),
) -> None:
    state = _get_state(ctx)
    settings = state.settings
    if output is not None and output_dir is not None:
        raise BadParameter("--output and --output-dir are mutually exclusive.")
    try:
        credential = Credential(token=jwt, account_id=account_id, namespace_id=kv_id)
    except ValidationError as exc:
        raise BadParameter("--jwt, --account-id and --kv-id must not be empty.") from exc
    try:
        destination = build_destination(output, output_dir, output_format or settings.output_format)
    except ConfigError as exc:
        raise BadParameter(f"{exc} (use --output or --output-dir).") from exc

    observer = ProgressObserver(enabled=not quiet and _progress_default_enabled())
    try:
        with state.client_factory(settings) as client:
            pipeline = ExportPipeline(
                client,
                observer,
                best_effort=settings.best_effort if best_effort is None else best_effort,
                max_workers=max_workers or settings.max_workers,
            )
            summary = pipeline.run(credential, destination)
    except FetchBatchError as exc:
        console.print(
            f"{len(exc.failures)} of {exc.total} value fetches failed; no file was written.",
            style="red",
        )
        for key, error in exc.failures[:MAX_FAILURES_SHOWN]:
            console.print(f"  {key}: {error}", style="dim", markup=False)
        raise typer.Exit(code=1)
    except PageTrackerError as exc:
        console.print(f"Export failed: {exc}", style="red", markup=False)
        raise typer.Exit(code=1)
    finally:
        observer.close()

    if quiet:
        console.print(str(summary.path), markup=False, highlight=False, soft_wrap=True)
        return
    console.print(_render_summary(summary))
    if summary.skipped:
        console.print(f"{len(summary.skipped)} key(s) skipped.", style="yellow")


@log_app.command("show", help="Show the most recent log lines.")
def log_show(
    tail: int = typer.Option(100, "--tail", min=1, help="Number of lines to show."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log instead."),
) -> None:
    path = default_log_dir() / (ERROR_LOG_NAME if errors else INFO_LOG_NAME)
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} lines", style="cyan")
    console.print("".join(lines), markup=False, highlight=False)


app.add_typer(log_app, name="log")


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
