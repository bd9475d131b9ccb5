"""Terminal progress rendering for value fetches."""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

from ..engine import LoggingObserver


@dataclass
class ProgressState:
    total: int
    fetched: int = 0
    failed: int = 0
    current_key: str | None = None


class ProgressObserver(LoggingObserver):
    """Log every notification and, on a terminal, drive a Rich progress bar."""

    def __init__(
        self,
        enabled: bool = True,
        console: Console | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        super().__init__(logger)
        self.enabled = enabled
        self._console = console
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self.state: ProgressState | None = None

    def on_keys_listed(self, count: int) -> None:
        super().on_keys_listed(count)
        self.state = ProgressState(total=count)
        if not self.enabled or count == 0:
            return
        console = self._console or Console(stderr=True)
        if not console.is_terminal:
            # Non-interactive: the log lines are enough
            self.enabled = False
            return
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold blue]KV values"),
            BarColumn(bar_width=None, complete_style="green", finished_style="green"),
            TaskProgressColumn(show_speed=False),
            TimeElapsedColumn(),
            TextColumn("[green]✓{task.fields[fetched]:>4}", justify="right"),
            TextColumn("[red]✗{task.fields[failed]:>3}", justify="right"),
            TextColumn("[dim]{task.fields[current_key]}", justify="left"),
            transient=True,
            console=console,
        )
        try:
            self._progress.start()
        except LiveError:
            # Another live display owns the console
            self.enabled = False
            self._progress = None
            return
        self._task_id = self._progress.add_task(
            "fetch", total=count, fetched=0, failed=0, current_key=""
        )

    def on_value_fetched(self, key: str, views: int) -> None:
        super().on_value_fetched(key, views)
        self._advance(key, failed=False)

    def on_fetch_failed(self, key: str, error: BaseException) -> None:
        super().on_fetch_failed(key, error)
        self._advance(key, failed=True)

    def on_fetch_complete(self, succeeded: int, failed: int) -> None:
        self.close()
        super().on_fetch_complete(succeeded, failed)

    def close(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
        self._task_id = None

    def _advance(self, key: str, *, failed: bool) -> None:
        if self.state is None:
            raise RuntimeError("on_keys_listed must be called before fetch notifications")
        self.state.current_key = key
        if failed:
            self.state.failed += 1
        else:
            self.state.fetched += 1
        if self._progress is not None and self._task_id is not None:
            display_key = key if len(key) <= 60 else key[:57] + "..."
            self._progress.update(
                self._task_id,
                advance=1,
                fetched=self.state.fetched,
                failed=self.state.failed,
                current_key=display_key,
            )


__all__ = ["ProgressObserver", "ProgressState"]
