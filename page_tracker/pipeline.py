"""Pipeline coordinator: list keys → fan-out fetch → sort → write CSV."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Protocol, Sequence

from .config import Credential, OutputDestination
from .engine import ExportObserver, LoggingObserver, collect
from .engine.exporter import BaseExporter, CsvExporter


class KeyValueSource(Protocol):
    def list_keys(self, credential: Credential) -> Sequence[str]: ...

    def get_value(self, credential: Credential, key: str) -> int: ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ExportSummary:
    """What a completed run produced."""

    path: Path
    key_count: int
    record_count: int
    skipped: list[str] = field(default_factory=list)


class ExportPipeline:
    """Sequence one export run; no step is retried here."""

    def __init__(
        self,
        client: KeyValueSource,
        observer: ExportObserver | None = None,
        *,
        best_effort: bool = False,
        max_workers: int | None = None,
        exporter_factory: Callable[[Path], BaseExporter] = CsvExporter,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.client = client
        self.observer = observer or LoggingObserver()
        self.best_effort = best_effort
        self.max_workers = max_workers
        self.exporter_factory = exporter_factory
        self.clock = clock

    def run(self, credential: Credential, destination: OutputDestination) -> ExportSummary:
        self.observer.on_started()
        keys = list(self.client.list_keys(credential))
        self.observer.on_keys_listed(len(keys))

        result = collect(
            self.client,
            credential,
            keys,
            observer=self.observer,
            best_effort=self.best_effort,
            max_workers=self.max_workers,
        )

        path = destination.resolve(self.clock())
        exporter = self.exporter_factory(path)
        written = exporter.write(result.records)
        self.observer.on_written(path, written)
        return ExportSummary(
            path=path,
            key_count=len(keys),
            record_count=written,
            skipped=result.skipped,
        )


__all__ = ["ExportPipeline", "ExportSummary", "KeyValueSource"]
