"""CSV exporter writing ``path,views`` rows atomically."""

from __future__ import annotations

import csv
import os
from pathlib import Path

from ...errors import ExportError
from ..records import ExportRecord
from .base import BaseExporter

FIELDNAMES = ("path", "views")


class CsvExporter(BaseExporter):
    """Write records to a hidden sibling file, renamed into place on close."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.partial_path = path.with_name(f".{path.name}.partial")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self.partial_path.open("w", encoding="utf-8", newline="")
        except OSError as exc:
            raise ExportError(f"Cannot create output file {path}: {exc}", path=path) from exc
        self._writer = csv.DictWriter(self._file, fieldnames=FIELDNAMES, lineterminator="\n")
        self._closed = False
        try:
            self._writer.writeheader()
        except OSError as exc:
            self.discard()
            raise ExportError(f"Cannot write output file {path}: {exc}", path=path) from exc

    def export(self, record: ExportRecord) -> None:
        self._guard(self._writer.writerow, record.as_row())

    def flush(self) -> None:
        self._guard(self._file.flush)

    def close(self) -> None:
        if self._closed:
            return
        self._guard(self._finalise)
        self._closed = True

    def discard(self) -> None:
        if not self._file.closed:
            self._file.close()
        self.partial_path.unlink(missing_ok=True)
        self._closed = True

    def _finalise(self) -> None:
        self._file.flush()
        os.fsync(self._file.fileno())
        self._file.close()
        os.replace(self.partial_path, self.path)

    def _guard(self, func, *args):
        try:
            return func(*args)
        except OSError as exc:
            raise ExportError(f"Cannot write output file {self.path}: {exc}", path=self.path) from exc


__all__ = ["CsvExporter", "FIELDNAMES"]
