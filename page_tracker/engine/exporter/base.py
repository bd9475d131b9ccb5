"""Exporter Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from ..records import ExportRecord


class BaseExporter(ABC):
    """Uniform exporter contract: export rows, then close or discard."""

    @abstractmethod
    def export(self, record: ExportRecord) -> None:
        """Persist a single record."""

    def export_many(self, records: Iterable[ExportRecord]) -> None:
        for record in records:
            self.export(record)

    @abstractmethod
    def flush(self) -> None:
        """Flush buffered data to destination."""

    @abstractmethod
    def close(self) -> None:
        """Finalise the destination and release underlying resources."""

    @abstractmethod
    def discard(self) -> None:
        """Abandon the output, leaving nothing at the destination."""

    def write(self, records: Iterable[ExportRecord]) -> int:
        """Export every record and close; on failure discard and re-raise."""

        count = 0
        try:
            for record in records:
                self.export(record)
                count += 1
            self.flush()
            self.close()
        except BaseException:
            self.discard()
            raise
        return count


__all__ = ["BaseExporter"]
