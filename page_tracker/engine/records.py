"""Value types flowing from the collector to the exporter."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class FetchOutcome:
    """Result of one per-key value fetch: either ``views`` or ``error`` is set."""

    key: str
    views: int | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True, frozen=True)
class ExportRecord:
    """One CSV row."""

    path: str
    views: int

    def as_row(self) -> dict[str, object]:
        return {"path": self.path, "views": self.views}


__all__ = ["ExportRecord", "FetchOutcome"]
