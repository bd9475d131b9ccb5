"""Exception hierarchy shared by the client, collector, exporter and CLI."""

from __future__ import annotations

from typing import Sequence


class PageTrackerError(Exception):
    """Base class for every failure surfaced by page-tracker."""


class TransportError(PageTrackerError):
    """Network failure or non-2xx response from the KV API."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(PageTrackerError):
    """Response body does not match the expected JSON shape."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ExportError(PageTrackerError, OSError):
    """Output file could not be created or written."""

    def __init__(self, message: str, *, path: object | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigError(PageTrackerError, ValueError):
    """Invalid or conflicting configuration supplied by the caller."""


class FetchBatchError(PageTrackerError):
    """One or more per-key fetches failed; raised once every fetch has finished."""

    def __init__(self, failures: Sequence[tuple[str, BaseException]], total: int) -> None:
        if not failures:
            raise ValueError("FetchBatchError requires at least one failure")
        self.failures = sorted(failures, key=lambda item: item[0])
        self.total = total
        key, error = self.failures[0]
        super().__init__(
            f"{len(self.failures)} of {total} value fetches failed; first `{key}`: {error}"
        )

    @property
    def first(self) -> tuple[str, BaseException]:
        return self.failures[0]

    @property
    def keys(self) -> list[str]:
        return [key for key, _ in self.failures]


__all__ = [
    "ConfigError",
    "DecodeError",
    "ExportError",
    "FetchBatchError",
    "PageTrackerError",
    "TransportError",
]
