"""Observer hooks reporting pipeline progress without global logging state."""

from __future__ import annotations

from pathlib import Path

import structlog


class ExportObserver:
    """No-op base observer; subclasses override the notifications they need.

    Every callback is invoked from the coordinating thread, so implementations
    need no locking of their own.
    """

    def on_started(self) -> None:
        return

    def on_keys_listed(self, count: int) -> None:
        return

    def on_value_fetched(self, key: str, views: int) -> None:
        return

    def on_fetch_failed(self, key: str, error: BaseException) -> None:
        return

    def on_fetch_complete(self, succeeded: int, failed: int) -> None:
        return

    def on_written(self, path: Path, record_count: int) -> None:
        return


class LoggingObserver(ExportObserver):
    """Emit one structlog event per notification."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.logger = logger or structlog.get_logger("page_tracker.pipeline")

    def on_started(self) -> None:
        self.logger.info("fetching_keys")

    def on_keys_listed(self, count: int) -> None:
        self.logger.info("keys_found", count=count)

    def on_value_fetched(self, key: str, views: int) -> None:
        self.logger.info("value_fetched", key=key, views=views)

    def on_fetch_failed(self, key: str, error: BaseException) -> None:
        self.logger.warning("value_fetch_failed", key=key, error=str(error))

    def on_fetch_complete(self, succeeded: int, failed: int) -> None:
        self.logger.info("values_fetched", succeeded=succeeded, failed=failed)

    def on_written(self, path: Path, record_count: int) -> None:
        self.logger.info("export_written", path=str(path), records=record_count)


__all__ = ["ExportObserver", "LoggingObserver"]
