from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest

from page_tracker.config import OutputDestination
from page_tracker.engine import ExportObserver, KVClient
from page_tracker.errors import DecodeError, ExportError, FetchBatchError, TransportError
from page_tracker.pipeline import ExportPipeline

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)


class EventLog(ExportObserver):
    def __init__(self) -> None:
        self.events: list[str] = []

    def on_started(self) -> None:
        self.events.append("started")

    def on_keys_listed(self, count: int) -> None:
        self.events.append(f"keys:{count}")

    def on_fetch_complete(self, succeeded: int, failed: int) -> None:
        self.events.append(f"done:{succeeded}/{failed}")

    def on_written(self, path: Path, record_count: int) -> None:
        self.events.append(f"written:{record_count}")


def _run(fake, settings, credential, destination, **kwargs):
    with KVClient(settings, transport=fake.transport) as client:
        pipeline = ExportPipeline(client, clock=lambda: FIXED_NOW, **kwargs)
        return pipeline.run(credential, destination)


def test_end_to_end_sorted_csv(make_fake_kv, client_settings, credential, tmp_path) -> None:
    fake = make_fake_kv({"c": 10, "a/b": 3}, keys=["c", "a/b"])
    observer = EventLog()
    destination = OutputDestination(output=tmp_path / "views.csv")

    summary = _run(fake, client_settings, credential, destination, observer=observer)

    assert summary.path == tmp_path / "views.csv"
    assert summary.key_count == 2
    assert summary.record_count == 2
    assert summary.skipped == []
    lines = summary.path.read_text(encoding="utf-8").splitlines()
    assert lines == ["path,views", "a/b,3", "c,10"]
    assert observer.events == ["started", "keys:2", "done:2/0", "written:2"]


def test_empty_namespace_writes_header_only(make_fake_kv, client_settings, credential, tmp_path) -> None:
    fake = make_fake_kv({})
    summary = _run(fake, client_settings, credential, OutputDestination(output=tmp_path / "e.csv"))
    assert summary.path.read_text(encoding="utf-8").splitlines() == ["path,views"]
    assert summary.record_count == 0


def test_single_fetch_failure_writes_nothing(make_fake_kv, client_settings, credential, tmp_path) -> None:
    fake = make_fake_kv({"ok": 1, "broken": httpx.ConnectError("reset by peer")})
    destination = OutputDestination(output_dir=tmp_path / "exports")

    with pytest.raises(FetchBatchError) as excinfo:
        _run(fake, client_settings, credential, destination)

    assert excinfo.value.keys == ["broken"]
    assert sorted(fake.value_requests) == ["broken", "ok"]
    assert not (tmp_path / "exports").exists() or list((tmp_path / "exports").iterdir()) == []


def test_best_effort_writes_successes(make_fake_kv, client_settings, credential, tmp_path) -> None:
    fake = make_fake_kv({"ok": 1, "broken": httpx.Response(500)})
    summary = _run(
        fake,
        client_settings,
        credential,
        OutputDestination(output=tmp_path / "partial.csv"),
        best_effort=True,
    )
    assert summary.skipped == ["broken"]
    assert summary.path.read_text(encoding="utf-8").splitlines() == ["path,views", "ok,1"]


@pytest.mark.parametrize(
    ("listing", "error"),
    [
        (httpx.Response(403, json={"success": False}), TransportError),
        (httpx.ConnectTimeout("timed out"), TransportError),
        ({"unexpected": True}, DecodeError),
    ],
)
def test_listing_failure_aborts_before_fetching(
    make_fake_kv, client_settings, credential, tmp_path, listing, error
) -> None:
    fake = make_fake_kv({"a": 1}, listing=listing)
    observer = EventLog()
    with pytest.raises(error):
        _run(fake, client_settings, credential, OutputDestination(output=tmp_path / "x.csv"), observer=observer)
    assert fake.value_requests == []
    assert observer.events == ["started"]
    assert not (tmp_path / "x.csv").exists()


def test_output_dir_uses_utc_timestamp(make_fake_kv, client_settings, credential, tmp_path) -> None:
    fake = make_fake_kv({"a": 1})
    summary = _run(fake, client_settings, credential, OutputDestination(output_dir=tmp_path))
    assert summary.path == tmp_path / "2024-05-01T12:30:45Z.csv"
    assert summary.path.exists()


def test_write_failure_is_export_error(make_fake_kv, client_settings, credential, tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    fake = make_fake_kv({"a": 1})
    with pytest.raises(ExportError):
        _run(fake, client_settings, credential, OutputDestination(output=blocker / "views.csv"))
