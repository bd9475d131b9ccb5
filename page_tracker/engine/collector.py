"""Concurrent per-key value collection with wait-for-all semantics."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from ..config import Credential
from ..errors import FetchBatchError
from .events import ExportObserver
from .records import ExportRecord, FetchOutcome


class ValueSource(Protocol):
    def get_value(self, credential: Credential, key: str) -> int: ...


@dataclass(slots=True)
class CollectionResult:
    """Sorted successes plus every failure seen during one batch."""

    records: list[ExportRecord]
    failures: list[FetchOutcome] = field(default_factory=list)

    @property
    def skipped(self) -> list[str]:
        return [outcome.key for outcome in self.failures]


def _fetch_one(client: ValueSource, credential: Credential, key: str) -> FetchOutcome:
    try:
        views = client.get_value(credential, key)
    except Exception as exc:  # noqa: BLE001
        return FetchOutcome(key=key, error=exc)
    return FetchOutcome(key=key, views=views)


def fetch_all(
    client: ValueSource,
    credential: Credential,
    keys: Sequence[str],
    *,
    observer: ExportObserver | None = None,
    max_workers: int | None = None,
) -> list[FetchOutcome]:
    """Fetch every key concurrently and return one outcome per key.

    Outcomes are returned in completion order. A failing fetch never cancels
    its siblings; the call returns only once every submitted fetch finished.
    """

    observer = observer or ExportObserver()
    if not keys:
        return []
    workers = max_workers or len(keys)
    outcomes: list[FetchOutcome] = []
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="kv-fetch") as executor:
        futures: list[Future[FetchOutcome]] = [
            executor.submit(_fetch_one, client, credential, key) for key in keys
        ]
        for future in as_completed(futures):
            outcome = future.result()
            if outcome.ok:
                observer.on_value_fetched(outcome.key, outcome.views)
            else:
                observer.on_fetch_failed(outcome.key, outcome.error)
            outcomes.append(outcome)
    return outcomes


def partition(outcomes: Sequence[FetchOutcome]) -> CollectionResult:
    """Split outcomes, sorting the successes by path in code-point order."""

    records = sorted(
        (ExportRecord(path=o.key, views=o.views) for o in outcomes if o.ok),
        key=lambda record: record.path,
    )
    failures = sorted((o for o in outcomes if not o.ok), key=lambda o: o.key)
    return CollectionResult(records=records, failures=failures)


def collect(
    client: ValueSource,
    credential: Credential,
    keys: Sequence[str],
    *,
    observer: ExportObserver | None = None,
    best_effort: bool = False,
    max_workers: int | None = None,
) -> CollectionResult:
    """Fetch all values and return the records sorted by path.

    Raises ``FetchBatchError`` after the whole batch finished if any fetch
    failed, unless ``best_effort`` is set, in which case failed keys are left
    out of ``records`` and listed in ``failures``.
    """

    observer = observer or ExportObserver()
    outcomes = fetch_all(client, credential, keys, observer=observer, max_workers=max_workers)
    result = partition(outcomes)
    observer.on_fetch_complete(len(result.records), len(result.failures))
    if result.failures and not best_effort:
        failures = [(o.key, o.error) for o in result.failures]
        raise FetchBatchError(failures, total=len(keys)) from result.failures[0].error
    return result


__all__ = ["CollectionResult", "ValueSource", "collect", "fetch_all", "partition"]
