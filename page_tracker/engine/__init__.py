"""Engine components wiring list → fan-out fetch → sort → export."""

from .collector import CollectionResult, collect, fetch_all, partition
from .events import ExportObserver, LoggingObserver
from .kv_client import KVClient, encode_key
from .records import ExportRecord, FetchOutcome

__all__ = [
    "CollectionResult",
    "ExportObserver",
    "ExportRecord",
    "FetchOutcome",
    "KVClient",
    "LoggingObserver",
    "collect",
    "encode_key",
    "fetch_all",
    "partition",
]
