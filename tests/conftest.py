"""Pytest configuration providing a simulated KV API and shared fixtures."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, Iterable
from urllib.parse import unquote

import httpx
import pytest

from page_tracker.config import ClientSettings, Credential
from page_tracker.engine import KVClient

BASE_URL = "https://kv.test/client/v4"
NAMESPACE_PREFIX = "/client/v4/accounts/acc-1/storage/kv/namespaces/ns-1"


@dataclass
class FakeKV:
    """In-memory stand-in for the KV REST API.

    ``values`` maps a key to an int (served as a bare JSON integer), an
    ``httpx.Response`` (served as-is) or an exception (raised by the transport).
    """

    keys: list[str] = field(default_factory=list)
    values: dict[str, Any] = field(default_factory=dict)
    delays: dict[str, float] = field(default_factory=dict)
    listing: Any = None
    token: str = "secret-token"
    requests: list[httpx.Request] = field(default_factory=list)
    value_requests: list[str] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock)

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"success": False})
        raw_path = request.url.raw_path.decode("ascii").split("?", 1)[0]
        if not raw_path.startswith(NAMESPACE_PREFIX):
            return httpx.Response(404, json={"success": False})
        tail = raw_path[len(NAMESPACE_PREFIX):]
        if tail == "/keys":
            if isinstance(self.listing, (httpx.Response, Exception)):
                return self._serve(self.listing)
            payload = self.listing if self.listing is not None else {
                "result": [{"name": key} for key in self.keys]
            }
            return httpx.Response(200, json=payload)
        if tail.startswith("/values/"):
            key = unquote(tail[len("/values/"):])
            with self._lock:
                self.value_requests.append(key)
            delay = self.delays.get(key)
            if delay:
                time.sleep(delay)
            if key not in self.values:
                return httpx.Response(404, json={"success": False})
            return self._serve(self.values[key])
        return httpx.Response(404, json={"success": False})

    @staticmethod
    def _serve(value: Any) -> httpx.Response:
        if isinstance(value, Exception):
            raise value
        if isinstance(value, httpx.Response):
            return value
        return httpx.Response(200, content=json.dumps(value).encode("utf-8"))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def credential() -> Credential:
    return Credential(token="secret-token", account_id="acc-1", namespace_id="ns-1")


@pytest.fixture
def client_settings() -> ClientSettings:
    return ClientSettings(api_base_url=BASE_URL, timeout=5)


@pytest.fixture
def fake_kv() -> FakeKV:
    return FakeKV()


@pytest.fixture
def kv_client(fake_kv: FakeKV, client_settings: ClientSettings) -> Iterable[KVClient]:
    client = KVClient(client_settings, transport=fake_kv.transport)
    yield client
    client.close()


@pytest.fixture
def make_fake_kv() -> Callable[..., FakeKV]:
    def _builder(values: dict[str, Any], **overrides: Any) -> FakeKV:
        overrides.setdefault("keys", list(values))
        return FakeKV(values=dict(values), **overrides)

    return _builder
