"""HTTP client for the Cloudflare Workers KV REST API."""

from __future__ import annotations

import string
from typing import Annotated, Any

import httpx
import structlog
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..config import ClientSettings, Credential
from ..errors import DecodeError, TransportError

_UNRESERVED = frozenset((string.ascii_letters + string.digits).encode("ascii"))
_VIEW_COUNT = TypeAdapter(Annotated[int, Field(ge=0, strict=True)])


class ListedKey(BaseModel):
    name: str


class ListKeysPayload(BaseModel):
    result: list[ListedKey]


def encode_key(key: str) -> str:
    """Percent-encode every byte of the UTF-8 key outside ``[A-Za-z0-9]``."""

    return "".join(
        chr(byte) if byte in _UNRESERVED else f"%{byte:02X}" for byte in key.encode("utf-8")
    )


class KVClient:
    """List keys and read integer values from one KV namespace.

    The underlying ``httpx.Client`` is shared by every worker thread of the
    collector; its connection pool is left unbounded so that fan-out is not
    throttled client side.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        transport: httpx.BaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.settings = settings or ClientSettings()
        self.logger = logger or structlog.get_logger("page_tracker.kv_client")
        self._client = httpx.Client(
            base_url=self.settings.api_base_url,
            timeout=self.settings.timeout,
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=20),
            transport=transport,
        )

    def __enter__(self) -> "KVClient":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    def list_keys(self, credential: Credential) -> list[str]:
        """Return every key name in server order."""

        path = self._namespace_path(credential) + "/keys"
        body = self._get_json(credential, path)
        try:
            payload = ListKeysPayload.model_validate(body)
        except ValidationError as exc:
            raise DecodeError(f"Unexpected key listing payload: {exc}", url=path) from exc
        return [entry.name for entry in payload.result]

    def get_value(self, credential: Credential, key: str) -> int:
        """Return the view count stored under ``key``."""

        path = f"{self._namespace_path(credential)}/values/{encode_key(key)}"
        body = self._get_json(credential, path)
        try:
            return _VIEW_COUNT.validate_python(body)
        except ValidationError as exc:
            raise DecodeError(
                f"Value for key {key!r} is not a non-negative integer: {body!r}", url=path
            ) from exc

    # ------------------------------------------------------------------
    @staticmethod
    def _namespace_path(credential: Credential) -> str:
        return (
            f"/accounts/{credential.account_id}"
            f"/storage/kv/namespaces/{credential.namespace_id}"
        )

    def _get_json(self, credential: Credential, path: str) -> Any:
        headers = {"Authorization": f"Bearer {credential.token}"}
        try:
            response = self._client.get(path, headers=headers)
        except httpx.HTTPError as exc:
            self.logger.debug("kv_request_error", path=path, error=str(exc))
            raise TransportError(f"Request to {path} failed: {exc}", url=path) from exc
        if not response.is_success:
            raise TransportError(
                f"Unexpected status {response.status_code} from {path}",
                url=path,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Response from {path} is not valid JSON", url=path) from exc


__all__ = ["KVClient", "ListKeysPayload", "ListedKey", "encode_key"]
