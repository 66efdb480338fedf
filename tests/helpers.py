from __future__ import annotations

import json
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from agentnet.models import RegistryRecord

_NO_JSON = object()


class FakeResponse:
    def __init__(self, status_code: int = 200, json_body: Any = _NO_JSON, text: Optional[str] = None) -> None:
        self.status_code = status_code
        self._json = json_body
        if text is None:
            text = json.dumps(json_body) if json_body is not _NO_JSON else ""
        self.text = text

    def json(self) -> Any:
        if self._json is _NO_JSON:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Scripted stand-in for ``requests.Session``.

    ``routes`` maps GET urls to a response or an exception. ``rpc`` maps a
    JSON-RPC method to a result, an exception, a ``FakeResponse`` or a
    callable taking the params and returning one of those.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None, rpc: Optional[Dict[str, Any]] = None) -> None:
        self.routes = dict(routes or {})
        self.rpc = dict(rpc or {})
        self.calls: List[str] = []
        self.headers: Dict[str, dict] = {}
        self.rpc_params: Dict[str, List[list]] = {}
        self._lock = threading.Lock()

    def get(self, url: str, headers: Optional[dict] = None, timeout: Any = None) -> FakeResponse:
        with self._lock:
            self.calls.append(f"GET {url}")
            self.headers[url] = dict(headers or {})
        outcome = self.routes.get(url, FakeResponse(404, text="404: Not Found"))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def post(self, url: str, json: Optional[dict] = None, headers: Optional[dict] = None, timeout: Any = None):
        method = json["method"]
        params = json["params"]
        with self._lock:
            self.calls.append(f"POST {method}")
            self.rpc_params.setdefault(method, []).append(params)
        if method not in self.rpc:
            return FakeResponse(200, {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "method not found"}})
        outcome = self.rpc[method]
        if callable(outcome) and not isinstance(outcome, Exception):
            outcome = outcome(params)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, FakeResponse):
            return outcome
        return FakeResponse(200, {"jsonrpc": "2.0", "id": 1, "result": outcome})

    def count(self, prefix: str) -> int:
        with self._lock:
            return sum(1 for call in self.calls if call.startswith(prefix))


def _word(value: int) -> bytes:
    return value.to_bytes(32, "big")


def _string_tail(text: str) -> bytes:
    raw = text.encode("latin-1")
    return _word(len(raw)) + raw + b"\x00" * (-len(raw) % 32)


def encode_registry(records: Sequence[RegistryRecord]) -> str:
    """ABI-encode records as ``getAll()`` returns them."""

    head_size = 5 * 32
    elements = []
    for record in records:
        repo_tail = _string_tail(record.repo_url)
        name_tail = _string_tail(record.name)
        head = (
            _word(head_size)
            + bytes(12)
            + bytes.fromhex(record.wallet[2:])
            + _word(head_size + len(repo_tail))
            + _word(record.registered_at)
            + _word(record.last_seen)
        )
        elements.append(head + repo_tail + name_tail)

    offsets = b""
    cursor = len(elements) * 32
    for element in elements:
        offsets += _word(cursor)
        cursor += len(element)
    return "0x" + (_word(32) + _word(len(elements)) + offsets + b"".join(elements)).hex()


def record(
    name: str,
    repo_url: str,
    wallet_byte: int,
    registered_at: int = 1_700_000_000,
    last_seen: int = 1_700_000_600,
) -> RegistryRecord:
    return RegistryRecord(
        repo_url=repo_url,
        wallet="0x" + f"{wallet_byte:02x}" * 20,
        name=name,
        registered_at=registered_at,
        last_seen=last_seen,
    )


def counting(build: Callable[[], Any]) -> Callable[[], Any]:
    def wrapper():
        wrapper.calls += 1
        return build()

    wrapper.calls = 0
    return wrapper
