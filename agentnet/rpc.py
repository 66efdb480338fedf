"""Minimal Ethereum JSON-RPC client."""

from __future__ import annotations

from typing import Any, Optional

import requests


class RpcError(RuntimeError):
    """Transport failure, malformed body, or an ``error`` member in the response."""


class JsonRpcClient:
    def __init__(
        self,
        endpoint: Optional[str],
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ) -> None:
        self.endpoint = endpoint
        self.session = session or requests.Session()
        self.timeout = timeout

    def call(self, method: str, params: list) -> Any:
        """Issue one request and return its ``result`` member (``None`` if absent)."""

        if not self.endpoint:
            raise RpcError("No RPC endpoint configured")
        payload = {"id": 1, "jsonrpc": "2.0", "method": method, "params": params}
        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers={"accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RpcError(f"{method} transport error: {exc}") from exc
        try:
            body = response.json()
        except ValueError as exc:
            raise RpcError(f"{method} returned non-JSON body (status {response.status_code})") from exc
        if not isinstance(body, dict):
            raise RpcError(f"{method} returned unexpected body")
        error = body.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise RpcError(f"{method} failed: {message}")
        return body.get("result")

    def eth_call(self, to: str, data: str, block: str = "latest") -> Optional[str]:
        return self.call("eth_call", [{"to": to, "data": data}, block])

    def eth_get_balance(self, address: str, block: str = "latest") -> Optional[str]:
        return self.call("eth_getBalance", [address, block])
