"""Agent registry contract reads."""

from __future__ import annotations

import logging
from typing import List, Optional

from .abi import decode_get_all
from .models import RegistryRecord
from .rpc import JsonRpcClient, RpcError

# keccak256("getAll()")[:4]; the call takes no arguments.
GET_ALL_SELECTOR = "0x53ed5143"

_LOGGER = logging.getLogger(__name__)


class RegistryError(RuntimeError):
    pass


def fetch_registry_records(rpc: JsonRpcClient, registry_address: Optional[str]) -> List[RegistryRecord]:
    """Return every registered agent, in contract order.

    Raises ``RegistryError`` on transport, JSON or RPC errors. No retry.
    """

    if not registry_address:
        raise RegistryError("No registry address configured")
    try:
        result = rpc.eth_call(registry_address, GET_ALL_SELECTOR)
    except RpcError as exc:
        raise RegistryError(str(exc)) from exc
    if not result or result == "0x":
        _LOGGER.info("registry empty address=%s", registry_address)
        return []
    if not isinstance(result, str):
        raise RegistryError("eth_call returned a non-hex result")
    records = decode_get_all(result)
    _LOGGER.info("registry decoded address=%s records=%s", registry_address, len(records))
    return records
