"""Native wallet balances."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional

from .rpc import JsonRpcClient, RpcError

WEI_PER_ETHER = Decimal(10) ** 18
_FOUR_PLACES = Decimal("0.0001")

_LOGGER = logging.getLogger(__name__)


def wei_to_ether(wei: int) -> str:
    # Wide enough for any uint256 balance at four places.
    with localcontext() as ctx:
        ctx.prec = 96
        return str((Decimal(wei) / WEI_PER_ETHER).quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP))


def fetch_wallet_balance(rpc: JsonRpcClient, wallet: str) -> Optional[str]:
    try:
        result = rpc.eth_get_balance(wallet)
        if not result:
            return None
        return wei_to_ether(int(result, 16))
    except (RpcError, ValueError, TypeError, ArithmeticError) as exc:
        _LOGGER.warning("balance unavailable wallet=%s err=%s", wallet, exc)
        return None
