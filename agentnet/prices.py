"""Token prices from DexScreener."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

import requests

from .models import PriceQuote

DEXSCREENER_TOKENS_URL = "https://api.dexscreener.com/latest/dex/tokens/{}"
MAX_BATCH = 30

_LOGGER = logging.getLogger(__name__)


def _distinct(addresses: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for address in addresses:
        key = address.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(address)
    return out


def _quote_from_pair(pair: dict) -> PriceQuote:
    change = (pair.get("priceChange") or {}).get("h24")
    return PriceQuote(
        price_usd=str(pair["priceUsd"]),
        change_24h=str(change) if change is not None else None,
        dex_url=pair.get("url") or None,
    )


def fetch_dex_prices(http: requests.Session, addresses: Iterable[str], timeout: float = 10.0) -> Dict[str, PriceQuote]:
    """Map lower-cased token address to its first listed pair quote.

    At most ``MAX_BATCH`` distinct addresses are sent; the rest are dropped.
    Any failure of the request itself yields an empty mapping.
    """

    batch = _distinct(addresses)
    if len(batch) > MAX_BATCH:
        _LOGGER.info("price batch truncated requested=%s sent=%s", len(batch), MAX_BATCH)
        batch = batch[:MAX_BATCH]
    prices: Dict[str, PriceQuote] = {}
    if not batch:
        return prices

    try:
        response = http.get(DEXSCREENER_TOKENS_URL.format(",".join(batch)), timeout=timeout)
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        _LOGGER.warning("dexscreener unavailable tokens=%s err=%s", len(batch), exc)
        return prices

    pairs = data.get("pairs") if isinstance(data, dict) else None
    for pair in pairs or []:
        try:
            address = pair["baseToken"]["address"].lower()
            if address in prices or pair.get("priceUsd") is None:
                continue
            prices[address] = _quote_from_pair(pair)
        except (KeyError, TypeError, AttributeError):
            _LOGGER.debug("dexscreener skipped malformed pair")
    return prices
