"""Fan-out/fan-in assembly of the network snapshot."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import requests

from .balances import fetch_wallet_balance
from .fanout import settle_all
from .github import extract_slug, fetch_activity, fetch_token_descriptor
from .models import (
    Agent,
    GithubActivity,
    NetworkSnapshot,
    PriceQuote,
    RegistryRecord,
    TokenDescriptor,
    TokenInfo,
)
from .prices import fetch_dex_prices
from .registry import RegistryError, fetch_registry_records
from .rpc import JsonRpcClient

_LOGGER = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class _Enrichment:
    record: RegistryRecord
    slug: Optional[str]
    token: Optional[TokenDescriptor]
    github: GithubActivity


class NetworkAggregator:
    """Builds one ``NetworkSnapshot`` from the registry and its enrichment sources.

    Enrichment failures only blank the affected fields; a registry failure
    yields a snapshot with no agents.
    """

    def __init__(
        self,
        rpc: JsonRpcClient,
        registry_address: Optional[str],
        http: Optional[requests.Session] = None,
        github_token: Optional[str] = None,
        known_tokens: Optional[Dict[str, TokenDescriptor]] = None,
        timeout: float = 10.0,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.rpc = rpc
        self.registry_address = registry_address
        self.http = http or requests.Session()
        self.github_token = github_token
        self.known_tokens = dict(known_tokens or {})
        self.timeout = timeout
        self.clock = clock

    def _token_descriptor(self, slug: Optional[str]) -> Optional[TokenDescriptor]:
        if not slug:
            return None
        return fetch_token_descriptor(self.http, slug, self.known_tokens, timeout=self.timeout)

    def _activity(self, slug: Optional[str]) -> GithubActivity:
        if not slug or not self.github_token:
            return GithubActivity()
        return fetch_activity(self.http, slug, self.github_token, timeout=self.timeout)

    def _enrich(self, record: RegistryRecord) -> _Enrichment:
        slug = extract_slug(record.repo_url)
        token, github = settle_all([lambda: self._token_descriptor(slug), lambda: self._activity(slug)])
        if not token.ok:
            _LOGGER.warning("token descriptor failed slug=%s err=%s", slug, token.error)
        if not github.ok:
            _LOGGER.warning("github activity failed slug=%s err=%s", slug, github.error)
        return _Enrichment(
            record=record,
            slug=slug,
            token=token.value_or(None),
            github=github.value_or(GithubActivity()),
        )

    @staticmethod
    def _assemble(item: _Enrichment, balance: Optional[str], prices: Dict[str, PriceQuote]) -> Agent:
        record = item.record
        token = TokenInfo()
        if item.token is not None:
            quote = prices.get(item.token.address.lower())
            token = TokenInfo(
                address=item.token.address,
                symbol=item.token.symbol,
                price_usd=quote.price_usd if quote else None,
                change_24h=quote.change_24h if quote else None,
                dex_url=quote.dex_url if quote else None,
            )
        return Agent(
            name=record.name,
            wallet=record.wallet,
            repo_url=record.repo_url,
            slug=item.slug,
            registered_at=record.registered_at,
            last_seen=record.last_seen,
            balance_eth=balance,
            token=token,
            github=item.github,
        )

    def build_snapshot(self) -> NetworkSnapshot:
        try:
            records = fetch_registry_records(self.rpc, self.registry_address)
        except RegistryError as exc:
            _LOGGER.warning("registry unavailable, serving empty snapshot err=%s", exc)
            return NetworkSnapshot(agents=[], cached_at=self.clock())

        enriched: List[_Enrichment] = []
        for record, outcome in zip(records, settle_all([lambda r=r: self._enrich(r) for r in records])):
            if outcome.ok:
                enriched.append(outcome.value)
            else:
                _LOGGER.warning("enrichment failed wallet=%s err=%s", record.wallet, outcome.error)
                enriched.append(_Enrichment(record, extract_slug(record.repo_url), None, GithubActivity()))

        token_addresses = [item.token.address for item in enriched if item.token is not None]
        price_outcome, *balance_outcomes = settle_all(
            [lambda: fetch_dex_prices(self.http, token_addresses, timeout=self.timeout)]
            + [lambda w=item.record.wallet: fetch_wallet_balance(self.rpc, w) for item in enriched]
        )
        if not price_outcome.ok:
            _LOGGER.warning("price lookup failed err=%s", price_outcome.error)
        prices = price_outcome.value_or({})

        agents = [
            self._assemble(item, balance.value_or(None), prices)
            for item, balance in zip(enriched, balance_outcomes)
        ]
        _LOGGER.info(
            "snapshot built agents=%s tokens=%s priced=%s",
            len(agents),
            len(token_addresses),
            sum(1 for agent in agents if agent.token.price_usd is not None),
        )
        return NetworkSnapshot(agents=agents, cached_at=self.clock())
