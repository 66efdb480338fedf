"""Wiring of settings into the aggregator and cache."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .aggregator import NetworkAggregator
from .cache import DynamoCacheStore, MemoryCacheStore, SnapshotCache
from .config import Settings
from .rpc import JsonRpcClient

_LOGGER = logging.getLogger(__name__)


def build_aggregator(settings: Settings, session: Optional[requests.Session] = None) -> NetworkAggregator:
    session = session or requests.Session()
    rpc = JsonRpcClient(settings.rpc_url, session=session, timeout=settings.http_timeout)
    return NetworkAggregator(
        rpc=rpc,
        registry_address=settings.registry_address,
        http=session,
        github_token=settings.github_token,
        known_tokens=settings.known_tokens,
        timeout=settings.http_timeout,
    )


def build_cache_store(settings: Settings):
    if settings.ddb_table:
        return DynamoCacheStore(settings.ddb_table, region=settings.ddb_region)
    _LOGGER.info("cache store=memory (no table configured)")
    return MemoryCacheStore()


def build_snapshot_cache(settings: Settings, session: Optional[requests.Session] = None) -> SnapshotCache:
    aggregator = build_aggregator(settings, session=session)
    return SnapshotCache(
        build_cache_store(settings),
        aggregator.build_snapshot,
        ttl_seconds=settings.cache_ttl,
    )
