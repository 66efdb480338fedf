"""Read-through snapshot cache and its backing stores."""

from __future__ import annotations

import base64
import gzip
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import boto3
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer

from .models import NetworkSnapshot

CACHE_KEY = "network-data"
CACHE_TTL = 300

_LOGGER = logging.getLogger(__name__)


class MemoryCacheStore:
    """Process-local store; entries vanish after their TTL."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._items: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._items[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._items[key] = (value, self._clock() + ttl_seconds)


def _compress(text: str) -> dict:
    raw = text.encode("utf-8")
    compressed = gzip.compress(raw)
    return {
        "encoding": "gzip+base64",
        "data": base64.b64encode(compressed).decode("ascii"),
        "original_bytes": len(raw),
        "compressed_bytes": len(compressed),
    }


def _decompress(entry: dict) -> Optional[str]:
    if not isinstance(entry, dict) or entry.get("encoding") != "gzip+base64":
        return None
    data = entry.get("data")
    if not data:
        return None
    return gzip.decompress(base64.b64decode(data)).decode("utf-8")


class DynamoCacheStore:
    """DynamoDB table keyed by ``cache_key`` with a ``ttl`` epoch attribute.

    DynamoDB removes expired items lazily, so reads check ``ttl`` themselves.
    """

    def __init__(self, table: str, region: Optional[str] = None, client=None) -> None:
        self.table = table
        self.region = region
        self._client = client
        self._serializer = TypeSerializer()
        self._deserializer = TypeDeserializer()

    def _ddb(self):
        if self._client is None:
            _LOGGER.info("ddb init table=%s region=%s", self.table, self.region)
            self._client = boto3.client("dynamodb", region_name=self.region)
        return self._client

    def get(self, key: str) -> Optional[str]:
        response = self._ddb().get_item(TableName=self.table, Key={"cache_key": {"S": key}})
        item = response.get("Item")
        if not item:
            return None
        decoded = {name: self._deserializer.deserialize(value) for name, value in item.items()}
        if int(decoded.get("ttl") or 0) <= int(time.time()):
            _LOGGER.info("ddb item expired key=%s", key)
            return None
        return _decompress(decoded.get("payload"))

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        now_ts = int(time.time())
        item = {
            "cache_key": key,
            "payload": _compress(value),
            "updated_at": now_ts,
            "ttl": now_ts + ttl_seconds,
        }
        marshalled = {name: self._serializer.serialize(val) for name, val in item.items()}
        self._ddb().put_item(TableName=self.table, Item=marshalled)


@dataclass(frozen=True)
class CachedSnapshot:
    body: str
    hit: bool


class SnapshotCache:
    """Serve the stored snapshot JSON, or build, store and serve a new one.

    Misses inside one process are single-flight: concurrent callers wait on
    the first build and then read its result. Separate processes still
    rebuild independently.
    """

    def __init__(
        self,
        store,
        build: Callable[[], NetworkSnapshot],
        key: str = CACHE_KEY,
        ttl_seconds: int = CACHE_TTL,
    ) -> None:
        self.store = store
        self.build = build
        self.key = key
        self.ttl_seconds = ttl_seconds
        self._build_lock = threading.Lock()

    def _read(self) -> Optional[str]:
        try:
            return self.store.get(self.key)
        except Exception:
            _LOGGER.exception("cache read failed key=%s", self.key)
            return None

    def _write(self, body: str) -> None:
        try:
            self.store.put(self.key, body, self.ttl_seconds)
        except Exception:
            _LOGGER.exception("cache write failed key=%s", self.key)

    def get_or_build(self) -> CachedSnapshot:
        cached = self._read()
        if cached:
            _LOGGER.info("cache hit key=%s", self.key)
            return CachedSnapshot(body=cached, hit=True)
        with self._build_lock:
            cached = self._read()
            if cached:
                _LOGGER.info("cache hit after wait key=%s", self.key)
                return CachedSnapshot(body=cached, hit=True)
            _LOGGER.info("cache miss key=%s ttl=%s", self.key, self.ttl_seconds)
            body = self.build().to_json()
            self._write(body)
            return CachedSnapshot(body=body, hit=False)
