"""Runtime configuration loaded from the environment."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .models import TokenDescriptor

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = PROJECT_ROOT / "data"

DEFAULT_CACHE_TTL = 300
DEFAULT_HTTP_TIMEOUT = 10.0

_LOGGER = logging.getLogger(__name__)


def load_dotenv(path: str = ".env") -> List[str]:
    """Copy ``KEY=value`` lines from ``path`` into the environment.

    Variables already set win over the file. Returns the keys that were set.
    """

    env_file = Path(path)
    if not env_file.is_file():
        return []
    loaded = []
    for raw in env_file.read_text(encoding="utf-8").splitlines():
        key, sep, value = raw.strip().partition("=")
        key = key.strip()
        if not sep or not key or key.startswith("#") or key in os.environ:
            continue
        os.environ[key] = value.strip().strip('"').strip("'")
        loaded.append(key)
    return loaded


def load_known_tokens(path: str) -> Dict[str, TokenDescriptor]:
    """Load the slug -> token override table.

    The file holds ``{"tokens": [{"slug": ..., "address": ..., "symbol": ...}]}``.
    A missing file yields an empty table.
    """

    file_path = Path(path)
    if not file_path.exists():
        return {}
    payload = json.loads(file_path.read_text(encoding="utf-8"))
    tokens = {}
    for item in payload.get("tokens", []):
        slug = item.get("slug")
        address = item.get("address")
        if slug and address:
            tokens[slug] = TokenDescriptor(address=address, symbol=item.get("symbol") or "TOKEN")
    return tokens


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    rpc_url: Optional[str] = None
    registry_address: Optional[str] = None
    github_token: Optional[str] = None
    ddb_table: Optional[str] = None
    ddb_region: Optional[str] = None
    cache_ttl: int = DEFAULT_CACHE_TTL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    root_path: str = ""
    known_tokens: Dict[str, TokenDescriptor] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "Settings":
        loaded = load_dotenv()
        if loaded:
            _LOGGER.info("dotenv loaded keys=%s", ",".join(loaded))
        tokens_path = os.getenv("AGENTNET_KNOWN_TOKENS_PATH", str(DATA_DIR / "known_tokens.json"))
        return cls(
            rpc_url=os.getenv("AGENTNET_RPC_URL") or None,
            registry_address=os.getenv("AGENTNET_REGISTRY_ADDRESS") or None,
            github_token=os.getenv("GITHUB_PAT") or None,
            ddb_table=os.getenv("AGENTNET_DDB_TABLE") or None,
            ddb_region=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION"),
            cache_ttl=_env_int("AGENTNET_CACHE_TTL", DEFAULT_CACHE_TTL),
            http_timeout=_env_float("AGENTNET_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            root_path=os.getenv("AGENTNET_ROOT_PATH", ""),
            known_tokens=load_known_tokens(tokens_path),
        )
