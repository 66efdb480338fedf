"""Records decoded from the registry and the public snapshot models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class RegistryRecord:
    repo_url: str
    wallet: str
    name: str
    registered_at: int
    last_seen: int


@dataclass(frozen=True)
class TokenDescriptor:
    address: str
    symbol: str


@dataclass(frozen=True)
class PriceQuote:
    price_usd: str
    change_24h: Optional[str] = None
    dex_url: Optional[str] = None


class _WireModel(BaseModel):
    # camelCase on the wire, snake_case in Python.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class IssueSummary(_WireModel):
    number: int
    title: str
    state: str
    labels: List[str] = Field(default_factory=list)
    created_at: str = Field(alias="created_at")


class CommitSummary(_WireModel):
    sha: str
    message: str
    date: str


class GithubActivity(_WireModel):
    issues: List[IssueSummary] = Field(default_factory=list)
    commits: List[CommitSummary] = Field(default_factory=list)
    focus_md: Optional[str] = None
    self_md: Optional[str] = None


class TokenInfo(_WireModel):
    address: Optional[str] = None
    symbol: Optional[str] = None
    price_usd: Optional[str] = None
    change_24h: Optional[str] = Field(default=None, alias="change24h")
    dex_url: Optional[str] = None


class Agent(_WireModel):
    name: str
    wallet: str
    repo_url: str
    slug: Optional[str] = None
    registered_at: int
    last_seen: int
    balance_eth: Optional[str] = None
    token: TokenInfo = Field(default_factory=TokenInfo)
    github: GithubActivity = Field(default_factory=GithubActivity)


class NetworkSnapshot(_WireModel):
    agents: List[Agent] = Field(default_factory=list)
    cached_at: int

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
