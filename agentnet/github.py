"""GitHub-backed enrichment: repo activity, memory files and token state."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

import requests

from .fanout import settle_all
from .models import CommitSummary, GithubActivity, IssueSummary, TokenDescriptor

GITHUB_API = "https://api.github.com"
GITHUB_RAW = "https://raw.githubusercontent.com"
DEFAULT_BRANCH = "main"
USER_AGENT = "agentnet-network-api"
RECENT_LIMIT = 10

_SLUG_RE = re.compile(r"^https?://github\.com/([\w.-]+/[\w.-]+)", re.ASCII)
_LOGGER = logging.getLogger(__name__)


def extract_slug(repo_url: str) -> Optional[str]:
    match = _SLUG_RE.match(repo_url or "")
    if not match:
        return None
    slug = match.group(1)
    if slug.endswith(".git"):
        slug = slug[: -len(".git")]
    return slug


def raw_file_url(slug: str, path: str) -> str:
    return f"{GITHUB_RAW}/{slug}/{DEFAULT_BRANCH}/{path}"


def _api_headers(token: str) -> dict:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": USER_AGENT,
    }


def _get_ok(http: requests.Session, url: str, timeout: float, headers: Optional[dict] = None) -> requests.Response:
    response = http.get(url, headers=headers or {"User-Agent": USER_AGENT}, timeout=timeout)
    response.raise_for_status()
    return response


def _fetch_issues(http: requests.Session, slug: str, token: str, timeout: float) -> List[IssueSummary]:
    url = f"{GITHUB_API}/repos/{slug}/issues?state=all&per_page={RECENT_LIMIT}&sort=updated"
    data = _get_ok(http, url, timeout, _api_headers(token)).json()
    return [
        IssueSummary(
            number=item["number"],
            title=item["title"],
            state=item["state"],
            labels=[label["name"] for label in item.get("labels") or []],
            created_at=item["created_at"],
        )
        for item in data[:RECENT_LIMIT]
    ]


def _fetch_commits(http: requests.Session, slug: str, token: str, timeout: float) -> List[CommitSummary]:
    url = f"{GITHUB_API}/repos/{slug}/commits?per_page={RECENT_LIMIT}"
    data = _get_ok(http, url, timeout, _api_headers(token)).json()
    return [
        CommitSummary(
            sha=item["sha"][:7],
            message=item["commit"]["message"].split("\n")[0],
            date=item["commit"]["author"]["date"],
        )
        for item in data[:RECENT_LIMIT]
    ]


def _fetch_text(http: requests.Session, slug: str, path: str, timeout: float) -> str:
    return _get_ok(http, raw_file_url(slug, path), timeout).text


def fetch_activity(http: requests.Session, slug: str, token: str, timeout: float = 10.0) -> GithubActivity:
    """Recent issues, commits and the two memory files for ``slug``.

    All four requests run concurrently and each one degrades to its empty
    value on its own.
    """

    issues, commits, focus, self_md = settle_all(
        [
            lambda: _fetch_issues(http, slug, token, timeout),
            lambda: _fetch_commits(http, slug, token, timeout),
            lambda: _fetch_text(http, slug, "memory/focus.md", timeout),
            lambda: _fetch_text(http, slug, "memory/self.md", timeout),
        ]
    )
    for part, outcome in (("issues", issues), ("commits", commits), ("focus", focus), ("self", self_md)):
        if not outcome.ok:
            _LOGGER.warning("github %s unavailable slug=%s err=%s", part, slug, outcome.error)
    return GithubActivity(
        issues=issues.value_or([]),
        commits=commits.value_or([]),
        focus_md=focus.value_or(None),
        self_md=self_md.value_or(None),
    )


def fetch_token_descriptor(
    http: requests.Session,
    slug: str,
    known_tokens: Dict[str, TokenDescriptor],
    timeout: float = 10.0,
) -> Optional[TokenDescriptor]:
    if slug in known_tokens:
        return known_tokens[slug]
    try:
        state = _get_ok(http, raw_file_url(slug, "memory/state.json"), timeout).json()
    except (requests.RequestException, ValueError) as exc:
        _LOGGER.info("token state unavailable slug=%s err=%s", slug, exc)
        return None
    token = state.get("token") if isinstance(state, dict) else None
    if not isinstance(token, dict):
        return None
    address = token.get("address")
    if not address or not isinstance(address, str):
        return None
    symbol = token.get("symbol")
    return TokenDescriptor(address=address, symbol=symbol if isinstance(symbol, str) and symbol else "TOKEN")
