from __future__ import annotations

import json

import logging

from agentnet.config import DATA_DIR, Settings, load_dotenv, load_known_tokens
from agentnet.models import TokenDescriptor


def test_load_known_tokens(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text(
        json.dumps(
            {
                "tokens": [
                    {"slug": "a/b", "address": "0xabc", "symbol": "AB"},
                    {"slug": "c/d", "address": "0xdef"},
                    {"slug": "no/address"},
                ]
            }
        ),
        encoding="utf-8",
    )

    assert load_known_tokens(str(path)) == {
        "a/b": TokenDescriptor(address="0xabc", symbol="AB"),
        "c/d": TokenDescriptor(address="0xdef", symbol="TOKEN"),
    }


def test_missing_known_tokens_file_is_empty(tmp_path):
    assert load_known_tokens(str(tmp_path / "absent.json")) == {}


def test_shipped_known_tokens():
    tokens = load_known_tokens(str(DATA_DIR / "known_tokens.json"))
    assert tokens["daimon111/daimon"].symbol == "DAIMON"


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AGENTNET_RPC_URL", "https://rpc.example")
    monkeypatch.setenv("AGENTNET_REGISTRY_ADDRESS", "0xaa")
    monkeypatch.setenv("GITHUB_PAT", "pat")
    monkeypatch.setenv("AGENTNET_CACHE_TTL", "120")
    monkeypatch.setenv("AGENTNET_HTTP_TIMEOUT", "2.5")
    monkeypatch.setenv("AGENTNET_KNOWN_TOKENS_PATH", str(tmp_path / "none.json"))
    monkeypatch.delenv("AGENTNET_DDB_TABLE", raising=False)

    settings = Settings.from_env()

    assert settings.rpc_url == "https://rpc.example"
    assert settings.registry_address == "0xaa"
    assert settings.github_token == "pat"
    assert settings.cache_ttl == 120
    assert settings.http_timeout == 2.5
    assert settings.ddb_table is None
    assert settings.known_tokens == {}


def test_dotenv_fills_missing_values(monkeypatch, tmp_path, caplog):
    caplog.set_level(logging.INFO, logger="agentnet.config")
    monkeypatch.chdir(tmp_path)
    # Registered first so the value the .env loader writes is undone afterwards.
    monkeypatch.setenv("AGENTNET_REGISTRY_ADDRESS", "")
    monkeypatch.delenv("AGENTNET_REGISTRY_ADDRESS")
    monkeypatch.setenv("AGENTNET_RPC_URL", "https://from-env.example")
    (tmp_path / ".env").write_text(
        "# local\nAGENTNET_REGISTRY_ADDRESS='0xbb'\nAGENTNET_RPC_URL=https://from-file.example\n",
        encoding="utf-8",
    )

    settings = Settings.from_env()

    assert settings.registry_address == "0xbb"
    assert settings.rpc_url == "https://from-env.example"
    assert "dotenv loaded keys=AGENTNET_REGISTRY_ADDRESS" in caplog.text


def test_load_dotenv_returns_keys_it_set(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AGENTNET_DDB_TABLE", "kept")
    monkeypatch.setenv("AGENTNET_ROOT_PATH", "")
    monkeypatch.delenv("AGENTNET_ROOT_PATH")
    env_file = tmp_path / "local.env"
    env_file.write_text(
        '# comment\n\nnot a pair\nAGENTNET_DDB_TABLE=other\nAGENTNET_ROOT_PATH = "/prod"\n',
        encoding="utf-8",
    )

    assert load_dotenv(str(env_file)) == ["AGENTNET_ROOT_PATH"]
    assert load_dotenv(str(tmp_path / "missing.env")) == []
    assert Settings.from_env().ddb_table == "kept"
