"""
Helium — Configuration Tests
==============================

What we test:
    ✅ Settings defaults and validators
    ✅ Secret resolution order: Key Vault → environment
    ✅ Vault failures fall back to the environment
    ✅ Fatal cases raise StartupConfigError
    ✅ Missing telemetry key only warns
"""

import logging

import pytest

from helium.config import (
    COSMOSDB_KEY_SECRET,
    INSIGHTS_KEY_SECRET,
    Settings,
    resolve_config,
)
from helium.exceptions import HeliumError, StartupConfigError


class FakeVault:
    """Key Vault double: serves secrets from a dict, records close()."""

    def __init__(self, secrets=None, error=None):
        self.secrets = secrets or {}
        self.error = error
        self.requested = []
        self.closed = False

    async def get_secret(self, name):
        self.requested.append(name)
        if self.error is not None:
            raise self.error
        if name not in self.secrets:
            raise HeliumError(f"Unable to find secret {name}")
        return self.secrets[name]

    async def close(self):
        self.closed = True


def make_settings(**overrides):
    values = {
        "cosmosdb_url": "https://helium-test.documents.azure.com:443/",
        "cosmosdb_key": "env-key",
        "appinsights_instrumentationkey": "",
        "key_vault_url": "",
        "tenant_id": "",
        "client_id": "",
        "client_secret": "",
    }
    values.update(overrides)
    return Settings(**values)


class TestSettings:

    def test_defaults(self):
        s = make_settings()
        assert s.port == 3000
        assert s.db_name == "imdb"
        assert s.db_collection == "movies"
        assert s.default_partition_key == "0"
        assert s.vault_configured is False

    def test_log_level_normalized(self):
        assert make_settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            make_settings(log_level="LOUD")

    def test_cors_origins_list(self):
        s = make_settings(cors_origins="http://a.example, http://b.example")
        assert s.cors_origins_list == ["http://a.example", "http://b.example"]

    def test_vault_needs_url_and_tenant(self):
        assert make_settings(key_vault_url="https://kv.vault.azure.net").vault_configured is False
        assert make_settings(
            key_vault_url="https://kv.vault.azure.net", tenant_id="t"
        ).vault_configured is True


class TestResolveConfig:

    @pytest.mark.asyncio
    async def test_environment_only(self):
        config = await resolve_config(make_settings(appinsights_instrumentationkey="ikey"))

        assert config.cosmosdb_key == "env-key"
        assert config.insights_key == "ikey"
        assert config.db_name == "imdb"

    @pytest.mark.asyncio
    async def test_vault_takes_precedence(self):
        vault = FakeVault({COSMOSDB_KEY_SECRET: "vault-key", INSIGHTS_KEY_SECRET: "vault-ikey"})
        s = make_settings(key_vault_url="https://kv.vault.azure.net", tenant_id="t")

        config = await resolve_config(s, vault_factory=lambda _: vault)

        assert config.cosmosdb_key == "vault-key"
        assert config.insights_key == "vault-ikey"
        assert vault.closed is True

    @pytest.mark.asyncio
    async def test_vault_failure_falls_back_to_environment(self, caplog):
        vault = FakeVault(error=HeliumError("Key Vault unreachable"))
        s = make_settings(key_vault_url="https://kv.vault.azure.net", tenant_id="t")

        with caplog.at_level(logging.ERROR, logger="helium.config"):
            config = await resolve_config(s, vault_factory=lambda _: vault)

        assert config.cosmosdb_key == "env-key"
        assert vault.closed is True
        assert "falling back to environment" in caplog.text

    @pytest.mark.asyncio
    async def test_vault_not_used_without_tenant(self):
        def factory(_):
            raise AssertionError("vault must not be built")

        config = await resolve_config(
            make_settings(key_vault_url="https://kv.vault.azure.net"), vault_factory=factory
        )
        assert config.cosmosdb_key == "env-key"

    @pytest.mark.asyncio
    async def test_client_id_without_secret_is_fatal(self):
        with pytest.raises(StartupConfigError) as exc_info:
            await resolve_config(make_settings(client_id="app-id"))
        assert exc_info.value.setting == "CLIENT_SECRET"

    @pytest.mark.asyncio
    async def test_missing_url_is_fatal(self):
        with pytest.raises(StartupConfigError) as exc_info:
            await resolve_config(make_settings(cosmosdb_url=""))
        assert exc_info.value.setting == "COSMOSDB_URL"

    @pytest.mark.asyncio
    async def test_missing_key_is_fatal(self):
        with pytest.raises(StartupConfigError) as exc_info:
            await resolve_config(make_settings(cosmosdb_key=""))
        assert exc_info.value.setting == "COSMOSDB_KEY"

    @pytest.mark.asyncio
    async def test_missing_insights_key_only_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="helium.config"):
            config = await resolve_config(make_settings())

        assert config.insights_key is None
        assert "APPINSIGHTS_INSTRUMENTATIONKEY" in caplog.text
