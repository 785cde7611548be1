"""
Helium — Application Configuration
====================================

What:  Centralized configuration using Pydantic Settings, plus the startup step
       that resolves secrets from Azure Key Vault or the environment.
Why:   Type-safe environment loading, validated once at startup. Missing
       required values abort startup instead of failing the first request.
How:   `Settings` reads environment variables (or .env). `resolve_config()`
       runs during the lifespan and produces an immutable `ResolvedConfig`.
Who:   Imported by main.py (logging, lifespan) and by tests.

Secret fallback order:
    1. Key Vault (when KEY_VAULT_URL and TENANT_ID are set)
    2. Environment variable (COSMOSDB_KEY, APPINSIGHTS_INSTRUMENTATIONKEY)
    3. Fixed default where one exists; otherwise StartupConfigError
"""

import logging
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from helium.exceptions import StartupConfigError

logger = logging.getLogger(__name__)

# Names of the secrets stored in Key Vault
COSMOSDB_KEY_SECRET = "cosmosDBkey"
INSIGHTS_KEY_SECRET = "AppInsightsInstrumentationKey"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern. Only COSMOSDB_URL and a Cosmos key
    (from the vault or COSMOSDB_KEY) are strictly required.
    """

    # ── Cosmos DB ─────────────────────────────────────────────────────────
    cosmosdb_url: str = Field(default="", description="Cosmos DB account URL")
    cosmosdb_key: str = Field(default="", description="Cosmos DB key (vault takes precedence)")

    # What: Database and collection holding every Actor/Movie/Genre document
    db_name: str = Field(default="imdb")
    db_collection: str = Field(default="movies")

    # What: Partition key value stored on documents that do not carry one
    default_partition_key: str = Field(default="0")

    # ── Key Vault ─────────────────────────────────────────────────────────
    # No CLIENT_ID means managed identity; CLIENT_ID without CLIENT_SECRET is fatal
    key_vault_url: str = Field(default="")
    client_id: str = Field(default="")
    client_secret: str = Field(default="")
    tenant_id: str = Field(default="")

    # What: Tenacity settings for secret reads (network errors only)
    vault_retry_max_attempts: int = Field(default=3, ge=1, le=10)
    vault_retry_min_wait: int = Field(default=1, ge=1, le=30)
    vault_retry_max_wait: int = Field(default=8, ge=1, le=120)

    # ── Telemetry ─────────────────────────────────────────────────────────
    appinsights_instrumentationkey: str = Field(default="")

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origins: str = Field(default="*")
    log_level: str = Field(default="INFO")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def vault_configured(self) -> bool:
        """Key Vault is only attempted when both its URL and the tenant are known."""
        return bool(self.key_vault_url and self.tenant_id)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("cosmosdb_url", "key_vault_url")
    @classmethod
    def strip_url(cls, v: str) -> str:
        return v.strip()

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


class ResolvedConfig(BaseModel):
    """Values needed to build the service clients, after secret resolution."""

    cosmosdb_url: str
    cosmosdb_key: str
    insights_key: Optional[str] = None
    db_name: str
    db_collection: str
    default_partition_key: str

    model_config = {"frozen": True}


async def resolve_config(
    settings: Settings,
    vault_factory: Optional[Callable[[Settings], Any]] = None,
) -> ResolvedConfig:
    """
    Resolve the Cosmos DB key and telemetry key: vault → environment → fail.

    What:    Startup-only step; raises StartupConfigError for missing required values.
    When:    Called once from the application lifespan, before any client is built.

    Args:
        settings: Loaded application settings.
        vault_factory: Builds the secret client from settings. Defaults to
                       KeyVaultService; tests inject a fake.

    Raises:
        StartupConfigError: CLIENT_ID without CLIENT_SECRET, no COSMOSDB_URL,
                            or no Cosmos key from any source.
    """
    logger.debug("Getting configuration values")

    if settings.client_id and not settings.client_secret:
        raise StartupConfigError(
            "CLIENT_ID is set but CLIENT_SECRET is not", setting="CLIENT_SECRET"
        )

    if not settings.cosmosdb_url:
        raise StartupConfigError("COSMOSDB_URL is not set", setting="COSMOSDB_URL")

    cosmosdb_key: Optional[str] = None
    insights_key: Optional[str] = None

    if settings.vault_configured:
        if vault_factory is None:
            from helium.services.keyvault_service import KeyVaultService

            vault_factory = KeyVaultService.from_settings

        vault = vault_factory(settings)
        logger.info("Reading secrets from Key Vault %s", settings.key_vault_url)
        try:
            cosmosdb_key = await vault.get_secret(COSMOSDB_KEY_SECRET)
            insights_key = await vault.get_secret(INSIGHTS_KEY_SECRET)
        except Exception as e:
            logger.error(
                "Failed to get secrets from Key Vault, falling back to environment: %s", e
            )
        finally:
            await vault.close()
    else:
        logger.info("Key Vault not configured (KEY_VAULT_URL/TENANT_ID), using environment")

    if not cosmosdb_key:
        logger.debug("Setting Cosmos DB key from COSMOSDB_KEY")
        cosmosdb_key = settings.cosmosdb_key
    if not insights_key:
        insights_key = settings.appinsights_instrumentationkey or None

    if not cosmosdb_key:
        raise StartupConfigError("Failed to get COSMOSDB_KEY", setting="COSMOSDB_KEY")
    if not insights_key:
        logger.warning(
            "APPINSIGHTS_INSTRUMENTATIONKEY not found; telemetry is only exposed on /metrics"
        )

    return ResolvedConfig(
        cosmosdb_url=settings.cosmosdb_url,
        cosmosdb_key=cosmosdb_key,
        insights_key=insights_key,
        db_name=settings.db_name,
        db_collection=settings.db_collection,
        default_partition_key=settings.default_partition_key,
    )


# Singleton instance read by main.py
settings = Settings()
