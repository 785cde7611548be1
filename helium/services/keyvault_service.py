"""
Helium — Azure Key Vault Secret Service
=========================================

What:  Thin async wrapper over the Key Vault SecretClient.
Why:   The Cosmos DB key and the telemetry key live in Key Vault in deployed
       environments; startup reads them before building the store client.
How:   The SecretClient is created lazily on first use behind a single-flight
       lock, then reads go through tenacity retries for transient network errors.
Who:   Called by config.resolve_config() during the application lifespan.

Authentication:
    - CLIENT_ID set   → service principal (ClientSecretCredential)
    - CLIENT_ID empty → managed identity (ManagedIdentityCredential)
"""

import asyncio
import logging
from typing import Any, Optional

from azure.core.exceptions import ResourceNotFoundError, ServiceRequestError
from azure.identity.aio import ClientSecretCredential, ManagedIdentityCredential
from azure.keyvault.secrets.aio import SecretClient
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from helium.config import Settings
from helium.exceptions import HeliumError

logger = logging.getLogger(__name__)


class KeyVaultService:
    """
    Reads the latest version of named secrets from one vault.

    The client is initialized at most once even if several coroutines ask for
    secrets concurrently before the first initialization finishes.
    """

    def __init__(
        self,
        url: str,
        client_id: str = "",
        client_secret: str = "",
        tenant_id: str = "",
        max_attempts: int = 3,
        min_wait: int = 1,
        max_wait: int = 8,
    ):
        self.url = url
        self.client_id = client_id
        self.client_secret = client_secret
        self.tenant_id = tenant_id
        self.max_attempts = max_attempts
        self.min_wait = min_wait
        self.max_wait = max_wait

        self._client: Optional[SecretClient] = None
        self._credential: Optional[Any] = None
        self._init_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "KeyVaultService":
        return cls(
            url=settings.key_vault_url,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
            tenant_id=settings.tenant_id,
            max_attempts=settings.vault_retry_max_attempts,
            min_wait=settings.vault_retry_min_wait,
            max_wait=settings.vault_retry_max_wait,
        )

    def _build_credential(self) -> Any:
        if self.client_id:
            return ClientSecretCredential(
                tenant_id=self.tenant_id,
                client_id=self.client_id,
                client_secret=self.client_secret,
            )
        return ManagedIdentityCredential()

    async def _get_client(self) -> SecretClient:
        """Create the SecretClient once (single-flight)."""
        if self._client is not None:
            return self._client

        async with self._init_lock:
            # Another coroutine may have finished initialization while we waited
            if self._client is None:
                self._credential = self._build_credential()
                self._client = SecretClient(vault_url=self.url, credential=self._credential)
                logger.info(
                    "Key Vault client initialized for %s (%s)",
                    self.url,
                    "service principal" if self.client_id else "managed identity",
                )
        return self._client

    async def get_secret(self, name: str) -> str:
        """
        Return the latest version of the named secret.

        Raises:
            HeliumError: The secret does not exist, or the vault stayed
                         unreachable after all retry attempts.
        """
        client = await self._get_client()

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(ServiceRequestError),
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential_jitter(initial=self.min_wait, max=self.max_wait),
                before_sleep=before_sleep_log(logger, logging.WARNING),
            ):
                with attempt:
                    secret = await client.get_secret(name)
        except ResourceNotFoundError as e:
            raise HeliumError(f"Unable to find secret {name}", context={"vault": self.url}) from e
        except RetryError as e:
            raise HeliumError(
                f"Key Vault unreachable while reading secret {name}",
                context={"vault": self.url, "attempts": self.max_attempts},
            ) from e

        if secret.value is None:
            raise HeliumError(f"Secret {name} has no value", context={"vault": self.url})
        return secret.value

    async def close(self) -> None:
        """Release the HTTP pipeline and credential, if they were created."""
        if self._client is not None:
            await self._client.close()
            self._client = None
        if self._credential is not None:
            await self._credential.close()
            self._credential = None
