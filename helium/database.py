"""
Helium — Cosmos DB Document Store Client
==========================================

What:  Async wrapper over the Cosmos DB SDK: query, point read, upsert, delete
       and list-collections, each timed and reported to telemetry.
Why:   Every store call goes through one place, so latency / RU reporting and
       SDK exception translation are uniform.
How:   azure.cosmos.aio.CosmosClient; database and container proxies are created
       lazily once behind a single-flight lock. SDK exceptions become
       NotFoundError (typed 404 from the store) or StoreError (everything else).
Who:   Owned by the ServiceContainer; used by the resource services and /healthz.
When:  Created at startup, closed at shutdown.

Error contract:
    success          → document / list of documents
    store 404        → NotFoundError
    any other error  → StoreError (message "<status>: <detail>", never retried)

Cross-partition queries:
    The async client fans a query out across partitions whenever no
    partition_key is given, which is always the case for query_documents().
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from azure.core.exceptions import AzureError
from azure.cosmos.aio import CosmosClient
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError

from helium.exceptions import NotFoundError, StoreError
from helium.services.queries import QuerySpec
from helium.services.telemetry_service import TelemetryService

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEPENDENCY_NAME = "CosmosDB"
REQUEST_CHARGE_HEADER = "x-ms-request-charge"

# Cosmos system properties; never returned to API clients
SYSTEM_FIELDS = {"_rid", "_self", "_etag", "_attachments", "_ts"}


def strip_system_fields(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k not in SYSTEM_FIELDS}


# ── Resource links ────────────────────────────────────────────────────────
# Built locally rather than read from the store; used to name the dependency
# target in telemetry and logs.

def build_db_link(database: str) -> str:
    return f"dbs/{database}"


def build_collection_link(database: str, collection: str) -> str:
    return f"{build_db_link(database)}/colls/{collection}"


def build_document_link(database: str, collection: str, document_id: str) -> str:
    return f"{build_collection_link(database, collection)}/docs/{document_id}"


class CosmosStore:
    """
    Document store client bound to one database and collection.

    Args:
        url: Cosmos DB account URL.
        key: Account key.
        telemetry: Receives dependency, duration and RU metrics.
        database: Database name (DB_NAME).
        collection: Collection / container name (DB_COLLECTION).
        client: Pre-built CosmosClient; tests pass a mock.
    """

    def __init__(
        self,
        url: str,
        key: str,
        telemetry: TelemetryService,
        database: str,
        collection: str,
        client: Optional[Any] = None,
    ):
        self.url = url
        self.telemetry = telemetry
        self.database_name = database
        self.collection_name = collection
        self._client = client if client is not None else CosmosClient(url, credential=key)

        self._database: Optional[Any] = None
        self._container: Optional[Any] = None
        self._init_lock = asyncio.Lock()

    @property
    def collection_link(self) -> str:
        return build_collection_link(self.database_name, self.collection_name)

    # ── Lazy proxies ──────────────────────────────────────────────────────

    async def _get_container(self) -> Any:
        if self._container is not None:
            return self._container

        async with self._init_lock:
            if self._container is None:
                self._database = self._client.get_database_client(self.database_name)
                self._container = self._database.get_container_client(self.collection_name)
                logger.info("Cosmos DB container proxy ready: %s", self.collection_link)
        return self._container

    async def _get_database(self) -> Any:
        await self._get_container()
        return self._database

    # ── Instrumentation ───────────────────────────────────────────────────

    def _track_charge(self, operation: str, proxy: Any) -> None:
        """Report the RU charge of the last response on `proxy`'s connection."""
        connection = getattr(proxy, "client_connection", None)
        headers = getattr(connection, "last_response_headers", None) or {}
        charge = headers.get(REQUEST_CHARGE_HEADER)
        if charge is None:
            return
        try:
            value = float(charge)
        except (TypeError, ValueError):
            return
        logger.debug("%s RU cost: %s", operation, value)
        self.telemetry.track_request_charge(operation, value)

    async def _execute(
        self,
        operation: str,
        target: str,
        proxy: Any,
        call: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Run one store call: time it, report it, translate SDK exceptions.

        No retries and no timeout: a transient failure surfaces as StoreError.
        """
        start = time.perf_counter()
        success = False
        result_code = ""
        try:
            result = await call()
            success = True
            return result
        except CosmosResourceNotFoundError as e:
            result_code = str(e.status_code)
            logger.debug("%s on %s: not found", operation, target)
            raise NotFoundError(resource="document", context={"target": target}) from e
        except CosmosHttpResponseError as e:
            result_code = str(e.status_code)
            logger.error("%s on %s failed: %s", operation, target, e.message)
            raise StoreError(f"{e.status_code}: {e.message}", status=e.status_code) from e
        except AzureError as e:
            result_code = type(e).__name__
            logger.error("%s on %s failed: %s", operation, target, e)
            raise StoreError(str(e)) from e
        finally:
            duration = time.perf_counter() - start
            self.telemetry.track_dependency(
                DEPENDENCY_NAME,
                target,
                operation,
                success,
                duration,
                result_code,
            )
            self._track_charge(operation, proxy)

    # ── Operations ────────────────────────────────────────────────────────

    async def query_documents(self, spec: QuerySpec) -> List[Dict[str, Any]]:
        """Run a cross-partition query and return every matching document."""
        container = await self._get_container()

        async def call() -> List[Dict[str, Any]]:
            items = container.query_items(query=spec.query, parameters=spec.parameters)
            return [item async for item in items]

        return await self._execute("queryDocuments", self.collection_link, container, call)

    async def get_document(self, partition_key: str, document_id: str) -> Dict[str, Any]:
        """Point read by id and partition key. Raises NotFoundError when absent."""
        container = await self._get_container()
        link = build_document_link(self.database_name, self.collection_name, document_id)

        async def call() -> Dict[str, Any]:
            return await container.read_item(item=document_id, partition_key=partition_key)

        doc = await self._execute("getDocument", link, container, call)
        return strip_system_fields(doc)

    async def upsert_document(self, content: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or replace a document keyed by its `id`."""
        container = await self._get_container()

        async def call() -> Dict[str, Any]:
            return await container.upsert_item(body=content)

        doc = await self._execute("upsertDocument", self.collection_link, container, call)
        return strip_system_fields(doc)

    async def delete_document(self, partition_key: str, document_id: str) -> None:
        """Delete by id and partition key. Raises NotFoundError when absent."""
        container = await self._get_container()
        link = build_document_link(self.database_name, self.collection_name, document_id)

        async def call() -> None:
            await container.delete_item(item=document_id, partition_key=partition_key)

        await self._execute("deleteDocument", link, container, call)

    async def query_collections(self, spec: Optional[QuerySpec] = None) -> List[Dict[str, Any]]:
        """List (or query) the collections of the database. Used by /healthz."""
        database = await self._get_database()
        spec = spec or QuerySpec(query="SELECT * FROM root")

        async def call() -> List[Dict[str, Any]]:
            items = database.query_containers(query=spec.query, parameters=spec.parameters)
            return [item async for item in items]

        return await self._execute(
            "queryCollections", build_db_link(self.database_name), database, call
        )

    async def close(self) -> None:
        await self._client.close()
