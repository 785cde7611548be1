"""
Helium — Test Configuration (conftest.py)
===========================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (in-memory document store,
       telemetry, API client, sample documents).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── telemetry:     TelemetryService with its own Prometheus registry
    ├── memory_store:  InMemoryStore standing in for CosmosStore
    ├── services:      ServiceContainer wired around memory_store
    ├── sample_actor / sample_movie: valid request payloads
    └── test_client:   HTTPX AsyncClient talking to create_app(services=...)
"""

import copy
import os
import re
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Settings are read when helium.config is first imported
os.environ["COSMOSDB_URL"] = "https://helium-test.documents.azure.com:443/"
os.environ["COSMOSDB_KEY"] = "test-key-not-real"
os.environ["KEY_VAULT_URL"] = ""
os.environ["TENANT_ID"] = ""
os.environ["CLIENT_ID"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from helium.database import strip_system_fields  # noqa: E402
from helium.exceptions import NotFoundError, StoreError  # noqa: E402
from helium.services.container import ServiceContainer  # noqa: E402
from helium.services.queries import QuerySpec  # noqa: E402
from helium.services.telemetry_service import TelemetryService  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-memory document store
# ══════════════════════════════════════════════════════════════════════════

_TYPE_RE = re.compile(r"root\.type = '(\w+)'")
_ID_RE = re.compile(r"root\.(\w+) = @id")
_SELECT_RE = re.compile(r"SELECT (.+?) FROM root")


class InMemoryStore:
    """
    Stand-in for CosmosStore that understands the query shapes the services build.

    Documents are keyed by (partition key, id). Projected fields missing from
    a document are omitted from the result, as Cosmos does.
    """

    def __init__(self):
        self.documents: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.queries: List[QuerySpec] = []
        self.upserts: List[Dict[str, Any]] = []
        self.unreachable: Optional[str] = None
        self.closed = False

    def _check_reachable(self) -> None:
        if self.unreachable:
            raise StoreError(self.unreachable)

    def add(self, doc: Dict[str, Any]) -> None:
        self.documents[(doc.get("key", "0"), doc["id"])] = copy.deepcopy(doc)

    async def query_documents(self, spec: QuerySpec) -> List[Dict[str, Any]]:
        self._check_reachable()
        self.queries.append(spec)

        type_match = _TYPE_RE.search(spec.query)
        id_match = _ID_RE.search(spec.query)
        projection = _SELECT_RE.search(spec.query).group(1)
        fields = None if projection == "*" else [
            f.strip().replace("root.", "", 1) for f in projection.split(",")
        ]
        search = spec.parameter("@textSearch")

        results = []
        for doc in self.documents.values():
            if type_match and doc.get("type") != type_match.group(1):
                continue
            if id_match and doc.get(id_match.group(1)) != spec.parameter("@id"):
                continue
            if search is not None and search not in doc.get("textSearch", ""):
                continue
            if fields is None:
                results.append(copy.deepcopy(doc))
            else:
                results.append({f: copy.deepcopy(doc[f]) for f in fields if f in doc})
        return results

    async def get_document(self, partition_key: str, document_id: str) -> Dict[str, Any]:
        self._check_reachable()
        try:
            return copy.deepcopy(self.documents[(partition_key, document_id)])
        except KeyError:
            raise NotFoundError(resource="document", resource_id=document_id)

    async def upsert_document(self, content: Dict[str, Any]) -> Dict[str, Any]:
        self._check_reachable()
        self.upserts.append(copy.deepcopy(content))
        stored = dict(content, _rid="rid", _etag="etag", _ts=1)
        self.documents[(content["key"], content["id"])] = stored
        return strip_system_fields(copy.deepcopy(stored))

    async def delete_document(self, partition_key: str, document_id: str) -> None:
        self._check_reachable()
        if self.documents.pop((partition_key, document_id), None) is None:
            raise NotFoundError(resource="document", resource_id=document_id)

    async def query_collections(self, spec: Optional[QuerySpec] = None) -> List[Dict[str, Any]]:
        self._check_reachable()
        return [{"id": "movies"}]

    async def close(self) -> None:
        self.closed = True


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def telemetry():
    return TelemetryService()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def services(memory_store, telemetry):
    return ServiceContainer.from_store(memory_store, telemetry)


@pytest.fixture
def sample_actor():
    """A valid actor payload."""
    return {
        "id": "nm0000123",
        "actorId": "nm0000123",
        "name": "George Clooney",
        "textSearch": "george clooney",
        "type": "Actor",
        "birthYear": 1961,
        "profession": ["actor", "producer", "writer"],
        "movies": [],
    }


@pytest.fixture
def sample_movie():
    """A valid movie payload."""
    return {
        "id": "m1",
        "movieId": "m1",
        "title": "X",
        "textSearch": "x",
        "type": "Movie",
        "year": 1994,
    }


@pytest_asyncio.fixture
async def test_client(services):
    """
    HTTPX AsyncClient routed straight to the app through ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/healthz")
            assert response.status_code == 200
    """
    from helium.main import create_app

    app = create_app(services=services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
