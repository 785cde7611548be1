"""
Helium — Actor Service
========================

What:  List, filter, fetch and create Actor documents.
How:   Builds QuerySpecs with services.queries, runs them through the store
       client, validates payloads with the Actor model before any write.
Who:   Called by routes/actors.py.

Get-by-id contract:
    Cross-partition query on `actorId`. Exactly one document is returned (the
    first match) or NotFoundError is raised.
"""

import logging
from typing import Any, Dict, List, Optional

from helium.database import CosmosStore
from helium.exceptions import NotFoundError
from helium.models.actor import Actor
from helium.services.queries import ACTOR_FIELDS, build_list_query, build_lookup_query
from helium.services.telemetry_service import TelemetryService

logger = logging.getLogger(__name__)


class ActorService:
    """Business logic for /api/actors. Stateless apart from its collaborators."""

    def __init__(
        self,
        store: CosmosStore,
        telemetry: TelemetryService,
        default_partition_key: str = "0",
    ):
        self.store = store
        self.telemetry = telemetry
        self.default_partition_key = default_partition_key

    async def list_actors(self, q: Optional[str] = None) -> List[Dict[str, Any]]:
        """All actors, or those whose textSearch contains `q` (case-insensitive)."""
        self.telemetry.track_event("get all actors")
        spec = build_list_query(Actor.resource_type, ACTOR_FIELDS, q)
        return await self.store.query_documents(spec)

    async def get_actor(self, actor_id: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: No actor has this actorId.
        """
        self.telemetry.track_event("get actor by id")
        spec = build_lookup_query(Actor.resource_type, Actor.id_field, actor_id, ACTOR_FIELDS)
        results = await self.store.query_documents(spec)
        if not results:
            raise NotFoundError(resource="Actor", resource_id=actor_id)
        return results[0]

    async def create_actor(self, payload: Any) -> Dict[str, Any]:
        """
        Validate then upsert. Validation always finishes before the store is called.

        Raises:
            ValidationError: Payload invalid (→ 400, nothing written).
            StoreError: Upsert failed (→ 500).
        """
        self.telemetry.track_event("create actor")
        actor = Actor.from_payload(payload)

        document = actor.to_document()
        document.setdefault("key", self.default_partition_key)

        result = await self.store.upsert_document(document)
        logger.info("Upserted actor %s", actor.resource_id)
        return result
