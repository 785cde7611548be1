"""
Helium — Movie Service
========================

What:  List, filter, fetch, create, replace and delete Movie documents.
Why:   Movies are the only resource with the full CRUD surface.
How:   Same query shapes as the actor service. Writes validate first; PUT and
       DELETE locate the stored document by `movieId` across partitions, then
       act on its `id` and partition key.
Who:   Called by routes/movies.py.

Operation flow:
    POST   → validate → upsert                                   → 201
    PUT    → validate → check path id → lookup → keep id/key → upsert → 201
    DELETE → lookup → delete by (key, id)                        → 204
    Any lookup miss → NotFoundError (404); any store failure → StoreError (500)
"""

import logging
from typing import Any, Dict, List, Optional

from helium.database import CosmosStore
from helium.exceptions import NotFoundError, ValidationError
from helium.models.movie import Movie
from helium.services.queries import MOVIE_FIELDS, build_list_query, build_lookup_query
from helium.services.telemetry_service import TelemetryService

logger = logging.getLogger(__name__)

# Enough of a stored movie to address it for replace / delete
_ADDRESS_FIELDS = ("id", "movieId", "key")


class MovieService:
    """Business logic for /api/movies."""

    def __init__(
        self,
        store: CosmosStore,
        telemetry: TelemetryService,
        default_partition_key: str = "0",
    ):
        self.store = store
        self.telemetry = telemetry
        self.default_partition_key = default_partition_key

    async def list_movies(self, q: Optional[str] = None) -> List[Dict[str, Any]]:
        """All movies, or those whose textSearch contains `q`. Empty list if none match."""
        self.telemetry.track_event("get all movies")
        spec = build_list_query(Movie.resource_type, MOVIE_FIELDS, q)
        return await self.store.query_documents(spec)

    async def get_movie(self, movie_id: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: No movie has this movieId.
        """
        self.telemetry.track_event("get movie by id")
        spec = build_lookup_query(Movie.resource_type, Movie.id_field, movie_id, MOVIE_FIELDS)
        results = await self.store.query_documents(spec)
        if not results:
            raise NotFoundError(resource="Movie", resource_id=movie_id)
        return results[0]

    async def _locate(self, movie_id: str) -> Dict[str, Any]:
        spec = build_lookup_query(Movie.resource_type, Movie.id_field, movie_id, _ADDRESS_FIELDS)
        results = await self.store.query_documents(spec)
        if not results:
            raise NotFoundError(resource="Movie", resource_id=movie_id)
        return results[0]

    async def create_movie(self, payload: Any) -> Dict[str, Any]:
        """
        Validate then upsert. Nothing is written when validation fails.

        Raises:
            ValidationError: Payload invalid (→ 400).
            StoreError: Upsert failed (→ 500).
        """
        self.telemetry.track_event("create movie")
        movie = Movie.from_payload(payload)

        document = movie.to_document()
        document.setdefault("key", self.default_partition_key)

        result = await self.store.upsert_document(document)
        logger.info("Upserted movie %s", movie.resource_id)
        return result

    async def replace_movie(self, movie_id: str, payload: Any) -> Dict[str, Any]:
        """
        Replace a stored movie with the payload, keeping its `id` and partition key.

        Raises:
            ValidationError: Payload invalid, or its movieId differs from `movie_id`.
            NotFoundError: No movie has this movieId.
            StoreError: Lookup or upsert failed.
        """
        self.telemetry.track_event("replace movie")
        movie = Movie.from_payload(payload)
        if movie.movieId != movie_id:
            raise ValidationError(
                [f'"movieId" must be equal to "{movie_id}"'],
                context={"path_id": movie_id, "body_id": movie.movieId},
            )

        existing = await self._locate(movie_id)

        document = movie.to_document()
        document["id"] = existing["id"]
        document["key"] = existing.get("key", self.default_partition_key)

        result = await self.store.upsert_document(document)
        logger.info("Replaced movie %s (id=%s)", movie_id, existing["id"])
        return result

    async def delete_movie(self, movie_id: str) -> None:
        """
        Raises:
            NotFoundError: No movie has this movieId (or it vanished before the delete).
            StoreError: Lookup or delete failed.
        """
        self.telemetry.track_event("delete movie")
        existing = await self._locate(movie_id)
        partition_key = existing.get("key", self.default_partition_key)

        try:
            await self.store.delete_document(partition_key, existing["id"])
        except NotFoundError as e:
            raise NotFoundError(resource="Movie", resource_id=movie_id) from e
        logger.info("Deleted movie %s", movie_id)
