"""
Helium — Service Container
============================

What:  Holds every long-lived client and service for one application instance.
Why:   Handlers receive their collaborators explicitly through FastAPI's
       dependency injection instead of looking them up in a global locator.
How:   Built once in the lifespan (or by tests), stored on `app.state.services`,
       handed to route handlers by the `get_services` dependency.
"""

from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request

from helium.config import ResolvedConfig
from helium.database import CosmosStore
from helium.services.actor_service import ActorService
from helium.services.genre_service import GenreService
from helium.services.movie_service import MovieService
from helium.services.telemetry_service import TelemetryService


@dataclass
class ServiceContainer:
    telemetry: TelemetryService
    store: CosmosStore
    actors: ActorService
    movies: MovieService
    genres: GenreService

    @classmethod
    def build(
        cls,
        config: ResolvedConfig,
        telemetry: Optional[TelemetryService] = None,
        cosmos_client: Optional[Any] = None,
    ) -> "ServiceContainer":
        """Construct the store client and services from resolved configuration."""
        telemetry = telemetry or TelemetryService(config.insights_key)
        store = CosmosStore(
            url=config.cosmosdb_url,
            key=config.cosmosdb_key,
            telemetry=telemetry,
            database=config.db_name,
            collection=config.db_collection,
            client=cosmos_client,
        )
        return cls.from_store(store, telemetry, config.default_partition_key)

    @classmethod
    def from_store(
        cls,
        store: Any,
        telemetry: TelemetryService,
        default_partition_key: str = "0",
    ) -> "ServiceContainer":
        """Wire services around an existing store (tests pass an in-memory one)."""
        return cls(
            telemetry=telemetry,
            store=store,
            actors=ActorService(store, telemetry, default_partition_key),
            movies=MovieService(store, telemetry, default_partition_key),
            genres=GenreService(store, telemetry),
        )

    async def close(self) -> None:
        await self.store.close()


def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the container built at startup."""
    return request.app.state.services
