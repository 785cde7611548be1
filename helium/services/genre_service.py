"""Genre listing. Genres are read-only and returned as stored."""

from typing import Any, Dict, List

from helium.database import CosmosStore, strip_system_fields
from helium.services.queries import build_list_query
from helium.services.telemetry_service import TelemetryService

GENRE_TYPE = "Genre"


class GenreService:
    def __init__(self, store: CosmosStore, telemetry: TelemetryService):
        self.store = store
        self.telemetry = telemetry

    async def list_genres(self) -> List[Dict[str, Any]]:
        self.telemetry.track_event("get all genres")
        results = await self.store.query_documents(build_list_query(GENRE_TYPE))
        return [strip_system_fields(doc) for doc in results]
