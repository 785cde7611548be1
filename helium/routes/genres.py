"""Helium — Genre Route Handlers (GET /api/genres, read-only)."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from helium.schemas.responses import ERROR_RESPONSES
from helium.services.container import ServiceContainer, get_services

router = APIRouter(prefix="/api/genres", tags=["Genres"])


@router.get(
    "",
    summary="List genres",
    responses={500: ERROR_RESPONSES[500]},
)
async def list_genres(
    services: ServiceContainer = Depends(get_services),
) -> List[Dict[str, Any]]:
    return await services.genres.list_genres()
