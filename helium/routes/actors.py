"""
Helium — Actor Route Handlers
===============================

Endpoints:
    GET  /api/actors?q=<name>   list / filter actors        → 200 array
    GET  /api/actors/{id}       one actor by actorId        → 200 object / 404
    POST /api/actors            create (upsert) an actor    → 201 / 400 / 500

Handlers are thin: extract parameters, call ActorService, return the result.
Errors raised by the service are mapped by the global handlers in main.py.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from helium.schemas.responses import ERROR_RESPONSES
from helium.services.container import ServiceContainer, get_services

router = APIRouter(prefix="/api/actors", tags=["Actors"])


@router.get(
    "",
    summary="List actors",
    description="Returns every actor, or those whose name contains `q` (case-insensitive).",
    responses={500: ERROR_RESPONSES[500]},
)
async def list_actors(
    q: Optional[str] = Query(default=None, description="Substring of the actor name"),
    services: ServiceContainer = Depends(get_services),
) -> List[Dict[str, Any]]:
    return await services.actors.list_actors(q)


@router.get(
    "/{actor_id}",
    summary="Get an actor by actorId",
    responses={404: ERROR_RESPONSES[404], 500: ERROR_RESPONSES[500]},
)
async def get_actor(
    actor_id: str,
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    return await services.actors.get_actor(actor_id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create an actor",
    description=(
        "Validates the payload (required fields, `type` = \"Actor\", "
        "`textSearch` = lowercase `name`) and upserts it."
    ),
    responses=ERROR_RESPONSES,
)
async def create_actor(
    payload: Any = Body(...),
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    return await services.actors.create_actor(payload)
