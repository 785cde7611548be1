"""
Helium — Movie Route Handlers
===============================

Endpoints:
    GET    /api/movies?q=<title>   list / filter movies       → 200 array
    GET    /api/movies/{id}        one movie by movieId       → 200 object / 404
    POST   /api/movies             create (upsert) a movie    → 201 / 400 / 500
    PUT    /api/movies/{id}        replace a movie            → 201 / 400 / 404 / 500
    DELETE /api/movies/{id}        delete a movie             → 204 / 404 / 500
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from helium.schemas.responses import ERROR_RESPONSES
from helium.services.container import ServiceContainer, get_services

router = APIRouter(prefix="/api/movies", tags=["Movies"])


@router.get(
    "",
    summary="List movies",
    description="Returns every movie, or those whose title contains `q` (case-insensitive).",
    responses={500: ERROR_RESPONSES[500]},
)
async def list_movies(
    q: Optional[str] = Query(default=None, description="Substring of the movie title"),
    services: ServiceContainer = Depends(get_services),
) -> List[Dict[str, Any]]:
    return await services.movies.list_movies(q)


@router.get(
    "/{movie_id}",
    summary="Get a movie by movieId",
    responses={404: ERROR_RESPONSES[404], 500: ERROR_RESPONSES[500]},
)
async def get_movie(
    movie_id: str,
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    return await services.movies.get_movie(movie_id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create a movie",
    responses=ERROR_RESPONSES,
)
async def create_movie(
    payload: Any = Body(...),
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    return await services.movies.create_movie(payload)


@router.put(
    "/{movie_id}",
    status_code=status.HTTP_201_CREATED,
    summary="Replace a movie",
    description="Replaces every field of the stored movie; its `id` and partition key are kept.",
    responses=ERROR_RESPONSES,
)
async def replace_movie(
    movie_id: str,
    payload: Any = Body(...),
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    return await services.movies.replace_movie(movie_id, payload)


@router.delete(
    "/{movie_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a movie",
    responses={404: ERROR_RESPONSES[404], 500: ERROR_RESPONSES[500]},
)
async def delete_movie(
    movie_id: str,
    services: ServiceContainer = Depends(get_services),
) -> Response:
    await services.movies.delete_movie(movie_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
