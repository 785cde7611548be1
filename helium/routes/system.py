"""
Helium — System Routes (health check and metrics)
===================================================

What:  GET /healthz checks the document store; GET /metrics exposes telemetry.
Who:   Container orchestrators (liveness/readiness probes) and Prometheus.

Health Check Philosophy:
    The service is healthy only if it can reach the document store, because
    every API call depends on it. The check lists the collections of the
    configured database: cheap, read-only, and it exercises authentication.
"""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from helium.exceptions import HeliumError
from helium.schemas.responses import MessageResponse
from helium.services.container import ServiceContainer, get_services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])

HEALTHY_MESSAGE = "Successfully reached healthcheck endpoint"


@router.get(
    "/healthz",
    response_model=MessageResponse,
    summary="Service health check",
    description="Returns 200 when the document store answers a collection listing, 500 otherwise.",
    responses={500: {"description": "Document store unreachable", "model": MessageResponse}},
)
async def health_check(services: ServiceContainer = Depends(get_services)):
    try:
        await services.store.query_collections()
    except HeliumError as e:
        logger.error("Health check failed: %s", e.message)
        return JSONResponse(
            status_code=500,
            content={
                "message": f"Failed to reach the document store: {e.message}",
                "status": 500,
            },
        )

    return MessageResponse(message=HEALTHY_MESSAGE, status=200)


@router.get("/metrics", summary="Prometheus metrics", include_in_schema=False)
async def metrics(services: ServiceContainer = Depends(get_services)) -> Response:
    body, content_type = services.telemetry.render()
    return Response(content=body, media_type=content_type)
