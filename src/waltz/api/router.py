"""Master API router mounted at /api/v1."""

from fastapi import APIRouter
from waltz.api.routes import (
    attestation_instances,
    attestation_runs,
    change_log,
    entities,
    health,
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(entities.router)
api_router.include_router(attestation_runs.router)
api_router.include_router(attestation_instances.router)
api_router.include_router(change_log.router)
