"""
Health check router for liveness and readiness checks.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status

from dbproxy.database.registry import DataAccessLayer
from dbproxy.dependencies.data_access import get_data_access

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if the API is running.
    """
    return {"status": "healthy"}


@router.get(
    "/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness check with dependencies",
)
async def readiness_check(
    data_access: Annotated[DataAccessLayer, Depends(get_data_access)],
):
    """
    Readiness check that pings every open database connection.
    """
    databases = await data_access.connections.ping_all()
    all_healthy = all(v == "healthy" for v in databases.values())

    return {
        "status": "healthy" if all_healthy else "degraded",
        "checks": {
            "api": "healthy",
            "databases": databases,
        },
    }
