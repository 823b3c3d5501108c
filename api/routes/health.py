"""
Health Check Routes
===================

Kubernetes-compatible health and readiness endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from api import __version__
from api.schemas import HealthResponse, HealthStatus, ReadinessResponse
from nl_to_es.llm.providers import list_providers

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the service",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint for load balancers and monitoring.

    Reports whether the agent is initialized and its settings store answers.
    """
    agent = getattr(request.app.state, "agent", None)
    checks = {"api": True, "agent": agent is not None, "settings_store": False}

    if agent is not None:
        try:
            await agent.settings.get_debug()
            checks["settings_store"] = True
        except OSError:
            checks["settings_store"] = False

    status = HealthStatus.HEALTHY if all(checks.values()) else HealthStatus.DEGRADED

    return HealthResponse(
        status=status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Returns whether the service is ready to handle requests",
)
async def readiness_check(request: Request) -> ReadinessResponse:
    """
    Readiness check for Kubernetes.

    The configured provider must be one the service can talk to.
    """
    agent = getattr(request.app.state, "agent", None)
    checks = {
        "agent_loaded": agent is not None,
        "provider_supported": agent is not None
        and agent.default_config.provider in list_providers(),
    }

    return ReadinessResponse(
        ready=all(checks.values()),
        checks=checks,
    )


@router.get(
    "/live",
    summary="Liveness check",
    description="Simple liveness probe",
)
async def liveness_check() -> dict:
    """Simple endpoint to verify the process is running."""
    return {"status": "ok"}
