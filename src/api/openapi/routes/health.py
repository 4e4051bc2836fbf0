"""Health check endpoints."""

import asyncio
from enum import Enum

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from src.api.dependencies import FactoryDep, SettingsDep
from src.commons.infrastructure.assetstore.base import HealthStatus as CheckResult
from src.infrastructure.factory import InfrastructureFactory

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    latency_ms: float | None = Field(default=None, description="Check latency")
    message: str | None = Field(default=None, description="Additional details")


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(description="Overall health status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )


class LivenessResponse(BaseModel):
    """Simple liveness response."""

    status: str = Field(default="ok")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(description="Whether the service is ready to accept requests")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


async def _run_checks(
    factory: InfrastructureFactory,
) -> dict[str, CheckResult]:
    """Run every component health check concurrently."""

    async def _check(name: str) -> CheckResult:
        try:
            if name == "asset_store":
                return await factory.get_asset_store().health_check()
            return await factory.get_document_db().health_check()
        except Exception as e:
            return CheckResult(healthy=False, latency_ms=0.0, message=str(e))

    names = ["asset_store", "document_db"]
    results = await asyncio.gather(*(_check(name) for name in names))
    return dict(zip(names, results, strict=True))


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Get overall health status of the service and its components.",
)
async def health_check(
    settings: SettingsDep,
    factory: FactoryDep,
) -> HealthResponse:
    """Check health of all service components."""
    providers = {
        "asset_store": settings.asset_store.provider,
        "document_db": settings.document_db.provider,
    }
    components = [
        ComponentHealth(
            name=name,
            status=HealthStatus.HEALTHY if result.healthy else HealthStatus.UNHEALTHY,
            latency_ms=round(result.latency_ms, 2),
            message=f"Provider: {providers[name]}"
            if result.healthy
            else result.message,
        )
        for name, result in (await _run_checks(factory)).items()
    ]

    unhealthy_count = sum(1 for c in components if c.status == HealthStatus.UNHEALTHY)
    if unhealthy_count == 0:
        overall_status = HealthStatus.HEALTHY
    elif unhealthy_count < len(components):
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.UNHEALTHY

    return HealthResponse(
        status=overall_status,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness check",
    description="Simple liveness check for Kubernetes.",
)
async def liveness() -> LivenessResponse:
    """Simple liveness check - just verifies the app is running."""
    return LivenessResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Readiness check for Kubernetes. Returns 503 when not ready.",
)
async def readiness(
    factory: FactoryDep,
    response: Response,
) -> ReadinessResponse:
    """Check if service is ready to accept requests.

    Both stores are needed to serve uploads, so both must answer.
    """
    checks = {name: result.healthy for name, result in (await _run_checks(factory)).items()}
    ready = all(checks.values())
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(ready=ready, checks=checks)
