"""
Health and readiness check utilities.
"""

from enum import Enum
from typing import Dict, List, Optional, Callable, Any
from datetime import datetime
from fastapi import FastAPI, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest
from pydantic import BaseModel, Field
from src.coinboard.logging import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""
    name: str
    status: HealthStatus
    message: Optional[str] = None
    last_check: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ServiceHealth(BaseModel):
    """Overall service health status."""
    service: str
    status: HealthStatus
    timestamp: datetime
    components: List[ComponentHealth]
    version: str = "1.0.0"


class HealthChecker:
    """Manages health checks for a service."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.checks: Dict[str, Callable[[], ComponentHealth]] = {}
        self.last_results: Dict[str, ComponentHealth] = {}

    def register_check(self, name: str, check_func: Callable[[], ComponentHealth]):
        """Register a health check function."""
        self.checks[name] = check_func
        logger.info(f"Registered health check: {name}")

    def check_health(self) -> ServiceHealth:
        """Run all health checks and return overall status."""
        components = []
        overall_status = HealthStatus.HEALTHY

        for name, check_func in self.checks.items():
            try:
                result = check_func()
                result.last_check = datetime.utcnow()
                self.last_results[name] = result
                components.append(result)

                if result.status == HealthStatus.UNHEALTHY:
                    overall_status = HealthStatus.UNHEALTHY
                elif result.status == HealthStatus.DEGRADED and overall_status == HealthStatus.HEALTHY:
                    overall_status = HealthStatus.DEGRADED

            except Exception as e:
                logger.error(f"Health check failed for {name}: {e}")
                error_result = ComponentHealth(
                    name=name,
                    status=HealthStatus.UNHEALTHY,
                    message=f"Check failed: {str(e)}",
                    last_check=datetime.utcnow()
                )
                components.append(error_result)
                overall_status = HealthStatus.UNHEALTHY

        return ServiceHealth(
            service=self.service_name,
            status=overall_status,
            timestamp=datetime.utcnow(),
            components=components
        )

    def is_ready(self) -> bool:
        """Check if service is ready to handle requests."""
        health = self.check_health()
        return health.status != HealthStatus.UNHEALTHY


def create_health_endpoints(app: FastAPI, health_checker: HealthChecker):
    """Add health, readiness and metrics endpoints to FastAPI app."""

    @app.get("/healthz")
    async def health_check() -> ServiceHealth:
        """Health check endpoint."""
        return health_checker.check_health()

    @app.get("/ready")
    async def readiness_check(response: Response):
        """Readiness check endpoint."""
        if health_checker.is_ready():
            return {"status": "ready"}
        else:
            response.status_code = 503
            return {"status": "not ready"}

    @app.get("/metrics", response_class=PlainTextResponse)
    async def metrics():
        """Prometheus metrics endpoint."""
        return generate_latest()


# Common health check functions

def price_stream_check(stream) -> ComponentHealth:
    """Stream is degraded, not unhealthy, when down: REST polling still works."""
    metadata = {
        "reconnect_attempts": stream.reconnect_attempts,
        "messages_received": stream.messages_received,
    }
    if stream.is_connected:
        return ComponentHealth(
            name="price_stream",
            status=HealthStatus.HEALTHY,
            message="Connected",
            metadata=metadata,
        )
    if stream.is_running:
        message = "Reconnecting"
    else:
        message = "Not running"
    return ComponentHealth(
        name="price_stream",
        status=HealthStatus.DEGRADED,
        message=message,
        metadata=metadata,
    )


def price_freshness_check(table, stale_after: float) -> ComponentHealth:
    """Price table must have been written within ``stale_after`` seconds."""
    age = table.seconds_since_update()
    if age is None:
        return ComponentHealth(
            name="price_table",
            status=HealthStatus.DEGRADED,
            message="No prices yet",
        )
    status = HealthStatus.HEALTHY if age <= stale_after else HealthStatus.DEGRADED
    return ComponentHealth(
        name="price_table",
        status=status,
        message=f"Last update {age:.0f}s ago",
        metadata={"symbols": len(table), "age_seconds": age},
    )
