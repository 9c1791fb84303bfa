"""Health check endpoint for monitoring and load balancers."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from streamchat import __version__
from streamchat.api.dependencies import ServiceContainer, get_container
from streamchat.observability.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckComponent(BaseModel):
    """Health status of a single component.

    Attributes:
        status: Component status (healthy, unhealthy)
        message: Optional status message or error details
    """

    status: str
    message: str | None = None


class HealthCheckResponse(BaseModel):
    """Overall health check response."""

    status: str
    components: dict[str, HealthCheckComponent]
    version: str = __version__


async def check_storage_health(container: ServiceContainer) -> HealthCheckComponent:
    if container.database is None:
        return HealthCheckComponent(status="healthy", message="In-memory blob store")

    try:
        await container.database.health_check()
    except Exception as e:
        logger.error("storage_health_check_failed", error=str(e))
        return HealthCheckComponent(status="unhealthy", message=f"Database error: {e}")

    return HealthCheckComponent(status="healthy", message="Database connection successful")


def check_provider_health(container: ServiceContainer) -> HealthCheckComponent:
    if not container.settings.llm.is_configured:
        return HealthCheckComponent(status="unhealthy", message="Missing OPENAI_API_KEY")
    return HealthCheckComponent(status="healthy", message="Credentials present")


@router.get("/health", response_model=HealthCheckResponse)
async def health(container: ServiceContainer = Depends(get_container)) -> JSONResponse:
    """Report storage connectivity and provider configuration.

    Returns 200 when every component is healthy and 503 otherwise.
    """
    components = {
        "storage": await check_storage_health(container),
        "provider": check_provider_health(container),
    }
    healthy = all(c.status == "healthy" for c in components.values())
    body = HealthCheckResponse(
        status="healthy" if healthy else "unhealthy", components=components
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )
