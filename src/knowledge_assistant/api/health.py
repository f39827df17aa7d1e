"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.api.deps import get_gateway, get_session_factory
from knowledge_assistant.providers.gateway import ProviderGateway

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Basic health check - returns ok if the service is running."""
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    gateway: ProviderGateway = Depends(get_gateway),
) -> dict[str, Any]:
    """
    Readiness check - verifies the knowledge store and lists providers.

    Checks:
    - Database: knowledge store connection
    - Search: configured web search providers
    - AI: configured generative providers (optional)
    """
    services: dict[str, str] = {}
    all_ok = True

    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        services["database"] = "ok"
    except SQLAlchemyError as e:
        services["database"] = f"error: {type(e).__name__}"
        all_ok = False

    if gateway.search_enabled:
        names = ", ".join(p.provider_name for p in gateway.search_providers)
        services["search"] = f"ok ({names})"
    else:
        services["search"] = "disabled"

    # AI is optional, never fails readiness
    available = [p.provider_name for p in gateway.generative_providers if await p.is_available()]
    if not gateway.ai_enabled:
        services["ai"] = "disabled"
    elif available:
        services["ai"] = f"ok ({', '.join(available)})"
    else:
        services["ai"] = "warning: no provider configured"

    status = "ready" if all_ok else "degraded"
    return {"status": status, "services": services}
