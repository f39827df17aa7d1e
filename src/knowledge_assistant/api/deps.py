"""FastAPI dependencies wiring components to the application settings."""

from functools import lru_cache

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.config import Settings, settings
from knowledge_assistant.db.database import async_session_maker
from knowledge_assistant.orchestrator import Orchestrator
from knowledge_assistant.providers.gateway import ProviderGateway


def get_settings() -> Settings:
    return settings


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_session_maker


@lru_cache
def _gateway_for(app_settings: Settings) -> ProviderGateway:
    return ProviderGateway.from_settings(app_settings)


def get_gateway(app_settings: Settings = Depends(get_settings)) -> ProviderGateway:
    return _gateway_for(app_settings)


def get_orchestrator(
    app_settings: Settings = Depends(get_settings),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    gateway: ProviderGateway = Depends(get_gateway),
) -> Orchestrator:
    return Orchestrator(app_settings, session_factory, gateway)


def require_admin(
    x_admin_token: str | None = Header(default=None),
    app_settings: Settings = Depends(get_settings),
) -> None:
    """Reject administrative calls without the configured admin token."""
    if not x_admin_token or x_admin_token != app_settings.ADMIN_TOKEN:
        raise HTTPException(status_code=403, detail="Invalid admin token")
