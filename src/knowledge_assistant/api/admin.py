"""Administrative endpoints: re-verification, cache sweep and knowledge purge."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.api.deps import get_gateway, get_session_factory, get_settings, require_admin
from knowledge_assistant.api.schemas import CacheSweepResponse, PurgeResponse, ReverifyResponse
from knowledge_assistant.cache.response_cache import ResponseCache
from knowledge_assistant.config import Settings
from knowledge_assistant.exceptions import StoreUnavailableError
from knowledge_assistant.knowledge.reverification import KnowledgeReverifier
from knowledge_assistant.knowledge.store import purge_knowledge
from knowledge_assistant.providers.gateway import ProviderGateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/reverify", response_model=ReverifyResponse)
async def reverify(
    limit: int | None = Query(default=None, ge=1, le=500),
    app_settings: Settings = Depends(get_settings),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    gateway: ProviderGateway = Depends(get_gateway),
) -> ReverifyResponse:
    """Re-check possibly outdated knowledge against the generative providers."""
    reverifier = KnowledgeReverifier(app_settings, session_factory, gateway)
    try:
        report = await reverifier.reverify_knowledge(limit=limit)
    except StoreUnavailableError as e:
        logger.error(f"Re-verification failed: {e}")
        raise HTTPException(status_code=503, detail="Knowledge store unavailable")
    return ReverifyResponse(
        checked=report.checked,
        updated=report.updated,
        unchanged=report.unchanged,
        no_answer=report.no_answer,
        failed=report.failed,
        updated_ids=report.updated_ids,
    )


@router.post("/cache/sweep", response_model=CacheSweepResponse)
async def sweep_cache(
    app_settings: Settings = Depends(get_settings),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CacheSweepResponse:
    """Delete cache entries older than the retention window."""
    try:
        deleted = await ResponseCache(app_settings, session_factory).sweep()
    except StoreUnavailableError as e:
        logger.error(f"Cache sweep failed: {e}")
        raise HTTPException(status_code=503, detail="Knowledge store unavailable")
    return CacheSweepResponse(deleted=deleted)


@router.post("/knowledge/purge", response_model=PurgeResponse)
async def purge(
    app_settings: Settings = Depends(get_settings),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> PurgeResponse:
    """Delete all learned knowledge, keeping system entries."""
    try:
        deleted = await purge_knowledge(app_settings, session_factory)
    except StoreUnavailableError as e:
        logger.error(f"Knowledge purge failed: {e}")
        raise HTTPException(status_code=503, detail="Knowledge store unavailable")
    return PurgeResponse(deleted=deleted)
