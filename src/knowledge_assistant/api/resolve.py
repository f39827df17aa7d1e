"""Query resolution, feedback and history endpoints."""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.api.deps import get_orchestrator, get_session_factory, get_settings
from knowledge_assistant.api.schemas import (
    ClearHistoryResponse,
    ConversationItem,
    FeedbackRequest,
    FeedbackResponse,
    HistoryResponse,
    ResolveRequest,
    ResolveResponse,
)
from knowledge_assistant.config import Settings
from knowledge_assistant.exceptions import ConversationNotFoundError, StoreUnavailableError
from knowledge_assistant.knowledge.feedback import FeedbackUpdater
from knowledge_assistant.knowledge.history import ConversationLog
from knowledge_assistant.orchestrator import KnowledgeHit, Orchestrator, ProviderHit, Resolution

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["assistant"])


def _to_response(result: Resolution, took_ms: int) -> ResolveResponse:
    return ResolveResponse(
        response=result.response,
        kind=result.kind,
        source=result.source,
        confidence=result.confidence,
        knowledge_id=result.knowledge_id,
        conversation_id=result.conversation_id,
        awaiting_confirmation=result.awaiting_confirmation,
        similarity=result.similarity if isinstance(result, KnowledgeHit) else None,
        possibly_stale=result.possibly_stale if isinstance(result, KnowledgeHit) else False,
        attribution=result.attribution if isinstance(result, ProviderHit) else None,
        took_ms=took_ms,
    )


@router.post("/resolve", response_model=ResolveResponse)
async def resolve(
    request: ResolveRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> ResolveResponse:
    """Answer a query or learn from a teach command.

    Invalid input is answered with a rejection message, not an HTTP error.
    """
    start = time.time()
    result = await orchestrator.resolve(request.query, user_id=request.user_id)
    took_ms = int((time.time() - start) * 1000)
    logger.info(f"Resolved query via {result.kind} ({result.source}) in {took_ms}ms")
    return _to_response(result, took_ms)


@router.post("/feedback", response_model=FeedbackResponse)
async def feedback(
    request: FeedbackRequest,
    app_settings: Settings = Depends(get_settings),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> FeedbackResponse:
    """Record feedback on an answer and adjust the confidence of its knowledge."""
    updater = FeedbackUpdater(app_settings, session_factory)
    try:
        outcome = await updater.apply_feedback(request.conversation_id, request.feedback)
    except ConversationNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        logger.error(f"Feedback failed: {e}")
        raise HTTPException(status_code=503, detail="Knowledge store unavailable")

    return FeedbackResponse(
        conversation_id=outcome.conversation_id,
        feedback=outcome.feedback,
        knowledge_id=outcome.knowledge_id,
        previous_confidence=outcome.previous_confidence,
        new_confidence=outcome.new_confidence,
    )


@router.get("/history/{user_id}", response_model=HistoryResponse)
async def history(
    user_id: str,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    app_settings: Settings = Depends(get_settings),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> HistoryResponse:
    """List a user's conversations, newest first."""
    records = await ConversationLog(app_settings, session_factory).get_user_history(
        user_id, limit=limit, offset=offset
    )
    return HistoryResponse(
        user_id=user_id,
        conversations=[
            ConversationItem(
                id=r.id,
                query=r.query,
                response=r.response,
                source=r.source,
                confidence=r.confidence,
                feedback=r.feedback,
                knowledge_id=r.knowledge_id,
                created_at=r.created_at,
            )
            for r in records
        ],
    )


@router.delete("/history/{user_id}", response_model=ClearHistoryResponse)
async def clear_history(
    user_id: str,
    app_settings: Settings = Depends(get_settings),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ClearHistoryResponse:
    """Delete all conversations of a user."""
    deleted = await ConversationLog(app_settings, session_factory).clear_user_history(user_id)
    return ClearHistoryResponse(user_id=user_id, deleted=deleted)
