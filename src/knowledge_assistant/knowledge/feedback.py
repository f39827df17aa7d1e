"""User feedback on answers and the resulting confidence updates.

Positive feedback raises the linked entry's confidence by a small step and
negative feedback lowers it by a larger one, so wrong answers are demoted
faster than correct ones are reinforced. Confidence stays within [0.1, 1.0].
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from knowledge_assistant.config import Settings
from knowledge_assistant.db.models import ConversationRecord, KnowledgeEntry
from knowledge_assistant.db.retry import run_with_retry
from knowledge_assistant.exceptions import ConversationNotFoundError

logger = logging.getLogger(__name__)

VALID_FEEDBACK = (-1, 0, 1)


@dataclass
class FeedbackOutcome:
    """What a feedback submission changed."""

    conversation_id: str
    feedback: int
    knowledge_id: str | None = None
    previous_confidence: float | None = None
    new_confidence: float | None = None


def get_confidence_step(feedback: int, settings: Settings) -> float:
    """Get the confidence delta for a feedback value."""
    if feedback > 0:
        return settings.FEEDBACK_POSITIVE_STEP
    if feedback < 0:
        return -settings.FEEDBACK_NEGATIVE_STEP
    return 0.0


class FeedbackUpdater:
    """Applies user feedback to conversations and knowledge confidence."""

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
    ):
        self.settings = settings
        self.session_factory = session_factory

    async def apply_feedback(self, conversation_id: str, feedback: int) -> FeedbackOutcome:
        """Record feedback on a conversation and adjust the linked entry.

        Args:
            conversation_id: Conversation the feedback refers to
            feedback: -1 (wrong), 0 (neutral) or 1 (helpful)

        Raises:
            ValueError: If feedback is not -1, 0 or 1
            ConversationNotFoundError: If the conversation does not exist
        """
        if isinstance(feedback, bool) or feedback not in VALID_FEEDBACK:
            raise ValueError(f"Feedback must be one of {VALID_FEEDBACK}, got {feedback!r}")

        async def _apply() -> FeedbackOutcome:
            async with self.session_factory() as session:
                conversation = await session.get(ConversationRecord, conversation_id)
                if conversation is None:
                    raise ConversationNotFoundError(conversation_id)

                conversation.feedback = feedback
                outcome = FeedbackOutcome(
                    conversation_id=conversation_id,
                    feedback=feedback,
                    knowledge_id=conversation.knowledge_id,
                )

                step = get_confidence_step(feedback, self.settings)
                if conversation.knowledge_id and step:
                    entry = await session.get(KnowledgeEntry, conversation.knowledge_id)
                    if entry is None:
                        logger.warning(
                            f"Knowledge entry {conversation.knowledge_id} for conversation "
                            f"{conversation_id} no longer exists"
                        )
                    else:
                        outcome.previous_confidence = entry.confidence
                        # The model validator clamps into [0.1, 1.0]
                        entry.confidence = entry.confidence + step
                        outcome.new_confidence = entry.confidence

                await session.commit()
                return outcome

        outcome = await run_with_retry(_apply, self.settings, "feedback update")
        logger.info(
            f"Feedback {feedback:+d} on conversation {conversation_id}: "
            f"knowledge={outcome.knowledge_id}, "
            f"confidence {outcome.previous_confidence} -> {outcome.new_confidence}"
        )
        return outcome
