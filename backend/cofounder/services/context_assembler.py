"""ContextAssembler: bounded snapshot of a founder's stored state for the LLM.

The caps below are hard limits; callers cannot widen them.
"""

import json

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofounder.db.models.chat_message import ChatMessage
from cofounder.db.models.decision import Decision
from cofounder.db.models.idea import Idea
from cofounder.db.models.metric import Metric
from cofounder.db.models.profile import Profile

logger = structlog.get_logger(__name__)

MAX_IDEAS = 5
MAX_DECISIONS = 5
MAX_METRICS = 10
MAX_CHAT_MESSAGES = 20


class ContextAssembler:
    """Builds the userContext / conversationContext strings.

    Missing rows degrade to empty defaults ({} / [] / ""); the assembler never
    fails the caller because data is absent.
    """

    async def build_user_context(self, session: AsyncSession, user_id: str) -> str:
        """JSON with profile, recentIdeas, recentDecisions and recentMetrics."""
        result = await session.execute(select(Profile).where(Profile.user_id == user_id))
        profile = result.scalar_one_or_none()

        result = await session.execute(
            select(Idea).where(Idea.user_id == user_id).order_by(Idea.created_at.desc()).limit(MAX_IDEAS)
        )
        ideas = result.scalars().all()

        result = await session.execute(
            select(Decision)
            .where(Decision.user_id == user_id)
            .order_by(Decision.created_at.desc())
            .limit(MAX_DECISIONS)
        )
        decisions = result.scalars().all()

        result = await session.execute(
            select(Metric)
            .where(Metric.user_id == user_id)
            .order_by(Metric.recorded_at.desc())
            .limit(MAX_METRICS)
        )
        metrics = result.scalars().all()

        context = {
            "profile": profile.to_context() if profile is not None else {},
            "recentIdeas": [
                {"title": idea.title, "status": idea.status, "validation_score": idea.validation_score}
                for idea in ideas
            ],
            "recentDecisions": [
                {
                    "title": decision.title,
                    "chosen_option": decision.chosen_option,
                    "confidence_level": decision.confidence_level,
                }
                for decision in decisions
            ],
            "recentMetrics": [
                {
                    "metric_type": metric.metric_type,
                    "value": metric.value,
                    "recorded_at": metric.recorded_at.isoformat() if metric.recorded_at else None,
                }
                for metric in metrics
            ],
        }
        return json.dumps(context)

    async def build_conversation_context(self, session: AsyncSession, user_id: str) -> str:
        """Most recent chat messages as ``role: content`` lines, oldest first."""
        result = await session.execute(
            select(ChatMessage)
            .where(ChatMessage.user_id == user_id)
            .order_by(ChatMessage.created_at.desc())
            .limit(MAX_CHAT_MESSAGES)
        )
        newest_first = result.scalars().all()
        return "\n".join(f"{message.role}: {message.content}" for message in reversed(newest_first))

    async def build(self, session: AsyncSession, user_id: str) -> tuple[str, str]:
        """Return ``(user_context, conversation_context)``."""
        user_context = await self.build_user_context(session, user_id)
        conversation_context = await self.build_conversation_context(session, user_id)
        logger.debug(
            "context_assembled",
            user_id=user_id,
            user_context_chars=len(user_context),
            conversation_context_chars=len(conversation_context),
        )
        return user_context, conversation_context
