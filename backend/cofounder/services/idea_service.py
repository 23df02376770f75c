"""IdeaService: idea CRUD and the validation pass.

Validation status machine: draft -> validating -> validated, or back to draft
when the gateway call fails. A failed pass leaves any score and reasoning
from an earlier successful pass untouched.
"""

from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofounder.db.models.idea import Idea
from cofounder.domain.extraction import parse_validation
from cofounder.domain.prompts import ContextType, build_idea_validation_prompt
from cofounder.services.chat_service import ChatService

logger = structlog.get_logger(__name__)

STATUS_DRAFT = "draft"
STATUS_VALIDATING = "validating"
STATUS_VALIDATED = "validated"


class IdeaService:
    def __init__(self, chat: ChatService | None = None):
        self.chat = chat

    async def create_idea(self, session: AsyncSession, user_id: str, **fields) -> Idea:
        idea = Idea(user_id=user_id, status=STATUS_DRAFT, **fields)
        session.add(idea)
        await session.commit()
        await session.refresh(idea)
        logger.info("idea_created", user_id=user_id, idea_id=str(idea.id))
        return idea

    async def list_ideas(self, session: AsyncSession, user_id: str) -> list[Idea]:
        result = await session.execute(
            select(Idea).where(Idea.user_id == user_id).order_by(Idea.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_idea(self, session: AsyncSession, user_id: str, idea_id: UUID) -> Idea | None:
        """Load an idea with user isolation (None means 404)."""
        result = await session.execute(select(Idea).where(Idea.id == idea_id, Idea.user_id == user_id))
        return result.scalar_one_or_none()

    async def validate_idea(self, session: AsyncSession, user_id: str, idea_id: UUID) -> Idea | None:
        """Run one validation pass and store the score and reasoning.

        Returns:
            The validated idea, or None if the idea does not exist for this user

        Raises:
            LLMGatewayError / ConfigurationError: propagated after the idea is reset to draft
        """
        idea = await self.get_idea(session, user_id, idea_id)
        if idea is None:
            return None

        idea.status = STATUS_VALIDATING
        await session.commit()

        try:
            text = await self.chat.generate(build_idea_validation_prompt(idea), ContextType.IDEA_VALIDATION)
        except Exception:
            logger.warning("idea_validation_failed", user_id=user_id, idea_id=str(idea_id), exc_info=True)
            idea.status = STATUS_DRAFT
            await session.commit()
            raise

        result = parse_validation(text)
        idea.validation_score = result.score
        idea.validation_reasoning = result.reasoning
        idea.status = STATUS_VALIDATED
        await session.commit()
        await session.refresh(idea)

        logger.info("idea_validated", user_id=user_id, idea_id=str(idea_id), score=result.score)
        return idea
