"""RoadmapService: MVP roadmap generation and step tracking.

One roadmap per idea. Steps are numbered 1..N by their position in the model
output and are toggled individually.
"""

from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cofounder.core.exceptions import RoadmapExistsError
from cofounder.db.models.idea import Idea
from cofounder.db.models.roadmap import Roadmap, RoadmapStep
from cofounder.domain.extraction import parse_roadmap
from cofounder.domain.prompts import ContextType, build_roadmap_prompt
from cofounder.services.chat_service import ChatService

logger = structlog.get_logger(__name__)


def compute_progress(steps: list[RoadmapStep]) -> float:
    """Percentage of completed steps (0.0 for a roadmap without steps)."""
    if not steps:
        return 0.0
    completed = sum(1 for step in steps if step.completed)
    return completed / len(steps) * 100


class RoadmapService:
    def __init__(self, chat: ChatService | None = None):
        self.chat = chat

    async def get_roadmap(self, session: AsyncSession, user_id: str, idea_id: UUID) -> Roadmap | None:
        result = await session.execute(
            select(Roadmap)
            .options(selectinload(Roadmap.steps))
            .where(Roadmap.idea_id == idea_id, Roadmap.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def generate_roadmap(self, session: AsyncSession, user_id: str, idea_id: UUID) -> Roadmap | None:
        """Ask the gateway for a roadmap, parse it and store roadmap + steps.

        Returns:
            The stored roadmap with steps loaded, or None if the idea does not exist for this user

        Raises:
            RoadmapExistsError: the idea already has a roadmap (nothing is stored)
        """
        result = await session.execute(select(Idea).where(Idea.id == idea_id, Idea.user_id == user_id))
        idea = result.scalar_one_or_none()
        if idea is None:
            return None

        text = await self.chat.generate(build_roadmap_prompt(idea), ContextType.MVP_PLANNING)
        draft = parse_roadmap(text)

        roadmap = Roadmap(
            user_id=user_id,
            idea_id=idea.id,
            mvp_scope=draft.mvp_scope,
            tech_stack=draft.tech_stack,
            estimated_build_time=draft.estimated_build_time,
            first_user_path=draft.first_user_path,
        )
        roadmap.steps = [
            RoadmapStep(step_number=step.step_number, title=step.title, description=step.description)
            for step in draft.steps
        ]
        session.add(roadmap)
        try:
            await session.commit()
        except IntegrityError as exc:
            # Concurrent request stored a roadmap for this idea first
            await session.rollback()
            logger.warning("roadmap_already_exists", user_id=user_id, idea_id=str(idea_id))
            raise RoadmapExistsError(str(idea_id)) from exc

        logger.info(
            "roadmap_generated",
            user_id=user_id,
            idea_id=str(idea_id),
            roadmap_id=str(roadmap.id),
            step_count=len(draft.steps),
        )
        return await self.get_roadmap(session, user_id, idea_id)

    async def toggle_step(
        self,
        session: AsyncSession,
        user_id: str,
        step_id: UUID,
        now: datetime | None = None,
    ) -> RoadmapStep | None:
        """Flip a step's completion; completed_at is set on completion and cleared otherwise."""
        result = await session.execute(
            select(RoadmapStep)
            .join(Roadmap, RoadmapStep.roadmap_id == Roadmap.id)
            .where(RoadmapStep.id == step_id, Roadmap.user_id == user_id)
        )
        step = result.scalar_one_or_none()
        if step is None:
            return None

        step.completed = not step.completed
        step.completed_at = (now or datetime.now(timezone.utc)) if step.completed else None
        await session.commit()
        return step
