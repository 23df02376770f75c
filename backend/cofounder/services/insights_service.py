"""InsightsService: proactive, time-sensitive suggestions from the founder's state.

Uses a non-streamed completion. Output the model did not format as a JSON
array of insights degrades to an empty list.
"""

from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cofounder.db.models.idea import Idea
from cofounder.db.models.metric import Metric
from cofounder.db.models.profile import Profile
from cofounder.db.models.roadmap import Roadmap
from cofounder.db.models.weekly_review import WeeklyReview
from cofounder.domain.extraction import parse_insights
from cofounder.domain.prompts import build_insights_system_prompt, build_insights_user_prompt
from cofounder.services.llm_gateway import LLMGatewayClient

logger = structlog.get_logger(__name__)

MAX_IDEAS = 5
MAX_ROADMAPS = 3
MAX_METRICS = 10
MAX_REVIEWS = 2


def _idea_state(idea: Idea) -> dict[str, Any]:
    return {
        "id": str(idea.id),
        "title": idea.title,
        "status": idea.status,
        "validation_score": idea.validation_score,
        "created_at": idea.created_at,
        "updated_at": idea.updated_at,
    }


def _roadmap_state(roadmap: Roadmap) -> dict[str, Any]:
    return {
        "idea_id": str(roadmap.idea_id),
        "mvp_scope": roadmap.mvp_scope,
        "estimated_build_time": roadmap.estimated_build_time,
        "created_at": roadmap.created_at,
        "roadmap_steps": [
            {
                "step_number": step.step_number,
                "title": step.title,
                "completed": step.completed,
                "completed_at": step.completed_at,
            }
            for step in roadmap.steps
        ],
    }


class InsightsService:
    def __init__(self, gateway: LLMGatewayClient):
        self.gateway = gateway

    async def collect_state(self, session: AsyncSession, user_id: str) -> tuple[dict[str, Any], str | None]:
        """Snapshot sent to the model, plus the founder's country (if known)."""
        result = await session.execute(select(Profile).where(Profile.user_id == user_id))
        profile = result.scalar_one_or_none()

        result = await session.execute(
            select(Idea).where(Idea.user_id == user_id).order_by(Idea.created_at.desc()).limit(MAX_IDEAS)
        )
        ideas = result.scalars().all()

        result = await session.execute(
            select(Roadmap)
            .options(selectinload(Roadmap.steps))
            .where(Roadmap.user_id == user_id)
            .order_by(Roadmap.created_at.desc())
            .limit(MAX_ROADMAPS)
        )
        roadmaps = result.scalars().all()

        result = await session.execute(
            select(Metric).where(Metric.user_id == user_id).order_by(Metric.recorded_at.desc()).limit(MAX_METRICS)
        )
        metrics = result.scalars().all()

        result = await session.execute(
            select(WeeklyReview)
            .where(WeeklyReview.user_id == user_id)
            .order_by(WeeklyReview.created_at.desc())
            .limit(MAX_REVIEWS)
        )
        reviews = result.scalars().all()

        state = {
            "profile": profile.to_context() if profile is not None else None,
            "ideas": [_idea_state(idea) for idea in ideas],
            "roadmaps": [_roadmap_state(roadmap) for roadmap in roadmaps],
            "metrics": [
                {"metric_type": m.metric_type, "value": m.value, "notes": m.notes, "recorded_at": m.recorded_at}
                for m in metrics
            ],
            "reviews": [
                {
                    "week_start": review.week_start,
                    "week_end": review.week_end,
                    "next_priorities": review.next_priorities,
                    "hard_truth": review.hard_truth,
                }
                for review in reviews
            ],
        }
        return state, profile.country if profile is not None else None

    async def generate_insights(
        self,
        session: AsyncSession,
        user_id: str,
        now: datetime | None = None,
    ) -> list[dict[str, Any]]:
        now = now or datetime.now(timezone.utc)
        state, country = await self.collect_state(session, user_id)

        content = await self.gateway.complete(
            build_insights_system_prompt(now.date(), country),
            [{"role": "user", "content": build_insights_user_prompt(state)}],
        )
        insights = parse_insights(content)
        logger.info("insights_generated", user_id=user_id, count=len(insights))
        return insights
