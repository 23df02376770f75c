"""ReviewService: weekly co-founder reviews.

A review covers the previous calendar week (Sunday through Saturday, UTC) and
is built from that week's decisions, metrics and chat messages.
"""

from datetime import date, datetime, time, timedelta, timezone

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofounder.db.models.chat_message import ChatMessage
from cofounder.db.models.decision import Decision
from cofounder.db.models.metric import Metric
from cofounder.db.models.weekly_review import WeeklyReview
from cofounder.domain.extraction import parse_weekly_review
from cofounder.domain.prompts import ContextType, build_weekly_review_prompt
from cofounder.services.chat_service import ChatService

logger = structlog.get_logger(__name__)

MAX_DISCUSSION_MESSAGES = 20


def previous_week(today: date) -> tuple[date, date]:
    """(Sunday, Saturday) of the week before the one containing ``today``."""
    days_since_sunday = (today.weekday() + 1) % 7
    week_start = today - timedelta(days=days_since_sunday + 7)
    return week_start, week_start + timedelta(days=6)


def week_bounds(week_start: date, week_end: date) -> tuple[datetime, datetime]:
    """Inclusive UTC datetime window from the start of week_start to the end of week_end."""
    return (
        datetime.combine(week_start, time.min, tzinfo=timezone.utc),
        datetime.combine(week_end, time.max, tzinfo=timezone.utc),
    )


class ReviewService:
    def __init__(self, chat: ChatService | None = None):
        self.chat = chat

    async def list_reviews(self, session: AsyncSession, user_id: str) -> list[WeeklyReview]:
        result = await session.execute(
            select(WeeklyReview)
            .where(WeeklyReview.user_id == user_id)
            .order_by(WeeklyReview.week_start.desc(), WeeklyReview.created_at.desc())
        )
        return list(result.scalars().all())

    async def generate_review(
        self,
        session: AsyncSession,
        user_id: str,
        now: datetime | None = None,
    ) -> WeeklyReview:
        now = now or datetime.now(timezone.utc)
        week_start, week_end = previous_week(now.date())
        start, end = week_bounds(week_start, week_end)

        result = await session.execute(
            select(Decision).where(
                Decision.user_id == user_id,
                Decision.created_at >= start,
                Decision.created_at <= end,
            )
        )
        decisions = [
            {
                "title": decision.title,
                "chosen_option": decision.chosen_option,
                "confidence_level": decision.confidence_level,
                "reasoning": decision.reasoning,
                "expected_outcome": decision.expected_outcome,
            }
            for decision in result.scalars().all()
        ]

        result = await session.execute(
            select(Metric).where(
                Metric.user_id == user_id,
                Metric.recorded_at >= start,
                Metric.recorded_at <= end,
            )
        )
        metrics = [
            {
                "metric_type": metric.metric_type,
                "value": metric.value,
                "notes": metric.notes,
                "recorded_at": metric.recorded_at,
            }
            for metric in result.scalars().all()
        ]

        result = await session.execute(
            select(ChatMessage)
            .where(
                ChatMessage.user_id == user_id,
                ChatMessage.created_at >= start,
                ChatMessage.created_at <= end,
            )
            .order_by(ChatMessage.created_at.asc())
            .limit(MAX_DISCUSSION_MESSAGES)
        )
        discussions = [message.content for message in result.scalars().all()]

        prompt = build_weekly_review_prompt(week_start, week_end, decisions, metrics, discussions)
        text = await self.chat.generate(prompt, ContextType.REVIEW)
        draft = parse_weekly_review(text)
        if draft.is_empty():
            logger.warning("weekly_review_no_sections", user_id=user_id, response_chars=len(text))

        review = WeeklyReview(
            user_id=user_id,
            week_start=week_start,
            week_end=week_end,
            what_worked=draft.what_worked,
            what_didnt_work=draft.what_didnt_work,
            key_learnings=draft.key_learnings,
            next_priorities=draft.next_priorities,
            hard_truth=draft.hard_truth,
            generated_at=now,
        )
        session.add(review)
        await session.commit()
        await session.refresh(review)

        logger.info("weekly_review_generated", user_id=user_id, week_start=week_start.isoformat())
        return review
