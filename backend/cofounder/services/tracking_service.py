"""Decision log and metric tracking (the records the context assembler reads)."""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cofounder.db.models.decision import Decision
from cofounder.db.models.metric import Metric

logger = structlog.get_logger(__name__)


class DecisionService:
    async def create_decision(self, session: AsyncSession, user_id: str, **fields) -> Decision:
        decision = Decision(user_id=user_id, **fields)
        session.add(decision)
        await session.commit()
        await session.refresh(decision)
        logger.info("decision_logged", user_id=user_id, decision_id=str(decision.id))
        return decision

    async def list_decisions(self, session: AsyncSession, user_id: str) -> list[Decision]:
        result = await session.execute(
            select(Decision).where(Decision.user_id == user_id).order_by(Decision.created_at.desc())
        )
        return list(result.scalars().all())


class MetricService:
    async def record_metric(self, session: AsyncSession, user_id: str, **fields) -> Metric:
        if fields.get("recorded_at") is None:
            fields.pop("recorded_at", None)
        metric = Metric(user_id=user_id, **fields)
        session.add(metric)
        await session.commit()
        await session.refresh(metric)
        logger.info("metric_recorded", user_id=user_id, metric_type=metric.metric_type)
        return metric

    async def list_metrics(self, session: AsyncSession, user_id: str) -> list[Metric]:
        result = await session.execute(
            select(Metric).where(Metric.user_id == user_id).order_by(Metric.recorded_at.desc())
        )
        return list(result.scalars().all())
