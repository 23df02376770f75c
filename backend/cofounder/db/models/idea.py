"""Idea model: startup ideas and their validation result."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Integer, String, Text, Uuid

from cofounder.db.base import Base


class Idea(Base):
    __tablename__ = "ideas"
    __table_args__ = (
        CheckConstraint(
            "validation_score IS NULL OR (validation_score >= 0 AND validation_score <= 100)",
            name="ck_ideas_validation_score_range",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    problem_statement = Column(Text, nullable=True)
    target_user = Column(Text, nullable=True)
    market_pain = Column(Text, nullable=True)
    niche_focus = Column(Text, nullable=True)
    risks = Column(JSON, nullable=False, default=list)
    assumptions = Column(JSON, nullable=False, default=list)

    validation_score = Column(Integer, nullable=True)
    validation_reasoning = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="draft")  # draft, validating, validated

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
