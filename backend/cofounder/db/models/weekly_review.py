"""WeeklyReview model: five optional sections from one LLM response."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, String, Text, Uuid

from cofounder.db.base import Base


class WeeklyReview(Base):
    __tablename__ = "weekly_reviews"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, index=True)

    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)

    # NULL means "not generated", never an empty string
    what_worked = Column(Text, nullable=True)
    what_didnt_work = Column(Text, nullable=True)
    key_learnings = Column(Text, nullable=True)
    next_priorities = Column(Text, nullable=True)
    hard_truth = Column(Text, nullable=True)

    generated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
