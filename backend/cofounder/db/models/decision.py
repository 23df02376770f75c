"""Decision model: founder decision log."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String, Text, Uuid

from cofounder.db.base import Base


class Decision(Base):
    __tablename__ = "decisions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, index=True)
    idea_id = Column(Uuid, nullable=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    options_considered = Column(JSON, nullable=False, default=list)
    chosen_option = Column(String(500), nullable=False)  # expected to be one of options_considered (not enforced)
    confidence_level = Column(String(20), nullable=True)  # low, medium, high
    reasoning = Column(Text, nullable=True)
    expected_outcome = Column(Text, nullable=True)
    actual_outcome = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
