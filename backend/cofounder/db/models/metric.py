"""Metric model: free-text traction datapoints."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text, Uuid

from cofounder.db.base import Base


class Metric(Base):
    __tablename__ = "metrics"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, index=True)
    idea_id = Column(Uuid, nullable=True)

    metric_type = Column(String(20), nullable=False)  # users, revenue, experiment, learning
    value = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)

    recorded_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
