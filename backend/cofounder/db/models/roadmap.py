"""Roadmap and RoadmapStep models: MVP plan for one idea."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from cofounder.db.base import Base


class Roadmap(Base):
    __tablename__ = "roadmaps"
    __table_args__ = (UniqueConstraint("idea_id", name="uq_roadmaps_idea_id"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, index=True)
    idea_id = Column(Uuid, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True)

    mvp_scope = Column(Text, nullable=True)
    tech_stack = Column(JSON, nullable=False, default=list)
    estimated_build_time = Column(String(255), nullable=True)
    first_user_path = Column(Text, nullable=True)

    steps = relationship(
        "RoadmapStep",
        back_populates="roadmap",
        order_by="RoadmapStep.step_number",
        cascade="all, delete-orphan",
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class RoadmapStep(Base):
    __tablename__ = "roadmap_steps"
    __table_args__ = (UniqueConstraint("roadmap_id", "step_number", name="uq_roadmap_steps_number"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    roadmap_id = Column(Uuid, ForeignKey("roadmaps.id", ondelete="CASCADE"), nullable=False, index=True)
    roadmap = relationship("Roadmap", back_populates="steps")

    step_number = Column(Integer, nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
