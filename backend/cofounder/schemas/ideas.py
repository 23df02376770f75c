"""Idea and roadmap Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class IdeaCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    problem_statement: str | None = None
    target_user: str | None = None
    market_pain: str | None = None
    niche_focus: str | None = None
    risks: list[str] = Field(default_factory=list)
    assumptions: list[str] = Field(default_factory=list)


class IdeaResponse(BaseModel):
    id: UUID
    title: str
    problem_statement: str | None
    target_user: str | None
    market_pain: str | None
    niche_focus: str | None
    risks: list[str]
    assumptions: list[str]
    validation_score: int | None
    validation_reasoning: str | None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GenerateRoadmapRequest(BaseModel):
    idea_id: UUID


class RoadmapStepResponse(BaseModel):
    id: UUID
    step_number: int
    title: str
    description: str | None
    completed: bool
    completed_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class RoadmapResponse(BaseModel):
    id: UUID
    idea_id: UUID
    mvp_scope: str | None
    tech_stack: list[str]
    estimated_build_time: str | None
    first_user_path: str | None
    steps: list[RoadmapStepResponse]
    progress: float  # percent of completed steps
    created_at: datetime
