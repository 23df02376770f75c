"""Decision log and metric Pydantic schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DecisionCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    options_considered: list[str] = Field(default_factory=list)
    chosen_option: str = Field(min_length=1)
    confidence_level: Literal["low", "medium", "high"] | None = None
    reasoning: str | None = None
    expected_outcome: str | None = None
    idea_id: UUID | None = None


class DecisionResponse(BaseModel):
    id: UUID
    title: str
    description: str
    options_considered: list[str]
    chosen_option: str
    confidence_level: str | None
    reasoning: str | None
    expected_outcome: str | None
    actual_outcome: str | None
    idea_id: UUID | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MetricCreateRequest(BaseModel):
    metric_type: Literal["users", "revenue", "experiment", "learning"]
    value: str = Field(min_length=1)
    notes: str | None = None
    idea_id: UUID | None = None
    recorded_at: datetime | None = None


class MetricResponse(BaseModel):
    id: UUID
    metric_type: str
    value: str
    notes: str | None
    idea_id: UUID | None
    recorded_at: datetime

    model_config = ConfigDict(from_attributes=True)
