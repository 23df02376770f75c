"""Weekly review and proactive insight Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class WeeklyReviewResponse(BaseModel):
    id: UUID
    week_start: date
    week_end: date
    what_worked: str | None
    what_didnt_work: str | None
    key_learnings: str | None
    next_priorities: str | None
    hard_truth: str | None
    generated_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class Insight(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str
    priority: str
    title: str
    description: str
    action: str
    due_info: str | None = Field(default=None, alias="dueInfo")


class InsightsResponse(BaseModel):
    insights: list[Insight]
