"""Tests for proactive insights."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from cofounder.db.models.idea import Idea
from cofounder.db.models.profile import Profile
from cofounder.services.insights_service import InsightsService
from cofounder.services.llm_gateway import LLMGatewayClient

pytestmark = pytest.mark.integration

USER_ID = "user-insights"
NOW = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)

INSIGHTS = [
    {
        "type": "compliance",
        "priority": "high",
        "title": "GSTR-3B due",
        "description": "Monthly GST return is due on the 20th.",
        "action": "File GSTR-3B",
        "dueInfo": "In 10 days",
    }
]


def completion_gateway(content: str):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    handler.requests = requests
    return handler


async def test_generates_insights_from_state(db_session):
    db_session.add(Profile(user_id=USER_ID, country="India"))
    db_session.add(Idea(user_id=USER_ID, title="Invoice chaser", status="draft"))
    await db_session.commit()
    handler = completion_gateway("```json\n" + json.dumps(INSIGHTS) + "\n```")
    service = InsightsService(LLMGatewayClient(transport=httpx.MockTransport(handler)))

    insights = await service.generate_insights(db_session, USER_ID, now=NOW)

    assert insights == INSIGHTS
    body = json.loads(handler.requests[0].content)
    system, user = body["messages"]
    assert "USER'S COUNTRY: India" in system["content"]
    assert "CURRENT DATE: Monday, March 10, 2025" in system["content"]
    assert "Invoice chaser" in user["content"]


async def test_malformed_output_is_empty_list(db_session):
    service = InsightsService(
        LLMGatewayClient(transport=httpx.MockTransport(completion_gateway("You should validate your idea.")))
    )

    assert await service.generate_insights(db_session, USER_ID, now=NOW) == []


async def test_state_without_profile(db_session):
    service = InsightsService(LLMGatewayClient(transport=httpx.MockTransport(completion_gateway("[]"))))

    state, country = await service.collect_state(db_session, USER_ID)

    assert country is None
    assert state == {"profile": None, "ideas": [], "roadmaps": [], "metrics": [], "reviews": []}
