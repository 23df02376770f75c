"""Tests for the bounded user/conversation context snapshot."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from cofounder.db.models.chat_message import ChatMessage
from cofounder.db.models.decision import Decision
from cofounder.db.models.idea import Idea
from cofounder.db.models.metric import Metric
from cofounder.db.models.profile import Profile
from cofounder.services.context_assembler import ContextAssembler

pytestmark = pytest.mark.integration

USER_ID = "user-ctx"
BASE = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


async def test_empty_state_degrades_to_defaults(db_session):
    user_context, conversation_context = await ContextAssembler().build(db_session, USER_ID)

    assert json.loads(user_context) == {
        "profile": {},
        "recentIdeas": [],
        "recentDecisions": [],
        "recentMetrics": [],
    }
    assert conversation_context == ""


async def test_profile_fields(db_session):
    db_session.add(Profile(user_id=USER_ID, full_name="Asha", country="India", industry="Fintech"))
    await db_session.commit()

    context = json.loads(await ContextAssembler().build_user_context(db_session, USER_ID))

    assert context["profile"]["full_name"] == "Asha"
    assert context["profile"]["country"] == "India"
    assert "subscription_status" not in context["profile"]


async def test_caps_and_newest_first(db_session):
    for i in range(7):
        db_session.add(Idea(user_id=USER_ID, title=f"idea {i}", created_at=BASE + timedelta(days=i)))
    for i in range(8):
        db_session.add(
            Decision(user_id=USER_ID, title=f"decision {i}", chosen_option="a", created_at=BASE + timedelta(days=i))
        )
    for i in range(12):
        db_session.add(Metric(user_id=USER_ID, metric_type="users", value=str(i), recorded_at=BASE + timedelta(days=i)))
    db_session.add(Idea(user_id="someone-else", title="not mine", created_at=BASE + timedelta(days=30)))
    await db_session.commit()

    context = json.loads(await ContextAssembler().build_user_context(db_session, USER_ID))

    assert [idea["title"] for idea in context["recentIdeas"]] == [f"idea {i}" for i in (6, 5, 4, 3, 2)]
    assert len(context["recentDecisions"]) == 5
    assert context["recentDecisions"][0]["title"] == "decision 7"
    assert [metric["value"] for metric in context["recentMetrics"]] == [str(i) for i in range(11, 1, -1)]
    assert context["recentMetrics"][0]["recorded_at"].startswith("2025-03-12T09:00:00")


async def test_idea_summary_fields(db_session):
    db_session.add(Idea(user_id=USER_ID, title="Invoice chaser", status="validated", validation_score=0))
    await db_session.commit()

    context = json.loads(await ContextAssembler().build_user_context(db_session, USER_ID))

    assert context["recentIdeas"] == [{"title": "Invoice chaser", "status": "validated", "validation_score": 0}]


async def test_conversation_keeps_last_twenty_oldest_first(db_session):
    for i in range(25):
        role = "user" if i % 2 == 0 else "assistant"
        db_session.add(
            ChatMessage(user_id=USER_ID, role=role, content=f"m{i}", created_at=BASE + timedelta(minutes=i))
        )
    await db_session.commit()

    conversation = await ContextAssembler().build_conversation_context(db_session, USER_ID)
    lines = conversation.split("\n")

    assert len(lines) == 20
    assert lines[0] == "assistant: m5"
    assert lines[-1] == "user: m24"
