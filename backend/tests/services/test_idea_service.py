"""Tests for idea CRUD and the validation pass."""

import pytest

from cofounder.core.exceptions import LLMGatewayError
from cofounder.services.idea_service import IdeaService

pytestmark = pytest.mark.integration

USER_ID = "user-ideas"


class FakeChat:
    """Stands in for ChatService.generate."""

    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def generate(self, prompt, context_type):
        self.calls.append((prompt, str(context_type)))
        if self.error is not None:
            raise self.error
        return self.text


async def test_create_and_list(db_session):
    service = IdeaService()
    await service.create_idea(db_session, USER_ID, title="Invoice chaser", problem_statement="Late payments")
    await service.create_idea(db_session, "someone-else", title="Not mine")

    ideas = await service.list_ideas(db_session, USER_ID)

    assert [idea.title for idea in ideas] == ["Invoice chaser"]
    assert ideas[0].status == "draft"
    assert ideas[0].validation_score is None


async def test_validation_stores_score_and_reasoning(db_session):
    chat = FakeChat("Clear pain, narrow ICP.\n\nVALIDATION_SCORE: 72")
    service = IdeaService(chat=chat)
    idea = await service.create_idea(db_session, USER_ID, title="Invoice chaser")

    validated = await service.validate_idea(db_session, USER_ID, idea.id)

    assert validated.status == "validated"
    assert validated.validation_score == 72
    assert validated.validation_reasoning == "Clear pain, narrow ICP."
    assert "Title: Invoice chaser" in chat.calls[0][0]
    assert chat.calls[0][1] == "idea_validation"


async def test_validation_without_score(db_session):
    service = IdeaService(chat=FakeChat("I need more detail about the target user."))
    idea = await service.create_idea(db_session, USER_ID, title="Vague idea")

    validated = await service.validate_idea(db_session, USER_ID, idea.id)

    assert validated.status == "validated"
    assert validated.validation_score is None


async def test_failed_validation_resets_to_draft_and_keeps_prior_score(db_session):
    service = IdeaService(chat=FakeChat("VALIDATION_SCORE: 40"))
    idea = await service.create_idea(db_session, USER_ID, title="Retry me")
    await service.validate_idea(db_session, USER_ID, idea.id)

    failing = IdeaService(chat=FakeChat(error=LLMGatewayError(500, "boom")))
    with pytest.raises(LLMGatewayError):
        await failing.validate_idea(db_session, USER_ID, idea.id)

    stored = await service.get_idea(db_session, USER_ID, idea.id)
    assert stored.status == "draft"
    assert stored.validation_score == 40


async def test_other_users_idea_is_not_found(db_session):
    chat = FakeChat("VALIDATION_SCORE: 90")
    service = IdeaService(chat=chat)
    idea = await service.create_idea(db_session, "someone-else", title="Not mine")

    assert await service.validate_idea(db_session, USER_ID, idea.id) is None
    assert chat.calls == []
