"""Tests for the in-memory conversation turn."""

import pytest

from cofounder.domain.conversation import ConversationTurn

pytestmark = pytest.mark.unit


def test_first_delta_appends_assistant_message():
    turn = ConversationTurn()
    turn.add_user_message("How do I price this?")

    turn.apply_assistant_text("Start")

    assert turn.messages == [
        {"role": "user", "content": "How do I price this?"},
        {"role": "assistant", "content": "Start"},
    ]


def test_later_deltas_update_in_place():
    turn = ConversationTurn()
    turn.add_user_message("hi")

    turn.apply_assistant_text("He")
    turn.apply_assistant_text("Hello")
    turn.apply_assistant_text("Hello there")

    assert len(turn.messages) == 2
    assert turn.messages[-1]["content"] == "Hello there"


def test_freeze_returns_final_text_and_blocks_mutation():
    turn = ConversationTurn()
    turn.add_user_message("hi")
    turn.apply_assistant_text("done")

    assert turn.freeze() == "done"
    with pytest.raises(RuntimeError):
        turn.apply_assistant_text("more")
    with pytest.raises(RuntimeError):
        turn.add_user_message("again")


def test_freeze_without_reply():
    turn = ConversationTurn()
    turn.add_user_message("hi")

    assert turn.freeze() is None
    assert turn.frozen is True
