from __future__ import annotations

from pathlib import Path

import pytest

from cafebot.config import Settings
from cafebot.dispatcher import ANYTHING_ELSE_PROMPT
from cafebot.framework import CafebotFramework
from cafebot.policy import NOTHING_TO_CANCEL_REASON
from cafebot.types import DialogTurnStatus


def _framework(tmp_path: Path | None = None) -> CafebotFramework:
    framework = CafebotFramework(Settings(state_dir=tmp_path))
    framework.load_hooks(entry_points=False)
    return framework


async def _say(framework: CafebotFramework, text: str, **extra: object):
    return await framework.process_inbound({"channel": "test", "chat_id": "c1", "sender_id": "u1", "content": text, **extra})


def _texts(result) -> list[str]:
    return [outbound["content"] for outbound in result.outbounds]


@pytest.mark.asyncio
async def test_booking_collects_missing_slots_and_confirms() -> None:
    framework = _framework()

    first = await _say(framework, "book a table for 2 people tomorrow")
    assert first.result.status is DialogTurnStatus.WAITING
    assert _texts(first) == [
        "Which of our cafes would you like? We are in Seattle, Bellevue, Renton, Kirkland, Redmond."
    ]

    second = await _say(framework, "Bellevue")
    assert _texts(second) == ["What time?"]

    third = await _say(framework, "7pm")
    assert "table for 2 at our Bellevue cafe tomorrow at 7pm" in _texts(third)[0]

    done = await _say(framework, "yes")
    assert done.result.status is DialogTurnStatus.COMPLETE
    assert _texts(done)[-1] == ANYTHING_ELSE_PROMPT
    assert framework.conversation_state.reservation.get("test:c1")["confirmed"] is True
    assert framework.conversation_state.dialog_stack.get("test:c1") == []


@pytest.mark.asyncio
async def test_invalid_party_size_is_asked_again() -> None:
    framework = _framework()
    await _say(framework, "reserve in Renton today at 8pm")

    result = await _say(framework, "lots")

    assert result.result.status is DialogTurnStatus.WAITING
    assert _texts(result) == ["Sorry, I need a number of guests between 1 and 20."]


@pytest.mark.asyncio
async def test_capabilities_mid_booking_returns_to_booking() -> None:
    framework = _framework()
    await _say(framework, "book a table in Kirkland")

    info = await _say(framework, "what can you do")
    assert info.result.status is DialogTurnStatus.COMPLETE
    assert _texts(info)[-1] == ANYTHING_ELSE_PROMPT
    stack = framework.conversation_state.dialog_stack.get("test:c1")
    assert [frame["dialog_id"] for frame in stack] == ["BookTable"]

    resumed = await _say(framework, "friday")
    assert _texts(resumed) == ["What time?"]


@pytest.mark.asyncio
async def test_cancel_mid_booking_unwinds_and_drops_draft() -> None:
    framework = _framework()
    await _say(framework, "book a table")

    result = await _say(framework, "never mind")

    assert result.result.status is DialogTurnStatus.CANCELLED
    assert _texts(result) == ["Ok. I've cancelled that."]
    assert framework.conversation_state.dialog_stack.get("test:c1") == []
    assert framework.conversation_state.reservation.get("test:c1") is None


@pytest.mark.asyncio
async def test_cancel_when_idle_is_denied() -> None:
    framework = _framework()

    result = await _say(framework, "cancel")

    assert result.result.status is DialogTurnStatus.EMPTY
    assert _texts(result) == [NOTHING_TO_CANCEL_REASON]


@pytest.mark.asyncio
async def test_who_are_you_remembers_name_across_conversations(tmp_path: Path) -> None:
    framework = _framework(tmp_path)

    ask = await _say(framework, "hi")
    assert ask.result.status is DialogTurnStatus.WAITING
    assert _texts(ask) == ["Hello, I'm the cafe bot. What's your name?"]
    named = await _say(framework, "Ada")
    assert _texts(named)[0] == "Hello Ada, nice to meet you!"

    reopened = _framework(tmp_path)
    again = await reopened.process_inbound({"channel": "test", "chat_id": "c2", "sender_id": "u1", "content": "hello"})
    assert _texts(again)[0] == "Hi Ada, nice to see you again."


@pytest.mark.asyncio
async def test_faq_answers_and_offers_more() -> None:
    framework = _framework()

    result = await _say(framework, "when do you open?")

    assert _texts(result) == ["We are open 7am to 9pm every day.", ANYTHING_ELSE_PROMPT]


@pytest.mark.asyncio
async def test_card_submission_starts_booking() -> None:
    framework = _framework()

    result = await _say(framework, "", card='{"intent": "Book_Table", "text": "Book a table", "location": "Redmond"}')

    assert _texts(result) == ["You said: 'Book a table'.", "What day would you like the table for?"]
    assert result.turn.intent == "Book_Table"
    assert framework.conversation_state.on_turn.get("test:c1")["raw_text"] == "Book a table"


@pytest.mark.asyncio
async def test_unselected_card_asks_for_choice() -> None:
    framework = _framework()

    result = await _say(framework, "", card="{}{")

    assert result.result.status is DialogTurnStatus.EMPTY
    assert _texts(result) == ["Choose a query from the card drop down before you click `Let's talk!`"]
