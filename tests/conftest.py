from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

import pytest

from cafebot.channel import RecordingChannel
from cafebot.dialogs import TurnContext
from cafebot.state import ConversationState, InMemoryStateStore
from cafebot.types import OnTurnInput

ContextFactory: TypeAlias = Callable[[OnTurnInput], TurnContext]


@pytest.fixture
def conversation_state() -> ConversationState:
    return ConversationState(InMemoryStateStore())


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel({"session_id": "conv-1"})


@pytest.fixture
def make_context(conversation_state: ConversationState, channel: RecordingChannel) -> ContextFactory:
    def factory(turn: OnTurnInput) -> TurnContext:
        return TurnContext(
            conversation_id="conv-1",
            turn=turn,
            channel=channel,
            conversation_state=conversation_state,
            user_id="user-1",
        )

    return factory
