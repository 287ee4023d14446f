"""Dialog capability contract, dialog registry and per-turn contexts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from cafebot.channel import OutboundChannel
from cafebot.errors import DuplicateDialogError
from cafebot.state import ConversationState
from cafebot.types import DialogFrame, OnTurnInput, TurnResult


class TurnContext:
    """Everything known about the inbound turn, plus response tracking."""

    def __init__(
        self,
        *,
        conversation_id: str,
        turn: OnTurnInput,
        channel: OutboundChannel,
        conversation_state: ConversationState,
        user_id: str | None = None,
    ) -> None:
        self.conversation_id = conversation_id
        self.user_id = user_id or conversation_id
        self.turn = turn
        self.channel = channel
        self.conversation_state = conversation_state
        self.responded = False

    @property
    def text(self) -> str:
        return self.turn.raw_text

    def send(self, message: str) -> None:
        self.channel.send(message)
        self.responded = True

    def send_with_suggestions(self, message: str, suggestions: Sequence[str]) -> None:
        self.channel.send_with_suggestions(message, suggestions)
        self.responded = True


class DialogContext:
    """A dialog's view of the turn: its own frame plus the shared turn context."""

    def __init__(self, turn_context: TurnContext, frame: DialogFrame) -> None:
        self.turn_context = turn_context
        self.frame = frame

    @property
    def turn(self) -> OnTurnInput:
        return self.turn_context.turn

    @property
    def state(self) -> dict[str, Any]:
        return self.frame.local_state

    @property
    def conversation_state(self) -> ConversationState:
        return self.turn_context.conversation_state

    def send(self, message: str) -> None:
        self.turn_context.send(message)

    def send_with_suggestions(self, message: str, suggestions: Sequence[str]) -> None:
        self.turn_context.send_with_suggestions(message, suggestions)


class Dialog(Protocol):
    """Named conversational unit. The dispatcher never looks inside one."""

    name: str

    def begin(self, dc: DialogContext, options: Mapping[str, Any] | None = None) -> TurnResult: ...

    def continue_dialog(self, dc: DialogContext) -> TurnResult: ...

    def cancel_all(self, dc: DialogContext) -> None: ...


class DialogSet:
    """Name -> dialog lookup table."""

    def __init__(self, dialogs: Iterable[Dialog] = ()) -> None:
        self._dialogs: dict[str, Dialog] = {}
        for dialog in dialogs:
            self.add(dialog)

    def add(self, dialog: Dialog) -> None:
        if dialog.name in self._dialogs:
            raise DuplicateDialogError(f"dialog already registered: {dialog.name}")
        self._dialogs[dialog.name] = dialog

    def has(self, name: str) -> bool:
        return name in self._dialogs

    def get(self, name: str) -> Dialog | None:
        return self._dialogs.get(name)

    def names(self) -> list[str]:
        return sorted(self._dialogs)

    def __len__(self) -> int:
        return len(self._dialogs)
