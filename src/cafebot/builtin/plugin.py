"""Builtin hook implementations."""

from __future__ import annotations

from typing import Any

from cafebot.builtin.cli import register_commands
from cafebot.builtin.dialogs import INTENT_TABLE, builtin_dialogs
from cafebot.builtin.recognizer import recognize, recognize_card
from cafebot.dialogs import Dialog
from cafebot.envelope import content_of, field_of
from cafebot.hookspecs import hookimpl
from cafebot.types import Envelope, OnTurnInput


class CafeCoreSkill:
    @hookimpl
    def provide_dialogs(self) -> list[Dialog]:
        return builtin_dialogs()

    @hookimpl
    def provide_intent_table(self) -> dict[str, str]:
        return dict(INTENT_TABLE)

    @hookimpl
    def resolve_turn(self, message: Envelope, session_id: str) -> OnTurnInput:
        _ = session_id
        card = field_of(message, "card")
        if card is not None:
            return recognize_card(card, content_of(message))
        return recognize(content_of(message))

    @hookimpl
    def register_cli_commands(self, app: Any) -> None:
        register_commands(app)


plugin = CafeCoreSkill()
