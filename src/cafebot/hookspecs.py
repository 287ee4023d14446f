"""Pluggy hook namespace and framework hook specifications."""

from __future__ import annotations

from typing import Any

import pluggy

from cafebot.dialogs import Dialog
from cafebot.state import StateStore
from cafebot.types import Envelope, OnTurnInput

CAFEBOT_HOOK_NAMESPACE = "cafebot"
hookspec = pluggy.HookspecMarker(CAFEBOT_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(CAFEBOT_HOOK_NAMESPACE)


class CafebotHookSpecs:
    """Hook contract for cafebot extensions."""

    @hookspec(firstresult=True)
    def provide_state_store(self) -> StateStore | None:
        """Provide the store backing dialog stack, profile and reservation state."""

    @hookspec
    def provide_dialogs(self) -> list[Dialog] | None:
        """Contribute dialogs to the dispatcher's registry."""

    @hookspec
    def provide_intent_table(self) -> dict[str, str] | None:
        """Contribute intent -> dialog name entries."""

    @hookspec(firstresult=True)
    def resolve_session(self, message: Envelope) -> str | None:
        """Resolve conversation id for one inbound message."""

    @hookspec(firstresult=True)
    def resolve_turn(self, message: Envelope, session_id: str) -> OnTurnInput | None:
        """Recognize intent and entities for one inbound message."""

    @hookspec
    def dispatch_outbound(self, message: Envelope) -> bool | None:
        """Deliver one outbound message to external channel(s)."""

    @hookspec
    def register_cli_commands(self, app: Any) -> None:
        """Register CLI commands onto the root Typer application."""

    @hookspec
    def on_error(self, stage: str, error: Exception, message: Envelope | None) -> None:
        """Observe framework errors from any stage."""
