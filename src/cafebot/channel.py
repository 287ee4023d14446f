"""Outbound channel contract and an in-memory recorder."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from cafebot.types import Envelope


class OutboundChannel(Protocol):
    def send(self, message: str) -> None: ...

    def send_with_suggestions(self, message: str, suggestions: Sequence[str]) -> None: ...


class RecordingChannel:
    """Collects outbound envelopes for one turn.

    ``route`` fields (channel, chat id, session id) are copied onto every envelope so
    the host can deliver them without knowing which dialog produced them.
    """

    def __init__(self, route: Mapping[str, Any] | None = None) -> None:
        self._route = {key: value for key, value in (route or {}).items() if value is not None}
        self.outbounds: list[Envelope] = []

    def send(self, message: str) -> None:
        self.outbounds.append({**self._route, "content": message, "suggestions": []})

    def send_with_suggestions(self, message: str, suggestions: Sequence[str]) -> None:
        self.outbounds.append({**self._route, "content": message, "suggestions": list(suggestions)})

    @property
    def texts(self) -> list[str]:
        return [str(item["content"]) for item in self.outbounds]
