"""Helpers for reading inbound envelopes of any shape."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cafebot.types import Envelope


def field_of(message: Envelope, key: str, default: Any = None) -> Any:
    """Read a field from mapping-like or attribute-based messages."""

    if isinstance(message, Mapping):
        return message.get(key, default)
    return getattr(message, key, default)


def content_of(message: Envelope) -> str:
    return str(field_of(message, "content", "") or "")


def session_of(message: Envelope) -> str:
    """Explicit ``session_id`` when present, otherwise ``channel:chat_id``."""

    session_id = str(field_of(message, "session_id") or "").strip()
    if session_id:
        return session_id
    channel = field_of(message, "channel") or "default"
    chat_id = field_of(message, "chat_id") or "default"
    return f"{channel}:{chat_id}"


def route_of(message: Envelope, session_id: str) -> dict[str, Any]:
    """Fields an outbound reply needs to find its way back."""

    return {
        "channel": field_of(message, "channel"),
        "chat_id": field_of(message, "chat_id"),
        "session_id": session_id,
    }
