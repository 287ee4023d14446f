"""Decoding of structured card submissions carried as a ``query`` entity."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import TypeAdapter, ValidationError

from cafebot.types import QUERY_PROPERTY, EntityProperty, OnTurnInput

CARD_CORRECTION_MESSAGE = "Choose a query from the card drop down before you click `Let's talk!`"

_CARD_ADAPTER: TypeAdapter[dict[str, str]] = TypeAdapter(dict[str, str])


class CardDecodeError(ValueError):
    """Raised when a card payload is not a mapping of strings."""


def find_card_query(turn: OnTurnInput) -> EntityProperty | None:
    """Return the first ``query`` entity, if any. Its value may still be empty or malformed."""

    return turn.entity(QUERY_PROPERTY)


def decode_card_payload(raw: object) -> dict[str, str]:
    try:
        if isinstance(raw, Mapping):
            return _CARD_ADAPTER.validate_python(dict(raw), strict=True)
        if isinstance(raw, (str, bytes, bytearray)):
            return _CARD_ADAPTER.validate_json(raw, strict=True)
    except ValidationError as exc:
        raise CardDecodeError(str(exc)) from exc
    raise CardDecodeError(f"unsupported card payload type: {type(raw).__name__}")


def echo_message(text: str) -> str:
    return f"You said: '{text}'."
