"""Keyword recognizer standing in for a hosted NLU service."""

from __future__ import annotations

import re
from collections.abc import Mapping

from cafebot.types import CANCEL_INTENT, NONE_INTENT, QUERY_PROPERTY, EntityProperty, OnTurnInput

GREETING_INTENT = "Greeting"
BOOK_TABLE_INTENT = "Book_Table"
SHOW_CAPABILITIES_INTENT = "ShowCapabilities"

CAFE_LOCATIONS = ("Seattle", "Bellevue", "Renton", "Kirkland", "Redmond")

# Checked in order; cancel first so "cancel my booking" is not a booking.
_INTENT_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (CANCEL_INTENT, re.compile(r"\b(cancel|stop|never\s?mind|forget it)\b", re.IGNORECASE)),
    (SHOW_CAPABILITIES_INTENT, re.compile(r"\b(what can you do|help|capabilities)\b", re.IGNORECASE)),
    (BOOK_TABLE_INTENT, re.compile(r"\b(book|reserve|reservation|table for)\b", re.IGNORECASE)),
    (GREETING_INTENT, re.compile(r"^\s*(hi|hello|hey)\b|\bwho are you\b|\bmy name is\b", re.IGNORECASE)),
)

_ENTITY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("partySize", re.compile(r"\b(?:for\s+)?(\d{1,2})\s*(?:people|persons|guests|of us)\b", re.IGNORECASE)),
    ("partySize", re.compile(r"\btable for (\d{1,2})\b", re.IGNORECASE)),
    ("time", re.compile(r"\b(\d{1,2}(?::\d{2})?\s*(?:am|pm))\b", re.IGNORECASE)),
    (
        "date",
        re.compile(
            r"\b(today|tomorrow|monday|tuesday|wednesday|thursday|friday|saturday|sunday|\d{1,2}/\d{1,2})\b",
            re.IGNORECASE,
        ),
    ),
    ("location", re.compile(r"\b(" + "|".join(CAFE_LOCATIONS) + r")\b", re.IGNORECASE)),
    ("userName", re.compile(r"\b(?:my name is|call me|i am|i'm)\s+([A-Za-z][A-Za-z'-]*)", re.IGNORECASE)),
)


def recognize(text: str) -> OnTurnInput:
    """Resolve free text into an intent plus entities."""

    stripped = text.strip()
    intent = NONE_INTENT
    for name, pattern in _INTENT_PATTERNS:
        if pattern.search(stripped):
            intent = name
            break
    return OnTurnInput(intent=intent, entities=tuple(_extract_entities(stripped)), raw_text=stripped)


def recognize_card(card: object, text: str = "") -> OnTurnInput:
    """A card submission carries its payload verbatim under the ``query`` entity."""

    value = dict(card) if isinstance(card, Mapping) else card
    return OnTurnInput(
        intent=SHOW_CAPABILITIES_INTENT,
        entities=(EntityProperty(name=QUERY_PROPERTY, value=value),),
        raw_text=text,
    )


def _extract_entities(text: str) -> list[EntityProperty]:
    entities: list[EntityProperty] = []
    seen: set[str] = set()
    for name, pattern in _ENTITY_PATTERNS:
        if name in seen:
            continue
        match = pattern.search(text)
        if match is None:
            continue
        value = match.group(1)
        if name == "location":
            value = value.title()
        elif name == "userName":
            value = value.capitalize()
        elif name in {"date", "time"}:
            value = value.lower()
        entities.append(EntityProperty(name=name, value=value))
        seen.add(name)
    return entities
