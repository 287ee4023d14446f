"""Turn-level data types shared by the dispatcher and its collaborators."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeAlias

Envelope: TypeAlias = Any

NONE_INTENT = "None"
CANCEL_INTENT = "Cancel"
QUERY_PROPERTY = "query"

_CARD_RESERVED_KEYS = frozenset({"intent", "text", QUERY_PROPERTY})


@dataclass(frozen=True)
class EntityProperty:
    """One recognized entity."""

    name: str
    value: Any


@dataclass(frozen=True)
class OnTurnInput:
    """Resolved intent, entities and raw text for one inbound turn."""

    intent: str = NONE_INTENT
    entities: tuple[EntityProperty, ...] = ()
    raw_text: str = ""

    def entity(self, name: str) -> EntityProperty | None:
        for item in self.entities:
            if item.name == name:
                return item
        return None

    def entity_options(self) -> dict[str, Any]:
        """Entities as begin options; the first value of a repeated name wins."""
        options: dict[str, Any] = {}
        for item in self.entities:
            options.setdefault(item.name, item.value)
        return options

    def with_text(self, raw_text: str) -> OnTurnInput:
        return OnTurnInput(intent=self.intent, entities=self.entities, raw_text=raw_text)

    @classmethod
    def from_card_input(cls, card: Mapping[str, str]) -> OnTurnInput:
        entities = tuple(
            EntityProperty(name=key, value=value) for key, value in card.items() if key not in _CARD_RESERVED_KEYS
        )
        return cls(
            intent=card.get("intent") or NONE_INTENT,
            entities=entities,
            raw_text=card.get("text", ""),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "intent": self.intent,
            "entities": [{"name": item.name, "value": item.value} for item in self.entities],
            "raw_text": self.raw_text,
        }


class DialogTurnStatus(StrEnum):
    WAITING = "waiting"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    EMPTY = "empty"


@dataclass(frozen=True)
class TurnResult:
    """Outcome of beginning or continuing a dialog."""

    status: DialogTurnStatus
    value: Any = None

    @classmethod
    def waiting(cls) -> TurnResult:
        return cls(DialogTurnStatus.WAITING)

    @classmethod
    def complete(cls, value: Any = None) -> TurnResult:
        return cls(DialogTurnStatus.COMPLETE, value)

    @classmethod
    def cancelled(cls) -> TurnResult:
        return cls(DialogTurnStatus.CANCELLED)

    @classmethod
    def empty(cls) -> TurnResult:
        return cls(DialogTurnStatus.EMPTY)


@dataclass(frozen=True)
class PolicyDecision:
    """Whether a requested operation may run; reason is user-facing when denied."""

    allowed: bool
    reason: str = ""


@dataclass
class DialogFrame:
    dialog_id: str
    local_state: dict[str, Any] = field(default_factory=dict)
