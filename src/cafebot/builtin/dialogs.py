"""Demo cafe dialogs registered by the builtin skill.

Each dialog keeps its step in the frame's local state. Multi-turn dialogs answer
``Waiting`` without replying when the turn carries an intent they do not own, which
lets the dispatcher begin an interrupting dialog on top of them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from cafebot.builtin.recognizer import (
    BOOK_TABLE_INTENT,
    CAFE_LOCATIONS,
    GREETING_INTENT,
    SHOW_CAPABILITIES_INTENT,
)
from cafebot.dialogs import Dialog, DialogContext
from cafebot.types import CANCEL_INTENT, NONE_INTENT, TurnResult

SHOW_CAPABILITIES = "ShowCapabilities"
QNA = "QnA"
WHO_ARE_YOU = "WhoAreYou"
BOOK_TABLE = "BookTable"
CANCEL = "Cancel"

CAPABILITY_QUERIES: tuple[str, ...] = (
    "Book a table",
    "Who are you?",
    "What are your hours?",
    "Where are your cafe locations?",
)

FAQ_ANSWERS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("hour", "open", "close"), "We are open 7am to 9pm every day."),
    (("location", "where", "address"), "We have cafes in " + ", ".join(CAFE_LOCATIONS) + "."),
    (("wifi", "internet"), "Yes, free wifi is available at every location."),
    (("menu", "coffee", "food"), "Our menu has espresso drinks, teas, pastries and light lunches."),
    (("park",), "Every location has free parking for guests."),
)
QNA_FALLBACK = "Sorry, I don't know the answer to that. Try asking about our hours, locations or menu."


class ShowCapabilitiesDialog:
    name = SHOW_CAPABILITIES

    def begin(self, dc: DialogContext, options: Mapping[str, Any] | None = None) -> TurnResult:
        dc.send_with_suggestions(
            "I can help you book a table, remember who you are and answer questions about our cafes.",
            CAPABILITY_QUERIES,
        )
        return TurnResult.complete()

    def continue_dialog(self, dc: DialogContext) -> TurnResult:
        return TurnResult.complete()

    def cancel_all(self, dc: DialogContext) -> None:
        return None


class QnADialog:
    name = QNA

    def begin(self, dc: DialogContext, options: Mapping[str, Any] | None = None) -> TurnResult:
        question = dc.turn.raw_text.lower()
        for keywords, answer in FAQ_ANSWERS:
            if any(keyword in question for keyword in keywords):
                dc.send(answer)
                return TurnResult.complete(answer)
        dc.send(QNA_FALLBACK)
        return TurnResult.complete()

    def continue_dialog(self, dc: DialogContext) -> TurnResult:
        return TurnResult.complete()

    def cancel_all(self, dc: DialogContext) -> None:
        return None


class WhoAreYouDialog:
    """Collects the user's name into the user profile."""

    name = WHO_ARE_YOU

    def begin(self, dc: DialogContext, options: Mapping[str, Any] | None = None) -> TurnResult:
        profile = dc.conversation_state.user_profile.get(dc.turn_context.user_id, {})
        known = profile.get("name")
        offered = (options or {}).get("userName")
        if offered:
            return self._remember(dc, str(offered))
        if known:
            dc.send(f"Hi {known}, nice to see you again.")
            return TurnResult.complete(known)
        dc.state["step"] = "name"
        dc.send("Hello, I'm the cafe bot. What's your name?")
        return TurnResult.waiting()

    def continue_dialog(self, dc: DialogContext) -> TurnResult:
        if dc.turn.intent not in {NONE_INTENT, GREETING_INTENT}:
            return TurnResult.waiting()
        name_entity = dc.turn.entity("userName")
        name = str(name_entity.value) if name_entity is not None else dc.turn.raw_text.strip()
        if not name:
            dc.send("Sorry, I didn't catch that. What's your name?")
            return TurnResult.waiting()
        return self._remember(dc, name)

    def cancel_all(self, dc: DialogContext) -> None:
        dc.state.clear()

    @staticmethod
    def _remember(dc: DialogContext, name: str) -> TurnResult:
        accessor = dc.conversation_state.user_profile
        profile = accessor.get(dc.turn_context.user_id, {})
        profile["name"] = name
        accessor.set(dc.turn_context.user_id, profile)
        dc.send(f"Hello {name}, nice to meet you!")
        return TurnResult.complete(name)


class BookTableDialog:
    """Slot-filling reservation with a final confirmation."""

    name = BOOK_TABLE

    SLOTS: tuple[tuple[str, str], ...] = (
        ("location", "Which of our cafes would you like? We are in " + ", ".join(CAFE_LOCATIONS) + "."),
        ("date", "What day would you like the table for?"),
        ("time", "What time?"),
        ("partySize", "How many guests?"),
    )
    _FOREIGN_INTENTS = frozenset({SHOW_CAPABILITIES_INTENT, GREETING_INTENT, CANCEL_INTENT})

    def begin(self, dc: DialogContext, options: Mapping[str, Any] | None = None) -> TurnResult:
        reservation: dict[str, Any] = {}
        for slot, _prompt in self.SLOTS:
            value = (options or {}).get(slot)
            if value:
                self._fill(reservation, slot, str(value))
        dc.state["reservation"] = reservation
        self._save_draft(dc)
        return self._next_step(dc)

    def continue_dialog(self, dc: DialogContext) -> TurnResult:
        if dc.turn.intent in self._FOREIGN_INTENTS:
            return TurnResult.waiting()

        reservation: dict[str, Any] = dc.state.setdefault("reservation", {})
        if dc.state.get("step") == "confirm":
            answer = dc.turn.raw_text.strip().lower()
            if answer in {"yes", "y", "sure", "ok", "yes please"}:
                reservation["confirmed"] = True
                dc.conversation_state.reservation.set(dc.turn_context.conversation_id, reservation)
                dc.send(f"Done. Your table for {reservation['partySize']} is booked. See you soon!")
                return TurnResult.complete(dict(reservation))
            dc.send("Ok, I won't book that table.")
            return TurnResult.cancelled()

        for slot, _prompt in self.SLOTS:
            entity = dc.turn.entity(slot)
            if entity is not None:
                self._fill(reservation, slot, str(entity.value))
        current = dc.state.get("step")
        if current is not None and current not in reservation and dc.turn.entity(current) is None:
            if not self._fill(reservation, current, dc.turn.raw_text.strip()):
                dc.send("Sorry, I need a number of guests between 1 and 20.")
                return TurnResult.waiting()
        self._save_draft(dc)
        return self._next_step(dc)

    def cancel_all(self, dc: DialogContext) -> None:
        dc.state.clear()
        dc.conversation_state.reservation.delete(dc.turn_context.conversation_id)

    def _next_step(self, dc: DialogContext) -> TurnResult:
        reservation = dc.state["reservation"]
        for slot, prompt in self.SLOTS:
            if slot not in reservation:
                dc.state["step"] = slot
                dc.send(prompt)
                return TurnResult.waiting()
        dc.state["step"] = "confirm"
        dc.send(
            f"Ok. I have a table for {reservation['partySize']} at our {reservation['location']} cafe "
            f"{reservation['date']} at {reservation['time']}. Shall I book it?"
        )
        return TurnResult.waiting()

    @staticmethod
    def _fill(reservation: dict[str, Any], slot: str, value: str) -> bool:
        if not value:
            return False
        if slot == "partySize":
            if not value.isdigit() or not 1 <= int(value) <= 20:
                return False
            reservation[slot] = int(value)
            return True
        reservation[slot] = value
        return True

    @staticmethod
    def _save_draft(dc: DialogContext) -> None:
        dc.conversation_state.reservation.set(dc.turn_context.conversation_id, dict(dc.state["reservation"]))


class CancelDialog:
    name = CANCEL

    def begin(self, dc: DialogContext, options: Mapping[str, Any] | None = None) -> TurnResult:
        dc.send("Ok. I've cancelled that.")
        return TurnResult.cancelled()

    def continue_dialog(self, dc: DialogContext) -> TurnResult:
        return TurnResult.cancelled()

    def cancel_all(self, dc: DialogContext) -> None:
        return None


INTENT_TABLE: dict[str, str] = {
    GREETING_INTENT: WHO_ARE_YOU,
    BOOK_TABLE_INTENT: BOOK_TABLE,
    SHOW_CAPABILITIES_INTENT: SHOW_CAPABILITIES,
    CANCEL_INTENT: CANCEL,
    NONE_INTENT: QNA,
}


def builtin_dialogs() -> list[Dialog]:
    return [ShowCapabilitiesDialog(), QnADialog(), WhoAreYouDialog(), BookTableDialog(), CancelDialog()]
