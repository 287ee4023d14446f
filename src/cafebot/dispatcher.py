"""Per-turn dispatch: interruption policy, dialog continuation and child dialog selection."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from cafebot.cards import CARD_CORRECTION_MESSAGE, CardDecodeError, decode_card_payload, echo_message, find_card_query
from cafebot.dialogs import DialogContext, DialogSet, TurnContext
from cafebot.errors import MissingDependencyError, UnknownDialogError
from cafebot.policy import InterruptionPolicy
from cafebot.stack import DialogStack
from cafebot.state import ConversationState
from cafebot.types import DialogTurnStatus, OnTurnInput, TurnResult

ANYTHING_ELSE_PROMPT = "Is there anything else I can help you with ?"
SUGGESTED_QUERIES: tuple[str, ...] = (
    "Who are you?",
    "Book a table",
    "What can you do?",
    "Where are your cafe locations?",
)


@dataclass(frozen=True)
class DispatchOutcome:
    """Final turn result and the stack the caller should persist."""

    result: TurnResult
    stack: DialogStack


class MainDispatcher:
    """Routes one turn to the active dialog or to a newly begun child dialog.

    The dispatcher holds no per-conversation state. The dialog stack is passed in
    and the updated stack is returned, so callers decide how it is stored and must
    serialize turns of the same conversation themselves.
    """

    def __init__(
        self,
        dialogs: DialogSet | None,
        conversation_state: ConversationState | None,
        *,
        intent_table: Mapping[str, str] | None = None,
        policy: InterruptionPolicy | None = None,
        suggested_queries: Sequence[str] = SUGGESTED_QUERIES,
    ) -> None:
        if dialogs is None:
            raise MissingDependencyError("dialogs registry is required")
        if conversation_state is None:
            raise MissingDependencyError("conversation state is required")
        self._dialogs = dialogs
        self._conversation_state = conversation_state
        self._intent_table = dict(intent_table or {})
        self._policy = policy or InterruptionPolicy()
        self._suggested_queries = list(suggested_queries)

        for intent, dialog_name in self._intent_table.items():
            if not dialogs.has(dialog_name):
                raise UnknownDialogError(f"intent {intent!r} maps to unregistered dialog {dialog_name!r}")

    @property
    def intent_table(self) -> dict[str, str]:
        return dict(self._intent_table)

    def on_begin_turn(self, context: TurnContext) -> DispatchOutcome:
        """First turn of a conversation: no stack exists yet."""

        return self._main_dispatch(context, DialogStack())

    def on_continue_turn(self, context: TurnContext, stack: DialogStack) -> DispatchOutcome:
        return self._main_dispatch(context, stack)

    def _main_dispatch(self, context: TurnContext, stack: DialogStack) -> DispatchOutcome:
        turn = context.turn
        decision = self._policy.evaluate(stack.active_dialog_id, turn.intent)
        if not decision.allowed:
            logger.info(
                "dispatch.denied session={} active={} intent={}",
                context.conversation_id,
                stack.active_dialog_id or "<idle>",
                turn.intent,
            )
            context.send(decision.reason)
            return DispatchOutcome(result=TurnResult.empty(), stack=stack)

        working = stack.copy()
        result: TurnResult | None = None
        if not working.is_idle:
            result = self._continue_active(context, working)

        # Skipped when the active dialog already replied, even if it is still waiting.
        if not context.responded and (result is None or result.status is not DialogTurnStatus.COMPLETE):
            begun = self._begin_child_dialog(context, working)
            if begun is not None:
                result = begun

        if result is None:
            return DispatchOutcome(result=TurnResult.empty(), stack=working)

        match result.status:
            case DialogTurnStatus.COMPLETE:
                finished = working.pop()
                logger.debug(
                    "dispatch.complete session={} dialog={}",
                    context.conversation_id,
                    finished.dialog_id if finished is not None else "<none>",
                )
                context.send_with_suggestions(ANYTHING_ELSE_PROMPT, self._suggested_queries)
            case DialogTurnStatus.CANCELLED:
                self._unwind(context, working)
            case DialogTurnStatus.WAITING | DialogTurnStatus.EMPTY:
                pass

        return DispatchOutcome(result=result, stack=working)

    def _continue_active(self, context: TurnContext, stack: DialogStack) -> TurnResult | None:
        frame = stack.top
        if frame is None:
            return None
        dialog = self._dialogs.get(frame.dialog_id)
        if dialog is None:
            logger.warning(
                "dispatch.stale_frame session={} dialog={}",
                context.conversation_id,
                frame.dialog_id,
            )
            stack.pop()
            return None
        return dialog.continue_dialog(DialogContext(context, frame))

    def _begin_child_dialog(self, context: TurnContext, stack: DialogStack) -> TurnResult | None:
        query = find_card_query(context.turn)
        if query is not None:
            return self._begin_from_card(context, stack, query.value)
        return self._begin_for_turn(context, stack, context.turn, context.turn.entity_options())

    def _begin_from_card(self, context: TurnContext, stack: DialogStack, raw_card: object) -> TurnResult | None:
        try:
            card = decode_card_payload(raw_card)
        except CardDecodeError as exc:
            logger.info("dispatch.card_rejected session={} error={}", context.conversation_id, exc)
            context.send(CARD_CORRECTION_MESSAGE)
            return TurnResult.empty()

        synthesized = OnTurnInput.from_card_input(card)
        text = card.get("text")
        if text is not None:
            context.send(echo_message(text))
        else:
            synthesized = synthesized.with_text(context.turn.raw_text)
        self._conversation_state.on_turn.set(context.conversation_id, synthesized.to_payload())
        context.turn = synthesized
        return self._begin_for_turn(context, stack, synthesized, card)

    def _begin_for_turn(
        self,
        context: TurnContext,
        stack: DialogStack,
        turn: OnTurnInput,
        options: Mapping[str, Any],
    ) -> TurnResult | None:
        dialog_name = self._intent_table.get(turn.intent)
        if dialog_name is None:
            logger.debug("dispatch.no_dialog session={} intent={}", context.conversation_id, turn.intent)
            return None
        dialog = self._dialogs.get(dialog_name)
        if dialog is None:
            return None

        frame = stack.push(dialog_name)
        logger.debug("dispatch.begin session={} dialog={}", context.conversation_id, dialog_name)
        result = dialog.begin(DialogContext(context, frame), options)
        if result.status is DialogTurnStatus.EMPTY:
            stack.pop()
        return result

    def _unwind(self, context: TurnContext, stack: DialogStack) -> None:
        unwound = stack.clear()
        for frame in unwound:
            dialog = self._dialogs.get(frame.dialog_id)
            if dialog is not None:
                dialog.cancel_all(DialogContext(context, frame))
        logger.info(
            "dispatch.cancelled session={} unwound={}",
            context.conversation_id,
            ",".join(frame.dialog_id for frame in unwound),
        )
