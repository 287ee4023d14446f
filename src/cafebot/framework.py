"""Hook-driven host that feeds inbound messages through the dispatcher."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import pluggy
from loguru import logger

from cafebot.channel import RecordingChannel
from cafebot.config import Settings, get_settings
from cafebot.dialogs import Dialog, DialogSet, TurnContext
from cafebot.dispatcher import MainDispatcher
from cafebot.envelope import content_of, field_of, route_of, session_of
from cafebot.hook_runtime import HookRuntime
from cafebot.hookspecs import CAFEBOT_HOOK_NAMESPACE, CafebotHookSpecs
from cafebot.stack import DialogStack
from cafebot.state import ConversationState, InMemoryStateStore, JsonFileStateStore, StateStore
from cafebot.types import Envelope, OnTurnInput, TurnResult


@dataclass(frozen=True)
class InboundResult:
    """Result of one complete inbound message."""

    session_id: str
    turn: OnTurnInput
    result: TurnResult
    outbounds: list[Envelope] = field(default_factory=list)


@dataclass
class _SessionGate:
    """Serializes turns of one session; dropped once no turn holds or awaits it."""

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class CafebotFramework:
    """Builds the dispatcher from plugins and runs turns with per-conversation exclusivity."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._plugin_manager = pluggy.PluginManager(CAFEBOT_HOOK_NAMESPACE)
        self._plugin_manager.add_hookspecs(CafebotHookSpecs)
        self._hook_runtime = HookRuntime(self._plugin_manager)
        self._session_gates: dict[str, _SessionGate] = {}
        self._dispatcher: MainDispatcher | None = None
        self._conversation_state: ConversationState | None = None

    def load_hooks(self, *, entry_points: bool = True) -> None:
        """Register the builtin skill, then any installed ``cafebot`` entry point plugins."""

        from cafebot.builtin.plugin import plugin as builtin_plugin

        if not self._plugin_manager.is_registered(builtin_plugin):
            self._plugin_manager.register(builtin_plugin, name="builtin")
        if entry_points:
            loaded = self._plugin_manager.load_setuptools_entrypoints(CAFEBOT_HOOK_NAMESPACE)
            if loaded:
                logger.info("plugins.loaded count={}", loaded)
        self._reset()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        self._plugin_manager.register(plugin, name=name)
        self._reset()

    @property
    def dispatcher(self) -> MainDispatcher:
        if self._dispatcher is None:
            self._dispatcher = self._build_dispatcher()
        return self._dispatcher

    @property
    def conversation_state(self) -> ConversationState:
        if self._conversation_state is None:
            provided = [store for store in self._hook_runtime.setup("provide_state_store") if store is not None]
            store = provided[0] if provided else self._default_store()
            self._conversation_state = ConversationState(store)
        return self._conversation_state

    def register_cli_commands(self, app: Any) -> None:
        self._hook_runtime.setup("register_cli_commands", app=app)

    def hook_report(self) -> dict[str, list[str]]:
        return self._hook_runtime.hook_report()

    async def process_inbound(self, inbound: Envelope) -> InboundResult:
        """Run one inbound message through recognition, dispatch and delivery."""

        try:
            session_id = await self._hook_runtime.first("resolve_session", message=inbound)
            if not session_id:
                session_id = session_of(inbound)
            result = await self._run_exclusive(inbound, session_id)
            for outbound in result.outbounds:
                await self._hook_runtime.fan_out("dispatch_outbound", message=outbound)
            return result
        except Exception as exc:
            await self._hook_runtime.report_error(stage="turn", error=exc, message=inbound)
            raise

    def end_conversation(self, session_id: str) -> None:
        """Destroy the conversation's dialog stack and turn state."""

        state = self.conversation_state
        state.dialog_stack.delete(session_id)
        state.on_turn.delete(session_id)
        state.reservation.delete(session_id)
        logger.info("conversation.ended session={}", session_id)

    async def _run_exclusive(self, inbound: Envelope, session_id: str) -> InboundResult:
        gate = self._session_gates.setdefault(session_id, _SessionGate())
        gate.holders += 1
        try:
            async with gate.lock:
                return await self._run_turn(inbound, session_id)
        finally:
            gate.holders -= 1
            if gate.holders == 0:
                del self._session_gates[session_id]

    async def _run_turn(self, inbound: Envelope, session_id: str) -> InboundResult:
        dispatcher = self.dispatcher
        state = self.conversation_state

        turn = await self._hook_runtime.first("resolve_turn", message=inbound, session_id=session_id)
        if not isinstance(turn, OnTurnInput):
            turn = OnTurnInput(raw_text=content_of(inbound))
        state.on_turn.set(session_id, turn.to_payload())

        channel = RecordingChannel(route_of(inbound, session_id))
        sender_id = field_of(inbound, "sender_id")
        context = TurnContext(
            conversation_id=session_id,
            turn=turn,
            channel=channel,
            conversation_state=state,
            user_id=str(sender_id) if sender_id is not None else None,
        )

        persisted = state.dialog_stack.get(session_id)
        if persisted is None:
            outcome = dispatcher.on_begin_turn(context)
        else:
            outcome = dispatcher.on_continue_turn(context, DialogStack.from_state(persisted))
        state.dialog_stack.set(session_id, outcome.stack.to_state())

        logger.info(
            "turn.done session={} intent={} status={} depth={}",
            session_id,
            context.turn.intent,
            outcome.result.status,
            len(outcome.stack),
        )
        return InboundResult(
            session_id=session_id,
            turn=context.turn,
            result=outcome.result,
            outbounds=list(channel.outbounds),
        )

    def _build_dispatcher(self) -> MainDispatcher:
        # Answers come back newest first; older ones are applied first so newer ones win.
        dialogs: dict[str, Dialog] = {}
        for batch in reversed(self._hook_runtime.setup("provide_dialogs")):
            for dialog in batch or []:
                dialogs[dialog.name] = dialog
        intent_table: dict[str, str] = {}
        for batch in reversed(self._hook_runtime.setup("provide_intent_table")):
            intent_table.update(batch or {})

        logger.debug("dispatcher.build dialogs={} intents={}", ",".join(sorted(dialogs)), len(intent_table))
        return MainDispatcher(
            DialogSet(dialogs.values()),
            self.conversation_state,
            intent_table=intent_table,
            suggested_queries=self.settings.suggested_queries,
        )

    def _default_store(self) -> StateStore:
        if self.settings.state_dir is not None:
            return JsonFileStateStore(self.settings.state_dir.expanduser())
        return InMemoryStateStore()

    def _reset(self) -> None:
        self._dispatcher = None
        self._conversation_state = None
