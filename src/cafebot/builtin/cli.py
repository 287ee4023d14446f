"""Builtin CLI commands."""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any

import typer

from cafebot.envelope import field_of
from cafebot.logging_utils import configure_logging

if TYPE_CHECKING:
    from cafebot.config import Settings
    from cafebot.framework import CafebotFramework, InboundResult

_EXIT_WORDS = frozenset({"exit", "quit", ":q"})


def register_commands(app: typer.Typer) -> None:
    @app.command("run")
    def run(
        message: str = typer.Argument("", help="Inbound message text"),
        card: str | None = typer.Option(None, "--card", help="Card submission payload as JSON text"),
        state_dir: Path | None = typer.Option(None, "--state-dir", "-s", help="Persist state as JSON files here"),  # noqa: B008
        channel: str = typer.Option("stdout", "--channel", help="Message channel"),
        chat_id: str = typer.Option("local", "--chat-id", help="Chat id"),
        sender_id: str = typer.Option("human", "--sender-id", help="Sender id"),
        session_id: str | None = typer.Option(None, "--session-id", help="Optional session id"),
    ) -> None:
        """Process one inbound message and print the replies."""

        settings = _settings(state_dir)
        configure_logging(level=settings.log_level)
        framework = _load_framework(settings)
        inbound: dict[str, Any] = {
            "channel": channel,
            "chat_id": chat_id,
            "sender_id": sender_id,
            "content": message,
        }
        if card is not None:
            inbound["card"] = card
        if session_id is not None and session_id.strip():
            inbound["session_id"] = session_id.strip()

        result = asyncio.run(framework.process_inbound(inbound))
        _echo_result(result)

    @app.command("chat")
    def chat(
        state_dir: Path | None = typer.Option(None, "--state-dir", "-s", help="Persist state as JSON files here"),  # noqa: B008
        session_id: str | None = typer.Option(None, "--session-id", help="Resume this session"),
    ) -> None:
        """Talk to the cafe bot interactively. Type 'exit' to leave."""

        settings = _settings(state_dir)
        configure_logging(profile="chat", level=settings.log_level)
        framework = _load_framework(settings)
        session = session_id or f"chat:{uuid.uuid4().hex[:8]}"
        typer.echo(f"session {session}. Say 'hi' or 'what can you do'.")

        async def loop() -> None:
            while True:
                try:
                    text = typer.prompt("you", prompt_suffix="> ")
                except (EOFError, typer.Abort):
                    break
                if text.strip().lower() in _EXIT_WORDS:
                    break
                result = await framework.process_inbound({"session_id": session, "sender_id": "human", "content": text})
                _echo_result(result, prefix="bot> ")
            framework.end_conversation(session)

        asyncio.run(loop())

    @app.command("hooks")
    def list_hooks() -> None:
        """Show hook implementation mapping."""

        framework = _load_framework(_settings(None))
        report = framework.hook_report()
        if not report:
            typer.echo("(no hook implementations)")
            return
        for hook_name, plugins in report.items():
            typer.echo(f"{hook_name}: {', '.join(plugins)}")


def _settings(state_dir: Path | None) -> Settings:
    from cafebot.config import get_settings

    return get_settings(state_dir=state_dir) if state_dir is not None else get_settings()


def _load_framework(settings: Settings) -> CafebotFramework:
    from cafebot.framework import CafebotFramework

    framework = CafebotFramework(settings)
    framework.load_hooks()
    return framework


def _echo_result(result: InboundResult, *, prefix: str = "") -> None:
    for outbound in result.outbounds:
        typer.echo(f"{prefix}{field_of(outbound, 'content', '')}")
        suggestions = field_of(outbound, "suggestions") or []
        if suggestions:
            typer.echo(f"{prefix}  [{' | '.join(suggestions)}]")
