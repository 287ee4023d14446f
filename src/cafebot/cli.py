"""cafebot CLI bootstrap."""

from __future__ import annotations

import typer

from cafebot.framework import CafebotFramework


def create_cli_app() -> typer.Typer:
    app = typer.Typer(name="cafebot", help="Multi-dialog cafe assistant", add_completion=False)
    framework = CafebotFramework()
    framework.load_hooks()
    framework.register_cli_commands(app)
    return app


app = create_cli_app()
