"""Runtime logging helpers."""

from __future__ import annotations

import sys
from logging import Handler
from typing import Literal

from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "chat"]

_DEFAULT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {message}"
# The chat terminal belongs to the conversation unless a level is configured.
_PROFILE_LEVELS: dict[LogProfile, str] = {"default": "INFO", "chat": "WARNING"}
_CONFIGURED: tuple[LogProfile, str] | None = None


def _build_chat_handler() -> Handler:
    return RichHandler(
        console=get_console(),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(*, profile: LogProfile = "default", level: str | None = None) -> None:
    """Install the sink for ``profile``; a repeated call with the same profile and level is a no-op."""

    global _CONFIGURED
    resolved_level = (level or _PROFILE_LEVELS[profile]).upper()
    if _CONFIGURED == (profile, resolved_level):
        return

    logger.remove()
    if profile == "chat":
        logger.add(_build_chat_handler(), level=resolved_level, format="{message}", backtrace=False, diagnose=False)
    else:
        logger.add(_write_stderr, level=resolved_level, format=_DEFAULT_FORMAT, backtrace=False, diagnose=False)
    _CONFIGURED = (profile, resolved_level)


def _write_stderr(message: str) -> None:
    # Looked up per call; sys.stderr may be replaced after configuration.
    sys.stderr.write(message)
