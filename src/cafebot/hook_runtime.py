"""Plugin hook calls for the cafebot framework.

Two kinds of hooks exist. Setup hooks (``provide_*``, ``register_cli_commands``) run
synchronously while the framework is assembled; a plugin that fails there leaves the
bot misconfigured, so the failure is raised as ``ConfigurationError``. Turn hooks
(``resolve_*``, ``dispatch_outbound``) run once per inbound message and may be async;
a failing plugin is reported to ``on_error`` observers and the next plugin is tried.
"""

from __future__ import annotations

import inspect
from typing import Any

import pluggy
from loguru import logger

from cafebot.errors import ConfigurationError
from cafebot.hookspecs import CafebotHookSpecs
from cafebot.types import Envelope

HOOK_NAMES: tuple[str, ...] = tuple(name for name in vars(CafebotHookSpecs) if not name.startswith("_"))


class HookRuntime:
    def __init__(self, plugin_manager: pluggy.PluginManager) -> None:
        self._plugin_manager = plugin_manager

    def setup(self, hook_name: str, **kwargs: Any) -> list[Any]:
        """Collect every plugin's answer to a setup hook, newest registration first."""

        answers: list[Any] = []
        for impl in self._implementations(hook_name):
            try:
                answer = impl.function(**_arguments(impl, kwargs))
            except Exception as exc:
                raise ConfigurationError(f"{hook_name} failed in plugin {_plugin_name(impl)!r}: {exc}") from exc
            if inspect.iscoroutine(answer):
                answer.close()
                raise ConfigurationError(f"{hook_name} must be synchronous, plugin {_plugin_name(impl)!r} is async")
            answers.append(answer)
        return answers

    async def first(self, hook_name: str, **kwargs: Any) -> Any:
        """First non-None answer to a turn hook, or None when every plugin declines."""

        answers = await self._each(hook_name, kwargs, stop_at_first=True)
        return answers[0] if answers else None

    async def fan_out(self, hook_name: str, **kwargs: Any) -> list[Any]:
        return await self._each(hook_name, kwargs, stop_at_first=False)

    async def report_error(self, *, stage: str, error: Exception, message: Envelope | None) -> None:
        """Tell ``on_error`` observers about a failure. Observers cannot fail the turn."""

        for impl in self._implementations("on_error"):
            try:
                outcome = impl.function(**_arguments(impl, {"stage": stage, "error": error, "message": message}))
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.opt(exception=True).warning("hook.observer_failed stage={} plugin={}", stage, _plugin_name(impl))

    def hook_report(self) -> dict[str, list[str]]:
        """Hook name -> implementing plugin names, in call order."""

        report: dict[str, list[str]] = {}
        for hook_name in sorted(HOOK_NAMES):
            plugins = [_plugin_name(impl) for impl in self._implementations(hook_name)]
            if plugins:
                report[hook_name] = plugins
        return report

    async def _each(self, hook_name: str, kwargs: dict[str, Any], *, stop_at_first: bool) -> list[Any]:
        answers: list[Any] = []
        for impl in self._implementations(hook_name):
            try:
                answer = impl.function(**_arguments(impl, kwargs))
                if inspect.isawaitable(answer):
                    answer = await answer
            except Exception as exc:
                logger.warning("hook.failed hook={} plugin={} error={}", hook_name, _plugin_name(impl), exc)
                await self.report_error(stage=f"{hook_name}:{_plugin_name(impl)}", error=exc, message=kwargs.get("message"))
                continue
            if stop_at_first:
                if answer is None:
                    continue
                return [answer]
            answers.append(answer)
        return answers

    def _implementations(self, hook_name: str) -> list[Any]:
        caller = getattr(self._plugin_manager.hook, hook_name, None)
        if caller is None:
            return []
        # Newest registration first, matching pluggy's own call order.
        return caller.get_hookimpls()[::-1]


def _arguments(impl: Any, kwargs: dict[str, Any]) -> dict[str, Any]:
    return {name: kwargs[name] for name in impl.argnames if name in kwargs}


def _plugin_name(impl: Any) -> str:
    return impl.plugin_name or "<unknown>"
