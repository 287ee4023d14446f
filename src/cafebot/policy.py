"""Interruption policy: may the requested operation run right now?"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from cafebot.errors import DuplicateRuleError
from cafebot.types import CANCEL_INTENT, PolicyDecision

SHOW_CAPABILITIES = "ShowCapabilities"

REPEATED_INFO_REASON = "Sorry! I'm unable to process that. You can say 'cancel' to cancel this conversation.."
NOTHING_TO_CANCEL_REASON = "Sure, but there is nothing to cancel.."

ALLOWED = PolicyDecision(allowed=True, reason="")


@dataclass(frozen=True)
class InterruptionRule:
    """Denies ``operation`` with ``reason`` when ``blocks(active_dialog_id)`` holds."""

    operation: str
    blocks: Callable[[str], bool]
    reason: str

    def evaluate(self, active_dialog_id: str) -> PolicyDecision | None:
        if self.blocks(active_dialog_id):
            return PolicyDecision(allowed=False, reason=self.reason)
        return None


def _is_idle(active_dialog_id: str) -> bool:
    return not active_dialog_id.strip()


DEFAULT_RULES: tuple[InterruptionRule, ...] = (
    InterruptionRule(
        operation=SHOW_CAPABILITIES,
        blocks=lambda active: active == SHOW_CAPABILITIES,
        reason=REPEATED_INFO_REASON,
    ),
    InterruptionRule(operation=CANCEL_INTENT, blocks=_is_idle, reason=NOTHING_TO_CANCEL_REASON),
)


class InterruptionPolicy:
    """Ordered rule table, first matching operation wins."""

    def __init__(self, rules: tuple[InterruptionRule, ...] | list[InterruptionRule] = DEFAULT_RULES) -> None:
        self._rules: list[InterruptionRule] = []
        for rule in rules:
            self.add_rule(rule)

    @property
    def rules(self) -> list[InterruptionRule]:
        return list(self._rules)

    def add_rule(self, rule: InterruptionRule) -> None:
        if any(existing.operation == rule.operation for existing in self._rules):
            raise DuplicateRuleError(f"interruption rule already registered for operation: {rule.operation}")
        self._rules.append(rule)

    def evaluate(self, active_dialog_id: str, requested_operation: str) -> PolicyDecision:
        for rule in self._rules:
            if rule.operation != requested_operation:
                continue
            return rule.evaluate(active_dialog_id or "") or ALLOWED
        return ALLOWED


def evaluate(active_dialog_id: str, requested_operation: str) -> PolicyDecision:
    """Evaluate against the default rule table."""

    return _DEFAULT_POLICY.evaluate(active_dialog_id, requested_operation)


_DEFAULT_POLICY = InterruptionPolicy()
