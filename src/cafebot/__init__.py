"""cafebot - per-turn dialog dispatch for a multi-dialog cafe assistant."""

from .dialogs import Dialog, DialogContext, DialogSet, TurnContext
from .dispatcher import DispatchOutcome, MainDispatcher
from .policy import InterruptionPolicy, InterruptionRule
from .stack import DialogStack
from .types import DialogTurnStatus, EntityProperty, OnTurnInput, PolicyDecision, TurnResult

__version__ = "0.1.0"

__all__ = [
    "Dialog",
    "DialogContext",
    "DialogSet",
    "DialogStack",
    "DialogTurnStatus",
    "DispatchOutcome",
    "EntityProperty",
    "InterruptionPolicy",
    "InterruptionRule",
    "MainDispatcher",
    "OnTurnInput",
    "PolicyDecision",
    "TurnContext",
    "TurnResult",
]
