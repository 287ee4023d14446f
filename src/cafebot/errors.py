"""Application-level exception types for cafebot."""

from __future__ import annotations


class CafebotError(Exception):
    """Base exception for cafebot."""


class ConfigurationError(CafebotError):
    """Base exception for construction and startup validation errors."""


class MissingDependencyError(ConfigurationError):
    """Raised when a required collaborator is not supplied at construction."""


class UnknownDialogError(ConfigurationError):
    """Raised when the intent table names a dialog that is not registered."""


class DuplicateDialogError(ConfigurationError):
    """Raised when two dialogs are registered under the same name."""


class DuplicateRuleError(ConfigurationError):
    """Raised when an interruption rule is keyed on an operation that already has one."""
