"""Keyed state storage for conversation and user scoped properties."""

from __future__ import annotations

import json
import threading
from copy import deepcopy
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

from loguru import logger

STATE_FILE_SUFFIX = ".json"

DIALOG_STACK_PROPERTY = "mainDispatcherState"
ON_TURN_PROPERTY = "onTurnProperty"
USER_PROFILE_PROPERTY = "userProfile"
RESERVATION_PROPERTY = "reservationProperty"


class StateStore(Protocol):
    """Single-key read/write storage; no multi-key transactions."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStateStore:
    """Process-local store; values are copied in and out."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._values:
                return None
            return deepcopy(self._values[key])

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._values)


class JsonFileStateStore:
    """One JSON document per key under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        path = self._path_for(key)
        with self._lock:
            if not path.exists():
                return None
            try:
                return json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError:
                logger.warning("state.corrupt key={} path={}", key, path)
                return None

    def set(self, key: str, value: Any) -> None:
        path = self._path_for(key)
        staged = path.with_suffix(f"{STATE_FILE_SUFFIX}.tmp")
        with self._lock:
            staged.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
            staged.replace(path)

    def delete(self, key: str) -> None:
        with self._lock:
            self._path_for(key).unlink(missing_ok=True)

    def _path_for(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}{STATE_FILE_SUFFIX}"


class StatePropertyAccessor:
    """Reads and writes one named property, scoped by conversation or user id."""

    def __init__(self, store: StateStore, name: str) -> None:
        self._store = store
        self.name = name

    def key(self, scope_id: str) -> str:
        return f"{scope_id}/{self.name}"

    def get(self, scope_id: str, default: Any = None) -> Any:
        value = self._store.get(self.key(scope_id))
        if value is None:
            return deepcopy(default)
        return value

    def set(self, scope_id: str, value: Any) -> None:
        self._store.set(self.key(scope_id), value)

    def delete(self, scope_id: str) -> None:
        self._store.delete(self.key(scope_id))


class ConversationState:
    """Named property accessors over one store."""

    def __init__(self, store: StateStore) -> None:
        self.store = store
        self.dialog_stack = StatePropertyAccessor(store, DIALOG_STACK_PROPERTY)
        self.on_turn = StatePropertyAccessor(store, ON_TURN_PROPERTY)
        self.user_profile = StatePropertyAccessor(store, USER_PROFILE_PROPERTY)
        self.reservation = StatePropertyAccessor(store, RESERVATION_PROPERTY)
