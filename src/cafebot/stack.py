"""Dialog stack value for one conversation."""

from __future__ import annotations

from collections.abc import Iterator
from copy import deepcopy
from typing import Any

from cafebot.types import DialogFrame


class DialogStack:
    """Ordered dialog frames; the last frame is the active dialog."""

    def __init__(self, frames: list[DialogFrame] | None = None) -> None:
        self._frames: list[DialogFrame] = list(frames or [])

    def __len__(self) -> int:
        return len(self._frames)

    def __iter__(self) -> Iterator[DialogFrame]:
        return iter(self._frames)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DialogStack):
            return NotImplemented
        return self.to_state() == other.to_state()

    def __repr__(self) -> str:
        return f"DialogStack({[frame.dialog_id for frame in self._frames]!r})"

    @property
    def is_idle(self) -> bool:
        return not self._frames

    @property
    def top(self) -> DialogFrame | None:
        if not self._frames:
            return None
        return self._frames[-1]

    @property
    def active_dialog_id(self) -> str:
        top = self.top
        return top.dialog_id if top is not None else ""

    def push(self, dialog_id: str) -> DialogFrame:
        frame = DialogFrame(dialog_id=dialog_id)
        self._frames.append(frame)
        return frame

    def pop(self) -> DialogFrame | None:
        if not self._frames:
            return None
        return self._frames.pop()

    def clear(self) -> list[DialogFrame]:
        """Remove every frame and return them top-down."""
        unwound = list(reversed(self._frames))
        self._frames.clear()
        return unwound

    def copy(self) -> DialogStack:
        return DialogStack(deepcopy(self._frames))

    def to_state(self) -> list[dict[str, Any]]:
        return [{"dialog_id": frame.dialog_id, "local_state": deepcopy(frame.local_state)} for frame in self._frames]

    @classmethod
    def from_state(cls, state: object) -> DialogStack:
        """Rebuild a stack from its persisted form, skipping malformed frames."""
        if not isinstance(state, list):
            return cls()
        frames: list[DialogFrame] = []
        for item in state:
            if not isinstance(item, dict):
                continue
            dialog_id = item.get("dialog_id")
            if not isinstance(dialog_id, str) or not dialog_id:
                continue
            local_state = item.get("local_state")
            if not isinstance(local_state, dict):
                local_state = {}
            frames.append(DialogFrame(dialog_id=dialog_id, local_state=deepcopy(local_state)))
        return cls(frames)
