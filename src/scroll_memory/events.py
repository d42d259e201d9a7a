"""Events consumed from the host: document lifecycle and raw input signals."""

from __future__ import annotations

from dataclasses import dataclass


NAVIGATION_KEYS = frozenset(
    {"ArrowUp", "ArrowDown", "PageUp", "PageDown", "Home", "End", "Space", " "}
)


@dataclass(frozen=True)
class OpenEvent:
    pass


@dataclass(frozen=True)
class RenameEvent:
    old_path: str
    new_path: str
    is_folder: bool = False


@dataclass(frozen=True)
class DeleteEvent:
    path: str
    is_folder: bool = False


@dataclass(frozen=True)
class QuitEvent:
    pass


@dataclass(frozen=True)
class ScrollSignal:
    pass


@dataclass(frozen=True)
class WheelSignal:
    pass


@dataclass(frozen=True)
class KeySignal:
    key: str

    @property
    def is_navigation(self) -> bool:
        return self.key in NAVIGATION_KEYS


LifecycleEvent = OpenEvent | RenameEvent | DeleteEvent | QuitEvent
InputSignal = ScrollSignal | WheelSignal | KeySignal
Event = LifecycleEvent | InputSignal
