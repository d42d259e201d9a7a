"""In-memory ephemeral state: per-document records, the live cache and its shadow.

The cache maps a document path to an :class:`EphemeralState`. A shadow copy of
the last flushed mapping is kept next to it so the flush loop can tell whether
anything needs to be written.
"""

from __future__ import annotations

import copy
import json
import math
from dataclasses import dataclass
from typing import Any


SCROLL_PRECISION = 4


def round_scroll(value: Any) -> float | None:
    """Return ``value`` rounded to 4 decimals, or None for anything non-numeric."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return round(number, SCROLL_PRECISION)


@dataclass(frozen=True)
class EphemeralState:
    scroll: float | None = None

    @property
    def has_scroll(self) -> bool:
        return self.scroll is not None

    def to_json(self) -> dict[str, float]:
        if self.scroll is None:
            return {}
        return {"scroll": self.scroll}

    @classmethod
    def from_json(cls, obj: Any) -> "EphemeralState":
        if not isinstance(obj, dict):
            raise ValueError(f"Expected a JSON object, got {type(obj).__name__}")
        if "scroll" not in obj or obj["scroll"] is None:
            return cls()
        scroll = round_scroll(obj["scroll"])
        if scroll is None or scroll < 0:
            raise ValueError(f"scroll must be a non-negative number, got {obj['scroll']!r}")
        return cls(scroll=scroll)


def states_equal(a: EphemeralState | None, b: EphemeralState | None) -> bool:
    """Presence-based equality: both unset, or both set to the same value.

    A missing record counts as a record without a scroll offset. Zero is a
    real position and is never confused with "unset".
    """
    a_scroll = a.scroll if a is not None else None
    b_scroll = b.scroll if b is not None else None
    if (a_scroll is None) != (b_scroll is None):
        return False
    return a_scroll == b_scroll


def serialize_db(entries: dict[str, EphemeralState]) -> str:
    return json.dumps(
        {path: state.to_json() for path, state in entries.items()},
        ensure_ascii=False,
        separators=(",", ":"),
    )


class StateCache:
    """Live document-path -> state mapping plus the last-flushed shadow copy."""

    def __init__(self, entries: dict[str, EphemeralState] | None = None) -> None:
        self._entries: dict[str, EphemeralState] = dict(entries or {})
        self._shadow: dict[str, EphemeralState] = copy.deepcopy(self._entries)

    @property
    def entries(self) -> dict[str, EphemeralState]:
        return dict(self._entries)

    @property
    def shadow(self) -> dict[str, EphemeralState]:
        return dict(self._shadow)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: str) -> EphemeralState | None:
        return self._entries.get(path)

    def set(self, path: str, state: EphemeralState) -> None:
        self._entries[path] = state

    def delete(self, path: str, *, recursive: bool = False) -> list[str]:
        """Remove ``path`` (and, with ``recursive``, every key below it)."""
        removed: list[str] = []
        if self._entries.pop(path, None) is not None:
            removed.append(path)
        if recursive:
            prefix = path.rstrip("/") + "/"
            for key in [k for k in self._entries if k.startswith(prefix)]:
                del self._entries[key]
                removed.append(key)
        return removed

    def rename(self, old_path: str, new_path: str, *, recursive: bool = False) -> list[tuple[str, str]]:
        """Move the entry at ``old_path`` to ``new_path``.

        If ``old_path`` has no entry, ``new_path`` ends up without one too.
        With ``recursive``, keys below ``old_path/`` move under ``new_path/``.
        """
        moves: list[tuple[str, str]] = [(old_path, new_path)]
        if recursive:
            old_prefix = old_path.rstrip("/") + "/"
            new_prefix = new_path.rstrip("/") + "/"
            for key in list(self._entries):
                if key.startswith(old_prefix):
                    moves.append((key, new_prefix + key[len(old_prefix):]))

        moved = [(src, dst, self._entries.pop(src, None)) for src, dst in moves]
        for src, dst, state in moved:
            if state is None:
                self._entries.pop(dst, None)
            else:
                self._entries[dst] = state
        return [(src, dst) for src, dst, state in moved if state is not None]

    def serialize(self) -> str:
        return serialize_db(self._entries)

    def is_dirty(self) -> bool:
        return self.serialize() != serialize_db(self._shadow)

    def mark_flushed(self, written: dict[str, EphemeralState]) -> None:
        self._shadow = copy.deepcopy(written)


@dataclass
class LifecycleState:
    """Process-wide bookkeeping shared by the detector and the coordinator."""

    last_loaded_path: str | None = None
    last_state: EphemeralState | None = None
    loading: bool = False
    open_view_identities: frozenset[tuple[str, str | None]] = frozenset()

    def reset(self, path: str | None) -> None:
        self.last_loaded_path = path
        self.last_state = None
