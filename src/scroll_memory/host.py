"""Host application interface and an in-memory host implementation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Protocol


DOCUMENT_VIEW_TYPE = "markdown"


@dataclass(frozen=True)
class ViewRef:
    view_id: str
    document_path: str | None
    view_type: str = DOCUMENT_VIEW_TYPE

    @property
    def identity(self) -> tuple[str, str | None]:
        return (self.view_id, self.document_path)


class Host(Protocol):
    def active_document_path(self) -> str | None: ...

    def most_recent_view(self) -> ViewRef | None: ...

    def iter_views(self) -> Iterable[ViewRef]: ...

    def get_scroll(self) -> float | None: ...

    def set_scroll(self, value: float) -> None: ...

    def has_flashing_marker(self) -> bool: ...


@dataclass
class FakeView:
    view_id: str
    document_path: str | None
    view_type: str = DOCUMENT_VIEW_TYPE
    scroll: float | None = 0.0
    rendered: bool = True

    def ref(self) -> ViewRef:
        return ViewRef(self.view_id, self.document_path, self.view_type)


@dataclass
class FakeHost:
    """Offline host: a list of panes holding views, one of them active."""

    views: list[FakeView] = field(default_factory=list)
    active_view_id: str | None = None
    flashing: bool = False
    scroll_writes: list[tuple[str, float]] = field(default_factory=list)
    _next_id: int = 0

    def add_view(
        self,
        document_path: str | None,
        *,
        view_type: str = DOCUMENT_VIEW_TYPE,
        activate: bool = True,
    ) -> FakeView:
        self._next_id += 1
        view = FakeView(view_id=f"view-{self._next_id}", document_path=document_path, view_type=view_type)
        self.views.append(view)
        if activate:
            self.active_view_id = view.view_id
        return view

    def open(self, document_path: str | None, *, new_view: bool = False) -> FakeView:
        """Show ``document_path`` in the active view (or a new one)."""
        view = self.active_view
        if view is None or new_view:
            return self.add_view(document_path)
        view.document_path = document_path
        view.scroll = 0.0
        return view

    def activate(self, view_id: str) -> None:
        self.active_view_id = view_id

    def rename_document(self, old_path: str, new_path: str) -> None:
        for view in self.views:
            if view.document_path == old_path:
                view.document_path = new_path

    @property
    def active_view(self) -> FakeView | None:
        for view in self.views:
            if view.view_id == self.active_view_id:
                return view
        return None

    def scroll_to(self, value: float) -> None:
        view = self.active_view
        if view is not None:
            view.scroll = value

    def active_document_path(self) -> str | None:
        view = self.active_view
        return view.document_path if view is not None else None

    def most_recent_view(self) -> ViewRef | None:
        view = self.active_view
        return view.ref() if view is not None else None

    def iter_views(self) -> Iterator[ViewRef]:
        for view in self.views:
            yield view.ref()

    def get_scroll(self) -> float | None:
        view = self.active_view
        if view is None or view.view_type != DOCUMENT_VIEW_TYPE:
            return None
        if not view.rendered:
            return math.nan
        return view.scroll

    def set_scroll(self, value: float) -> None:
        view = self.active_view
        if view is None or view.view_type != DOCUMENT_VIEW_TYPE:
            return
        view.scroll = value
        self.scroll_writes.append((view.view_id, value))

    def has_flashing_marker(self) -> bool:
        return self.flashing
