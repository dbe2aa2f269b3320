"""Host environment abstraction.

The engine never touches a concrete UI toolkit. It needs a field that can
report its value and checked state, deliver named events, and locate the
nearest ancestor scope that carries state markers. ``MemoryField`` and
``MemoryScope`` implement these protocols in memory; they back the CLI and
the test suite, and serve as the reference for adapting other hosts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

# Event handler signature: (event name) -> None
EventHandler = Callable[[str], None]


@runtime_checkable
class Scope(Protocol):
    """An ancestor container that holds state marker tokens."""

    def has_marker(self, token: str) -> bool:
        ...

    def add_marker(self, token: str) -> None:
        ...

    def remove_marker(self, token: str) -> None:
        ...


@runtime_checkable
class Field(Protocol):
    """An input-like element a rule can be bound to."""

    @property
    def value(self) -> str:
        ...

    @property
    def checked(self) -> bool:
        ...

    @property
    def is_checkbox(self) -> bool:
        ...

    def on(self, events: Iterable[str], handler: EventHandler) -> None:
        ...

    def off(self, events: Iterable[str], handler: EventHandler) -> None:
        ...

    def trigger(self, event: str) -> None:
        ...

    def closest(self, selector: str) -> Scope | None:
        ...


class MemoryScope:
    """In-memory container node.

    ``selector`` matching is by tag name (``"fieldset"``) or ``"#name"``.
    ``marker_changes`` counts every add/remove that actually changed the
    token set.
    """

    def __init__(
        self,
        tag: str = "fieldset",
        name: str = "",
        parent: MemoryScope | None = None,
    ) -> None:
        self.tag = tag
        self.name = name
        self.parent = parent
        self.markers: set[str] = set()
        self.marker_changes = 0

    def matches(self, selector: str) -> bool:
        if selector.startswith("#"):
            return self.name == selector[1:]
        return self.tag == selector

    def closest(self, selector: str) -> MemoryScope | None:
        node: MemoryScope | None = self
        while node is not None:
            if node.matches(selector):
                return node
            node = node.parent
        return None

    def has_marker(self, token: str) -> bool:
        return token in self.markers

    def add_marker(self, token: str) -> None:
        if token not in self.markers:
            self.markers.add(token)
            self.marker_changes += 1

    def remove_marker(self, token: str) -> None:
        if token in self.markers:
            self.markers.discard(token)
            self.marker_changes += 1

    def __repr__(self) -> str:
        return f"MemoryScope(tag={self.tag!r}, name={self.name!r}, markers={sorted(self.markers)!r})"


class MemoryField:
    """In-memory input element.

    Handlers run synchronously, in subscription order, when an event is
    triggered. Every triggered event name is appended to ``fired``.
    """

    def __init__(
        self,
        name: str = "",
        value: str = "",
        *,
        control_type: str = "text",
        checked: bool = False,
        parent: MemoryScope | None = None,
    ) -> None:
        self.name = name
        self.value = value
        self.control_type = control_type
        self.checked = checked
        self.parent = parent
        self.fired: list[str] = []
        self._handlers: dict[str, list[EventHandler]] = {}

    @property
    def is_checkbox(self) -> bool:
        return self.control_type == "checkbox"

    def on(self, events: Iterable[str], handler: EventHandler) -> None:
        for event in events:
            self._handlers.setdefault(event, []).append(handler)

    def off(self, events: Iterable[str], handler: EventHandler) -> None:
        for event in events:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

    def handlers(self, event: str) -> list[EventHandler]:
        return list(self._handlers.get(event, []))

    def trigger(self, event: str) -> None:
        self.fired.append(event)
        for handler in self.handlers(event):
            handler(event)

    def closest(self, selector: str) -> MemoryScope | None:
        if self.parent is None:
            return None
        return self.parent.closest(selector)

    def set_value(self, value: str, *events: str) -> None:
        """Change the value, then fire ``events`` in order."""
        self.value = value
        for event in events:
            self.trigger(event)

    def __repr__(self) -> str:
        return f"MemoryField(name={self.name!r}, value={self.value!r})"
