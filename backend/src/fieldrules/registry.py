"""Named registries for fieldrules.

Provides registration and lookup for:
- Format presets (regex + invert flag) referenced by ``format=`` options
- Predicates referenced by name from declarative rule definitions
  (``when`` gates and custom ``validates_with`` checks)
"""

import re
from collections.abc import Callable
from typing import Any

from fieldrules.host import Field

# Predicate signature: (field) -> bool
Predicate = Callable[[Field], bool]


class FormatRegistry:
    """Registry of named format presets.

    A preset is a partial format configuration, typically
    ``validation_regex`` and optionally ``invert_rule``. Presets are
    overlaid between the format defaults and the caller's options.

    Example:
        FormatRegistry.register("zip", {"validation_regex": r"^\\d{5}$"})
        validates_format(field, format="zip")
    """

    # Shipped presets; always available and untouched by clear()
    _builtins: dict[str, dict[str, Any]] = {
        "email": {
            "validation_regex": re.compile(r"([^@\s]+)@((?:[-a-z0-9]+\.)+[a-z]{2,})", re.IGNORECASE),
        },
        # Matches any disallowed character, so the rule is inverted
        "subDomain": {
            "validation_regex": re.compile(r"[^a-z0-9-]", re.IGNORECASE),
            "invert_rule": True,
        },
    }
    _formats: dict[str, dict[str, Any]] = {}

    @classmethod
    def register(cls, name: str, options: dict[str, Any]) -> None:
        """Register a format preset by name.

        Idempotent - re-registering the same name is a no-op. A registered
        preset shadows a built-in preset of the same name.
        """
        if name in cls._formats:
            return
        cls._formats[name] = dict(options)

    @classmethod
    def get(cls, name: str) -> dict[str, Any]:
        """Get a copy of a registered or built-in preset.

        Raises:
            ValueError: If the preset is not registered
        """
        preset = cls._formats.get(name, cls._builtins.get(name))
        if preset is None:
            raise ValueError(
                f"Format '{name}' is not registered. "
                "Available formats: " + ", ".join(cls.list_registered())
            )
        return dict(preset)

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._formats or name in cls._builtins

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._formats.keys() | cls._builtins.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear registrations, leaving the built-in presets. Primarily for testing."""
        cls._formats.clear()


class PredicateRegistry:
    """Registry of named field predicates.

    Predicates must be registered before a rule definition can reference
    them by name.

    Example:
        @predicate("isCompany")
        def is_company(field) -> bool:
            ...
    """

    _predicates: dict[str, Predicate] = {}

    @classmethod
    def register(cls, name: str, fn: Predicate) -> None:
        """Register a predicate by name.

        Idempotent - re-registering the same name is a no-op.
        """
        if name in cls._predicates:
            return
        cls._predicates[name] = fn

    @classmethod
    def get(cls, name: str) -> Predicate:
        """Get a registered predicate.

        Raises:
            ValueError: If the predicate is not registered
        """
        if name not in cls._predicates:
            raise ValueError(
                f"Predicate '{name}' is not registered. "
                "Predicates must be explicitly registered before rules reference them."
            )
        return cls._predicates[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._predicates

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._predicates.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._predicates.clear()


def predicate(name: str) -> Callable[[Predicate], Predicate]:
    """Decorator to register a predicate.

    Usage:
        @predicate("hasCompany")
        def has_company(field) -> bool:
            return field.value != ""
    """

    def decorator(fn: Predicate) -> Predicate:
        PredicateRegistry.register(name, fn)
        return fn

    return decorator
