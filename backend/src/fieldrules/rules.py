"""Attachment API.

Each ``validates_*`` function binds one rule to every field in a selection
and returns the selection unchanged, so rules can be chained:

    validates_length(validates_presence(name), minimum=2, maximum=40)

Attaching subscribes to the rule's events; nothing is evaluated until the
first event arrives. A field may carry any number of rules, including
several of the same kind; ``detach_all`` removes them together.
"""

import weakref
from typing import Any, TypeVar

from fieldrules.binding import FieldBinding
from fieldrules.config import merge_options
from fieldrules.host import Field
from fieldrules.lookup import LookupTransport
from fieldrules.settings import EngineSettings
from fieldrules.types import RuleKind

S = TypeVar("S")

# field -> bindings in attach order. Bindings are owned by the handlers the
# field holds.
_bindings: "weakref.WeakKeyDictionary[Any, list[weakref.ref[FieldBinding]]]" = weakref.WeakKeyDictionary()


def _fields(selection: Any) -> list[Field]:
    if isinstance(selection, Field):
        return [selection]
    return list(selection)


def bind(
    field: Field,
    kind: RuleKind,
    options: dict[str, Any] | None = None,
    *,
    transport: LookupTransport | None = None,
    settings: EngineSettings | None = None,
) -> FieldBinding:
    """Create, register and attach a binding for a single field."""
    config = merge_options(kind, options, settings)
    binding = FieldBinding(field, config, transport=transport)

    _bindings.setdefault(field, []).append(weakref.ref(binding))
    return binding.attach()


def _attach(kind: RuleKind, selection: S, options: dict[str, Any], **kwargs: Any) -> S:
    for field in _fields(selection):
        bind(field, kind, options, **kwargs)
    return selection


def validates_presence(selection: S, **options: Any) -> S:
    """Invalid when the value equals ``blank_value`` or a checkbox is unchecked.

    Options: invalid_class, blank_value, validates_on, when, scope
    """
    return _attach(RuleKind.PRESENCE, selection, options)


def validates_format(selection: S, **options: Any) -> S:
    """Match the value against ``validation_regex`` (or a named ``format``).

    Options: invalid_class, validation_regex, invert_rule, format,
    validates_on, when, scope
    """
    return _attach(RuleKind.FORMAT, selection, options)


def validates_length(selection: S, **options: Any) -> S:
    """Keep the value length within inclusive ``minimum``/``maximum`` bounds.

    Options: invalid_class, minimum, maximum, validates_on, when, scope
    """
    return _attach(RuleKind.LENGTH, selection, options)


def validates_numericality(selection: S, **options: Any) -> S:
    """Require a numeric value (commas ignored), optionally an integer.

    Options: invalid_class, only_integer, validates_on, when, scope
    """
    return _attach(RuleKind.NUMERICALITY, selection, options)


def validates_uniqueness(
    selection: S,
    *,
    transport: LookupTransport | None = None,
    **options: Any,
) -> S:
    """Reject values already present in ``source``.

    ``source`` is either a collection of taken values or a lookup URL
    (string or ``RemoteSource``) answering with a JSON array.

    Options: invalid_class, source, validates_on, when, scope
    """
    return _attach(RuleKind.UNIQUENESS, selection, options, transport=transport)


def validates(selection: S, **options: Any) -> S:
    """Custom rule: ``validates_with(field)`` must return True.

    Options: invalid_class, validates_with, validates_on, when, scope
    """
    return _attach(RuleKind.CUSTOM, selection, options)


def bindings_for(field: Field) -> list[FieldBinding]:
    """Bindings currently attached to ``field``."""
    refs = _bindings.get(field, [])
    return [b for b in (ref() for ref in refs) if b is not None and b.attached]


def detach_all(field: Field) -> None:
    """Detach every rule from ``field``."""
    for binding in bindings_for(field):
        binding.detach()
    _bindings.pop(field, None)
