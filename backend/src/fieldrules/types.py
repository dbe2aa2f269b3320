"""Core types for the fieldrules validation engine.

This module defines the small vocabulary shared by every layer:
- RuleKind: which of the six rule kinds a binding runs
- Verdict: what an evaluator decided about the current value
- BindingState: where a binding is in its re-evaluation cycle
- Outcome: what was published for one verdict (signals + marker change)
"""

from dataclasses import dataclass, field
from enum import Enum


class RuleKind(Enum):
    """The kind of rule attached to a field.

    The value is used to build kind-qualified signal names,
    e.g. ``invalid-format``.
    """

    PRESENCE = "presence"
    FORMAT = "format"
    LENGTH = "length"
    NUMERICALITY = "numericality"
    UNIQUENESS = "uniqueness"
    CUSTOM = "custom"


class Verdict(Enum):
    """Result of evaluating one rule against the current field value.

    VALID: emit valid signals and clear the marker
    INVALID: emit invalid signals and set the marker
    SKIP: clear the marker without emitting a signal (empty format values)
    UNDETERMINED: the rule could not decide (e.g. remote lookup failed)
    """

    VALID = "valid"
    INVALID = "invalid"
    SKIP = "skip"
    UNDETERMINED = "undetermined"


class BindingState(Enum):
    """Re-evaluation state of a single binding."""

    IDLE = "idle"
    GATING = "gating"
    EVALUATING = "evaluating"


@dataclass(frozen=True)
class Outcome:
    """What was published for a single verdict.

    Attributes:
        kind: Rule kind that produced the verdict
        verdict: The verdict that was published
        signals: Signal names triggered on the field, in order
        marker: The state marker token of the rule
        marker_changed: True if the ancestor scope's marker was toggled
    """

    kind: RuleKind
    verdict: Verdict
    signals: tuple[str, ...] = field(default_factory=tuple)
    marker: str = ""
    marker_changed: bool = False


@dataclass(frozen=True)
class RemoteSource:
    """Endpoint descriptor for remote uniqueness lookups.

    The lookup issues ``GET url?<param>=<value>`` and expects a JSON array;
    a non-empty array means the value is already taken.
    """

    url: str
    param: str = "q"
