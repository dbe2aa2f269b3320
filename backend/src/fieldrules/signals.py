"""Outcome signals and the ancestor state marker.

Publishing a verdict means triggering the outcome signals on the field
itself and toggling the rule's marker token on the nearest ancestor scope:

    VALID         valid, valid-<kind>                 marker removed
    INVALID       invalid, invalid-<kind>             marker added
    SKIP          (none)                              marker removed
    UNDETERMINED  undetermined, undetermined-<kind>   marker untouched

Bindings that share a scope write to it independently; the last write wins.
"""

import logging

from fieldrules.config import RuleConfig
from fieldrules.host import Field
from fieldrules.types import Outcome, Verdict

logger = logging.getLogger(__name__)

VALID = "valid"
INVALID = "invalid"
UNDETERMINED = "undetermined"


def signal_names(verdict: Verdict, kind_name: str) -> tuple[str, ...]:
    """Signal names triggered for ``verdict``, generic name first."""
    if verdict == Verdict.SKIP:
        return ()
    base = verdict.value
    return (base, f"{base}-{kind_name}")


def set_marker(field: Field, selector: str, token: str) -> bool:
    """Add ``token`` to the closest scope. Returns True if it changed."""
    scope = field.closest(selector)
    if scope is None or scope.has_marker(token):
        return False
    scope.add_marker(token)
    return True


def clear_marker(field: Field, selector: str, token: str) -> bool:
    """Remove ``token`` from the closest scope. Returns True if it changed."""
    scope = field.closest(selector)
    if scope is None or not scope.has_marker(token):
        return False
    scope.remove_marker(token)
    return True


def publish(field: Field, config: RuleConfig, verdict: Verdict) -> Outcome:
    """Trigger the signals for ``verdict`` and update the marker."""
    signals = signal_names(verdict, config.kind.value)
    for name in signals:
        field.trigger(name)

    changed = False
    if verdict == Verdict.INVALID:
        changed = set_marker(field, config.scope, config.invalid_class)
    elif verdict in (Verdict.VALID, Verdict.SKIP):
        changed = clear_marker(field, config.scope, config.invalid_class)

    logger.debug(
        "%s rule on %r -> %s (signals=%s, marker_changed=%s)",
        config.kind.value,
        field,
        verdict.value,
        signals,
        changed,
    )
    return Outcome(
        kind=config.kind,
        verdict=verdict,
        signals=signals,
        marker=config.invalid_class,
        marker_changed=changed,
    )
