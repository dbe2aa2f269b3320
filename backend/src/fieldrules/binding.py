"""Field bindings and the event-triggered re-evaluation loop.

A ``FieldBinding`` ties one field to one rule. On every configured event it
runs the ``when`` gate, evaluates the rule and publishes the verdict:

    IDLE -> GATING -> EVALUATING -> IDLE

The cycle completes synchronously within the event, except for remote
uniqueness rules, which hand the value to a ``UniquenessCoordinator`` and
publish whenever a surviving result arrives.
"""

import logging
from collections import deque
from typing import Any

from fieldrules.config import RuleConfig
from fieldrules.errors import RuleConfigurationError
from fieldrules.evaluators import evaluate_uniqueness_set, get_evaluator
from fieldrules.host import Field
from fieldrules.lookup import HttpLookupTransport, InFlightLookup, LookupTransport, UniquenessCoordinator
from fieldrules.signals import publish
from fieldrules.types import BindingState, Outcome, RemoteSource, RuleKind, Verdict

logger = logging.getLogger(__name__)

OUTCOME_HISTORY = 50


class FieldBinding:
    """One rule attached to one field.

    Args:
        field: The field to watch
        config: Merged configuration for the rule
        transport: Lookup transport for remote uniqueness sources
            (an ``HttpLookupTransport`` is created when needed and omitted)

    Attributes:
        state: Current position in the re-evaluation cycle
        last_value: Field value seen by the most recent triggering event
        outcomes: Most recent published outcomes, oldest first
    """

    def __init__(
        self,
        field: Field,
        config: RuleConfig,
        transport: LookupTransport | None = None,
    ) -> None:
        self.field = field
        self.config = config
        self.state = BindingState.IDLE
        self.last_value: str | None = None
        self.outcomes: deque[Outcome] = deque(maxlen=OUTCOME_HISTORY)
        self.attached = False
        self.coordinator: UniquenessCoordinator | None = None

        source = config.get("source")
        if config.kind == RuleKind.UNIQUENESS and isinstance(source, RemoteSource):
            self.coordinator = UniquenessCoordinator(
                field,
                source,
                transport or HttpLookupTransport(),
                self._publish_safely,
            )

    @property
    def kind(self) -> RuleKind:
        return self.config.kind

    @property
    def pending(self) -> InFlightLookup | None:
        """The in-flight uniqueness lookup, if any."""
        if self.coordinator is None:
            return None
        return self.coordinator.pending

    def attach(self) -> "FieldBinding":
        """Subscribe to the configured events. Does not evaluate."""
        if not self.attached:
            self.field.on(self.config.validates_on, self.handle_event)
            self.attached = True
        return self

    def detach(self) -> None:
        """Unsubscribe and cancel any in-flight lookup."""
        if self.attached:
            self.field.off(self.config.validates_on, self.handle_event)
            self.attached = False
        if self.coordinator is not None:
            self.coordinator.cancel()

    async def wait(self) -> None:
        """Wait for the in-flight lookup (if any) to finish."""
        if self.coordinator is not None:
            await self.coordinator.wait()

    def handle_event(self, event: str) -> None:
        """Run one gate/evaluate/publish cycle for ``event``."""
        self.state = BindingState.GATING
        self.last_value = self.field.value
        try:
            if not self._gate():
                return
            self.state = BindingState.EVALUATING
            self._evaluate()
        except RuleConfigurationError as e:
            logger.warning("%s rule on %r is misconfigured: %s", self.kind.value, self.field, e)
            self._publish_safely(Verdict.INVALID)
        except Exception:
            logger.exception("%s rule on %r failed during %r", self.kind.value, self.field, event)
            self._publish_safely(Verdict.UNDETERMINED)
        finally:
            self.state = BindingState.IDLE

    def _gate(self) -> bool:
        try:
            return bool(self.config.when(self.field))
        except Exception:
            logger.exception("when predicate of %s rule on %r raised; skipping", self.kind.value, self.field)
            return False

    def _evaluate(self) -> None:
        if self.kind != RuleKind.UNIQUENESS:
            self._apply(get_evaluator(self.kind)(self.field, self.config))
            return

        value = self.field.value
        if value == "":
            return
        if self.coordinator is not None:
            self.coordinator.submit(value)
            return
        for verdict in evaluate_uniqueness_set(value, self._members()):
            self._apply(verdict)

    def _members(self) -> tuple[Any, ...]:
        source = self.config["source"]
        if isinstance(source, (str, bytes)) or not hasattr(source, "__iter__"):
            raise RuleConfigurationError(f"Unsupported uniqueness source {source!r}")
        return tuple(source)

    def _apply(self, verdict: Verdict) -> Outcome:
        outcome = publish(self.field, self.config, verdict)
        self.outcomes.append(outcome)
        return outcome

    def _publish_safely(self, verdict: Verdict) -> None:
        try:
            self._apply(verdict)
        except Exception:
            logger.exception("Publishing %s verdict on %r failed", verdict.value, self.field)

    def __repr__(self) -> str:
        return f"FieldBinding({self.kind.value}, field={self.field!r}, state={self.state.value})"
