"""Predicate evaluators, one per rule kind.

Each evaluator takes the bound field and its merged configuration and
returns a ``Verdict``. Evaluators only read from the field; publishing the
verdict is the caller's job (see ``fieldrules.signals``).

Uniqueness against a fixed set is the exception to the one-verdict shape:
``evaluate_uniqueness_set`` yields one verdict per member examined. Remote
uniqueness is asynchronous and handled by ``fieldrules.lookup``.
"""

import re
from collections.abc import Callable, Iterable
from typing import Any

from fieldrules.config import RuleConfig
from fieldrules.errors import RuleConfigurationError
from fieldrules.host import Field
from fieldrules.types import RuleKind, Verdict

# Evaluator signature: (field, config) -> Verdict
Evaluator = Callable[[Field, RuleConfig], Verdict]

NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


def _verdict(valid: bool) -> Verdict:
    return Verdict.VALID if valid else Verdict.INVALID


def evaluate_presence(field: Field, config: RuleConfig) -> Verdict:
    """Invalid if the value equals ``blank_value`` or an unchecked checkbox."""
    if field.value == config["blank_value"]:
        return Verdict.INVALID
    if field.is_checkbox and not field.checked:
        return Verdict.INVALID
    return Verdict.VALID


def compile_pattern(pattern: Any) -> re.Pattern[str]:
    """Compile a ``validation_regex`` option.

    Raises:
        RuleConfigurationError: If the option is not a usable pattern
    """
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except (re.error, TypeError) as e:
        raise RuleConfigurationError(f"Invalid validation_regex {pattern!r}: {e}") from e


def evaluate_format(field: Field, config: RuleConfig) -> Verdict:
    """Match the value against ``validation_regex``.

    Empty values are skipped. With ``invert_rule`` the value is valid only
    when the pattern is not found anywhere in it.

    Raises:
        RuleConfigurationError: The rule names an unregistered format preset
            or its pattern does not compile
    """
    if config.get("unknown_format"):
        raise RuleConfigurationError(f"Format preset {config['unknown_format']!r} is not registered")

    value = field.value
    if value == "":
        return Verdict.SKIP

    found = compile_pattern(config["validation_regex"]).search(value) is not None
    if config["invert_rule"]:
        return _verdict(not found)
    return _verdict(found)


def evaluate_length(field: Field, config: RuleConfig) -> Verdict:
    """Check the value length against inclusive ``minimum``/``maximum`` bounds."""
    length = len(field.value)
    minimum = config["minimum"]
    maximum = config["maximum"]
    if minimum is not None and length < minimum:
        return Verdict.INVALID
    if maximum is not None and length > maximum:
        return Verdict.INVALID
    return Verdict.VALID


def is_numeric(value: str, only_integer: bool = False) -> bool:
    """True if ``value`` reads as a number once commas are stripped.

    Blank values count as numeric; presence is a separate rule.
    """
    text = value.replace(",", "").strip()
    if text == "":
        return True
    pattern = INTEGER_PATTERN if only_integer else NUMBER_PATTERN
    return pattern.match(text) is not None


def evaluate_numericality(field: Field, config: RuleConfig) -> Verdict:
    return _verdict(is_numeric(field.value, bool(config["only_integer"])))


def evaluate_custom(field: Field, config: RuleConfig) -> Verdict:
    """Delegate to the caller's ``validates_with`` predicate."""
    return _verdict(bool(config["validates_with"](field)))


def evaluate_uniqueness_set(value: str, members: Iterable[Any]) -> list[Verdict]:
    """One verdict per member: invalid where the member equals ``value`` exactly."""
    return [Verdict.INVALID if member == value else Verdict.VALID for member in members]


EVALUATORS: dict[RuleKind, Evaluator] = {
    RuleKind.PRESENCE: evaluate_presence,
    RuleKind.FORMAT: evaluate_format,
    RuleKind.LENGTH: evaluate_length,
    RuleKind.NUMERICALITY: evaluate_numericality,
    RuleKind.CUSTOM: evaluate_custom,
}


def get_evaluator(kind: RuleKind) -> Evaluator:
    return EVALUATORS[kind]
