"""Rule configuration: per-kind defaults and option merging.

Every binding receives its own ``RuleConfig``, produced once by overlaying
the caller's options onto a freshly built default table for the rule kind.
Option values are not checked here; bad values surface at evaluation time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from fieldrules.host import Field
from fieldrules.registry import FormatRegistry
from fieldrules.settings import EngineSettings
from fieldrules.types import RemoteSource, RuleKind

logger = logging.getLogger(__name__)


def always(field: Field) -> bool:
    """Default ``when`` gate: the rule always runs."""
    return True


def missing_validator(field: Field) -> bool:
    """Default ``validates_with`` for custom rules: always invalid."""
    logger.warning("Custom rule on %r has no validates_with predicate; reporting invalid", field)
    return False


def _common_defaults(settings: EngineSettings) -> dict[str, Any]:
    return {
        "validates_on": ("change", "blur"),
        "when": always,
        "scope": settings.scope,
    }


def presence_defaults(settings: EngineSettings) -> dict[str, Any]:
    return {**_common_defaults(settings), "invalid_class": "invalid-presence", "blank_value": ""}


def format_defaults(settings: EngineSettings) -> dict[str, Any]:
    return {
        **_common_defaults(settings),
        "invalid_class": "invalid-format",
        "validation_regex": ".*",
        "invert_rule": False,
    }


def length_defaults(settings: EngineSettings) -> dict[str, Any]:
    return {
        **_common_defaults(settings),
        "invalid_class": "invalid-length",
        "minimum": None,
        "maximum": None,
    }


def numericality_defaults(settings: EngineSettings) -> dict[str, Any]:
    return {**_common_defaults(settings), "invalid_class": "invalid-numericality", "only_integer": False}


def uniqueness_defaults(settings: EngineSettings) -> dict[str, Any]:
    return {**_common_defaults(settings), "invalid_class": "invalid-uniqueness", "source": ()}


def custom_defaults(settings: EngineSettings) -> dict[str, Any]:
    return {
        **_common_defaults(settings),
        "invalid_class": "invalid",
        "validates_with": missing_validator,
        "validates_on": ("change",),
    }


DEFAULT_FACTORIES: dict[RuleKind, Callable[[EngineSettings], dict[str, Any]]] = {
    RuleKind.PRESENCE: presence_defaults,
    RuleKind.FORMAT: format_defaults,
    RuleKind.LENGTH: length_defaults,
    RuleKind.NUMERICALITY: numericality_defaults,
    RuleKind.UNIQUENESS: uniqueness_defaults,
    RuleKind.CUSTOM: custom_defaults,
}


class RuleConfig(Mapping[str, Any]):
    """Read-only merged options for one binding.

    Behaves as a mapping from option name to value; the common options are
    also exposed as properties.
    """

    __slots__ = ("_kind", "_options")

    def __init__(self, kind: RuleKind, options: Mapping[str, Any]) -> None:
        self._kind = kind
        self._options = MappingProxyType(dict(options))

    @property
    def kind(self) -> RuleKind:
        return self._kind

    @property
    def invalid_class(self) -> str:
        return self._options["invalid_class"]

    @property
    def validates_on(self) -> tuple[str, ...]:
        return self._options["validates_on"]

    @property
    def when(self) -> Callable[[Field], bool]:
        return self._options["when"]

    @property
    def scope(self) -> str:
        return self._options["scope"]

    def __getitem__(self, key: str) -> Any:
        return self._options[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"RuleConfig({self._kind.value}, {dict(self._options)!r})"


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, set, frozenset)):
        return tuple(value)
    return value


def merge_options(
    kind: RuleKind,
    options: Mapping[str, Any] | None = None,
    settings: EngineSettings | None = None,
) -> RuleConfig:
    """Overlay caller options onto the defaults for ``kind``.

    For format rules a ``format`` option names a registered preset which is
    applied between the defaults and the caller's options. An unknown preset
    is logged and recorded as ``unknown_format`` instead of raising. For uniqueness
    rules a string ``source`` is promoted to a ``RemoteSource`` using the
    configured query parameter.

    Args:
        kind: Rule kind whose defaults are used
        options: Caller-supplied partial options
        settings: Engine settings (read from the environment if omitted)

    Returns:
        A new, immutable RuleConfig
    """
    settings = settings or EngineSettings.from_env()
    options = dict(options or {})
    merged = DEFAULT_FACTORIES[kind](settings)

    if kind == RuleKind.FORMAT and options.get("format"):
        try:
            merged.update(FormatRegistry.get(options["format"]))
        except ValueError as e:
            logger.warning("Format rule will report invalid: %s", e)
            merged["unknown_format"] = options["format"]

    merged.update(options)

    if isinstance(merged.get("validates_on"), str):
        merged["validates_on"] = tuple(merged["validates_on"].split())

    if kind == RuleKind.UNIQUENESS and isinstance(merged.get("source"), str):
        merged["source"] = RemoteSource(url=merged["source"], param=settings.lookup_param)

    return RuleConfig(kind, {key: _freeze(value) for key, value in merged.items()})
