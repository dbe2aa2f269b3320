"""Load declarative rule definitions from YAML.

A form file names the rules each field carries:

    form: signup
    fields:
      - name: email
        rules:
          - type: presence
          - type: format
            params: {format: email}
          - type: uniqueness
            params: {source: "http://localhost:8000/lookup/emails"}
            on: [blur]

Params use camelCase keys (``invalidClass``, ``blankValue``,
``validationRegex``...). ``when`` and ``validatesWith`` name predicates
registered in ``PredicateRegistry``.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from fieldrules.binding import FieldBinding
from fieldrules.errors import DefinitionError
from fieldrules.host import Field
from fieldrules.lookup import LookupTransport
from fieldrules.registry import PredicateRegistry
from fieldrules.rules import bind
from fieldrules.settings import EngineSettings
from fieldrules.types import RemoteSource, RuleKind

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def preprocess_on_key(obj: Any) -> Any:
    """Recursively rename the boolean key ``True`` to ``"on"``.

    PyYAML parses the bare key ``on:`` as boolean ``True`` (YAML 1.1).
    """
    if isinstance(obj, dict):
        return {("on" if k is True else k): preprocess_on_key(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [preprocess_on_key(item) for item in obj]
    return obj


@dataclass
class RuleDefinition:
    """A single rule from a form file.

    Attributes:
        type: Rule kind
        params: Options in snake_case, as passed to ``merge_options``
        on: Triggering events (kind default when None)
        when: Name of a registered gate predicate
    """

    type: RuleKind
    params: dict[str, Any] = field(default_factory=dict)
    on: list[str] | None = None
    when: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuleDefinition":
        """Create RuleDefinition from YAML/JSON dict."""
        try:
            kind = RuleKind(data["type"])
        except KeyError as e:
            raise DefinitionError("Rule definition is missing 'type'") from e
        except ValueError as e:
            valid = ", ".join(k.value for k in RuleKind)
            raise DefinitionError(f"Unknown rule type {data['type']!r}. Expected one of: {valid}") from e

        operations = data.get("on")
        if isinstance(operations, str):
            operations = [operations]

        return cls(
            type=kind,
            params={snake_case(k): v for k, v in (data.get("params") or {}).items()},
            on=operations,
            when=data.get("when"),
        )

    def to_options(self, settings: EngineSettings | None = None) -> dict[str, Any]:
        """Resolve names and literals into ``merge_options`` options."""
        options = dict(self.params)

        if self.on is not None:
            options["validates_on"] = tuple(self.on)
        if self.when is not None:
            options["when"] = _predicate(self.when)
        if isinstance(options.get("validates_with"), str):
            options["validates_with"] = _predicate(options["validates_with"])

        if options.pop("ignore_case", False) and isinstance(options.get("validation_regex"), str):
            options["validation_regex"] = re.compile(options["validation_regex"], re.IGNORECASE)

        source = options.get("source")
        if isinstance(source, Mapping):
            settings = settings or EngineSettings.from_env()
            options["source"] = RemoteSource(
                url=source["url"],
                param=source.get("param", settings.lookup_param),
            )
        return options


def _predicate(name: str):
    try:
        return PredicateRegistry.get(name)
    except ValueError as e:
        raise DefinitionError(str(e)) from e


@dataclass
class FieldRules:
    name: str
    rules: list[RuleDefinition] = field(default_factory=list)


@dataclass
class FormDefinition:
    """Rules for every field of one form."""

    name: str
    fields: list[FieldRules] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FormDefinition":
        data = preprocess_on_key(data)
        fields = []
        for entry in data.get("fields") or []:
            if "name" not in entry:
                raise DefinitionError("Field entry is missing 'name'")
            fields.append(
                FieldRules(
                    name=entry["name"],
                    rules=[RuleDefinition.from_dict(r) for r in entry.get("rules") or []],
                )
            )
        return cls(name=data.get("form", ""), fields=fields)

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def bind(
        self,
        fields: Mapping[str, Field],
        *,
        transport: LookupTransport | None = None,
        settings: EngineSettings | None = None,
    ) -> list[FieldBinding]:
        """Attach every defined rule to the matching field.

        Raises:
            DefinitionError: If a defined field is missing from ``fields``
                or a rule references an unregistered predicate
        """
        bindings = []
        for field_rules in self.fields:
            target = fields.get(field_rules.name)
            if target is None:
                raise DefinitionError(f"Form '{self.name}' has no field named '{field_rules.name}'")
            for rule in field_rules.rules:
                bindings.append(
                    bind(
                        target,
                        rule.type,
                        rule.to_options(settings),
                        transport=transport,
                        settings=settings,
                    )
                )
        return bindings


def load_form(path: Path) -> FormDefinition:
    """Load a form definition from a YAML file.

    Raises:
        DefinitionError: If the file cannot be parsed or is not a mapping
    """
    try:
        with Path(path).open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as e:
        raise DefinitionError(f"YAML parse error in {path}: {e}") from e

    if not isinstance(raw, dict):
        raise DefinitionError(f"{path} does not contain a form definition")
    return FormDefinition.from_dict(raw)
