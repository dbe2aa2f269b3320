"""Tests for declarative form definitions and their schema."""

import re
import textwrap
from pathlib import Path

import pytest

from fieldrules.definitions import (
    FormDefinition,
    RuleDefinition,
    load_form,
    preprocess_on_key,
    snake_case,
)
from fieldrules.errors import DefinitionError
from fieldrules.host import MemoryField, MemoryScope
from fieldrules.registry import predicate
from fieldrules.rules import bindings_for
from fieldrules.schema import validate_form_file
from fieldrules.types import RemoteSource, RuleKind

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


def write(tmp_path: Path, content: str, name: str = "form.yaml") -> Path:
    path = tmp_path / name
    path.write_text(textwrap.dedent(content))
    return path


class TestHelpers:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("invalidClass", "invalid_class"),
            ("validationRegex", "validation_regex"),
            ("onlyInteger", "only_integer"),
            ("minimum", "minimum"),
            ("blank_value", "blank_value"),
        ],
    )
    def test_snake_case(self, name, expected):
        assert snake_case(name) == expected

    def test_preprocess_on_key(self):
        assert preprocess_on_key({True: ["blur"], "rules": [{True: "change"}]}) == {
            "on": ["blur"],
            "rules": [{"on": "change"}],
        }


class TestRuleDefinition:
    def test_from_dict(self):
        rule = RuleDefinition.from_dict(
            {"type": "length", "params": {"minimum": 3, "invalidClass": "short"}, "on": "blur"}
        )
        assert rule.type == RuleKind.LENGTH
        assert rule.params == {"minimum": 3, "invalid_class": "short"}
        assert rule.on == ["blur"]
        assert rule.when is None

    def test_unknown_type(self):
        with pytest.raises(DefinitionError, match="Unknown rule type 'zip'"):
            RuleDefinition.from_dict({"type": "zip"})

    def test_missing_type(self):
        with pytest.raises(DefinitionError, match="missing 'type'"):
            RuleDefinition.from_dict({"params": {}})

    def test_to_options_resolves_predicates(self):
        @predicate("isBusiness")
        def is_business(field):
            return True

        @predicate("hasVat")
        def has_vat(field):
            return field.value.startswith("GB")

        rule = RuleDefinition.from_dict(
            {"type": "custom", "when": "isBusiness", "params": {"validatesWith": "hasVat"}}
        )
        options = rule.to_options()
        assert options["when"] is is_business
        assert options["validates_with"] is has_vat

    def test_unregistered_predicate(self):
        rule = RuleDefinition.from_dict({"type": "presence", "when": "nobody"})
        with pytest.raises(DefinitionError, match="not registered"):
            rule.to_options()

    def test_ignore_case_compiles_pattern(self):
        rule = RuleDefinition.from_dict(
            {"type": "format", "params": {"validationRegex": "^ab", "ignoreCase": True}}
        )
        options = rule.to_options()
        assert options["validation_regex"].flags & re.IGNORECASE
        assert "ignore_case" not in options

    def test_remote_source_mapping(self):
        rule = RuleDefinition.from_dict(
            {"type": "uniqueness", "params": {"source": {"url": "http://x/lookup", "param": "term"}}}
        )
        assert rule.to_options()["source"] == RemoteSource(url="http://x/lookup", param="term")

    def test_events_become_validates_on(self):
        rule = RuleDefinition.from_dict({"type": "presence", "on": ["keyup", "blur"]})
        assert rule.to_options()["validates_on"] == ("keyup", "blur")


class TestFormDefinition:
    def test_load_form(self, tmp_path):
        path = write(
            tmp_path,
            """
            form: signup
            fields:
              - name: username
                rules:
                  - type: presence
                  - type: length
                    params: {minimum: 3}
                    on: blur
              - name: terms
            """,
        )
        form = load_form(path)
        assert form.name == "signup"
        assert form.field_names() == ["username", "terms"]
        assert [r.type for r in form.fields[0].rules] == [RuleKind.PRESENCE, RuleKind.LENGTH]
        assert form.fields[0].rules[1].on == ["blur"]
        assert form.fields[1].rules == []

    def test_bind_attaches_rules(self):
        form = FormDefinition.from_dict(
            {
                "form": "signup",
                "fields": [
                    {"name": "username", "rules": [{"type": "presence"}, {"type": "length", "params": {"maximum": 3}}]}
                ],
            }
        )
        scope = MemoryScope()
        username = MemoryField("username", "toolong", parent=scope)
        bindings = form.bind({"username": username})

        assert len(bindings) == 2
        assert bindings_for(username) == bindings
        username.trigger("change")
        assert scope.markers == {"invalid-length"}

    def test_bind_missing_field(self):
        form = FormDefinition.from_dict({"form": "f", "fields": [{"name": "email"}]})
        with pytest.raises(DefinitionError, match="no field named 'email'"):
            form.bind({})

    def test_field_without_name(self):
        with pytest.raises(DefinitionError, match="missing 'name'"):
            FormDefinition.from_dict({"form": "f", "fields": [{"rules": []}]})

    def test_load_invalid_yaml(self, tmp_path):
        path = write(tmp_path, "form: [unclosed")
        with pytest.raises(DefinitionError, match="YAML parse error"):
            load_form(path)

    def test_load_non_mapping(self, tmp_path):
        path = write(tmp_path, "- just\n- a list\n")
        with pytest.raises(DefinitionError, match="does not contain a form definition"):
            load_form(path)

    def test_example_form_loads(self):
        form = load_form(EXAMPLES_DIR / "signup.yaml")
        assert form.name == "signup"
        uniqueness = form.fields[0].rules[2]
        assert uniqueness.type == RuleKind.UNIQUENESS
        assert uniqueness.on == ["blur"]


class TestSchema:
    def test_example_form_is_valid(self):
        assert validate_form_file(EXAMPLES_DIR / "signup.yaml") == []

    def test_unknown_rule_type(self, tmp_path):
        path = write(
            tmp_path,
            """
            form: f
            fields:
              - name: a
                rules:
                  - type: zip
            """,
        )
        issues = validate_form_file(path)
        assert len(issues) == 1
        assert issues[0].path == "fields[0]/rules[0]/type"

    def test_missing_form_name(self, tmp_path):
        path = write(tmp_path, "fields: []\n")
        issues = validate_form_file(path)
        assert any("'form' is a required property" in i.message for i in issues)

    def test_bad_minimum(self, tmp_path):
        path = write(
            tmp_path,
            """
            form: f
            fields:
              - name: a
                rules:
                  - type: length
                    params: {minimum: -1}
            """,
        )
        issues = validate_form_file(path)
        assert [i.path for i in issues] == ["fields[0]/rules[0]/params/minimum"]

    def test_empty_file(self, tmp_path):
        issues = validate_form_file(write(tmp_path, ""))
        assert "empty" in issues[0].message

    def test_yaml_error(self, tmp_path):
        issues = validate_form_file(write(tmp_path, "form: [unclosed"))
        assert "YAML parse error" in issues[0].message

    def test_issue_str(self, tmp_path):
        path = write(tmp_path, "fields: []\n")
        issue = validate_form_file(path)[0]
        assert str(issue).startswith("[ERROR] ")
