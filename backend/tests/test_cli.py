"""Tests for the fieldrules CLI commands."""

import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from fieldrules.cli.main import cli

EXAMPLE = str(Path(__file__).parent.parent / "examples" / "signup.yaml")


@pytest.fixture
def runner():
    return CliRunner()


class TestValidate:
    def test_validate_succeeds(self, runner):
        result = runner.invoke(cli, ["validate", EXAMPLE])
        assert result.exit_code == 0
        assert "Form definition is valid" in result.output

    def test_validate_lists_fields(self, runner):
        result = runner.invoke(cli, ["validate", EXAMPLE])
        assert "username (presence, length, uniqueness)" in result.output
        assert "terms (presence)" in result.output

    def test_validate_reports_schema_errors(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("form: bad\nfields:\n  - name: a\n    rules:\n      - type: zip\n")
        result = runner.invoke(cli, ["validate", str(path)])
        assert result.exit_code == 1
        assert "schema error(s) found" in result.output

    def test_validate_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["validate", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 2


class TestCheck:
    def test_all_valid(self, runner):
        result = runner.invoke(
            cli,
            [
                "check",
                EXAMPLE,
                "--value", "username=alice",
                "--value", "email=alice@example.com",
                "--value", "subdomain=my-team",
                "--value", "seats=1,000",
                "--checked", "terms",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "username: ok" in result.output
        assert "valid-length" in result.output
        assert "invalid" not in result.output

    def test_invalid_values(self, runner):
        result = runner.invoke(
            cli,
            [
                "check",
                EXAMPLE,
                "--value", "username=al",
                "--value", "email=not-an-email",
                "--value", "seats=1.5",
            ],
        )
        assert result.exit_code == 1
        assert "username: invalid" in result.output
        assert "invalid-length" in result.output
        assert "email: invalid" in result.output
        assert "seats: invalid" in result.output
        assert "terms: invalid" in result.output
        # Empty format values are skipped
        assert "subdomain: ok" in result.output

    def test_unchecked_checkbox(self, runner):
        result = runner.invoke(
            cli,
            [
                "check",
                EXAMPLE,
                "--value", "username=alice",
                "--value", "email=alice@example.com",
                "--checkbox", "terms",
            ],
        )
        assert result.exit_code == 1
        assert "invalid-terms" in result.output

    def test_event_selection(self, runner, tmp_path):
        path = tmp_path / "form.yaml"
        path.write_text(
            textwrap.dedent(
                """
                form: f
                fields:
                  - name: code
                    rules:
                      - type: uniqueness
                        params:
                          source: [taken]
                        on: keyup
                """
            )
        )
        quiet = runner.invoke(cli, ["check", str(path), "--value", "code=taken"])
        assert quiet.exit_code == 0
        assert "code: ok" in quiet.output

        loud = runner.invoke(cli, ["check", str(path), "--value", "code=taken", "--event", "keyup"])
        assert loud.exit_code == 1
        assert "invalid-uniqueness" in loud.output

    def test_bad_value_syntax(self, runner):
        result = runner.invoke(cli, ["check", EXAMPLE, "--value", "username"])
        assert result.exit_code == 2
        assert "NAME=VALUE" in result.output
