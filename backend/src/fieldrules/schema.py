"""
schema.py: JSON Schema validation for fieldrules form definition files.

Usage:
    from fieldrules.schema import validate_form_file

    for issue in validate_form_file(Path("forms/signup.yaml")):
        print(issue)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from fieldrules.definitions import preprocess_on_key

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"
FORM_SCHEMA = "form.schema.json"


@dataclass
class ValidationIssue:
    """A single validation finding for a form definition file."""

    file: Path
    message: str
    path: str = ""          # location within the document, e.g. "fields[0]/rules[1]"
    severity: str = "error" # "error" | "warning"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{loc}: {self.message}"


def _load_schema(name: str) -> dict[str, Any]:
    with (_SCHEMAS_DIR / name).open() as fh:
        return json.load(fh)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def validate_form_document(doc: Any, file: Path) -> list[ValidationIssue]:
    """Validate an already parsed form document."""
    validator = Draft202012Validator(_load_schema(FORM_SCHEMA))
    return [
        ValidationIssue(file=file, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(doc), key=_json_path)
    ]


def validate_form_file(yaml_path: Path) -> list[ValidationIssue]:
    """
    Validate a form definition YAML file against the bundled schema.

    Args:
        yaml_path: Path to the YAML file to validate.

    Returns:
        A list of :class:`ValidationIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [ValidationIssue(file=yaml_path, message="File is empty or contains only whitespace")]

    issues = validate_form_document(preprocess_on_key(raw), yaml_path)
    logger.debug("Validated %s: %d issue(s)", yaml_path, len(issues))
    return issues
