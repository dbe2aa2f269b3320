"""Form definition commands: validate and check."""

import asyncio
from pathlib import Path

import click

from fieldrules.definitions import FormDefinition, load_form
from fieldrules.errors import DefinitionError
from fieldrules.host import MemoryField, MemoryScope
from fieldrules.rules import bindings_for
from fieldrules.schema import validate_form_file
from fieldrules.signals import INVALID, UNDETERMINED


def _parse_values(values: tuple[str, ...]) -> dict[str, str]:
    parsed = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected NAME=VALUE, got '{item}'", param_hint="--value")
        parsed[name] = value
    return parsed


def _load(path: Path) -> FormDefinition:
    issues = validate_form_file(path)
    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour), err=True)
    if any(i.severity == "error" for i in issues):
        click.echo(click.style(f"\n{len(issues)} schema error(s) found", fg="red", bold=True), err=True)
        raise SystemExit(1)

    try:
        return load_form(path)
    except DefinitionError as e:
        click.echo(click.style(f"Semantic validation failed: {e}", fg="red"), err=True)
        raise SystemExit(1)


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(path: Path):
    """Validate a form definition YAML file."""
    form = _load(path)

    click.echo(f"Form '{form.name}' with {len(form.fields)} field(s):")
    for field_rules in form.fields:
        kinds = ", ".join(rule.type.value for rule in field_rules.rules) or "no rules"
        click.echo(f"  ✓ {field_rules.name} ({kinds})")

    click.echo(click.style("\nForm definition is valid.", fg="green", bold=True))


def _build_fields(
    form: FormDefinition,
    values: dict[str, str],
    checked: tuple[str, ...],
    checkboxes: tuple[str, ...] = (),
) -> dict[str, MemoryField]:
    form_scope = MemoryScope(tag="form", name=form.name)
    fields = {}
    for name in form.field_names():
        control = "checkbox" if name in checked or name in checkboxes else "text"
        fields[name] = MemoryField(
            name,
            values.get(name, "on" if control == "checkbox" else ""),
            control_type=control,
            checked=name in checked,
            parent=MemoryScope(name=name, parent=form_scope),
        )

    try:
        form.bind(fields)
    except DefinitionError as e:
        click.echo(click.style(f"Cannot bind rules: {e}", fg="red"), err=True)
        raise SystemExit(1)
    return fields


async def _fire(fields: dict[str, MemoryField], events: tuple[str, ...]) -> None:
    for field in fields.values():
        for event in events:
            field.trigger(event)

    for field in fields.values():
        for binding in bindings_for(field):
            await binding.wait()


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--value", "values", multiple=True, metavar="NAME=VALUE", help="Field value (repeatable).")
@click.option("--checked", multiple=True, metavar="NAME", help="Treat NAME as a checked checkbox.")
@click.option("--checkbox", "checkboxes", multiple=True, metavar="NAME", help="Treat NAME as an unchecked checkbox.")
@click.option(
    "--event",
    "events",
    multiple=True,
    default=("change",),
    show_default=True,
    help="Event to fire on every field (repeatable).",
)
def check(
    path: Path,
    values: tuple[str, ...],
    checked: tuple[str, ...],
    checkboxes: tuple[str, ...],
    events: tuple[str, ...],
):
    """Evaluate a form definition against the given field values."""
    form = _load(path)
    fields = _build_fields(form, _parse_values(values), checked, checkboxes)
    asyncio.run(_fire(fields, events))

    failed = False
    for name, field in fields.items():
        signals = [s for s in field.fired if s not in events]
        markers = sorted(field.parent.markers) if field.parent else []
        if INVALID in signals or markers:
            status, colour = "invalid", "red"
            failed = True
        elif UNDETERMINED in signals:
            status, colour = "undetermined", "yellow"
        else:
            status, colour = "ok", "green"

        click.echo(click.style(f"{name}: {status}", fg=colour, bold=True))
        click.echo(f"  signals: {', '.join(signals) or '-'}")
        click.echo(f"  markers: {', '.join(markers) or '-'}")

    if failed:
        raise SystemExit(1)
