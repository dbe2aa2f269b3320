"""Shared fixtures for the fieldrules test suite."""

import pytest

from fieldrules.host import MemoryField, MemoryScope
from fieldrules.registry import FormatRegistry, PredicateRegistry


@pytest.fixture(autouse=True)
def setup_registries():
    """Clear format and predicate registrations around each test."""
    FormatRegistry.clear()
    PredicateRegistry.clear()
    yield
    FormatRegistry.clear()
    PredicateRegistry.clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep FIELDRULES_* settings from the developer's shell out of tests."""
    for name in (
        "FIELDRULES_LOOKUP_TIMEOUT",
        "FIELDRULES_LOOKUP_PARAM",
        "FIELDRULES_SCOPE",
        "FIELDRULES_LOG_LEVEL",
        "FIELDRULES_LOOKUP_DATA",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fieldset():
    """A fieldset inside a form."""
    return MemoryScope(tag="fieldset", name="account", parent=MemoryScope(tag="form", name="signup"))


@pytest.fixture
def make_field(fieldset):
    """Factory for fields living inside ``fieldset``."""

    def _make(value: str = "", **kwargs) -> MemoryField:
        kwargs.setdefault("parent", fieldset)
        return MemoryField(kwargs.pop("name", "input"), value, **kwargs)

    return _make
