"""Lookup service for remote uniqueness checks."""

from fieldrules.api.app import create_app
from fieldrules.api.store import LookupStore

app = create_app()

__all__ = ["LookupStore", "app", "create_app"]
