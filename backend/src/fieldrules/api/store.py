"""Collections of taken values served by the lookup service."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

import yaml

from fieldrules.errors import DefinitionError


class LookupStore:
    """Named collections of taken values.

    Matching is exact by default; a collection listed in
    ``case_insensitive`` matches regardless of case.
    """

    def __init__(
        self,
        collections: Mapping[str, Iterable[str]] | None = None,
        case_insensitive: Iterable[str] = (),
    ) -> None:
        self._collections: dict[str, list[str]] = {
            name: list(values) for name, values in (collections or {}).items()
        }
        self._case_insensitive = set(case_insensitive)

    @classmethod
    def from_yaml(cls, path: Path) -> LookupStore:
        """Load collections from a YAML file.

        Format:
            collections:
              usernames: [alice, bob]
              emails: [alice@example.com]
            caseInsensitive: [emails]
        """
        with Path(path).open() as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, dict) or not isinstance(data.get("collections", {}), dict):
            raise DefinitionError(f"{path} does not contain a 'collections' mapping")
        return cls(
            collections=data.get("collections") or {},
            case_insensitive=data.get("caseInsensitive") or (),
        )

    def has_collection(self, name: str) -> bool:
        return name in self._collections

    def list_collections(self) -> list[str]:
        return sorted(self._collections)

    def find(self, name: str, query: str) -> list[str]:
        """Entries of collection ``name`` equal to ``query``.

        Raises:
            KeyError: If the collection does not exist
        """
        values = self._collections[name]
        if name in self._case_insensitive:
            folded = query.casefold()
            return [v for v in values if v.casefold() == folded]
        return [v for v in values if v == query]
