"""Dependency map whose serialized form is always sorted by dependency id."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import cbor2

from voltlock.lockfile.model import DependencyID, DependencyLock


class DependenciesMap:
    """Unordered dependency id -> lock record store.

    Lookups go through a plain dict; every export sorts by `DependencyID`
    first, so two maps holding the same entries render identically no matter
    how they were filled.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[DependencyID, DependencyLock] | None = None) -> None:
        self._entries: dict[DependencyID, DependencyLock] = dict(entries or {})

    def insert(self, key: DependencyID, record: DependencyLock) -> DependencyLock | None:
        """Upsert `record`; return the record it replaced, if any."""
        previous = self._entries.get(key)
        self._entries[key] = record
        return previous

    def get(self, key: DependencyID) -> DependencyLock | None:
        return self._entries.get(key)

    def items(self) -> Iterator[tuple[DependencyID, DependencyLock]]:
        return iter(self._entries.items())

    def sorted_items(self) -> list[tuple[DependencyID, DependencyLock]]:
        return sorted(self._entries.items(), key=lambda item: item[0])

    def to_payload(self) -> dict[str, dict[str, str]]:
        return {str(key): record.to_payload() for key, record in self.sorted_items()}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Mapping[str, Any]]) -> DependenciesMap:
        return cls(
            {
                DependencyID.parse(key): DependencyLock.from_payload(value)
                for key, value in payload.items()
            }
        )

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), indent=2, ensure_ascii=False) + "\n"

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self.to_payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def digest(self) -> str:
        return hashlib.sha256(self.to_cbor()).hexdigest()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[DependencyID]:
        return iter(sorted(self._entries))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependenciesMap):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"DependenciesMap({len(self._entries)} entries)"


__all__ = ["DependenciesMap"]
