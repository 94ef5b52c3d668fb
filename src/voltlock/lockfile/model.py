"""Lock file typed model: dependency identifiers and resolved lock records."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import total_ordering
from typing import Any

from voltlock.errors import KeyParseError, ValidationError

ID_DELIMITER = "@"

_RANGE_CHARS_RE = re.compile(r"[\s^~<>=*|]")
_WILDCARD_SEGMENTS = frozenset({"", "x", "X"})
_RECORD_FIELDS = ("name", "version", "tarball", "sha1")


def canonical_id(name: str, version_spec: str) -> str:
    """Return the ``name@version_spec`` form used for identity, ordering and storage."""
    return f"{name}{ID_DELIMITER}{version_spec}"


def is_concrete_version(version: str) -> bool:
    if not version or _RANGE_CHARS_RE.search(version):
        return False
    core = re.split(r"[-+]", version, maxsplit=1)[0]
    return all(part not in _WILDCARD_SEGMENTS for part in core.split("."))


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class DependencyID:
    """A dependency reference: package name plus the requested version spec.

    Equality, hashing and ordering all go through `canonical_id`, so two ids
    are the same exactly when their ``name@version_spec`` strings are.
    """

    name: str
    version_spec: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not isinstance(self.version_spec, str):
            raise ValidationError("Dependency id parts must be strings.")
        if not self.name or self.name == ID_DELIMITER:
            raise ValidationError(
                "Dependency name must not be empty.",
                context={"version_spec": self.version_spec},
            )
        if ID_DELIMITER in self.name[1:]:
            raise ValidationError(
                "Dependency name may only contain '@' as a scope prefix.",
                hint="Scoped names look like '@scope/package'.",
                context={"name": self.name},
            )

    @classmethod
    def parse(cls, text: str) -> DependencyID:
        # A leading '@' belongs to a scoped name, so search after it.
        start = 1 if text.startswith(ID_DELIMITER) else 0
        index = text.find(ID_DELIMITER, start)
        if index < 0:
            raise KeyParseError("missing dependency version", context={"key": text})
        name = text[:index]
        if not name or name == ID_DELIMITER:
            raise KeyParseError("missing dependency name", context={"key": text})
        return cls(name=name, version_spec=text[index + 1 :])

    @classmethod
    def coerce(cls, value: DependencyID | tuple[str, str] | str) -> DependencyID:
        if isinstance(value, DependencyID):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        name, version_spec = value
        return cls(name=name, version_spec=version_spec)

    def canonical(self) -> str:
        return canonical_id(self.name, self.version_spec)

    def __str__(self) -> str:
        return self.canonical()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyID):
            return NotImplemented
        return self.canonical() == other.canonical()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, DependencyID):
            return NotImplemented
        return self.canonical() < other.canonical()

    def __hash__(self) -> int:
        return hash(self.canonical())


@dataclass(frozen=True, slots=True)
class DependencyLock:
    """The resolved version, source tarball and integrity string of one dependency.

    The digest field keeps the ``sha1`` name used by the on-disk format,
    whichever algorithm produced it.
    """

    name: str
    version: str
    tarball: str
    sha1: str

    def __post_init__(self) -> None:
        for field_name in _RECORD_FIELDS:
            if not isinstance(getattr(self, field_name), str):
                raise ValidationError(
                    f"Lock record `{field_name}` must be a string.",
                    context={"name": str(self.name)},
                )
        if not is_concrete_version(self.version):
            raise ValidationError(
                "Lock record version must be a concrete version, not a range.",
                context={"name": self.name, "version": self.version},
            )

    @property
    def digest(self) -> str:
        return self.sha1

    def to_payload(self) -> dict[str, str]:
        return {
            "name": self.name,
            "version": self.version,
            "tarball": self.tarball,
            "sha1": self.sha1,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> DependencyLock:
        values: dict[str, str] = {}
        for field_name in _RECORD_FIELDS:
            value = payload.get(field_name)
            if not isinstance(value, str):
                raise ValidationError(f"Invalid lock record `{field_name}` value.")
            values[field_name] = value
        return cls(**values)


__all__ = [
    "DependencyID",
    "DependencyLock",
    "ID_DELIMITER",
    "canonical_id",
    "is_concrete_version",
]
