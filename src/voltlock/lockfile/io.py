"""Lock file parser and serializer."""

from __future__ import annotations

import json
from typing import Any

from voltlock.errors import KeyParseError, LockfileDecodeError, LockfileEncodeError, ValidationError
from voltlock.lockfile.deps import DependenciesMap
from voltlock.lockfile.model import DependencyID, DependencyLock


def serialize_dependencies(dependencies: DependenciesMap) -> bytes:
    try:
        return dependencies.to_json().encode("utf-8")
    except (TypeError, UnicodeEncodeError, ValueError) as exc:
        raise LockfileEncodeError("unable to serialize lock file", hint=str(exc)) from exc


def parse_dependencies(raw: str) -> DependenciesMap:
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise LockfileDecodeError("unable to deserialize lock file", hint=str(exc)) from exc

    if not isinstance(payload, dict):
        raise LockfileDecodeError("Invalid lock file payload type.", hint="Expected a JSON object.")

    entries: dict[DependencyID, DependencyLock] = {}
    for key, value in payload.items():
        entries[_parse_key(key)] = _parse_record(key, value)
    return DependenciesMap(entries)


def _parse_key(key: str) -> DependencyID:
    try:
        return DependencyID.parse(key)
    except (KeyParseError, ValidationError) as exc:
        raise LockfileDecodeError(
            "Invalid dependency key in lock file.",
            hint=exc.args[0],
            context={"key": key},
        ) from exc


def _parse_record(key: str, value: Any) -> DependencyLock:
    if not isinstance(value, dict):
        raise LockfileDecodeError("Invalid dependency entry in lock file.", context={"key": key})
    try:
        return DependencyLock.from_payload(value)
    except ValidationError as exc:
        raise LockfileDecodeError(
            "Invalid dependency entry in lock file.",
            hint=exc.args[0],
            context={"key": key},
        ) from exc


__all__ = ["parse_dependencies", "serialize_dependencies"]
