"""Integrity string computation, parsing, and verification for package tarballs."""

from __future__ import annotations

import base64
import binascii
import hashlib
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import BinaryIO, Protocol

from voltlock.errors import (
    HashCopyError,
    HashParseError,
    IntegrityMismatchError,
    UnsupportedAlgorithmError,
)

COPY_CHUNK_SIZE = 64 * 1024

_INTEGRITY_RE = re.compile(
    r"^(?P<algorithm>[a-z0-9]+)-(?P<digest>[A-Za-z0-9+/]+={0,2})(?:\?(?P<options>[\x21-\x7e]*))?$"
)


class Algorithm(StrEnum):
    """Algorithm tags recognized in integrity strings."""

    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    XXH3 = "xxh3"


class _Hasher(Protocol):
    def update(self, data: bytes, /) -> None: ...

    def hexdigest(self) -> str: ...


@dataclass(frozen=True, slots=True)
class Integrity:
    algorithm: Algorithm
    digest: str
    options: str | None = None

    def __str__(self) -> str:
        text = f"{self.algorithm.value}-{self.digest}"
        if self.options:
            text += f"?{self.options}"
        return text


def calc_hash(data: bytes | bytearray | memoryview | BinaryIO, algorithm: Algorithm | str) -> str:
    """Compute the tagged integrity string for `data`.

    `sha1` keeps the legacy lock file encoding: the lowercase hex digest text is
    base64-encoded, giving ``sha1-<base64(hex)>``. `sha512` is rendered as
    ``sha512-<hex>``. Any other algorithm returns an empty string, so callers
    must check for emptiness to detect an unsupported request.
    """
    resolved = _coerce_algorithm(algorithm)
    if resolved is Algorithm.SHA1:
        hasher = hashlib.sha1()
        _copy_into(hasher, data, algorithm=resolved)
        encoded = base64.b64encode(hasher.hexdigest().encode("ascii")).decode("ascii")
        candidate = f"sha1-{encoded}"
        try:
            parse_integrity(candidate)
        except HashParseError as exc:
            raise HashParseError(
                "Legacy sha1 integrity string failed to parse.",
                context={"hash": candidate},
            ) from exc
        return candidate
    if resolved is Algorithm.SHA512:
        hasher = hashlib.sha512()
        _copy_into(hasher, data, algorithm=resolved)
        return f"sha512-{hasher.hexdigest()}"
    return ""


def require_hash(
    data: bytes | bytearray | memoryview | BinaryIO, algorithm: Algorithm | str
) -> str:
    """Like `calc_hash`, but raise instead of returning an empty string."""
    result = calc_hash(data, algorithm)
    if not result:
        raise UnsupportedAlgorithmError(
            "Integrity algorithm is not supported.",
            hint="Use 'sha1' or 'sha512'.",
            context={"algorithm": str(algorithm)},
        )
    return result


def parse_integrity(text: str) -> Integrity:
    match = _INTEGRITY_RE.match(text.strip())
    if match is None:
        raise HashParseError(
            "Invalid integrity string.",
            hint="Expected '<algorithm>-<base64 digest>'.",
            context={"hash": text},
        )
    algorithm = _coerce_algorithm(match.group("algorithm"))
    if algorithm is None:
        raise HashParseError(
            "Unknown integrity algorithm.",
            context={"hash": text, "algorithm": match.group("algorithm")},
        )
    digest = match.group("digest")
    try:
        base64.b64decode(digest, validate=True)
    except binascii.Error as exc:
        raise HashParseError(
            "Integrity digest is not valid base64.",
            context={"hash": text},
        ) from exc
    return Integrity(algorithm=algorithm, digest=digest, options=match.group("options") or None)


def verify_integrity(data: bytes | bytearray | memoryview | BinaryIO, expected: str) -> str:
    """Recompute the digest named by `expected` and raise on mismatch."""
    integrity = parse_integrity(expected)
    actual = require_hash(data, integrity.algorithm)
    wanted = f"{integrity.algorithm.value}-{integrity.digest}"
    if actual != wanted:
        raise IntegrityMismatchError(
            "Downloaded content integrity mismatch.",
            hint="Refetch the tarball or regenerate the lock entry from a trusted source.",
            context={"operation": "verify", "expected": wanted, "actual": actual},
        )
    return actual


def _coerce_algorithm(value: Algorithm | str) -> Algorithm | None:
    if isinstance(value, Algorithm):
        return value
    try:
        return Algorithm(str(value).lower())
    except ValueError:
        return None


def _copy_into(
    hasher: _Hasher,
    data: bytes | bytearray | memoryview | BinaryIO,
    *,
    algorithm: Algorithm,
) -> None:
    try:
        if isinstance(data, (bytes, bytearray, memoryview)):
            hasher.update(data)
            return
        while True:
            chunk = data.read(COPY_CHUNK_SIZE)
            if not chunk:
                return
            hasher.update(chunk)
    except (AttributeError, BufferError, OSError, TypeError, ValueError) as exc:
        raise HashCopyError(
            "Failed to copy data into the hasher.",
            context={"algorithm": algorithm.value, "error": str(exc)},
        ) from exc


__all__ = [
    "Algorithm",
    "COPY_CHUNK_SIZE",
    "Integrity",
    "calc_hash",
    "parse_integrity",
    "require_hash",
    "verify_integrity",
]
