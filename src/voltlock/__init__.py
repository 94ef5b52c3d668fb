"""Public package entrypoint for the Volt lock file and integrity layer."""

from .config import DEFAULT_SETTINGS, LOCK_FILENAME, Settings
from .errors import (
    ErrorCode,
    HashCopyError,
    HashError,
    HashParseError,
    IntegrityMismatchError,
    KeyParseError,
    LockfileDecodeError,
    LockfileEncodeError,
    LockfileError,
    LockfileIOError,
    UnsupportedAlgorithmError,
    ValidationError,
    VoltError,
)
from .integrity import Algorithm, Integrity, calc_hash, parse_integrity, require_hash, verify_integrity
from .lockfile import DependenciesMap, DependencyID, DependencyLock, LockFile
from .observability import StructuredLogger

__all__ = [
    "Algorithm",
    "DEFAULT_SETTINGS",
    "DependenciesMap",
    "DependencyID",
    "DependencyLock",
    "ErrorCode",
    "HashCopyError",
    "HashError",
    "HashParseError",
    "Integrity",
    "IntegrityMismatchError",
    "KeyParseError",
    "LOCK_FILENAME",
    "LockFile",
    "LockfileDecodeError",
    "LockfileEncodeError",
    "LockfileError",
    "LockfileIOError",
    "Settings",
    "StructuredLogger",
    "UnsupportedAlgorithmError",
    "ValidationError",
    "VoltError",
    "calc_hash",
    "parse_integrity",
    "require_hash",
    "verify_integrity",
]
