"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used by lock file and integrity operations."""

    VALIDATION = "E_VALIDATION"
    KEY_PARSE = "E_KEY_PARSE"
    LOCKFILE_IO = "E_LOCKFILE_IO"
    LOCKFILE_DECODE = "E_LOCKFILE_DECODE"
    LOCKFILE_ENCODE = "E_LOCKFILE_ENCODE"
    HASH_COPY = "E_HASH_COPY"
    HASH_PARSE = "E_HASH_PARSE"
    UNSUPPORTED_ALGORITHM = "E_UNSUPPORTED_ALGORITHM"
    INTEGRITY_MISMATCH = "E_INTEGRITY_MISMATCH"


class VoltError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        for k, v in self.context.items():
            if v:
                parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(VoltError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class KeyParseError(VoltError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.KEY_PARSE, hint=hint, context=context)


class LockfileError(VoltError):
    """Common base for lock file read, decode and write failures."""


class LockfileIOError(LockfileError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.LOCKFILE_IO, hint=hint, context=context)


class LockfileDecodeError(LockfileError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.LOCKFILE_DECODE, hint=hint, context=context)


class LockfileEncodeError(LockfileError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.LOCKFILE_ENCODE, hint=hint, context=context)


class HashError(VoltError):
    """Common base for digest computation failures."""


class HashCopyError(HashError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.HASH_COPY, hint=hint, context=context)


class HashParseError(HashError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.HASH_PARSE, hint=hint, context=context)


class UnsupportedAlgorithmError(HashError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message, code=ErrorCode.UNSUPPORTED_ALGORITHM, hint=hint, context=context
        )


class IntegrityMismatchError(VoltError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.INTEGRITY_MISMATCH, hint=hint, context=context)


__all__ = [
    "ErrorCode",
    "HashCopyError",
    "HashError",
    "HashParseError",
    "IntegrityMismatchError",
    "KeyParseError",
    "LockfileDecodeError",
    "LockfileEncodeError",
    "LockfileError",
    "LockfileIOError",
    "UnsupportedAlgorithmError",
    "ValidationError",
    "VoltError",
]
