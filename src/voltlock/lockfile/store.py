"""Lock file lifecycle: create, load, mutate, and persist."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from voltlock.config import DEFAULT_SETTINGS, Settings
from voltlock.errors import KeyParseError, LockfileDecodeError, LockfileIOError, ValidationError
from voltlock.integrity import Algorithm, require_hash, verify_integrity
from voltlock.lockfile.deps import DependenciesMap
from voltlock.lockfile.io import parse_dependencies, serialize_dependencies
from voltlock.lockfile.model import DependencyID, DependencyLock
from voltlock.observability import StructuredLogger

DependencyKey = DependencyID | tuple[str, str] | str


@dataclass(slots=True)
class LockFile:
    """Pins the resolved version, tarball and integrity string of each dependency.

    Typical use by an install pipeline::

        lock = LockFile.load_or_new(project_root / "volt.lock")
        if ("react", "^18.0.0") not in lock:
            lock.add(("react", "^18.0.0"), DependencyLock(...))
            lock.save()

    `save()` truncates and rewrites the file in place. It is not atomic with
    respect to a crash mid-write, and concurrent writers on the same path
    race with last-writer-wins.
    """

    path: Path
    dependencies: DependenciesMap = field(default_factory=DependenciesMap)
    settings: Settings = DEFAULT_SETTINGS
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    @classmethod
    def new(
        cls,
        path: str | Path,
        *,
        settings: Settings = DEFAULT_SETTINGS,
        logger: StructuredLogger | None = None,
    ) -> LockFile:
        lock = cls(path=Path(path), settings=settings, logger=logger or StructuredLogger())
        lock.logger.log(operation="new", path=lock.path, message="Created empty lock file.")
        return lock

    @classmethod
    def load(
        cls,
        path: str | Path,
        *,
        settings: Settings = DEFAULT_SETTINGS,
        logger: StructuredLogger | None = None,
    ) -> LockFile:
        lock_path = Path(path)
        try:
            with lock_path.open("r", encoding="utf-8") as handle:
                raw = handle.read()
        except UnicodeDecodeError as exc:
            raise LockfileDecodeError(
                "Lock file is not valid UTF-8.",
                context={"path": str(lock_path)},
            ) from exc
        except OSError as exc:
            raise LockfileIOError(
                "unable to read lock file",
                hint=exc.strerror or str(exc),
                context={"path": str(lock_path)},
            ) from exc

        try:
            dependencies = parse_dependencies(raw)
        except LockfileDecodeError as exc:
            raise LockfileDecodeError(
                exc.args[0],
                hint=exc.hint,
                context={**exc.context, "path": str(lock_path)},
            ) from exc
        lock = cls(
            path=lock_path,
            dependencies=dependencies,
            settings=settings,
            logger=logger or StructuredLogger(),
        )
        lock.logger.log(
            operation="load",
            path=lock_path,
            message="Loaded lock file.",
            extra={"entries": len(dependencies)},
        )
        return lock

    @classmethod
    def load_or_new(
        cls,
        path: str | Path,
        *,
        settings: Settings = DEFAULT_SETTINGS,
        logger: StructuredLogger | None = None,
    ) -> LockFile:
        """Load `path`, or start an empty lock file when it does not exist yet."""
        try:
            return cls.load(path, settings=settings, logger=logger)
        except LockfileIOError as exc:
            if not isinstance(exc.__cause__, FileNotFoundError):
                raise
        return cls.new(path, settings=settings, logger=logger)

    @classmethod
    def for_project(
        cls,
        project_root: str | Path,
        *,
        settings: Settings = DEFAULT_SETTINGS,
        logger: StructuredLogger | None = None,
    ) -> LockFile:
        return cls.load_or_new(settings.lock_file_path(project_root), settings=settings, logger=logger)

    def add(self, key: DependencyKey, record: DependencyLock) -> None:
        dependency_id = DependencyID.coerce(key)
        previous = self.dependencies.insert(dependency_id, record)
        self.logger.log(
            operation="add" if previous is None else "replace",
            path=self.path,
            key=str(dependency_id),
            message=f"Locked {record.name}@{record.version}.",
        )

    def get(self, key: DependencyKey) -> DependencyLock | None:
        return self.dependencies.get(DependencyID.coerce(key))

    def lock_download(
        self,
        key: DependencyKey,
        *,
        name: str,
        version: str,
        tarball: str,
        data: bytes | BinaryIO,
        algorithm: Algorithm | None = None,
    ) -> DependencyLock:
        """Digest downloaded tarball bytes and record the result under `key`."""
        digest = require_hash(data, algorithm or self.settings.integrity_algorithm)
        record = DependencyLock(name=name, version=version, tarball=tarball, sha1=digest)
        self.add(key, record)
        return record

    def verify(self, key: DependencyKey, data: bytes | BinaryIO) -> DependencyLock:
        """Check downloaded tarball bytes against the locked integrity string."""
        record = self.get(key)
        if record is None:
            raise ValidationError(
                "Dependency is not present in the lock file.",
                context={"key": str(key), "path": str(self.path)},
            )
        verify_integrity(data, record.digest)
        return record

    def save(self) -> Path:
        # Encode before opening so a serialization failure leaves the file untouched.
        encoded = serialize_dependencies(self.dependencies)
        snapshot_digest = self.dependencies.digest()
        try:
            with self.path.open("wb") as handle:
                handle.write(encoded)
        except OSError as exc:
            raise LockfileIOError(
                "unable to write lock file",
                hint=exc.strerror or str(exc),
                context={"path": str(self.path)},
            ) from exc
        self.logger.log(
            operation="save",
            path=self.path,
            message="Saved lock file.",
            extra={"entries": len(self.dependencies), "digest": snapshot_digest},
        )
        return self.path

    def __contains__(self, key: object) -> bool:
        try:
            dependency_id = DependencyID.coerce(key)  # type: ignore[arg-type]
        except (KeyParseError, TypeError, ValidationError, ValueError):
            return False
        return dependency_id in self.dependencies

    def __len__(self) -> int:
        return len(self.dependencies)


__all__ = ["DependencyKey", "LockFile"]
