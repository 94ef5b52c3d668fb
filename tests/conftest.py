"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from voltlock.lockfile import DependencyLock, LockFile

RecordFactory = Callable[..., DependencyLock]


@pytest.fixture
def make_record() -> RecordFactory:
    """Build a lock record with registry-style defaults."""

    def _make(name: str = "react", version: str = "18.2.0", digest: str = "sha512-00") -> DependencyLock:
        return DependencyLock(
            name=name,
            version=version,
            tarball=f"https://registry.npmjs.org/{name}/-/{name.split('/')[-1]}-{version}.tgz",
            sha1=digest,
        )

    return _make


@pytest.fixture
def lock_path(tmp_path: Path) -> Path:
    return tmp_path / "volt.lock"


@pytest.fixture
def empty_lock(lock_path: Path) -> LockFile:
    return LockFile.new(lock_path)
