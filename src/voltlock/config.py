"""Lock file settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from voltlock.integrity import Algorithm

LOCK_FILENAME = "volt.lock"


@dataclass(frozen=True, slots=True)
class Settings:
    lock_filename: str = LOCK_FILENAME
    integrity_algorithm: Algorithm = Algorithm.SHA512

    def lock_file_path(self, project_root: str | Path) -> Path:
        return Path(project_root) / self.lock_filename


DEFAULT_SETTINGS = Settings()

__all__ = ["DEFAULT_SETTINGS", "LOCK_FILENAME", "Settings"]
