"""Lock file model, parser/serializer, and lifecycle APIs."""

from .deps import DependenciesMap
from .io import parse_dependencies, serialize_dependencies
from .model import DependencyID, DependencyLock, canonical_id, is_concrete_version
from .store import DependencyKey, LockFile

__all__ = [
    "DependenciesMap",
    "DependencyID",
    "DependencyKey",
    "DependencyLock",
    "LockFile",
    "canonical_id",
    "is_concrete_version",
    "parse_dependencies",
    "serialize_dependencies",
]
