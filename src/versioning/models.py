"""Data models for lockfile diffs."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from constants import PackageManagers


class ChangeStatus(Enum):
    """How a package changed between two lockfile revisions."""
    ADDED = "added"
    REMOVED = "removed"
    UPDATED = "updated"
    DOWNGRADED = "downgraded"


class SemverLevel(Enum):
    """Coarsest semantic version component that changed."""
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class CheckType(Enum):
    """Predicate evaluated by the check command."""
    ANY = "any"
    UPDATED = "updated"
    DOWNGRADED = "downgraded"
    REMOVED = "removed"
    ADDED = "added"


@dataclass(frozen=True)
class PackageChange:
    """One row of a lockfile diff."""
    name: str
    type: PackageManagers
    from_version: Optional[str]
    to_version: Optional[str]
    status: ChangeStatus
    release_count: Optional[int] = None
    semver: Optional[SemverLevel] = None

    @classmethod
    def added(cls, name: str, type: PackageManagers, version: str) -> "PackageChange":  # pylint: disable=redefined-builtin
        return cls(name=name, type=type, from_version=None, to_version=version, status=ChangeStatus.ADDED)

    @classmethod
    def removed(cls, name: str, type: PackageManagers, version: str) -> "PackageChange":  # pylint: disable=redefined-builtin
        return cls(name=name, type=type, from_version=version, to_version=None, status=ChangeStatus.REMOVED)

    @classmethod
    def updated(cls, name: str, type: PackageManagers, from_version: str, to_version: str) -> "PackageChange":  # pylint: disable=redefined-builtin
        return cls(name=name, type=type, from_version=from_version, to_version=to_version,
                   status=ChangeStatus.UPDATED)

    @classmethod
    def downgraded(cls, name: str, type: PackageManagers, from_version: str, to_version: str) -> "PackageChange":  # pylint: disable=redefined-builtin
        return cls(name=name, type=type, from_version=from_version, to_version=to_version,
                   status=ChangeStatus.DOWNGRADED)

    @property
    def is_version_change(self) -> bool:
        """True for updates and downgrades, the rows that get enriched."""
        return self.status in (ChangeStatus.UPDATED, ChangeStatus.DOWNGRADED)

    def with_enrichment(self, release_count: Optional[int], semver: Optional[SemverLevel]) -> "PackageChange":
        return replace(self, release_count=release_count, semver=semver)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "from": self.from_version,
            "to": self.to_version,
            "status": self.status.value,
            "release_count": self.release_count,
            "semver": self.semver.value if self.semver else None,
        }


@dataclass(frozen=True)
class DependencyFile:
    """Git state of one lockfile for the current invocation."""
    file: str
    type: PackageManagers
    has_been_recently_updated: bool = False
    commit_logs: Tuple[str, ...] = ()

    @classmethod
    def create(cls, type: PackageManagers) -> "DependencyFile":  # pylint: disable=redefined-builtin
        return cls(file=type.lockfile, type=type)

    def with_file(self, file: str) -> "DependencyFile":
        return replace(self, file=file)

    def with_status(self, recently_updated: bool, commit_logs) -> "DependencyFile":
        return replace(self, has_been_recently_updated=recently_updated, commit_logs=tuple(commit_logs))


@dataclass(frozen=True)
class DependencyDiff:
    """Diff of one lockfile between two revisions.

    ``to_commit`` None means the working tree. A new file never has a
    ``from_commit``.
    """
    filename: str
    type: PackageManagers
    from_commit: Optional[str]
    to_commit: Optional[str]
    changes: Tuple[PackageChange, ...] = ()
    is_new: bool = False

    def __post_init__(self):
        if self.is_new and self.from_commit is not None:
            raise ValueError("a new lockfile cannot have a from commit")

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)

    @property
    def is_uncommitted(self) -> bool:
        return self.to_commit is None

    def _with_status(self, status: ChangeStatus) -> Tuple[PackageChange, ...]:
        return tuple(c for c in self.changes if c.status is status)

    @property
    def added(self) -> Tuple[PackageChange, ...]:
        return self._with_status(ChangeStatus.ADDED)

    @property
    def removed(self) -> Tuple[PackageChange, ...]:
        return self._with_status(ChangeStatus.REMOVED)

    @property
    def updated(self) -> Tuple[PackageChange, ...]:
        return self._with_status(ChangeStatus.UPDATED)

    @property
    def downgraded(self) -> Tuple[PackageChange, ...]:
        return self._with_status(ChangeStatus.DOWNGRADED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "type": self.type.value,
            "from_commit": self.from_commit,
            "to_commit": self.to_commit,
            "is_new": self.is_new,
            "changes": [c.to_dict() for c in self.changes],
        }


@dataclass(frozen=True)
class DiffResult:
    """Result of one invocation, handed read-only to a renderer."""
    diffs: Tuple[DependencyDiff, ...] = field(default_factory=tuple)
    has_uncommitted_changes: bool = False

    @property
    def has_diffs(self) -> bool:
        return bool(self.diffs)

    @property
    def has_any_changes(self) -> bool:
        return any(d.has_changes for d in self.diffs)

    @property
    def all_changes(self) -> Tuple[PackageChange, ...]:
        return tuple(c for d in self.diffs for c in d.changes)

    def find_change(self, name: str) -> Optional[PackageChange]:
        """First change for package ``name`` across all lockfiles."""
        for change in self.all_changes:
            if change.name == name:
                return change
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_uncommitted_changes": self.has_uncommitted_changes,
            "diffs": [d.to_dict() for d in self.diffs],
        }
