"""Package-level diff between two lockfile revisions."""

from __future__ import annotations

from typing import Dict, List

from constants import PackageManagers
from versioning.models import PackageChange
from versioning.parser import compare_versions


def compute_diff(
    previous: Dict[str, str],
    current: Dict[str, str],
    kind: PackageManagers,
) -> List[PackageChange]:
    """Compare two name to version maps.

    Packages only in ``previous`` are removed, packages only in ``current``
    are added, and packages whose version string differs are updated or
    downgraded depending on version order. Unchanged packages are dropped.
    The result is sorted by package name (code point order), so it does not
    depend on the iteration order of either map.
    """
    changes: List[PackageChange] = []

    for name, from_version in previous.items():
        if name not in current:
            changes.append(PackageChange.removed(name, kind, from_version))
            continue
        to_version = current[name]
        if to_version == from_version:
            continue
        if compare_versions(to_version, from_version) > 0:
            changes.append(PackageChange.updated(name, kind, from_version, to_version))
        else:
            changes.append(PackageChange.downgraded(name, kind, from_version, to_version))

    for name, to_version in current.items():
        if name not in previous:
            changes.append(PackageChange.added(name, kind, to_version))

    changes.sort(key=lambda change: change.name)
    return changes
