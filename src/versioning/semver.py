"""Semantic version change classification."""

from typing import Optional

from .models import SemverLevel
from .parser import is_dev_version, parse_version


def classify(from_version: str, to_version: str) -> Optional[SemverLevel]:
    """Return the coarsest component that differs between two versions.

    Branch versions, unparseable versions and changes confined to
    pre-release or build metadata yield None. The result does not depend on
    the direction of the change.
    """
    if is_dev_version(from_version) or is_dev_version(to_version):
        return None

    old = parse_version(from_version)
    new = parse_version(to_version)
    if old is None or new is None:
        return None

    if old.major != new.major:
        return SemverLevel.MAJOR
    if old.minor != new.minor:
        return SemverLevel.MINOR
    if old.patch != new.patch:
        return SemverLevel.PATCH
    return None
