"""Version string parsing and ordering for lockfile versions.

Lockfiles carry whatever the package manager recorded: plain semver
(``1.2.3``), Composer tags with a ``v`` prefix or a fourth component
(``v2.0.0.1``), pre-release suffixes, and branch versions such as
``dev-main``. Parsing is lenient and ordering is total: any two strings can
be compared without raising.
"""

from typing import Iterable, List, Optional

import semantic_version


def is_dev_version(version: str) -> bool:
    """Return True for branch style versions (``dev-main``, ``1.x-dev``)."""
    v = (version or "").strip().lower()
    return v.startswith("dev-") or v.endswith("-dev")


def parse_version(version: str) -> Optional[semantic_version.Version]:
    """Coerce ``version`` into a semantic version, or None if it cannot be.

    A leading ``v`` is dropped; missing minor/patch components become 0; a
    fourth numeric component is kept as build metadata.
    """
    if not isinstance(version, str):
        return None
    v = version.strip()
    if v[:1] in ("v", "V"):
        v = v[1:]
    if not v or is_dev_version(v):
        return None
    try:
        return semantic_version.Version.coerce(v)
    except ValueError:
        return None


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _build_key(version: semantic_version.Version):
    # Fourth components land in build metadata; order them numerically.
    return tuple((0, int(part), "") if part.isdigit() else (1, 0, part) for part in version.build)


def compare_versions(left: str, right: str) -> int:
    """Compare two version strings, returning -1, 0 or 1.

    Parseable versions compare by semantic precedence; when precedence ties
    the build components (where a fourth version number lives) decide, then
    the raw strings (``1.0.0`` vs ``v1.0.0``). An unparseable version always sorts after a
    parseable one, and two unparseable versions compare as plain strings.
    """
    if left == right:
        return 0
    parsed_left = parse_version(left)
    parsed_right = parse_version(right)
    if parsed_left is not None and parsed_right is not None:
        if parsed_left < parsed_right:
            return -1
        if parsed_left > parsed_right:
            return 1
        return _cmp(_build_key(parsed_left), _build_key(parsed_right)) or _cmp(left, right)
    if parsed_left is None and parsed_right is None:
        return _cmp(str(left), str(right))
    return 1 if parsed_left is None else -1


def releases_in_range(versions: Iterable[str], from_version: str, to_version: str) -> List[str]:
    """Versions ``v`` with ``from_version < v <= to_version``, branch versions excluded.

    Order of ``versions`` is preserved.
    """
    selected = []
    for version in versions:
        if not isinstance(version, str) or not version or is_dev_version(version):
            continue
        if compare_versions(version, from_version) > 0 and compare_versions(version, to_version) <= 0:
            selected.append(version)
    return selected
