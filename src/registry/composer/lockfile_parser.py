"""Lockfile parser for Composer (composer.lock).

composer.lock is a JSON object with ``packages`` and ``packages-dev`` arrays
of package objects. Each package carries ``name`` and ``version``, and
usually a ``dist`` block pointing at the archive the package was installed
from.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator

from common.logging_utils import extra_context

logger = logging.getLogger(__name__)

_SECTIONS = ("packages", "packages-dev")


def _load(content: str) -> Dict[str, Any]:
    try:
        data = json.loads(content or "")
    except (json.JSONDecodeError, TypeError) as e:
        logger.debug(
            "Failed to parse composer.lock: %s",
            e,
            extra=extra_context(
                event="parse",
                component="composer_lockfile",
                outcome="json_decode_error",
            ),
        )
        return {}
    return data if isinstance(data, dict) else {}


def _iter_packages(data: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    # packages-dev comes last so it wins on name collisions
    for section in _SECTIONS:
        entries = data.get(section)
        if not isinstance(entries, list):
            continue
        for pkg in entries:
            if isinstance(pkg, dict) and isinstance(pkg.get("name"), str) and pkg["name"]:
                yield pkg


def extract_versions(content: str) -> Dict[str, str]:
    """Extract a package name to version map from composer.lock text.

    Args:
        content: Raw lockfile text

    Returns:
        Mapping of package name to version; empty for malformed input.
    """
    versions: Dict[str, str] = {}
    for pkg in _iter_packages(_load(content)):
        version = pkg.get("version")
        if isinstance(version, str) and version:
            versions[pkg["name"]] = version
    return versions


def extract_dist_urls(content: str) -> Dict[str, str]:
    """Map each package name to its ``dist.url``, when one is recorded."""
    urls: Dict[str, str] = {}
    for pkg in _iter_packages(_load(content)):
        dist = pkg.get("dist")
        if isinstance(dist, dict) and isinstance(dist.get("url"), str) and dist["url"]:
            urls[pkg["name"]] = dist["url"]
    return urls
