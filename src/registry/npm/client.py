"""npm registry client: releases published between two versions."""

from __future__ import annotations

import logging
from typing import List, Optional

from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from constants import PackageManagers
from versioning.parser import releases_in_range

logger = logging.getLogger(__name__)

_ACCEPT = "application/json"


def releases_between(package: str, from_version: str, to_version: str) -> Optional[List[str]]:
    """List versions of ``package`` after ``from_version`` up to ``to_version``.

    Args:
        package: Package name, scoped names included
        from_version: Lower bound, exclusive
        to_version: Upper bound, inclusive

    Returns:
        Matching versions in registry order, or None if the registry could not
        be queried.
    """
    url = PackageManagers.NPM.registry_url(package)

    with Timer() as timer:
        status, _, data = get_json(url, headers={"Accept": _ACCEPT})

    if status != 200 or not isinstance(data, dict):
        logger.debug(
            "npm metadata unavailable for %s",
            package,
            extra=extra_context(
                event="http_response",
                component="client",
                outcome="unavailable",
                status_code=status,
                duration_ms=timer.duration_ms(),
                target=safe_url(url),
                package_manager="npm",
            ),
        )
        return None

    versions = data.get("versions")
    if not isinstance(versions, dict):
        return []

    releases = releases_in_range(versions.keys(), from_version, to_version)
    if is_debug_enabled(logger):
        logger.debug(
            "npm releases counted",
            extra=extra_context(
                event="release_count",
                component="client",
                outcome="success",
                count=len(releases),
                duration_ms=timer.duration_ms(),
                package_manager="npm",
            ),
        )
    return releases
