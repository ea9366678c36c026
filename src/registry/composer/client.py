"""Composer repository client (Packagist p2 metadata)."""

from __future__ import annotations

import logging
from typing import List, Optional

from common.http_client import get_json
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from constants import PackageManagers
from versioning.parser import releases_in_range

logger = logging.getLogger(__name__)


def releases_between(
    package: str,
    from_version: str,
    to_version: str,
    metadata_url: Optional[str] = None,
) -> Optional[List[str]]:
    """List versions of ``package`` after ``from_version`` up to ``to_version``.

    Args:
        package: vendor/name
        from_version: Lower bound, exclusive
        to_version: Upper bound, inclusive
        metadata_url: p2 metadata URL; Packagist when omitted. Private
            repositories embed basic-auth credentials in it.

    Returns:
        Matching versions, or None if the repository could not be queried.
    """
    url = metadata_url or PackageManagers.COMPOSER.registry_url(package)
    safe_target = safe_url(url)

    with Timer() as timer:
        status, _, data = get_json(url)

    if status in (401, 403):
        logger.warning(
            "Access denied fetching metadata for %s (HTTP %s); check auth.json credentials",
            package,
            status,
            extra=extra_context(
                event="http_response",
                component="client",
                outcome="auth_failed",
                status_code=status,
                target=safe_target,
                package_manager="composer",
            ),
        )
        return None

    if status != 200 or not isinstance(data, dict):
        logger.debug(
            "Composer metadata unavailable for %s",
            package,
            extra=extra_context(
                event="http_response",
                component="client",
                outcome="unavailable",
                status_code=status,
                duration_ms=timer.duration_ms(),
                target=safe_target,
                package_manager="composer",
            ),
        )
        return None

    packages = data.get("packages")
    entries = packages.get(package) if isinstance(packages, dict) else None
    if not isinstance(entries, list):
        return []

    versions = [entry.get("version") for entry in entries if isinstance(entry, dict)]
    releases = releases_in_range(versions, from_version, to_version)
    if is_debug_enabled(logger):
        logger.debug(
            "Composer releases counted",
            extra=extra_context(
                event="release_count",
                component="client",
                outcome="success",
                count=len(releases),
                duration_ms=timer.duration_ms(),
                package_manager="composer",
            ),
        )
    return releases
