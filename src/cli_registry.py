"""CLI Registry utilities."""

import logging
from typing import List, Optional

from constants import PackageManagers


def fetch_releases(kind, name, from_version, to_version, metadata_url=None) -> Optional[List[str]]:
    """Fetch the releases of a package between two versions from its registry.

    Args:
        kind: PackageManagers member
        name: Package name
        from_version: Lower bound, exclusive
        to_version: Upper bound, inclusive
        metadata_url: Composer only; private repository metadata URL

    Returns:
        List of versions, or None when the registry lookup failed.
    """
    if kind is PackageManagers.COMPOSER:
        from registry.composer import client as _composer  # pylint: disable=import-outside-toplevel
        return _composer.releases_between(name, from_version, to_version, metadata_url)
    if kind is PackageManagers.NPM:
        from registry.npm import client as _npm  # pylint: disable=import-outside-toplevel
        return _npm.releases_between(name, from_version, to_version)
    logging.error("Selected package type doesn't support release lookup: %s", kind)
    return None
