"""Lockfile parser for npm package-lock.json.

Reads the flat ``packages`` object written by lockfileVersion 2 and 3. Keys
are install paths such as ``node_modules/@scope/pkg`` or
``node_modules/react/node_modules/scheduler``; the package name is the key
with every ``node_modules/`` segment removed.
"""

from __future__ import annotations

import json
import logging
from typing import Dict

from common.logging_utils import extra_context

logger = logging.getLogger(__name__)

_NODE_MODULES = "node_modules/"


def package_name_from_path(pkg_path: str) -> str:
    """Return the package name for an install path.

    ``node_modules/react/node_modules/scheduler`` becomes ``react/scheduler``.
    """
    return pkg_path.replace(_NODE_MODULES, "")


def extract_versions(content: str) -> Dict[str, str]:
    """Extract a package name to version map from package-lock.json text.

    Args:
        content: Raw lockfile text

    Returns:
        Mapping of package name to version; empty when the text is not a
        JSON object.
    """
    try:
        data = json.loads(content or "")
    except (json.JSONDecodeError, TypeError) as e:
        logger.debug(
            "Failed to parse package-lock.json: %s",
            e,
            extra=extra_context(
                event="parse",
                component="npm_lockfile",
                outcome="json_decode_error",
            ),
        )
        return {}

    if not isinstance(data, dict):
        return {}
    packages = data.get("packages")
    if not isinstance(packages, dict):
        return {}

    versions: Dict[str, str] = {}
    for pkg_path, pkg_info in packages.items():
        # Root project entry has an empty path
        if not pkg_path or not isinstance(pkg_info, dict):
            continue
        version = pkg_info.get("version")
        if not isinstance(version, str) or not version:
            continue
        name = package_name_from_path(pkg_path)
        if name:
            versions[name] = version
    return versions
