"""Composer ``auth.json`` credentials and private repository metadata URLs.

Credentials come from two files: the project's ``auth.json`` in the
invocation directory, merged over the global one in ``$COMPOSER_HOME`` (or
``~/.composer``). Only the ``http-basic`` section is used; a host defined in
the project file replaces the global entry for that host.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Dict, Optional
from urllib.parse import quote, urlsplit

from common.config import home_directory
from common.errors import HomeDirectoryError
from constants import Constants, PackageManagers

logger = logging.getLogger(__name__)

HttpBasic = Dict[str, Dict[str, str]]


def _read_http_basic(path: str) -> HttpBasic:
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable Composer auth file %s: %s", path, exc)
        return {}
    section = data.get("http-basic") if isinstance(data, dict) else None
    if not isinstance(section, dict):
        return {}
    return {host: creds for host, creds in section.items() if isinstance(creds, dict)}


def global_auth_path() -> Optional[str]:
    composer_home = os.environ.get(Constants.ENV_COMPOSER_HOME)
    if composer_home:
        return os.path.join(composer_home, Constants.COMPOSER_AUTH_FILE)
    try:
        home = home_directory()
    except HomeDirectoryError:
        return None
    return os.path.join(home, Constants.COMPOSER_HOME_DIR, Constants.COMPOSER_AUTH_FILE)


def load_auth(cwd: Optional[str] = None) -> HttpBasic:
    """Return merged ``http-basic`` credentials keyed by host."""
    merged: HttpBasic = {}
    global_path = global_auth_path()
    if global_path:
        merged.update(_read_http_basic(global_path))
    local_path = os.path.join(cwd or os.getcwd(), Constants.COMPOSER_AUTH_FILE)
    merged.update(_read_http_basic(local_path))
    return merged


def metadata_url(package: str, dist_url: Optional[str], http_basic: HttpBasic) -> str:
    """p2 metadata URL for ``package``.

    Defaults to Packagist. When the host serving the package's dist archive
    has ``http-basic`` credentials, the URL points at that host with the
    credentials embedded.
    """
    default = PackageManagers.COMPOSER.registry_url(package)
    if not dist_url:
        return default
    host = urlsplit(dist_url).hostname
    creds = http_basic.get(host) if host else None
    if not creds:
        return default
    username = quote(str(creds.get("username", "")), safe="")
    password = quote(str(creds.get("password", "")), safe="")
    return f"https://{username}:{password}@{host}/p2/{package}.json"
