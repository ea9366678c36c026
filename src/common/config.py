"""User configuration stored as YAML under the home directory."""

from __future__ import annotations

import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

from common.errors import HomeDirectoryError
from constants import Constants

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "cache": {
        "enabled": True,
        "min-time": Constants.CACHE_MIN_TIME_SEC,
        "max-time": Constants.CACHE_MAX_TIME_SEC,
    },
}


def home_directory() -> str:
    """Return the user's home directory.

    Raises:
        HomeDirectoryError: If neither HOME nor USERPROFILE is set.
    """
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    if not home:
        raise HomeDirectoryError("Cannot determine home directory")
    return home


def default_config_dir() -> str:
    """Directory holding the config file and the response cache."""
    return os.path.join(home_directory(), Constants.CONFIG_DIR_NAME)


def _deep_merge(dest: Dict[str, Any], src: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in src.items():
        if isinstance(value, dict) and isinstance(dest.get(key), dict):
            _deep_merge(dest[key], value)
        else:
            dest[key] = value
    return dest


def parse_value(text: str) -> Any:
    """Coerce a command-line value into bool, int, float or str."""
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


class ConfigService:
    """Read and write the YAML configuration file.

    Values are addressed with dot paths, e.g. ``cache.min-time``. Missing
    keys fall back to DEFAULTS.
    """

    def __init__(self, config_path: Optional[str] = None):
        self._config_path = config_path or os.path.join(default_config_dir(), Constants.CONFIG_FILE_NAME)
        self._config: Dict[str, Any] = {}
        self._load()

    @property
    def config_path(self) -> str:
        return self._config_path

    def get(self, key: str, default: Any = None) -> Any:
        value = self._lookup(self._config, key)
        if value is None:
            return default if default is not None else self._lookup(DEFAULTS, key)
        return value

    def set(self, key: str, value: Any) -> None:
        """Set ``key`` and persist the whole file."""
        node = self._config
        parts = key.split(".")
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
        self._save()

    def get_all(self) -> Dict[str, Any]:
        return _deep_merge(copy.deepcopy(DEFAULTS), self._config)

    @staticmethod
    def _lookup(data: Dict[str, Any], key: str) -> Any:
        node: Any = data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def _ensure_exists(self) -> None:
        directory = os.path.dirname(self._config_path)
        if directory:
            os.makedirs(directory, mode=0o755, exist_ok=True)
        if not os.path.isfile(self._config_path):
            self._write(DEFAULTS)

    def _load(self) -> None:
        try:
            self._ensure_exists()
        except OSError as exc:
            logger.warning("Could not create config file %s: %s", self._config_path, exc)
            return
        try:
            with open(self._config_path, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Failed to load config %s: %s", self._config_path, exc)
            return
        self._config = data if isinstance(data, dict) else {}

    def _save(self) -> None:
        self._ensure_exists()
        self._write(self._config)

    def _write(self, data: Dict[str, Any]) -> None:
        with open(self._config_path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False, indent=2)
