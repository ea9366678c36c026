"""Constants used in the project."""

from enum import Enum
from typing import Optional
from urllib.parse import quote


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FAILURE = 1
    CHECK_ERROR = 2


class PackageManagers(Enum):
    """Package managers supported by the program.

    Args:
        Enum (string): Package managers supported by the program.
    """

    COMPOSER = "composer"
    NPM = "npmjs"

    @property
    def label(self) -> str:
        """Human readable name."""
        if self is PackageManagers.COMPOSER:
            return "Composer"
        return "npm"

    @property
    def lockfile(self) -> str:
        """Lockfile name at the project root."""
        if self is PackageManagers.COMPOSER:
            return Constants.COMPOSER_LOCK_FILE
        return Constants.PACKAGE_LOCK_FILE

    def registry_url(self, package: str = "") -> str:
        """Registry metadata URL for a package, or the registry base URL."""
        if self is PackageManagers.COMPOSER:
            if package:
                return f"{Constants.REGISTRY_URL_PACKAGIST}/p2/{package}.json"
            return Constants.REGISTRY_URL_PACKAGIST
        if package:
            return f"{Constants.REGISTRY_URL_NPM}/{quote(package, safe='@')}"
        return Constants.REGISTRY_URL_NPM

    @classmethod
    def parse(cls, text: str) -> Optional["PackageManagers"]:
        """Map a user supplied type name to a package manager, or None."""
        value = (text or "").strip().lower()
        if value == "composer":
            return cls.COMPOSER
        if value in ("npmjs", "npm"):
            return cls.NPM
        return None


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_PACKAGIST = "https://repo.packagist.org"
    REGISTRY_URL_NPM = "https://registry.npmjs.org"
    OUTPUT_FORMATS = ["text", "json", "markdown"]
    COMPOSER_LOCK_FILE = "composer.lock"
    PACKAGE_LOCK_FILE = "package-lock.json"
    COMPOSER_AUTH_FILE = "auth.json"
    COMPOSER_HOME_DIR = ".composer"
    ENV_COMPOSER_HOME = "COMPOSER_HOME"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "LOCKDIFF_LOG_LEVEL"
    DEFAULT_LOG_LEVEL = "WARNING"
    REQUEST_TIMEOUT = 30  # Read timeout in seconds for all HTTP requests
    CONNECT_TIMEOUT = 10
    GIT_TIMEOUT = 60  # Seconds before a git subprocess is abandoned
    USER_AGENT = "lockdiff"

    # Configuration and cache locations (under the user's home directory)
    CONFIG_DIR_NAME = ".lockdiff"
    CONFIG_FILE_NAME = "config.yaml"
    CACHE_DIR_NAME = "cache"
    CACHE_MIN_TIME_SEC = 300
    CACHE_MAX_TIME_SEC = 86400
