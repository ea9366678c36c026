"""The ``config`` command: show and change the YAML configuration."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import yaml

from common.config import ConfigService, parse_value
from common.errors import LockdiffError
from constants import ExitCodes

logger = logging.getLogger(__name__)


def format_value(value: Any) -> str:
    """Render a configuration value for the terminal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return yaml.safe_dump(value, default_flow_style=False, sort_keys=False, indent=2).rstrip("\n")
    return str(value)


def run_config(args: Any, config: Optional[ConfigService] = None) -> int:
    """Dump all values, print one key, or set one key."""
    key = getattr(args, "KEY", None)
    value = getattr(args, "VALUE", None)
    try:
        config = config or ConfigService()
        if key is None:
            print(format_value(config.get_all()))
            return ExitCodes.SUCCESS.value

        if value is None:
            current = config.get(key)
            if current is None:
                print(f"Configuration key '{key}' not found", file=sys.stderr)
                return ExitCodes.FAILURE.value
            print(format_value(current))
            return ExitCodes.SUCCESS.value

        config.set(key, parse_value(value))
    except (LockdiffError, OSError, yaml.YAMLError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return ExitCodes.FAILURE.value

    logger.info("Configuration updated: %s = %s", key, value)
    print(f"Configuration updated: {key} = {value}")
    return ExitCodes.SUCCESS.value
