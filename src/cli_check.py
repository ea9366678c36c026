"""The ``check`` command: did a package change?"""

import logging
import sys
from typing import Any, Optional

from analysis.orchestrator import DiffCalculator
from cli_analyse import build_options, setup_cache
from constants import ExitCodes
from repository.git import GitRepository
from versioning.models import ChangeStatus, CheckType, PackageChange

logger = logging.getLogger(__name__)

_EXPECTED_STATUS = {
    CheckType.UPDATED: ChangeStatus.UPDATED,
    CheckType.DOWNGRADED: ChangeStatus.DOWNGRADED,
    CheckType.REMOVED: ChangeStatus.REMOVED,
    CheckType.ADDED: ChangeStatus.ADDED,
}


def evaluate(change: Optional[PackageChange], check_type: CheckType) -> bool:
    """True when ``change`` satisfies ``check_type``; no change is always False."""
    if change is None:
        return False
    if check_type is CheckType.ANY:
        return True
    return change.status is _EXPECTED_STATUS[check_type]


def run_check(args: Any) -> int:
    """Exit 0 when the predicate holds, 1 when it does not, 2 on error."""
    quiet = bool(getattr(args, "QUIET", False))
    check_type = getattr(args, "CHECK_TYPE", None) or CheckType.ANY
    try:
        options = build_options(args, skip_release_count=True)
        setup_cache(bool(getattr(args, "NO_CACHE", False)))
        result = DiffCalculator(GitRepository(), options).run()
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.debug("check failed", exc_info=True)
        if not quiet:
            print(f"Error: {exc}", file=sys.stderr)
        return ExitCodes.CHECK_ERROR.value

    outcome = evaluate(result.find_change(args.PACKAGE), check_type)
    if not quiet:
        print("true" if outcome else "false")
    return ExitCodes.SUCCESS.value if outcome else ExitCodes.FAILURE.value
