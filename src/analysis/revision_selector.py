"""Choose which two revisions of a lockfile to compare.

A lockfile with uncommitted edits is compared against its newest commit; a
committed lockfile compares its two newest commits; a lockfile with neither
is skipped. When the ``from`` revision was chosen from a log that mixes
several files, it may not touch this lockfile at all. The file is then
either new in the range (nothing touched it before) or untouched since an
earlier point, and is skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from common.logging_utils import extra_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevisionSelection:
    """Revisions to diff. ``to_commit`` None means the working tree."""
    from_commit: Optional[str]
    to_commit: Optional[str]
    is_new: bool = False


def pick_commits(commit_logs: Sequence[str], recently_updated: bool) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(to, from)`` from a newest-first commit list."""
    if recently_updated:
        return None, (commit_logs[0] if commit_logs else None)
    to_commit = commit_logs[0] if commit_logs else None
    from_commit = commit_logs[1] if len(commit_logs) > 1 else None
    return to_commit, from_commit


def select_revisions(
    commit_logs: Sequence[str],
    recently_updated: bool,
    history_before: Callable[[str], List[str]],
    reference_log: Optional[Sequence[str]] = None,
    filename: Optional[str] = None,
) -> Optional[RevisionSelection]:
    """Resolve the revisions for one lockfile, or None to skip it.

    Args:
        commit_logs: Commits touching this lockfile, newest first
        recently_updated: Whether the working tree has uncommitted changes to it
        history_before: Lists commits touching the lockfile strictly before
            a given commit
        reference_log: Log the commits are picked from; defaults to
            ``commit_logs``. A ``from`` commit outside the lockfile's own
            log, and so the untouched check, only arises when this differs.
        filename: Used in log messages only
    """
    if not recently_updated and not commit_logs:
        return None

    log = commit_logs if reference_log is None else reference_log
    to_commit, from_commit = pick_commits(log, recently_updated)
    if not recently_updated and to_commit is None:
        return None

    if from_commit is not None and from_commit in commit_logs:
        return RevisionSelection(from_commit=from_commit, to_commit=to_commit, is_new=False)

    if from_commit is not None and history_before(from_commit):
        logger.info(
            "%s untouched since %s; skipping",
            filename or "lockfile",
            from_commit,
            extra=extra_context(
                event="revision_select",
                component="revision_selector",
                outcome="untouched",
                target=filename,
            ),
        )
        return None

    return RevisionSelection(from_commit=None, to_commit=to_commit, is_new=True)
