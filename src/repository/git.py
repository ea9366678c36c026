"""Git working copy access through the ``git`` command line.

Every query runs from the repository root with a timeout. A failed or
timed-out command is treated as empty output; only failing to locate the
repository itself raises.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import List, Optional, Sequence

from common.errors import RepositoryNotFoundError
from common.logging_utils import extra_context, is_debug_enabled, Timer
from constants import Constants

logger = logging.getLogger(__name__)

# Porcelain status codes that mean the file differs from HEAD in a way worth diffing
_CHANGED_CODES = ("M", "A", "?")


class GitRepository:
    """Repository containing the invocation directory."""

    def __init__(self, cwd: Optional[str] = None):
        self._current_dir = os.path.abspath(cwd or os.getcwd()).rstrip(os.sep) or os.sep
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--show-toplevel"],
                cwd=self._current_dir,
                capture_output=True,
                text=True,
                timeout=Constants.GIT_TIMEOUT,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise RepositoryNotFoundError(f"Unable to run git: {exc}") from exc
        root = result.stdout.strip()
        if result.returncode != 0 or not root:
            raise RepositoryNotFoundError(
                f"Not a git repository (or any of the parent directories): {self._current_dir}"
            )
        self._root = os.path.realpath(root)
        relative = os.path.relpath(os.path.realpath(self._current_dir), self._root)
        self._relative_current_dir = "" if relative == os.curdir else relative

    @property
    def root(self) -> str:
        return self._root

    @property
    def current_dir(self) -> str:
        return self._current_dir

    @property
    def relative_current_dir(self) -> str:
        """Invocation directory relative to the root; empty at the root."""
        return self._relative_current_dir

    def _run(self, args: Sequence[str]) -> str:
        cmd = ["git", *args]
        with Timer() as t:
            try:
                result = subprocess.run(
                    cmd,
                    cwd=self._root,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    timeout=Constants.GIT_TIMEOUT,
                    check=False,
                )
            except (OSError, subprocess.TimeoutExpired) as exc:
                logger.debug(
                    "git command failed: %s",
                    exc,
                    extra=extra_context(event="git", component="git", action=args[0], outcome="exception"),
                )
                return ""
        if result.returncode != 0:
            logger.debug(
                "git %s exited with %s: %s",
                args[0],
                result.returncode,
                result.stderr.strip(),
                extra=extra_context(event="git", component="git", action=args[0], outcome="nonzero_exit"),
            )
            return ""
        if is_debug_enabled(logger):
            logger.debug(
                "git %s",
                " ".join(args),
                extra=extra_context(event="git", component="git", action=args[0],
                                    outcome="success", duration_ms=t.duration_ms()),
            )
        return result.stdout

    def commits_touching(self, path: str, before_commit: Optional[str] = None) -> List[str]:
        """Short hashes of commits touching ``path``, newest first.

        With ``before_commit`` only history reachable from that commit is
        listed.
        """
        args = ["log"]
        if before_commit:
            args.append(before_commit)
        args.extend(["--pretty=format:%h", "--", path])
        return [line.strip() for line in self._run(args).splitlines() if line.strip()]

    def has_uncommitted_change(self, path: str) -> bool:
        """True when ``path`` is modified, added or untracked in the working tree."""
        for line in self._run(["status", "--porcelain", "--", path]).splitlines():
            if len(line) < 3:
                continue
            code = line[:2]
            if any(c in code for c in _CHANGED_CODES):
                return True
        return False

    def content_at(self, path: str, commit: str) -> str:
        """Content of ``path`` at ``commit``; empty when it did not exist there."""
        return self._run(["show", f"{commit}:{path}"])

    def working_tree_content(self, path: str) -> str:
        full_path = os.path.join(self._root, path)
        try:
            with open(full_path, "r", encoding="utf-8") as fh:
                return fh.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Cannot read %s: %s", full_path, exc)
            return ""

    def resolve_commit(self, ref: str) -> Optional[str]:
        """Full hash for ``ref``, or None if it does not name a commit."""
        output = self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"]).strip()
        return output or None

    def short_hash(self, commit: str) -> str:
        return self._run(["rev-parse", "--short", commit]).strip() or commit[:7]
