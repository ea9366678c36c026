"""Lockfile diff orchestration.

For each configured package manager the calculator resolves the lockfile
path, asks git which revisions to compare, extracts both package maps,
diffs them and enriches version changes with a semver level and a release
count. The work is split in two phases so a caller can show progress: the
diffs are computed up front and enrichment, which needs one registry request
per change, is driven one change at a time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from analysis.diff_engine import compute_diff
from analysis.revision_selector import RevisionSelection, select_revisions
from common.errors import UsageError
from common.logging_utils import extra_context, is_debug_enabled, Timer
from constants import PackageManagers
from registry.composer import auth as composer_auth
from registry.composer import lockfile_parser as composer_lockfile
from registry.npm import lockfile_parser as npm_lockfile
from versioning.models import DependencyDiff, DependencyFile, DiffResult, PackageChange
from versioning.semver import classify

logger = logging.getLogger(__name__)

ReleaseFetcher = Callable[..., Optional[List[str]]]

_EXTRACTORS: Dict[PackageManagers, Callable[[str], Dict[str, str]]] = {
    PackageManagers.COMPOSER: composer_lockfile.extract_versions,
    PackageManagers.NPM: npm_lockfile.extract_versions,
}


def parse_package_manager_types(include: Optional[str] = None,
                                exclude: Optional[str] = None) -> Tuple[PackageManagers, ...]:
    """Resolve comma separated include/exclude lists to package managers.

    Raises:
        UsageError: Both lists given, or an unknown type name.
    """
    if include and exclude:
        raise UsageError("Cannot use --include and --exclude options together")

    def _parse(text: str) -> List[PackageManagers]:
        kinds = []
        for item in text.split(","):
            if not item.strip():
                continue
            kind = PackageManagers.parse(item)
            if kind is None:
                raise UsageError(
                    f"Invalid package manager type: {item.strip()}. "
                    f"Valid types are: {', '.join(k.value for k in PackageManagers)}"
                )
            kinds.append(kind)
        return kinds

    if include:
        selected = set(_parse(include))
        return tuple(k for k in PackageManagers if k in selected)
    if exclude:
        excluded = set(_parse(exclude))
        return tuple(k for k in PackageManagers if k not in excluded)
    return tuple(PackageManagers)


@dataclass
class DiffOptions:
    """Options of one diff run."""
    types: Sequence[PackageManagers] = field(default_factory=lambda: tuple(PackageManagers))
    ignore_last: bool = False
    from_commit: Optional[str] = None
    to_commit: Optional[str] = None
    skip_release_count: bool = False

    @property
    def has_explicit_range(self) -> bool:
        return self.from_commit is not None or self.to_commit is not None

    def validate(self) -> None:
        if self.ignore_last and self.has_explicit_range:
            raise UsageError("Cannot use --ignore-last together with --from or --to")


@dataclass
class _PendingDiff:
    diff: DependencyDiff
    dist_urls: Dict[str, str]


class DiffCalculator:
    """Compute a DiffResult for the repository behind ``git``.

    Args:
        git: GitRepository or an object with the same interface
        options: DiffOptions; defaults to all package managers
        release_fetcher: ``fetcher(kind, name, from, to, metadata_url=None)``
            returning a list of versions or None; defaults to the registries
        auth_loader: returns Composer ``http-basic`` credentials by host
    """

    def __init__(self, git, options: Optional[DiffOptions] = None,
                 release_fetcher: Optional[ReleaseFetcher] = None,
                 auth_loader: Optional[Callable[[], Dict[str, Dict[str, str]]]] = None):
        self._git = git
        self._options = options or DiffOptions()
        if release_fetcher is None:
            from cli_registry import fetch_releases  # pylint: disable=import-outside-toplevel
            release_fetcher = fetch_releases
        self._release_fetcher = release_fetcher
        self._auth_loader = auth_loader or (lambda: composer_auth.load_auth(git.current_dir))
        self._http_basic: Optional[Dict[str, Dict[str, str]]] = None
        self._result: Optional[DiffResult] = None

    @property
    def result(self) -> Optional[DiffResult]:
        """Result of the last completed run, None until then."""
        return self._result

    def run(self) -> DiffResult:
        _, changes = self.run_with_progress()
        for _ in changes:
            pass
        if self._result is None:
            raise RuntimeError("Diff run finished without a result")
        return self._result

    def run_with_progress(self) -> Tuple[int, Iterator[PackageChange]]:
        """Compute the diffs and return ``(total, iterator)``.

        ``total`` is the number of updated or downgraded packages. Each step
        of the iterator enriches one of them and yields it; ``result`` is set
        once the iterator is exhausted.
        """
        self._options.validate()
        self._result = None
        pending = self._compute_diffs()
        total = sum(1 for p in pending for c in p.diff.changes if c.is_version_change)
        return total, self._enrich_all(pending)

    def _compute_diffs(self) -> List[_PendingDiff]:
        from_hash: Optional[str] = None
        to_hash: Optional[str] = None
        if self._options.has_explicit_range:
            from_hash, to_hash = self._resolve_range()
        pending = []
        for kind in self._options.types:
            dependency_file = self._dependency_file(kind)
            if self._options.has_explicit_range:
                selection: Optional[RevisionSelection] = RevisionSelection(
                    from_commit=from_hash, to_commit=to_hash, is_new=False
                )
            else:
                selection = self._select(dependency_file)
            if selection is None:
                continue
            item = self._diff_file(dependency_file, selection)
            if item is not None:
                pending.append(item)
        return pending

    def _resolve_range(self) -> Tuple[Optional[str], str]:
        from_hash = None
        if self._options.from_commit is not None:
            from_hash = self._resolve(self._options.from_commit)
        to_hash = self._resolve(self._options.to_commit or "HEAD")
        return from_hash, to_hash

    def _resolve(self, ref: str) -> str:
        resolved = self._git.resolve_commit(ref)
        if not resolved:
            raise UsageError(f"Unknown revision: {ref}")
        return self._git.short_hash(resolved)

    def _dependency_file(self, kind: PackageManagers) -> DependencyFile:
        dependency_file = DependencyFile.create(kind)
        relative = self._git.relative_current_dir
        if relative and os.path.isfile(os.path.join(self._git.current_dir, dependency_file.file)):
            dependency_file = dependency_file.with_file(f"{relative}/{dependency_file.file}".replace(os.sep, "/"))
        return dependency_file

    def _select(self, dependency_file: DependencyFile) -> Optional[RevisionSelection]:
        path = dependency_file.file
        recently_updated = not self._options.ignore_last and self._git.has_uncommitted_change(path)
        dependency_file = dependency_file.with_status(recently_updated, self._git.commits_touching(path))
        return select_revisions(
            dependency_file.commit_logs,
            dependency_file.has_been_recently_updated,
            lambda commit: self._git.commits_touching(path, commit),
            filename=path,
        )

    def _diff_file(self, dependency_file: DependencyFile, selection: RevisionSelection) -> Optional[_PendingDiff]:
        path = dependency_file.file
        if selection.to_commit is None:
            to_content = self._git.working_tree_content(path)
        else:
            to_content = self._git.content_at(path, selection.to_commit)
        if not to_content.strip():
            logger.info("%s has no content at %s; skipping", path, selection.to_commit or "working tree")
            return None
        from_content = self._git.content_at(path, selection.from_commit) if selection.from_commit else ""

        extract = _EXTRACTORS[dependency_file.type]
        changes = compute_diff(extract(from_content), extract(to_content), dependency_file.type)
        dist_urls = {}
        if dependency_file.type is PackageManagers.COMPOSER:
            dist_urls = composer_lockfile.extract_dist_urls(to_content)

        logger.info(
            "%s: %d change(s) between %s and %s",
            path,
            len(changes),
            selection.from_commit or "(none)",
            selection.to_commit or "working tree",
            extra=extra_context(
                event="diff",
                component="orchestrator",
                package_manager=dependency_file.type.value,
                target=path,
            ),
        )
        diff = DependencyDiff(
            filename=path,
            type=dependency_file.type,
            from_commit=selection.from_commit,
            to_commit=selection.to_commit,
            changes=tuple(changes),
            is_new=selection.is_new,
        )
        return _PendingDiff(diff=diff, dist_urls=dist_urls)

    def _enrich_all(self, pending: List[_PendingDiff]) -> Iterator[PackageChange]:
        diffs = []
        for item in pending:
            enriched = []
            for change in item.diff.changes:
                if change.is_version_change:
                    change = self._enrich(change, item.dist_urls)
                    yield change
                enriched.append(change)
            diffs.append(DependencyDiff(
                filename=item.diff.filename,
                type=item.diff.type,
                from_commit=item.diff.from_commit,
                to_commit=item.diff.to_commit,
                changes=tuple(enriched),
                is_new=item.diff.is_new,
            ))
        self._result = DiffResult(
            diffs=tuple(diffs),
            has_uncommitted_changes=any(d.is_uncommitted for d in diffs),
        )

    def _enrich(self, change: PackageChange, dist_urls: Dict[str, str]) -> PackageChange:
        semver = classify(change.from_version, change.to_version)
        if self._options.skip_release_count:
            return change.with_enrichment(None, semver)

        metadata_url = None
        if change.type is PackageManagers.COMPOSER:
            metadata_url = composer_auth.metadata_url(change.name, dist_urls.get(change.name), self._credentials())

        with Timer() as t:
            releases = self._release_fetcher(
                change.type, change.name, change.from_version, change.to_version, metadata_url=metadata_url
            )
        if is_debug_enabled(logger):
            logger.debug(
                "Release lookup finished",
                extra=extra_context(
                    event="release_count",
                    component="orchestrator",
                    outcome="success" if releases is not None else "unavailable",
                    package_manager=change.type.value,
                    duration_ms=t.duration_ms(),
                ),
            )
        return change.with_enrichment(len(releases) if releases is not None else None, semver)

    def _credentials(self) -> Dict[str, Dict[str, str]]:
        if self._http_basic is None:
            self._http_basic = self._auth_loader()
        return self._http_basic
