"""Markdown renderer, suitable for pull request descriptions."""

from typing import List, Sequence

from versioning.models import DependencyDiff, DiffResult, PackageChange


def _release_text(change: PackageChange) -> str:
    if change.release_count is not None and change.release_count > 1:
        return f" ({change.release_count} releases)"
    return ""


class MarkdownOutput:
    """Render diffs with one section per lockfile and one list per status."""

    def format(self, result: DiffResult) -> str:
        if not result.has_any_changes:
            return "No dependency changes detected."

        lines: List[str] = ["# Dependency Changes", ""]
        if result.has_uncommitted_changes:
            lines.extend(["> **Note:** Showing uncommitted changes", ""])
        for diff in result.diffs:
            lines.extend(self._format_diff(diff))
        return "\n".join(lines).rstrip("\n")

    def _format_diff(self, diff: DependencyDiff) -> List[str]:
        if not diff.has_changes:
            return []

        lines = [f"## {diff.filename}"]
        if diff.is_new:
            lines.append("*File created*")
        else:
            from_commit = diff.from_commit[:7] if diff.from_commit else "unknown"
            to_commit = diff.to_commit[:7] if diff.to_commit else "uncommitted"
            lines.append(f"*Changes from `{from_commit}` to `{to_commit}`*")
        lines.append("")

        lines.extend(self._section("Added", diff.added, lambda c: f"- **{c.name}** `{c.to_version}`"))
        lines.extend(self._section("Removed", diff.removed, lambda c: f"- **{c.name}** `{c.from_version}`"))
        lines.extend(self._section("Updated", diff.updated, self._version_change))
        lines.extend(self._section("Downgraded", diff.downgraded, self._version_change))
        return lines

    @staticmethod
    def _version_change(change: PackageChange) -> str:
        semver = f" *{change.semver.value}*" if change.semver else ""
        return f"- **{change.name}** `{change.from_version}` → `{change.to_version}`{_release_text(change)}{semver}"

    @staticmethod
    def _section(title: str, changes: Sequence[PackageChange], render) -> List[str]:
        if not changes:
            return []
        return [f"### {title}", *(render(c) for c in changes), ""]
