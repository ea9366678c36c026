"""Plain text renderer for terminals."""

from io import StringIO
from typing import Dict

from rich.console import Console
from rich.text import Text

from constants import PackageManagers
from versioning.models import ChangeStatus, DependencyDiff, DiffResult, PackageChange

_SYMBOLS: Dict[ChangeStatus, str] = {
    ChangeStatus.ADDED: "+",
    ChangeStatus.REMOVED: "×",
    ChangeStatus.UPDATED: "↑",
    ChangeStatus.DOWNGRADED: "↓",
}

_STYLES: Dict[ChangeStatus, str] = {
    ChangeStatus.ADDED: "green",
    ChangeStatus.REMOVED: "red",
    ChangeStatus.UPDATED: "cyan",
    ChangeStatus.DOWNGRADED: "yellow",
}


class TextOutput:
    """Aligned one-line-per-package listing.

    With ``use_ansi`` the status symbols are coloured.
    """

    def __init__(self, use_ansi: bool = True):
        self.use_ansi = use_ansi

    def format(self, result: DiffResult) -> str:
        buffer = StringIO()
        console = Console(
            file=buffer,
            force_terminal=self.use_ansi,
            color_system="standard" if self.use_ansi else None,
            highlight=False,
            markup=False,
            emoji=False,
            width=1000,
        )

        if not result.has_diffs:
            filenames = ", ".join(kind.lockfile for kind in PackageManagers)
            console.print(f"No recent changes and no commit logs found for {filenames}")
            return buffer.getvalue().rstrip("\n")

        if result.has_uncommitted_changes:
            filenames = ", ".join(d.filename for d in result.diffs if d.is_uncommitted)
            console.print(f"Uncommitted changes detected on {filenames}")
            console.print()

        for diff in result.diffs:
            self._format_diff(console, diff)
        return buffer.getvalue().rstrip("\n")

    def _format_diff(self, console: Console, diff: DependencyDiff) -> None:
        if diff.is_new:
            suffix = f" created at {diff.to_commit}" if diff.to_commit else " created"
            console.print(f"{diff.filename}{suffix}")
        else:
            from_commit = diff.from_commit or "unknown"
            to_commit = diff.to_commit or "uncommitted changes"
            console.print(f"{diff.filename} between {from_commit} and {to_commit}")
        console.print()

        if not diff.has_changes:
            console.print(" → No dependencies changes detected")
            console.print()
            return

        name_width = max(len(c.name) for c in diff.changes)
        from_width = max((len(c.from_version) for c in diff.changes if c.from_version is not None), default=0)
        for change in diff.changes:
            console.print(self._line(change, name_width, from_width))
        console.print()

    @staticmethod
    def _line(change: PackageChange, name_width: int, from_width: int) -> Text:
        line = Text(_SYMBOLS[change.status], style=_STYLES[change.status])
        line.append(f" {change.name.ljust(name_width)} : ")
        if change.status is ChangeStatus.ADDED:
            line.append(change.to_version or "")
        elif change.status is ChangeStatus.REMOVED:
            line.append(change.from_version or "")
        else:
            line.append(f"{(change.from_version or '').ljust(from_width)} => {change.to_version}")
            if change.release_count is not None and change.release_count > 1:
                line.append(f" ({change.release_count} releases)")
        return line
