"""The ``analyse`` and ``between`` commands.

Both run the same diff: ``between`` is ``analyse --from X --to Y``. Text
output on a terminal gets a progress bar on stderr while release counts are
fetched.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from analysis.orchestrator import DiffCalculator, DiffOptions, parse_package_manager_types
from common.cache import CacheService
from common.config import ConfigService
from common.errors import LockdiffError
from common.http_client import set_default_cache
from common.logging_utils import extra_context, is_debug_enabled
from constants import ExitCodes
from outputs import JsonOutput, get_formatter
from repository.git import GitRepository
from versioning.models import DiffResult

logger = logging.getLogger(__name__)


def build_options(args: Any, skip_release_count: bool = False) -> DiffOptions:
    """Translate parsed arguments into validated DiffOptions."""
    options = DiffOptions(
        types=parse_package_manager_types(getattr(args, "INCLUDE", None), getattr(args, "EXCLUDE", None)),
        ignore_last=bool(getattr(args, "IGNORE_LAST", False)),
        from_commit=getattr(args, "FROM_COMMIT", None),
        to_commit=getattr(args, "TO_COMMIT", None),
        skip_release_count=skip_release_count,
    )
    options.validate()
    return options


def setup_cache(no_cache: bool = False, config: Optional[ConfigService] = None) -> CacheService:
    """Install the registry response cache for this invocation."""
    cache = CacheService(config or ConfigService())
    if no_cache:
        cache.disable()
    set_default_cache(cache)
    return cache


def run_with_progress_bar(calculator: DiffCalculator, console: Optional[Console] = None) -> DiffResult:
    """Run ``calculator`` while a progress bar tracks release lookups."""
    total, changes = calculator.run_with_progress()
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(bar_width=40, complete_style="cyan", finished_style="green"),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console or Console(stderr=True),
        transient=True,
    )
    with progress:
        task_id = progress.add_task("Fetching release information", total=total)
        for change in changes:
            progress.update(task_id, advance=1, description=f"Fetching {change.name}")
    return calculator.result


def _report_error(output_format: str, exc: Exception) -> int:
    if output_format == "json":
        print(JsonOutput.format_error(str(exc)))
    else:
        print(f"Error: {exc}", file=sys.stderr)
    return ExitCodes.FAILURE.value


def run_analyse(args: Any) -> int:
    """Entry point for ``analyse`` and ``between``. Returns the exit code."""
    output_format = getattr(args, "OUTPUT_FORMAT", "text") or "text"
    try:
        options = build_options(args)
        setup_cache(bool(getattr(args, "NO_CACHE", False)))
        calculator = DiffCalculator(GitRepository(), options)
        show_progress = (
            output_format == "text"
            and not getattr(args, "NO_PROGRESS", False)
            and sys.stderr.isatty()
        )
        result = run_with_progress_bar(calculator) if show_progress else calculator.run()
    except LockdiffError as exc:
        logger.debug("analyse failed", exc_info=True)
        return _report_error(output_format, exc)

    if is_debug_enabled(logger):
        logger.debug(
            "Diff finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="analyse",
                count=len(result.all_changes),
            ),
        )
    formatter = get_formatter(output_format, use_ansi=sys.stdout.isatty())
    print(formatter.format(result))
    return ExitCodes.SUCCESS.value
