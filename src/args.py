"""Argument parsing functionality for lockdiff."""

import argparse
import sys

from common.errors import UsageError
from constants import Constants
from versioning.models import CheckType

COMMANDS = ("analyse", "between", "check", "config")
DEFAULT_COMMAND = "analyse"


def _add_logging_args(parser):
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: WARNING)",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)


def _add_filter_args(parser):
    parser.add_argument("--include",
                        dest="INCLUDE",
                        help="Only analyse these package manager types (comma separated: composer, npmjs)",
                        action="store",
                        type=str)
    parser.add_argument("--exclude",
                        dest="EXCLUDE",
                        help="Skip these package manager types (comma separated: composer, npmjs)",
                        action="store",
                        type=str)
    parser.add_argument("--no-cache",
                        dest="NO_CACHE",
                        help="Disable the registry response cache",
                        action="store_true")


def _add_output_args(parser):
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (default: text)",
                        action="store",
                        type=str.lower,
                        choices=Constants.OUTPUT_FORMATS,
                        default="text")
    parser.add_argument("--no-progress",
                        dest="NO_PROGRESS",
                        help="Do not show the progress bar",
                        action="store_true")


class ArgumentParser(argparse.ArgumentParser):
    """Parser that raises UsageError instead of exiting on bad arguments.

    Subparsers inherit the class, so the whole command tree reports usage
    errors through main().
    """

    def error(self, message):
        raise UsageError(f"{self.prog}: {message}")


def build_parser():
    """Build the top level parser with one subparser per command."""
    parser = ArgumentParser(
        prog="lockdiff",
        description="Show what changed in composer.lock and package-lock.json across git history",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="action", metavar="command")

    analyse = subparsers.add_parser(
        "analyse",
        help="Diff lockfiles against their previous revision (default)",
        description="Diff each lockfile against its previous revision, or the working tree against the last commit.",
    )
    _add_output_args(analyse)
    _add_filter_args(analyse)
    analyse.add_argument("--ignore-last",
                         dest="IGNORE_LAST",
                         help="Ignore uncommitted changes and compare the last two commits",
                         action="store_true")
    analyse.add_argument("--from",
                         dest="FROM_COMMIT",
                         help="Commit, branch or tag to compare from",
                         action="store",
                         type=str)
    analyse.add_argument("--to",
                         dest="TO_COMMIT",
                         help="Commit, branch or tag to compare to (default: HEAD when --from is given)",
                         action="store",
                         type=str)
    _add_logging_args(analyse)

    between = subparsers.add_parser(
        "between",
        help="Diff lockfiles between two commits, branches or tags",
    )
    between.add_argument("FROM_COMMIT",
                         help="Starting commit, branch or tag (older version)",
                         type=str)
    between.add_argument("TO_COMMIT",
                         help="Ending commit, branch or tag (default: HEAD)",
                         nargs="?",
                         type=str)
    _add_output_args(between)
    _add_filter_args(between)
    _add_logging_args(between)

    check = subparsers.add_parser(
        "check",
        help="Check whether a package changed; exit 0 when true, 1 when false, 2 on error",
    )
    check.add_argument("PACKAGE",
                       help="Package name, e.g. symfony/console or react",
                       type=str)
    predicates = check.add_mutually_exclusive_group()
    predicates.add_argument("--has-any-change",
                            dest="CHECK_TYPE",
                            help="Any change (default)",
                            action="store_const",
                            const=CheckType.ANY)
    predicates.add_argument("--is-updated",
                            dest="CHECK_TYPE",
                            help="Package was updated",
                            action="store_const",
                            const=CheckType.UPDATED)
    predicates.add_argument("--is-downgraded",
                            dest="CHECK_TYPE",
                            help="Package was downgraded",
                            action="store_const",
                            const=CheckType.DOWNGRADED)
    predicates.add_argument("--is-removed",
                            dest="CHECK_TYPE",
                            help="Package was removed",
                            action="store_const",
                            const=CheckType.REMOVED)
    predicates.add_argument("--is-added",
                            dest="CHECK_TYPE",
                            help="Package was added",
                            action="store_const",
                            const=CheckType.ADDED)
    check.set_defaults(CHECK_TYPE=CheckType.ANY)
    check.add_argument("-q", "--quiet",
                       dest="QUIET",
                       help="Suppress all output",
                       action="store_true")
    _add_filter_args(check)
    _add_logging_args(check)

    config = subparsers.add_parser(
        "config",
        help="Show or change configuration values",
    )
    config.add_argument("KEY",
                        help="Configuration key, dot notation for nested values (e.g. cache.enabled)",
                        nargs="?",
                        type=str)
    config.add_argument("VALUE",
                        help="Value to set",
                        nargs="?",
                        type=str)
    _add_logging_args(config)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program.

    Runs ``analyse`` when no command is given.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in COMMANDS + ("-h", "--help"):
        argv.insert(0, DEFAULT_COMMAND)
    return build_parser().parse_args(argv)


def requested_format(argv=None):
    """Output format named in ``argv``, read without a full parse.

    Used to shape usage errors when parsing itself failed.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    for index, arg in enumerate(argv):
        if arg in ("-f", "--format") and index + 1 < len(argv):
            return argv[index + 1].lower()
        if arg.startswith("--format="):
            return arg.split("=", 1)[1].lower()
        if arg.startswith("-f") and len(arg) > 2 and not arg.startswith("--"):
            return arg[2:].lower()
    return "text"


def requested_command(argv=None):
    """Command named in ``argv``, or the default command."""
    argv = list(sys.argv[1:] if argv is None else argv)
    return argv[0] if argv and argv[0] in COMMANDS else DEFAULT_COMMAND
