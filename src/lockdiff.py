"""lockdiff - see what changed in your dependency lockfiles."""
import logging
import sys

from args import parse_args, requested_command, requested_format
from common.errors import UsageError
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from outputs.json_output import JsonOutput


def _usage_failure(argv, exc):
    if requested_format(argv) == "json":
        print(JsonOutput.format_error(str(exc)))
    else:
        print(f"Error: {exc}", file=sys.stderr)
    if requested_command(argv) == "check":
        return ExitCodes.CHECK_ERROR.value
    return ExitCodes.FAILURE.value


def main(argv=None):
    """Main function of the program."""
    try:
        args = parse_args(argv)
    except UsageError as exc:
        sys.exit(_usage_failure(argv, exc))

    configure_logging(getattr(args, "LOG_LEVEL", None))
    if getattr(args, "LOG_FILE", None):
        add_file_handler(args.LOG_FILE)

    logger = logging.getLogger(__name__)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action)
        )

    # pylint: disable=import-outside-toplevel
    if args.action == "check":
        from cli_check import run_check
        code = run_check(args)
    elif args.action == "config":
        from cli_config import run_config
        code = run_config(args)
    elif args.action in ("analyse", "between"):
        from cli_analyse import run_analyse
        code = run_analyse(args)
    else:
        logging.error("Unknown command: %s", args.action)
        code = ExitCodes.FAILURE.value
    sys.exit(code)


if __name__ == "__main__":
    main()
