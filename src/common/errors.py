"""Exception hierarchy for fatal conditions.

Only conditions that abort an invocation are modelled as exceptions. Parse
failures, git subprocess failures and registry failures are recovered where
they happen and never reach this hierarchy.
"""


class LockdiffError(Exception):
    """Base class for errors that abort a command."""


class UsageError(LockdiffError):
    """Invalid combination of options or an unknown option value."""


class EnvironmentFailure(LockdiffError):
    """The runtime environment cannot support the command."""


class RepositoryNotFoundError(EnvironmentFailure):
    """The working directory is not inside a git working copy."""


class HomeDirectoryError(EnvironmentFailure):
    """The user's home directory cannot be determined."""
