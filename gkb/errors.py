"""
Error types.

Every failure gkb reports derives from BuilderError and carries the exit
code the CLI returns for it.
"""

from typing import Optional


class BuilderError(Exception):
    """Base class for all gkb failures."""

    exit_code = 1


class SettingsError(BuilderError):
    """The settings file is missing, unreadable or incomplete."""

    exit_code = 1


class PrivilegeFailure(BuilderError):
    """Escalation to root privileges failed."""

    exit_code = 2


class ConfigMissing(BuilderError):
    """The kernel .config source does not exist or is not a regular file."""

    exit_code = 3

    def __init__(self, path):
        super().__init__(f"Kernel config file not found: {path}")
        self.path = path


class LinkingError(BuilderError):
    """
    A symlink could not be read, created or replaced.

    Attributes:
        link: Path of the link being handled
        cause: Underlying OS error
    """

    exit_code = 4

    def __init__(self, link, cause: OSError):
        super().__init__(f"Failed to link {link}: {cause}")
        self.link = link
        self.cause = cause


class BuildFailure(BuilderError):
    """
    A build stage could not run, exited non-zero, or its artifact was not copied.

    Attributes:
        stage: Name of the failing stage
        cause: Underlying OS error, if any
        returncode: Exit status of the stage process, if it ran
    """

    exit_code = 5

    def __init__(
        self,
        stage: str,
        cause: Optional[OSError] = None,
        returncode: Optional[int] = None,
    ):
        if cause is not None:
            message = f"{stage} failed: {cause}"
        else:
            message = f"{stage} failed with exit code {returncode}"
        super().__init__(message)
        self.stage = stage
        self.cause = cause
        self.returncode = returncode


class PromptFailure(BuilderError):
    """The interactive prompt itself failed (not a "no" answer)."""

    exit_code = 6
