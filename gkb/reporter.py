"""
Output reporting module.

Prints stage progress and results with configurable verbosity.
"""

from typing import List, Sequence
from enum import Enum

from .pipeline import Stage
from .scanner import VersionEntry


class OutputLevel(Enum):
    """Output verbosity levels."""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2


_STARTED = {
    Stage.COMPILE: "Compiling kernel...",
    Stage.MODULES_INSTALL: "Installing kernel modules...",
    Stage.INITRAMFS: "Generating initramfs...",
}

_FINISHED = {
    Stage.COMPILE: "Finished compiling kernel",
    Stage.MODULES_INSTALL: "Finished installing modules",
    Stage.INITRAMFS: "Finished generating initramfs",
}


class Reporter:
    """
    Handles formatted output for gkb operations.

    Progress goes to stdout; errors are printed by the CLI.
    """

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL):
        """
        Initialize the reporter.

        Args:
            level: Output verbosity level
        """
        self.level = level

    def print_versions(self, entries: Sequence[VersionEntry], root: str) -> None:
        """Print the discovered source trees (verbose only)."""
        if self.level != OutputLevel.VERBOSE:
            return

        print(f"Found {len(entries)} kernel source(s) in {root}")
        for entry in entries:
            print(f"  {entry.version_string}")
        print()

    def print_selected(self, entry: VersionEntry) -> None:
        if self.level == OutputLevel.QUIET:
            return
        print(f"Selected {entry.version_string}")

    def print_link(self, link: str, target: str, changed: bool) -> None:
        """
        Print what happened to a symlink (verbose only).

        Args:
            link: Path of the link
            target: What the link should point at
            changed: Whether the link was (re)created
        """
        if self.level != OutputLevel.VERBOSE:
            return

        if changed:
            print(f"Linked {link} -> {target}")
        else:
            print(f"{link} already in place")

    def print_command(self, command: List[str]) -> None:
        """Print the command about to be executed (verbose only)."""
        if self.level != OutputLevel.VERBOSE:
            return
        print(f"Executing: {' '.join(command)}")

    def stage_started(self, stage: Stage) -> None:
        if self.level == OutputLevel.QUIET:
            return
        print(_STARTED[stage], flush=True)

    def stage_finished(self, stage: Stage) -> None:
        if self.level == OutputLevel.QUIET:
            return
        print(_FINISHED[stage])

    def stage_skipped(self, stage: Stage) -> None:
        if self.level != OutputLevel.VERBOSE:
            return
        print(f"Skipped: {stage.value}")

    def print_done(self) -> None:
        """Print final completion notice."""
        if self.level == OutputLevel.QUIET:
            return

        print()
        print("Done.")
