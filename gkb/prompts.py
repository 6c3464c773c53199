"""
Interactive prompts.

Selection and confirmation helpers handed to KernelBuilder. Both read
from stdin with input(); lists and questions are printed to the given
stream, stderr by default.
"""

import sys
from typing import Sequence

from .errors import PromptFailure
from .scanner import VersionEntry


def _read(prompt: str, stream) -> str:
    print(prompt, end="", file=stream, flush=True)
    try:
        return input()
    except EOFError as e:
        raise PromptFailure("No answer given (end of input)") from e


def select_version(entries: Sequence[VersionEntry], stream=None) -> int:
    """
    Ask the operator which source tree to build.

    Lists the entries numbered from 0; an empty answer picks the first.
    Invalid answers are asked again.

    Args:
        entries: Candidate source trees
        stream: Where the list is printed (defaults to stderr)

    Returns:
        int: Index of the chosen entry

    Raises:
        PromptFailure: If there is nothing to choose from or input ends
    """
    if not entries:
        raise PromptFailure("No kernel sources to choose from")

    if stream is None:
        stream = sys.stderr

    print("Pick version to build and install:", file=stream)
    for index, entry in enumerate(entries):
        print(f"  [{index}] {entry.version_string}", file=stream)

    while True:
        answer = _read(f"Version [0-{len(entries) - 1}, default 0]: ", stream).strip()
        if not answer:
            return 0
        if answer.isdecimal() and int(answer) < len(entries):
            return int(answer)
        print(f"Invalid choice: {answer}", file=stream)


def confirm(message: str, stream=None) -> bool:
    """
    Ask a yes/no question on stderr, defaulting to no.

    Raises:
        PromptFailure: If input ends before an answer is given
    """
    if stream is None:
        stream = sys.stderr
    response = _read(f"{message} [y/N]: ", stream).strip().lower()
    return response in ('y', 'yes')


def assume_yes(message: str) -> bool:
    """Confirmation that always answers yes (--yes)."""
    return True
