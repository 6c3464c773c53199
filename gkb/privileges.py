"""
Privilege handling.

Installing a kernel writes to /boot, /lib/modules and /usr/src, so the build
runs as root. When started as a normal user gkb re-executes itself via sudo.
"""

import os
import sys
from typing import List

from .errors import PrivilegeFailure


def is_root() -> bool:
    """
    Check if the current process runs as root.

    Returns:
        bool: True if the effective UID is 0
    """
    try:
        return os.geteuid() == 0
    except AttributeError:
        # os.geteuid() not available on Windows
        return False


def generate_sudo_command(argv: List[str]) -> List[str]:
    """
    Command re-running gkb with the same arguments under sudo.

    The environment is preserved so HOME and GKB_* settings still apply.
    """
    return ["sudo", "-E", sys.executable, "-m", "gkb"] + list(argv)


def escalate_if_needed(argv: List[str]) -> None:
    """
    Replace the current process with a root one unless already root.

    Only returns when already running as root.

    Args:
        argv: Command-line arguments to pass on

    Raises:
        PrivilegeFailure: If sudo cannot be executed
    """
    if is_root():
        return

    cmd = generate_sudo_command(argv)
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        os.execvp(cmd[0], cmd)
    except OSError as e:
        raise PrivilegeFailure(f"Failed to escalate privileges with sudo: {e}") from e
