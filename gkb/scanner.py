"""
Kernel source detection module.

Discovers the kernel source trees installed under /usr/src and orders them
by version for presentation.
"""

import os
import re
from typing import Iterable, Tuple
from dataclasses import dataclass


SOURCE_ROOT = "/usr/src"
KERNEL_PREFIX = "linux"
DISTRIBUTION_SUFFIX = "gentoo"


@dataclass(frozen=True)
class VersionEntry:
    """
    A kernel source tree found under the source root.

    Attributes:
        path: Full path to the source tree (e.g., '/usr/src/linux-6.6.13-gentoo')
        version_string: Directory name (e.g., 'linux-6.6.13-gentoo')
    """
    path: str
    version_string: str

    @property
    def kernel_release(self) -> str:
        """Version string without its 'linux-' prefix, as dracut's --kver expects."""
        prefix = KERNEL_PREFIX + "-"
        if self.version_string.startswith(prefix):
            return self.version_string[len(prefix):]
        return self.version_string[len(KERNEL_PREFIX):]


def scan_versions(root: str = SOURCE_ROOT) -> Tuple[VersionEntry, ...]:
    """
    List the kernel source trees directly under root.

    Keeps directory-listing order. Entries that are symlinks (such as the
    'linux' alias) or whose name does not look like 'linux-*-gentoo' are
    dropped silently. An unreadable root yields an empty result.

    Args:
        root: Directory holding the kernel sources

    Returns:
        Tuple[VersionEntry, ...]: Discovered source trees
    """
    try:
        names = os.listdir(root)
    except OSError:
        return ()

    root_dir = os.path.normpath(root)
    entries = []
    for name in names:
        path = os.path.join(root_dir, name)

        if os.path.dirname(path) != root_dir:
            continue
        if os.path.islink(path):
            continue

        version_string = os.path.relpath(path, root_dir)
        if version_string.startswith(KERNEL_PREFIX) and version_string.endswith(DISTRIBUTION_SUFFIX):
            entries.append(VersionEntry(path=path, version_string=version_string))

    return tuple(entries)


def parse_version(version_string: str) -> Tuple[int, ...]:
    """
    Extract the numeric kernel version from a source tree name.

    Examples:
        'linux-6.6.13-gentoo' -> (6, 6, 13)
        'linux-6.1-gentoo' -> (6, 1)
        'linux-custom-gentoo' -> ()

    Args:
        version_string: Source tree name

    Returns:
        Tuple[int, ...]: Version components, empty if none found
    """
    match = re.search(r'(\d+(?:\.\d+)*)', version_string)
    if not match:
        return ()
    return tuple(int(part) for part in match.group(1).split('.'))


def sort_versions(entries: Iterable[VersionEntry]) -> Tuple[VersionEntry, ...]:
    """
    Order entries newest first.

    Entries with a parseable version come before those without one; ties
    and unparseable names fall back to name order.

    Args:
        entries: Entries as returned by scan_versions

    Returns:
        Tuple[VersionEntry, ...]: Sorted entries
    """
    versioned = []
    unversioned = []
    for entry in entries:
        if parse_version(entry.version_string):
            versioned.append(entry)
        else:
            unversioned.append(entry)

    # Name order first so the stable version sort breaks ties by name
    versioned.sort(key=lambda e: e.version_string)
    versioned.sort(key=lambda e: parse_version(e.version_string), reverse=True)
    unversioned.sort(key=lambda e: e.version_string)

    return tuple(versioned + unversioned)
