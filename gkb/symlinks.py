"""
Symlink management module.

Keeps the two links the kernel build tooling relies on in place:
the .config link inside the selected source tree and the
/usr/src/linux alias pointing at the selected tree.
"""

import os
import contextlib

from .errors import ConfigMissing, LinkingError
from .scanner import VersionEntry, SOURCE_ROOT


CURRENT_ALIAS = "linux"
CONFIG_LINK = ".config"


def ensure_config_link(entry: VersionEntry, config_source) -> bool:
    """
    Link the configured .config file into the source tree.

    An existing .config (file, link or dangling link) is left untouched so
    a hand-tuned configuration is never overwritten.

    Args:
        entry: Selected source tree
        config_source: Path to the .config file to link

    Returns:
        bool: True if a link was created, False if one was already there

    Raises:
        ConfigMissing: If config_source is not an existing regular file
        LinkingError: If the link cannot be created
    """
    config_source = os.fspath(config_source)
    if not os.path.isfile(config_source):
        raise ConfigMissing(config_source)

    link = os.path.join(entry.path, CONFIG_LINK)
    if os.path.lexists(link):
        return False

    try:
        os.symlink(config_source, link)
    except OSError as e:
        raise LinkingError(link, e) from e

    return True


def _points_at(target: str, entry: VersionEntry, root: str) -> bool:
    """Check whether an alias target designates the entry's directory."""
    if target == entry.version_string:
        return True
    resolved = os.path.normpath(os.path.join(root, target))
    return resolved == os.path.normpath(entry.path)


def ensure_current_link(entry: VersionEntry, root: str = SOURCE_ROOT) -> bool:
    """
    Point the current-kernel alias at the selected source tree.

    The alias must already exist; it is not created from scratch. When it
    points elsewhere, a new link is created under a temporary name and
    renamed over the alias so the alias is never missing.

    Args:
        entry: Selected source tree
        root: Directory holding the alias

    Returns:
        bool: True if the alias was replaced, False if it was already correct

    Raises:
        LinkingError: If the alias cannot be read or replaced
    """
    alias = os.path.join(root, CURRENT_ALIAS)

    try:
        target = os.readlink(alias)
    except OSError as e:
        raise LinkingError(alias, e) from e

    if _points_at(target, entry, root):
        return False

    temp_link = os.path.join(root, f".{CURRENT_ALIAS}.{os.getpid()}.tmp")
    try:
        if os.path.lexists(temp_link):
            os.remove(temp_link)
        # Relative target, like eselect kernel does
        os.symlink(entry.version_string, temp_link)
        os.replace(temp_link, alias)
    except OSError as e:
        with contextlib.suppress(OSError):
            os.remove(temp_link)
        raise LinkingError(alias, e) from e

    return True
