"""
Settings module.

Loads the three paths gkb needs from a settings file, with GKB_*
environment variables taking precedence over the file.

The default location is ~/.config/gkb/config with any of the extensions
.toml, .json, .yaml or .yml; the extension picks the format.

Example ~/.config/gkb/config.toml:

    kernel = "/boot/vmlinuz-gentoo"
    initramfs = "/boot/initramfs-gentoo.img"
    kernel-config = "/etc/kernels/config-gentoo"
"""

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .errors import SettingsError


DEFAULT_CONFIG_PATH = Path("~/.config/gkb/config")
ENV_PREFIX = "GKB_"

# Tried in this order when the settings path has no extension
CONFIG_EXTENSIONS = (".toml", ".json", ".yaml", ".yml")


# setting key -> dataclass field
_KEYS = {
    "kernel": "kernel_file_path",
    "initramfs": "initramfs_file_path",
    "kernel-config": "kernel_config_file_path",
}


@dataclass
class GKBConfig:
    """
    Paths used by the build.

    Attributes:
        kernel_file_path: Where the compiled kernel image is copied
        initramfs_file_path: Where dracut writes the initramfs
        kernel_config_file_path: The .config file linked into the source tree
    """
    kernel_file_path: Path
    initramfs_file_path: Path
    kernel_config_file_path: Path

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GKBConfig":
        """Create config from a settings mapping; '_' may stand in for '-' in keys."""
        values = {}
        for key, field_name in _KEYS.items():
            value = data.get(key, data.get(key.replace("-", "_")))
            if value is None or str(value).strip() == "":
                raise SettingsError(f"Missing required setting '{key}'")
            values[field_name] = Path(os.path.expanduser(str(value)))
        return cls(**values)

    @classmethod
    def load(
        cls,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "GKBConfig":
        """
        Load configuration from a settings file and the environment.

        Args:
            config_path: Settings file, with or without extension
                (defaults to ~/.config/gkb/config)
            environ: Environment to read overrides from (defaults to os.environ)

        Returns:
            GKBConfig: Loaded configuration

        Raises:
            SettingsError: If the file is missing or invalid, or a key is absent
        """
        if environ is None:
            environ = os.environ

        config_path = find_config_file(config_path)
        data = read_settings(config_path)

        data.update(env_overrides(environ))
        return cls.from_dict(data)


def find_config_file(config_path: Optional[Path] = None) -> Path:
    """
    Locate the settings file.

    An existing file is used as given. A path without a known extension is
    also tried with each of CONFIG_EXTENSIONS, in order.

    Args:
        config_path: Settings path (defaults to ~/.config/gkb/config)

    Returns:
        Path: The settings file found

    Raises:
        SettingsError: If no candidate exists
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(os.path.expanduser(str(config_path)))

    if config_path.is_file():
        return config_path

    if config_path.suffix not in CONFIG_EXTENSIONS:
        for extension in CONFIG_EXTENSIONS:
            candidate = Path(str(config_path) + extension)
            if candidate.is_file():
                return candidate
        raise SettingsError(
            f"Settings file not found: {config_path} "
            f"(tried {', '.join(CONFIG_EXTENSIONS)})"
        )

    raise SettingsError(f"Settings file not found: {config_path}")


def read_settings(config_path: Path) -> Dict[str, Any]:
    """
    Parse a settings file according to its extension.

    .toml is read as TOML and .json as JSON; anything else as YAML.

    Raises:
        SettingsError: If the file cannot be read, does not parse,
            or does not hold a mapping
    """
    suffix = config_path.suffix.lower()
    try:
        if suffix == ".toml":
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        elif suffix == ".json":
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        else:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
    except OSError as e:
        raise SettingsError(f"Cannot read settings file {config_path}: {e}") from e
    except (tomllib.TOMLDecodeError, ValueError, yaml.YAMLError) as e:
        raise SettingsError(f"Invalid settings file {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsError(f"Settings file {config_path} must contain a mapping")

    return data


def env_overrides(environ: Mapping[str, str]) -> Dict[str, str]:
    """
    Collect settings given as GKB_* environment variables.

    GKB_KERNEL_CONFIG maps to 'kernel-config', and so on.
    """
    overrides = {}
    for key in _KEYS:
        env_name = ENV_PREFIX + key.replace("-", "_").upper()
        if environ.get(env_name):
            overrides[key] = environ[env_name]
    return overrides
