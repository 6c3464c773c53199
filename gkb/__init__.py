"""
GKB - Gentoo Kernel Builder

A small command-line utility that picks a kernel source tree from /usr/src,
links its .config and the /usr/src/linux alias, then compiles and installs it.
"""

__version__ = "0.1.0"
__author__ = "GKB Contributors"
__license__ = "MIT"

from .cli import main

__all__ = ["main"]
