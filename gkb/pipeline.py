"""
Build pipeline module.

Runs the three external build stages (compile, module install, initramfs
generation) inside a kernel source tree.
"""

import os
import shutil
import subprocess
from enum import Enum
from typing import List, Optional

from .errors import BuildFailure
from .scanner import VersionEntry


KERNEL_IMAGE = os.path.join("arch", "x86", "boot", "bzImage")


class Stage(Enum):
    """Stages of the build pipeline."""
    COMPILE = "Kernel compilation"
    MODULES_INSTALL = "Module installation"
    INITRAMFS = "Initramfs generation"


def available_jobs() -> int:
    """
    Number of CPUs this process may run on.

    Returns:
        int: Parallelism degree for make, at least 1
    """
    try:
        return len(os.sched_getaffinity(0)) or 1
    except AttributeError:
        # sched_getaffinity is Linux-only
        return os.cpu_count() or 1


def generate_make_command(jobs: int) -> List[str]:
    """Command compiling the kernel with the given parallelism."""
    if jobs < 1:
        raise ValueError("Parallelism must be at least 1")
    return ["make", "-j", str(jobs)]


def generate_modules_install_command() -> List[str]:
    """Command installing the compiled modules."""
    return ["make", "modules_install"]


def generate_dracut_command(entry: VersionEntry, initramfs_path) -> List[str]:
    """
    Command generating a host-only initramfs for the entry's kernel.

    Args:
        entry: Source tree whose kernel release is targeted
        initramfs_path: Destination of the initramfs image

    Returns:
        List[str]: Command as list of arguments
    """
    return [
        "dracut",
        "--hostonly",
        "--kver",
        entry.kernel_release,
        "--force",
        os.fspath(initramfs_path),
    ]


def run_stage(stage: Stage, cmd: List[str], cwd: str) -> None:
    """
    Run one stage command and wait for it.

    Output of the command is discarded.

    Args:
        stage: Stage being run, used in error messages
        cmd: Command as list of arguments
        cwd: Source tree to run the command in

    Raises:
        BuildFailure: If the command cannot be started or exits non-zero
    """
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        raise BuildFailure(stage.value, cause=e) from e

    if result.returncode != 0:
        raise BuildFailure(stage.value, returncode=result.returncode)


def compile_kernel(entry: VersionEntry, kernel_path, jobs: Optional[int] = None) -> None:
    """
    Compile the kernel and copy the image to its boot destination.

    Args:
        entry: Source tree to build
        kernel_path: Destination of the kernel image
        jobs: Parallelism degree (defaults to available CPUs)

    Raises:
        BuildFailure: If make fails or the image cannot be copied
    """
    if jobs is None:
        jobs = available_jobs()

    run_stage(Stage.COMPILE, generate_make_command(jobs), entry.path)

    try:
        shutil.copy(os.path.join(entry.path, KERNEL_IMAGE), os.fspath(kernel_path))
    except OSError as e:
        raise BuildFailure(Stage.COMPILE.value, cause=e) from e


def install_modules(entry: VersionEntry) -> None:
    """Run 'make modules_install' in the source tree."""
    run_stage(Stage.MODULES_INSTALL, generate_modules_install_command(), entry.path)


def generate_initramfs(entry: VersionEntry, initramfs_path) -> None:
    """Generate the initramfs for the entry's kernel with dracut."""
    run_stage(Stage.INITRAMFS, generate_dracut_command(entry, initramfs_path), entry.path)
