"""
Build orchestration.

KernelBuilder takes a scanned list of source trees and walks one of them
through selection, linking, compilation and the optional install stages.
"""

import os
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .config import GKBConfig
from .errors import PromptFailure
from .pipeline import (
    Stage,
    available_jobs,
    compile_kernel,
    generate_dracut_command,
    generate_make_command,
    generate_modules_install_command,
    generate_initramfs,
    install_modules,
)
from .reporter import Reporter
from .scanner import SOURCE_ROOT, VersionEntry
from .symlinks import CONFIG_LINK, CURRENT_ALIAS, ensure_config_link, ensure_current_link


MODULES_PROMPT = "Do you want to install kernel modules?"
INITRAMFS_PROMPT = "Do you want to generate initramfs with dracut?"


class BuildState(Enum):
    """States a build passes through, in order."""
    SCANNED = "scanned"
    SELECTED = "selected"
    CONFIG_LINKED = "config_linked"
    CURRENT_LINKED = "current_linked"
    COMPILED = "compiled"
    MODULES_INSTALLED = "modules_installed"
    INITRAMFS_GENERATED = "initramfs_generated"
    DONE = "done"


class KernelBuilder:
    """
    Drives one kernel build.

    The first error aborts the build; links already created are kept.
    """

    def __init__(
        self,
        config: GKBConfig,
        versions: Sequence[VersionEntry],
        select: Callable[[Sequence[VersionEntry]], int],
        confirm: Callable[[str], bool],
        reporter: Optional[Reporter] = None,
        root: str = SOURCE_ROOT,
        jobs: Optional[int] = None,
    ):
        """
        Args:
            config: Loaded settings
            versions: Source trees to offer, in presentation order
            select: Returns the index of the chosen entry
            confirm: Answers a yes/no question
            reporter: Progress output (defaults to a normal-level Reporter)
            root: Directory holding the source trees and the alias
            jobs: Parallelism for make (defaults to available CPUs)
        """
        self.config = config
        self.versions = tuple(versions)
        self.select = select
        self.confirm = confirm
        self.reporter = reporter or Reporter()
        self.root = root
        self.jobs = jobs

    def _select_entry(self) -> VersionEntry:
        index = self.select(self.versions)
        if not 0 <= index < len(self.versions):
            raise PromptFailure(f"Invalid selection: {index}")
        return self.versions[index]

    def build(self) -> List[BuildState]:
        """
        Run the build.

        Returns:
            List[BuildState]: States visited, ending with BuildState.DONE

        Raises:
            BuilderError: On the first failing step
        """
        states = [BuildState.SCANNED]

        entry = self._select_entry()
        states.append(BuildState.SELECTED)
        self.reporter.print_selected(entry)

        config_source = self.config.kernel_config_file_path
        created = ensure_config_link(entry, config_source)
        self.reporter.print_link(os.path.join(entry.path, CONFIG_LINK), str(config_source), created)
        states.append(BuildState.CONFIG_LINKED)

        replaced = ensure_current_link(entry, self.root)
        self.reporter.print_link(os.path.join(self.root, CURRENT_ALIAS), entry.version_string, replaced)
        states.append(BuildState.CURRENT_LINKED)

        jobs = self.jobs or available_jobs()
        self.reporter.stage_started(Stage.COMPILE)
        self.reporter.print_command(generate_make_command(jobs))
        compile_kernel(entry, self.config.kernel_file_path, jobs)
        self.reporter.stage_finished(Stage.COMPILE)
        states.append(BuildState.COMPILED)

        if self.confirm(MODULES_PROMPT):
            self.reporter.stage_started(Stage.MODULES_INSTALL)
            self.reporter.print_command(generate_modules_install_command())
            install_modules(entry)
            self.reporter.stage_finished(Stage.MODULES_INSTALL)
            states.append(BuildState.MODULES_INSTALLED)
        else:
            self.reporter.stage_skipped(Stage.MODULES_INSTALL)

        if self.confirm(INITRAMFS_PROMPT):
            initramfs_path = self.config.initramfs_file_path
            self.reporter.stage_started(Stage.INITRAMFS)
            self.reporter.print_command(generate_dracut_command(entry, initramfs_path))
            generate_initramfs(entry, initramfs_path)
            self.reporter.stage_finished(Stage.INITRAMFS)
            states.append(BuildState.INITRAMFS_GENERATED)
        else:
            self.reporter.stage_skipped(Stage.INITRAMFS)

        states.append(BuildState.DONE)
        self.reporter.print_done()
        return states
