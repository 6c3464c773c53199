"""
Unit tests for the builder module.

Runs KernelBuilder against a temporary source root with mocked
subprocess calls.
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch, MagicMock

from gkb.builder import (
    BuildState,
    INITRAMFS_PROMPT,
    KernelBuilder,
    MODULES_PROMPT,
)
from gkb.config import GKBConfig
from gkb.errors import BuildFailure, ConfigMissing, LinkingError, PromptFailure
from gkb.reporter import OutputLevel, Reporter
from gkb.scanner import scan_versions


class BuilderTestCase(unittest.TestCase):
    """Temporary source root, boot directory and settings."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        base = self._tmp.name
        self.root = os.path.join(base, "src")
        self.boot = os.path.join(base, "boot")
        os.makedirs(self.boot)

        for name in ("linux-6.1.0-gentoo", "linux-6.6.13-gentoo"):
            os.makedirs(os.path.join(self.root, name, "arch", "x86", "boot"))
            with open(os.path.join(self.root, name, "arch", "x86", "boot", "bzImage"), "wb") as f:
                f.write(name.encode())

        self.alias = os.path.join(self.root, "linux")
        os.symlink("linux-6.1.0-gentoo", self.alias)

        config_source = os.path.join(base, "config-gentoo")
        with open(config_source, "w") as f:
            f.write("CONFIG_64BIT=y\n")

        self.config = GKBConfig(
            kernel_file_path=Path(self.boot) / "vmlinuz",
            initramfs_file_path=Path(self.boot) / "initramfs.img",
            kernel_config_file_path=Path(config_source),
        )
        self.versions = tuple(sorted(scan_versions(self.root), key=lambda e: e.version_string))

    def tearDown(self):
        self._tmp.cleanup()

    def _builder(self, index, answers=(False, False), config=None):
        self.questions = []
        replies = list(answers)

        def confirm(message):
            self.questions.append(message)
            return replies.pop(0)

        return KernelBuilder(
            config or self.config,
            self.versions,
            select=lambda entries: index,
            confirm=confirm,
            reporter=Reporter(OutputLevel.QUIET),
            root=self.root,
            jobs=2,
        )

    def _entry(self, name):
        return next(e for e in self.versions if e.version_string == name)


class TestKernelBuilder(BuilderTestCase):
    """Tests for KernelBuilder.build."""

    @patch('gkb.pipeline.subprocess.run')
    def test_decline_both_runs_only_compiler(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        builder = self._builder(1, answers=(False, False))

        states = builder.build()

        self.assertEqual(states, [
            BuildState.SCANNED,
            BuildState.SELECTED,
            BuildState.CONFIG_LINKED,
            BuildState.CURRENT_LINKED,
            BuildState.COMPILED,
            BuildState.DONE,
        ])
        mock_run.assert_called_once()
        self.assertEqual(mock_run.call_args[0][0], ["make", "-j", "2"])
        self.assertEqual(self.questions, [MODULES_PROMPT, INITRAMFS_PROMPT])

    @patch('gkb.pipeline.subprocess.run')
    def test_full_build(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        builder = self._builder(1, answers=(True, True))

        states = builder.build()

        self.assertIn(BuildState.MODULES_INSTALLED, states)
        self.assertIn(BuildState.INITRAMFS_GENERATED, states)
        self.assertEqual(states[-1], BuildState.DONE)

        commands = [c[0][0] for c in mock_run.call_args_list]
        self.assertEqual(commands, [
            ["make", "-j", "2"],
            ["make", "modules_install"],
            ["dracut", "--hostonly", "--kver", "6.6.13-gentoo", "--force",
             str(self.config.initramfs_file_path)],
        ])
        entry = self._entry("linux-6.6.13-gentoo")
        for call in mock_run.call_args_list:
            self.assertEqual(call[1]["cwd"], entry.path)

    @patch('gkb.pipeline.subprocess.run')
    def test_links_and_image(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        entry = self._entry("linux-6.6.13-gentoo")

        self._builder(1).build()

        self.assertEqual(os.readlink(self.alias), "linux-6.6.13-gentoo")
        self.assertEqual(
            os.readlink(os.path.join(entry.path, ".config")),
            str(self.config.kernel_config_file_path),
        )
        with open(self.config.kernel_file_path, "rb") as f:
            self.assertEqual(f.read(), b"linux-6.6.13-gentoo")

    @patch('gkb.pipeline.subprocess.run')
    def test_already_linked_reaches_compile_without_mutation(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)
        entry = self._entry("linux-6.1.0-gentoo")
        os.symlink(str(self.config.kernel_config_file_path), os.path.join(entry.path, ".config"))

        with patch('gkb.symlinks.os.symlink') as mock_symlink, \
                patch('gkb.symlinks.os.replace') as mock_replace:
            states = self._builder(0).build()

        self.assertIn(BuildState.COMPILED, states)
        mock_symlink.assert_not_called()
        mock_replace.assert_not_called()
        self.assertEqual(os.readlink(self.alias), "linux-6.1.0-gentoo")

    @patch('gkb.pipeline.subprocess.run')
    def test_compile_failure_stops_pipeline(self, mock_run):
        mock_run.return_value = MagicMock(returncode=2)
        builder = self._builder(1, answers=(True, True))

        with self.assertRaises(BuildFailure):
            builder.build()

        mock_run.assert_called_once()
        self.assertEqual(self.questions, [])

    @patch('gkb.pipeline.subprocess.run')
    def test_modules_failure_skips_initramfs(self, mock_run):
        mock_run.side_effect = [MagicMock(returncode=0), MagicMock(returncode=1)]
        builder = self._builder(1, answers=(True, True))

        with self.assertRaises(BuildFailure) as ctx:
            builder.build()

        self.assertEqual(ctx.exception.stage, "Module installation")
        self.assertEqual(mock_run.call_count, 2)
        self.assertEqual(self.questions, [MODULES_PROMPT])

    @patch('gkb.pipeline.subprocess.run')
    def test_missing_config_touches_nothing(self, mock_run):
        config = GKBConfig(
            kernel_file_path=self.config.kernel_file_path,
            initramfs_file_path=self.config.initramfs_file_path,
            kernel_config_file_path=Path(self.boot) / "missing-config",
        )

        with self.assertRaises(ConfigMissing):
            self._builder(1, config=config).build()

        mock_run.assert_not_called()
        self.assertEqual(os.readlink(self.alias), "linux-6.1.0-gentoo")
        entry = self._entry("linux-6.6.13-gentoo")
        self.assertFalse(os.path.lexists(os.path.join(entry.path, ".config")))

    @patch('gkb.pipeline.subprocess.run')
    def test_missing_alias_stops_before_compile(self, mock_run):
        os.remove(self.alias)

        with self.assertRaises(LinkingError):
            self._builder(1).build()

        mock_run.assert_not_called()

    @patch('gkb.pipeline.subprocess.run')
    def test_invalid_selection(self, mock_run):
        with self.assertRaises(PromptFailure):
            self._builder(5).build()

        mock_run.assert_not_called()

    @patch('gkb.pipeline.subprocess.run')
    def test_prompt_failure_after_compile(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0)

        def broken_confirm(message):
            raise PromptFailure("No answer given (end of input)")

        builder = KernelBuilder(
            self.config,
            self.versions,
            select=lambda entries: 1,
            confirm=broken_confirm,
            reporter=Reporter(OutputLevel.QUIET),
            root=self.root,
            jobs=2,
        )

        with self.assertRaises(PromptFailure):
            builder.build()

        mock_run.assert_called_once()


if __name__ == '__main__':
    unittest.main()
