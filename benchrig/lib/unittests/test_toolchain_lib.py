# benchrig/lib/unittests/test_toolchain_lib.py
import os
import tempfile
import unittest
from unittest.mock import patch

from benchrig.lib.env_lib import Env
from benchrig.lib.errors import ToolchainInstallError
from benchrig.lib.exec_lib import CommandError
from benchrig.lib.toolchain_lib import Toolchain, install_tool, reclaim_workspace, toolchain_env


class TestToolchainEnv(unittest.TestCase):
    def test_prefixes_path_and_pins_root(self):
        base = Env.from_dict({"PATH": "/usr/bin", "GOROOT": "/old/go"})
        env = toolchain_env(base, "/opt/go")
        self.assertEqual(env.lookup("PATH"), "/opt/go/bin" + os.pathsep + "/usr/bin")
        self.assertEqual(env.lookup("GOROOT"), "/opt/go")
        # Caller env is untouched
        self.assertEqual(base.lookup("GOROOT"), "/old/go")


class TestToolchain(unittest.TestCase):
    def setUp(self):
        self.go = Toolchain.for_build("/opt/go", Env.from_dict({"PATH": "/usr/bin"}))

    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_do(self, mock_run_cmd):
        self.go.do("/src", "version")
        mock_run_cmd.assert_called_once_with(["/opt/go/bin/go", "version"], cwd="/src", env=self.go.env.collapse())

    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_install_forces_gobin(self, mock_run_cmd):
        self.go.install("/w/bin", "example.com/tool@latest")
        cmd = mock_run_cmd.call_args.args[0]
        kwargs = mock_run_cmd.call_args.kwargs
        self.assertEqual(cmd, ["/opt/go/bin/go", "install", "example.com/tool@latest"])
        self.assertEqual(kwargs["cwd"], "/w/bin")
        self.assertEqual(kwargs["env"]["GOBIN"], "/w/bin")
        self.assertIsNone(self.go.env.lookup("GOBIN"))

    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_build_path(self, mock_run_cmd):
        with tempfile.TemporaryDirectory() as pkg:
            self.go.build_path(pkg, "/w/bin", "-ldflags=-s")
            mock_run_cmd.assert_called_once_with(
                ["/opt/go/bin/go", "build", "-o", "/w/bin", "-ldflags=-s"], cwd=pkg, env=self.go.env.collapse()
            )

    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_build_path_missing_package(self, mock_run_cmd):
        with self.assertRaises(CommandError):
            self.go.build_path("/nonexistent/pkg", "/w/bin")
        mock_run_cmd.assert_not_called()


class TestInstallTool(unittest.TestCase):
    def setUp(self):
        self.go = Toolchain.for_build("/opt/go", Env())

    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_returns_binary_path(self, mock_run_cmd):
        path = install_tool(self.go, "/w/bin", "github.com/bazelbuild/bazelisk@latest", "bazelisk")
        self.assertEqual(path, "/w/bin/bazelisk")

    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_failure_is_fatal(self, mock_run_cmd):
        mock_run_cmd.side_effect = CommandError(["go", "install"], reason="dial tcp: i/o timeout")
        with self.assertRaises(ToolchainInstallError) as cm:
            install_tool(self.go, "/w/bin", "github.com/bazelbuild/bazelisk@latest", "bazelisk")
        self.assertIn("i/o timeout", str(cm.exception))
        # No retry
        mock_run_cmd.assert_called_once()


class TestReclaimWorkspace(unittest.TestCase):
    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_cleans_after_success(self, mock_run_cmd):
        with reclaim_workspace(["bazelisk", "clean", "--expunge"], "/src"):
            mock_run_cmd.assert_not_called()
        mock_run_cmd.assert_called_once_with(["bazelisk", "clean", "--expunge"], cwd="/src")

    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_cleans_after_failure_and_keeps_error(self, mock_run_cmd):
        with self.assertRaises(RuntimeError):
            with reclaim_workspace(["bazelisk", "clean", "--expunge"], "/src"):
                raise RuntimeError("build broke")
        mock_run_cmd.assert_called_once()

    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_clean_failure_is_swallowed(self, mock_run_cmd):
        mock_run_cmd.side_effect = CommandError(["bazelisk", "clean"], returncode=2)
        with reclaim_workspace(["bazelisk", "clean", "--expunge"], "/src"):
            pass

    @patch("benchrig.lib.toolchain_lib.run_cmd")
    def test_clean_failure_never_masks_build_error(self, mock_run_cmd):
        mock_run_cmd.side_effect = CommandError(["bazelisk", "clean"], returncode=2)
        with self.assertRaises(RuntimeError) as cm:
            with reclaim_workspace(["bazelisk", "clean", "--expunge"], "/src"):
                raise RuntimeError("build broke")
        self.assertEqual(str(cm.exception), "build broke")


if __name__ == '__main__':
    unittest.main()
