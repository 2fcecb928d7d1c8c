"""
Primary toolchain wrapper, auxiliary tool installation and workspace cleanup.

Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved.
"""

from contextlib import contextmanager
from typing import Iterator, List
import logging
import os

from benchrig.lib.env_lib import Env
from benchrig.lib.errors import ToolchainInstallError
from benchrig.lib.exec_lib import CommandError, run_cmd

log = logging.getLogger(__name__)


def toolchain_env(env: Env, root: str) -> Env:
    """Layer the toolchain onto env: its bin dir first on PATH and its root pinned."""
    env = env.prefix("PATH", os.path.join(root, "bin") + os.pathsep)
    return env.set("GOROOT", root)


class Toolchain:
    """
    The Go tool of a specific toolchain root, run with a fixed environment.

    All invocations go through run_cmd(), so failures surface as CommandError.
    """

    def __init__(self, root: str, env: Env):
        self.root = root
        self.tool = os.path.join(root, "bin", "go")
        self.env = env

    @classmethod
    def for_build(cls, root: str, env: Env) -> "Toolchain":
        return cls(root, toolchain_env(env, root))

    def with_env(self, env: Env) -> "Toolchain":
        return Toolchain(self.root, env)

    def do(self, cwd: str, *args: str):
        run_cmd([self.tool, *args], cwd=cwd, env=self.env.collapse())

    def build_path(self, path: str, out: str, *flags: str):
        """Build the package at path into out (a file, or a directory to hold the binary)."""
        if not os.path.isdir(path):
            raise CommandError([self.tool, "build", path], reason="package directory does not exist")
        self.do(path, "build", "-o", out, *flags)

    def install(self, bin_dir: str, package: str):
        """go install package with GOBIN forced to bin_dir."""
        self.with_env(self.env.set("GOBIN", bin_dir)).do(bin_dir, "install", package)


def install_tool(toolchain: Toolchain, bin_dir: str, package: str, name: str) -> str:
    """
    Install an auxiliary tool into bin_dir and return the path of its binary.

    bin_dir is owned by this run, so every invocation fetches its own copy
    instead of reusing whatever version is already on the host.

    Raises:
        ToolchainInstallError: if installation fails. There is no retry.
    """
    log.info(f"Installing {name} into {bin_dir}")
    try:
        toolchain.install(bin_dir, package)
    except CommandError as e:
        raise ToolchainInstallError(f"error building {name}: {e}") from e
    return os.path.join(bin_dir, name)


@contextmanager
def reclaim_workspace(clean_cmd: List[str], cwd: str) -> Iterator[None]:
    """
    Run clean_cmd in cwd when the block exits, however it exits.

    Cleanup is best effort: there may be nothing to clean if the block
    failed early, so a failing clean_cmd is logged and dropped and the
    block's own result or exception is what the caller sees.
    """
    try:
        yield
    finally:
        try:
            run_cmd(clean_cmd, cwd=cwd)
        except CommandError as e:
            log.debug(f"Workspace cleanup failed (ignored): {e}")
