"""
CockroachDB harness.

Builds the cockroach binary with the project's bazel-based `dev` tooling
plus `go build`, then drives the kv workloads through the cockroachdb-bench
driver on single and three node clusters.

Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved.
"""

import logging
import os

from benchrig.harnesses._base_harness import BaseHarness, host_arch, run_variants
from benchrig.lib.errors import BuildStepError, CombinedBuildError, UnsupportedPlatformError
from benchrig.lib.exec_lib import CommandError, run_bounded, run_cmd
from benchrig.lib.fs_lib import copy_file
from benchrig.lib.git_lib import git_recursive_clone_to_commit
from benchrig.lib.toolchain_lib import Toolchain, install_tool, reclaim_workspace
from benchrig.schema.config import SuiteConfig
from benchrig.schema.contexts import BuildContext, GetContext, RunContext

log = logging.getLogger(__name__)

REPO_URL = "https://github.com/cockroachdb/cockroach"
REPO_BRANCH = "master"
# Includes https://github.com/cockroachdb/cockroach/pull/125588.
REPO_COMMIT = "c4a0d997e0da6ba3ebede61b791607aa452b9bbc"

BAZELISK_PACKAGE = "github.com/bazelbuild/bazelisk@latest"

# Go 1.23 needs this to link cockroach; older toolchains reject it.
CHECKLINKNAME_FLAG = "-ldflags=-checklinkname=0"

SUPPORTED_ARCHES = ("amd64", "arm64")


class CockroachDBHarness(BaseHarness):
    name = "cockroachdb"

    benchmarks = (
        "kv0/nodes=1",
        "kv50/nodes=1",
        "kv95/nodes=1",
        "kv0/nodes=3",
        "kv50/nodes=3",
        "kv95/nodes=3",
    )
    short_benchmarks = ("kv0/nodes=3", "kv95/nodes=3")

    def check_prerequisites(self):
        arch = host_arch()
        if arch not in SUPPORTED_ARCHES:
            raise UnsupportedPlatformError(f"requires amd64 or arm64, host is {arch}")

    def get(self, cfg: SuiteConfig, gctx: GetContext):
        # Recursive, as the build needs submodules such as PROJ.
        git_recursive_clone_to_commit(gctx.src_dir, REPO_URL, REPO_BRANCH, REPO_COMMIT)

    def build(self, cfg: SuiteConfig, bctx: BuildContext):
        # bazelisk goes into the bin dir so each run gets a fresh copy.
        go = Toolchain.for_build(cfg.goroot, bctx.env)
        bazel = install_tool(go, bctx.bin_dir, BAZELISK_PACKAGE, "bazelisk")

        # Bazel treats each run as its own workspace, so its scratch state
        # grows without bound unless expunged.
        with reclaim_workspace([bazel, "clean", "--expunge"], bctx.src_dir):
            self._build_steps(go, bazel, bctx)

    def _build_steps(self, go: Toolchain, bazel: str, bctx: BuildContext):
        env = go.env.collapse()

        def step(name, cmd):
            log.info(f"Build step: {name}")
            try:
                run_cmd(cmd, cwd=bctx.src_dir, env=env)
            except CommandError as e:
                raise BuildStepError(name, str(e)) from e

        # Generated sources needed before a plain `go build` works.
        step("codegen", [bazel, "run", "//pkg/gen:code"])
        step(
            "c-deps",
            [bazel, "run", "//pkg/cmd/generate-cgo:generate-cgo", "--run_under", f"cd {bctx.src_dir} && "],
        )

        # cockroach-short is cockroach without the UI, and much quicker to build.
        self._compile(go, os.path.join(bctx.src_dir, "pkg", "cmd", "cockroach-short"), bctx.bin_dir)

        try:
            copy_file(os.path.join(bctx.bin_dir, "cockroach"), os.path.join(bctx.bin_dir, "cockroach-short"))
        except OSError as e:
            raise BuildStepError("rename", str(e)) from e

        log.info("Build step: benchmark driver")
        try:
            go.build_path(bctx.bench_dir, os.path.join(bctx.bin_dir, "cockroachdb-bench"))
        except CommandError as e:
            raise BuildStepError("driver", str(e)) from e

    def _compile(self, go: Toolchain, pkg_dir: str, bin_dir: str):
        log.info("Build step: compile")
        try:
            go.build_path(pkg_dir, bin_dir, CHECKLINKNAME_FLAG)
            return
        except CommandError as with_flag_err:
            log.warning(f"Build with {CHECKLINKNAME_FLAG} failed, retrying without it")
            try:
                go.build_path(pkg_dir, bin_dir)
            except CommandError as without_flag_err:
                raise CombinedBuildError("compile", [with_flag_err, without_flag_err]) from without_flag_err

    def run(self, cfg: SuiteConfig, rctx: RunContext):
        driver = os.path.join(rctx.bin_dir, "cockroachdb-bench")
        env = cfg.exec_env.collapse()

        def run_variant(bench):
            args = list(rctx.args) + [
                "-bench", bench,
                "-cockroachdb-bin", os.path.join(rctx.bin_dir, "cockroach"),
                "-tmp", rctx.tmp_dir,
            ]
            if rctx.short:
                args.append("-short")
            run_bounded([driver, *args], rctx.results, short=rctx.short, env=env)

        run_variants(self.variants(rctx.short), run_variant, rctx.tmp_dir)
