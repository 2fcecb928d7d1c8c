"""
Helpers shared by the harness phase subcommands.

Builds the per-invocation contexts from the suite config, prepares the
on-disk layout each phase expects, and runs phases in order.
"""

import contextlib
import logging
import os
import shutil
import sys

from benchrig.harnesses import Phase, PhaseStatus, get_harness
from benchrig.lib.fs_lib import ensure_dirs, rm_dir_contents
from benchrig.schema.config import load_suite_config
from benchrig.schema.contexts import BuildContext, GetContext, RunContext

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def add_phase_args(parser):
    parser.add_argument("harness", help="Name of the harness (see 'benchrig list')")
    parser.add_argument("--config_file", required=True, help="Path to suite configuration file (YAML or JSON)")
    parser.add_argument("--log-file", help="Also write log output to this file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Level of messages to display (default: INFO)",
    )


def add_run_args(parser):
    parser.add_argument("--short", action="store_true", help="Run the reduced benchmark set")
    parser.add_argument(
        "--results",
        help="File receiving benchmark output, '-' for stdout (default: <work_dir>/<harness>/results/<harness>.results)",
    )


def setup_logging(log_level="INFO", log_file=None):
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=getattr(logging, log_level), format=LOG_FORMAT, handlers=handlers, force=True)


def load(args):
    """Load the suite config and harness named in args; exits on errors."""
    try:
        cfg = load_suite_config(args.config_file)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    try:
        harness = get_harness(args.harness)
    except ValueError as e:
        print(f"Error: {e}")
        print("Use 'benchrig list' to see available harnesses.")
        sys.exit(1)
    if not cfg.is_enabled(harness.name):
        print(f"Error: harness '{harness.name}' is not enabled in {args.config_file}")
        sys.exit(1)
    return cfg, harness


def get_context(cfg, harness):
    dirs = cfg.harness_dirs(harness.name)
    # git refuses to clone into a non-empty directory
    if os.path.exists(dirs.src_dir):
        log.info(f"Removing stale source tree {dirs.src_dir}")
        shutil.rmtree(dirs.src_dir)
    ensure_dirs(os.path.dirname(dirs.src_dir))
    return GetContext(src_dir=dirs.src_dir)


def build_context(cfg, harness):
    dirs = cfg.harness_dirs(harness.name)
    bench_dir = cfg.bench_dirs.get(harness.name)
    if not bench_dir:
        raise ValueError(f"No bench_dirs entry for '{harness.name}' in the suite config")
    ensure_dirs(dirs.bin_dir)
    # Tools are installed fresh into bin_dir on every build
    rm_dir_contents(dirs.bin_dir)
    return BuildContext(src_dir=dirs.src_dir, bin_dir=dirs.bin_dir, bench_dir=bench_dir, env=cfg.build_env)


def run_context(cfg, harness, results, extra_args=(), short=False):
    dirs = cfg.harness_dirs(harness.name)
    ensure_dirs(dirs.tmp_dir, dirs.results_dir)
    rm_dir_contents(dirs.tmp_dir)
    return RunContext(
        bin_dir=dirs.bin_dir,
        tmp_dir=dirs.tmp_dir,
        results=results,
        args=tuple(cfg.run_args) + tuple(extra_args),
        short=short or cfg.short,
    )


@contextlib.contextmanager
def open_results(cfg, harness, path=None):
    """Yield the results stream: a file opened for append, or stdout for '-'."""
    if path == "-":
        yield sys.stdout
        return
    if path is None:
        path = os.path.join(cfg.harness_dirs(harness.name).results_dir, f"{harness.name}.results")
    ensure_dirs(os.path.dirname(os.path.abspath(path)))
    log.info(f"Writing results to {path}")
    with open(path, "a") as f:
        yield f


def run_phases(cfg, harness, phases, results=None, extra_args=(), short=False):
    """
    Run the prerequisite check and then each phase in order, stopping at the first failure.

    Returns:
        PhaseResult of the last phase attempted.
    """
    result = harness.execute(Phase.CHECK)
    if not result.succeeded:
        return result

    for phase in phases:
        try:
            if phase == Phase.GET:
                args = (cfg, get_context(cfg, harness))
            elif phase == Phase.BUILD:
                args = (cfg, build_context(cfg, harness))
            else:
                args = (cfg, run_context(cfg, harness, results, extra_args, short))
        except (OSError, ValueError) as e:
            print(f"Error: cannot prepare {phase.value} for {harness.name}: {e}")
            sys.exit(1)
        result = harness.execute(phase, *args)
        if not result.succeeded:
            break
    return result


def report(result):
    """Print a one-line summary of a PhaseResult and return the process exit code."""
    if result.succeeded:
        print(f"{result.harness}: {result.phase.value} completed in {result.duration_seconds:.1f}s")
        return 0
    label = {
        PhaseStatus.UNSUPPORTED: "unsupported",
        PhaseStatus.TIMEOUT: "timed out",
    }.get(result.status, "failed")
    print(f"{result.harness}: {result.phase.value} {label}: {result.error_message}")
    return 1
