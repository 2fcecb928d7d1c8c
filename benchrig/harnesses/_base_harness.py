"""
Base harness interface and common data structures.

Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional, Tuple
import logging
import platform
import time

from benchrig.lib.errors import HarnessError, RunTimeoutError, UnsupportedPlatformError
from benchrig.lib.fs_lib import rm_dir_contents
from benchrig.schema.config import SuiteConfig
from benchrig.schema.contexts import BuildContext, GetContext, RunContext

log = logging.getLogger(__name__)

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


def host_arch() -> str:
    """Host architecture using Go's names (amd64, arm64, ...)."""
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


class Phase(Enum):
    """Harness operations, in the order a full invocation runs them."""

    CHECK = "check"
    GET = "get"
    BUILD = "build"
    RUN = "run"


class PhaseStatus(Enum):
    """Outcome of a harness phase."""

    COMPLETED = "completed"
    FAILED = "failed"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


@dataclass
class PhaseResult:
    """Outcome of one harness phase, with the exception that ended it if any."""

    harness: str
    phase: Phase
    status: PhaseStatus
    start_time: float
    end_time: float
    error_message: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def duration_seconds(self) -> float:
        """Total execution time in seconds."""
        return self.end_time - self.start_time

    @property
    def succeeded(self) -> bool:
        """Whether the phase completed successfully."""
        return self.status == PhaseStatus.COMPLETED


def _status_for(error: BaseException) -> PhaseStatus:
    if isinstance(error, UnsupportedPlatformError):
        return PhaseStatus.UNSUPPORTED
    if isinstance(error, RunTimeoutError):
        return PhaseStatus.TIMEOUT
    return PhaseStatus.FAILED


def run_variants(variants: Iterable[str], run_variant: Callable[[str], None], tmp_dir: str):
    """
    Run each variant in order, emptying tmp_dir after every successful one.

    The workload keeps on-disk state in tmp_dir and would reuse it, so no
    variant may start with another's leftovers. The first failure stops the
    loop and propagates; later variants are not attempted.
    """
    for variant in variants:
        log.info(f"Running benchmark {variant}...")
        start_time = time.time()
        run_variant(variant)
        log.info(f"Benchmark {variant} finished in {time.time() - start_time:.1f}s")
        rm_dir_contents(tmp_dir)


class BaseHarness(ABC):
    """
    Abstract base class for workload harnesses.

    A harness is a stateless strategy: everything it needs arrives in the
    config and context records passed to each operation. A full invocation
    runs the operations in order:
    1. check_prerequisites() - Reject unsupported hosts, no side effects
    2. get() - Acquire the workload source
    3. build() - Produce the workload and benchmark driver binaries
    4. run() - Execute every benchmark variant

    Operations raise HarnessError subclasses on failure; execute() turns
    them into PhaseResult values for drivers that want a status instead.
    """

    #: Harness name used on the command line and in the work dir layout.
    name: str = ""

    #: Full benchmark matrix, in run order.
    benchmarks: Tuple[str, ...] = ()

    #: Reduced matrix for short mode; an ordered subset of benchmarks.
    short_benchmarks: Tuple[str, ...] = ()

    def variants(self, short: bool) -> Tuple[str, ...]:
        return self.short_benchmarks if short else self.benchmarks

    @abstractmethod
    def check_prerequisites(self):
        """
        Raise UnsupportedPlatformError if this host cannot run the workload.

        Must not have side effects.
        """
        pass

    @abstractmethod
    def get(self, cfg: SuiteConfig, gctx: GetContext):
        """
        Acquire the workload source into gctx.src_dir at a pinned revision.
        """
        pass

    @abstractmethod
    def build(self, cfg: SuiteConfig, bctx: BuildContext):
        """
        Build the workload and its benchmark driver into bctx.bin_dir.
        """
        pass

    @abstractmethod
    def run(self, cfg: SuiteConfig, rctx: RunContext):
        """
        Run the selected benchmark variants, streaming output to rctx.results.
        """
        pass

    def execute(self, phase: Phase, *args) -> PhaseResult:
        """
        Run one phase and report its outcome instead of raising.

        Args:
            phase: Which operation to run
            *args: Passed to the operation

        Returns:
            PhaseResult; on failure error holds the raised exception
        """
        operations = {
            Phase.CHECK: self.check_prerequisites,
            Phase.GET: self.get,
            Phase.BUILD: self.build,
            Phase.RUN: self.run,
        }
        start_time = time.time()
        log.info(f"{phase.value.capitalize()} {self.name}...")
        try:
            operations[phase](*args)
        except HarnessError as e:
            log.error(f"{self.name} {phase.value} failed: {e}")
            return PhaseResult(
                harness=self.name,
                phase=phase,
                status=_status_for(e),
                start_time=start_time,
                end_time=time.time(),
                error_message=str(e),
                error=e,
            )
        except Exception as e:
            log.exception(f"Error during {self.name} {phase.value}")
            return PhaseResult(
                harness=self.name,
                phase=phase,
                status=PhaseStatus.FAILED,
                start_time=start_time,
                end_time=time.time(),
                error_message=str(e),
                error=e,
            )
        return PhaseResult(
            harness=self.name, phase=phase, status=PhaseStatus.COMPLETED, start_time=start_time, end_time=time.time()
        )
