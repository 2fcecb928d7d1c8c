"""
Exception hierarchy for harness phases.

Each phase raises a distinct category so callers can tell an unsupported host
from a broken build, and a plain timeout from a process that could not be
killed.

Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved.
"""

from typing import List, Optional


class HarnessError(Exception):
    """Base class for all harness failures."""


class UnsupportedPlatformError(HarnessError):
    """Host architecture or platform cannot run this workload."""


class AcquisitionError(HarnessError):
    """Source clone or checkout failed."""


class ToolchainInstallError(HarnessError):
    """Auxiliary build tool could not be installed."""


class BuildStepError(HarnessError):
    """A build step failed."""

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}")
        self.step = step


class CombinedBuildError(BuildStepError):
    """
    Every attempt of a fallback-aware step failed.

    The causes are kept in attempt order and all of them appear in the
    string form, so the first attempt's diagnostic is never lost.
    """

    def __init__(self, step: str, errors: List[BaseException]):
        message = "; ".join(f"attempt {i + 1}: {err}" for i, err in enumerate(errors))
        super().__init__(step, message)
        self.errors = list(errors)


class RunError(HarnessError):
    """Base class for run-phase failures."""


class RunProcessError(RunError):
    """Benchmark process failed to spawn or exited non-zero."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class RunTimeoutError(RunError):
    """Benchmark process exceeded its wall-clock bound and was killed."""


class TerminationError(RunTimeoutError):
    """Timeout fired but the process could not be killed; it may still be running."""
