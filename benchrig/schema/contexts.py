"""
Per-invocation records passed to harness phases.

All of them are frozen: the driver builds them once and harnesses only read.

Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved.
"""

from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from benchrig.lib.env_lib import Env


class GetContext(BaseModel):
    """Where source acquisition should put the tree."""

    model_config = ConfigDict(frozen=True)

    src_dir: str


class BuildContext(BaseModel):
    """
    Inputs and outputs of a build.

    env is the caller's environment; build steps layer their own variables
    on top of it without changing it.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    src_dir: str = Field(description="Checked out workload source")
    bin_dir: str = Field(description="Receives the workload and driver binaries")
    bench_dir: str = Field(description="Source of the companion benchmark driver")
    env: Env = Field(default_factory=Env.from_os)


class RunContext(BaseModel):
    """Inputs of a benchmark run."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    bin_dir: str
    tmp_dir: str = Field(description="Scratch dir for the workload, emptied between variants")
    results: Any = Field(description="Writable text stream receiving benchmark output")
    args: Tuple[str, ...] = ()
    short: bool = False

    @field_validator("results")
    @classmethod
    def validate_results(cls, v: Any) -> Any:
        if not callable(getattr(v, "write", None)):
            raise ValueError("results must be a writable stream")
        return v
