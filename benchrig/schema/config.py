"""
Suite configuration: file schema, loading and the resolved runtime view.

The file is validated before any harness phase starts so a typo fails fast
with a clear message instead of half way through a build.

Copyright 2025 Advanced Micro Devices, Inc.
All rights reserved.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import getpass
import json
import os

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from benchrig.lib.env_lib import Env


# =============================================================================
# File Schema
# =============================================================================


class SuiteConfigFile(BaseModel):
    """
    Schema for the suite configuration file (YAML or JSON).

    Usage:
        with open("suite.yaml") as f:
            raw = yaml.safe_load(f)
        config = SuiteConfigFile.model_validate(raw)
    """

    model_config = ConfigDict(extra="forbid")  # Catch typos in top-level keys

    goroot: str = Field(description="Root of the Go toolchain used for builds")
    work_dir: str = Field(default="/tmp/benchrig", description="Per-harness src/bin/tmp/results live under here")

    inherit_env: bool = Field(default=True, description="Start build/exec environments from the process env")
    build_env: Dict[str, str] = Field(default_factory=dict, description="Variables set for build steps")
    exec_env: Dict[str, str] = Field(default_factory=dict, description="Variables set for benchmark processes")

    run_args: List[str] = Field(default_factory=list, description="Arguments passed through to benchmark drivers")
    short: bool = Field(default=False, description="Run the reduced benchmark set")

    harnesses: Optional[List[str]] = Field(default=None, description="Restrict to these harnesses")
    bench_dirs: Dict[str, str] = Field(
        default_factory=dict, description="Harness name -> source dir of its benchmark driver"
    )

    @field_validator("goroot", "work_dir")
    @classmethod
    def validate_absolute(cls, v: str, info) -> str:
        if not os.path.isabs(v):
            raise ValueError(f"{info.field_name} must be an absolute path, got {v!r}")
        return os.path.normpath(v)

    @field_validator("bench_dirs")
    @classmethod
    def normalize_dirs(cls, v: Dict[str, str]) -> Dict[str, str]:
        return {name: os.path.abspath(path) for name, path in v.items()}


# =============================================================================
# Placeholders
# =============================================================================


def resolve_placeholders(raw: Any, values: Dict[str, str]) -> Any:
    """Replace {name} placeholders in every string of a loaded config tree."""
    if isinstance(raw, str):
        for name, value in values.items():
            raw = raw.replace("{" + name + "}", value)
        return raw
    if isinstance(raw, list):
        return [resolve_placeholders(item, values) for item in raw]
    if isinstance(raw, dict):
        return {key: resolve_placeholders(item, values) for key, item in raw.items()}
    return raw


def resolve_config_placeholders(raw_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Resolve {user-id} everywhere, then {work-dir} using the resolved work_dir.
    """
    resolved = resolve_placeholders(raw_config, {"user-id": getpass.getuser()})
    work_dir = resolved.get("work_dir", SuiteConfigFile.model_fields["work_dir"].default)
    return resolve_placeholders(resolved, {"work-dir": work_dir})


def validate_config_file(config_path: Union[str, Path]) -> SuiteConfigFile:
    """
    Load and validate a suite configuration file.

    Args:
        config_path: Path to configuration file (YAML or JSON)

    Returns:
        Validated SuiteConfigFile

    Raises:
        ValueError: If config is invalid with detailed error message
        FileNotFoundError: If config file doesn't exist
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        if config_path.suffix in ('.yaml', '.yml'):
            raw_config = yaml.safe_load(f)
        else:
            raw_config = json.load(f)

    if raw_config is None:
        raise ValueError(f"Configuration file is empty: {config_path}")
    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration file must hold a mapping: {config_path}")

    try:
        return SuiteConfigFile.model_validate(resolve_config_placeholders(raw_config))
    except Exception as e:
        # Re-raise with file context
        raise ValueError(f"Invalid configuration in {config_path}:\n{e}") from e


# =============================================================================
# Runtime View
# =============================================================================


@dataclass(frozen=True)
class HarnessDirs:
    """On-disk layout of one harness under the suite work dir."""

    src_dir: str
    bin_dir: str
    tmp_dir: str
    results_dir: str


@dataclass(frozen=True)
class SuiteConfig:
    """
    Resolved suite configuration handed to harness phases.

    Built once per invocation; harnesses only read it.
    """

    goroot: str
    work_dir: str
    build_env: Env = field(default_factory=Env)
    exec_env: Env = field(default_factory=Env)
    run_args: List[str] = field(default_factory=list)
    short: bool = False
    harnesses: Optional[List[str]] = None
    bench_dirs: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_file(cls, config: SuiteConfigFile, base_env: Optional[Env] = None) -> "SuiteConfig":
        if base_env is None:
            base_env = Env.from_os() if config.inherit_env else Env()
        return cls(
            goroot=config.goroot,
            work_dir=config.work_dir,
            build_env=base_env.update(config.build_env),
            exec_env=base_env.update(config.exec_env),
            run_args=list(config.run_args),
            short=config.short,
            harnesses=list(config.harnesses) if config.harnesses is not None else None,
            bench_dirs=dict(config.bench_dirs),
        )

    def harness_dirs(self, name: str) -> HarnessDirs:
        root = os.path.join(self.work_dir, name)
        return HarnessDirs(
            src_dir=os.path.join(root, "src"),
            bin_dir=os.path.join(root, "bin"),
            tmp_dir=os.path.join(root, "tmp"),
            results_dir=os.path.join(root, "results"),
        )

    def is_enabled(self, name: str) -> bool:
        return self.harnesses is None or name in self.harnesses


def load_suite_config(config_path: Union[str, Path]) -> SuiteConfig:
    return SuiteConfig.from_file(validate_config_file(config_path))
