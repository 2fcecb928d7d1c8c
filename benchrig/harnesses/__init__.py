"""
Harnesses - one module per benchmarked workload.

Harnesses are responsible for:
- Checking the host can run the workload
- Acquiring source at a pinned revision
- Building the workload and its benchmark driver
- Running benchmark variants with time bounds

Harnesses should NOT:
- Parse benchmark output
- Decide how results are reported
"""

import importlib
import logging
import os
import pkgutil

from benchrig.extension import ExtensionConfig
from benchrig.harnesses._base_harness import (
    BaseHarness,
    Phase,
    PhaseResult,
    PhaseStatus,
    host_arch,
    run_variants,
)

log = logging.getLogger(__name__)

HARNESS_DIR = os.path.dirname(__file__)


def _harnesses_in_module(mod):
    found = []
    for attr in dir(mod):
        obj = getattr(mod, attr)
        # Only concrete classes defined in this module, not imported ones
        if (
            isinstance(obj, type)
            and issubclass(obj, BaseHarness)
            and obj is not BaseHarness
            and obj.__module__ == mod.__name__
            and not getattr(obj, "__abstractmethods__", None)
        ):
            found.append(obj())
    return found


def discover_harnesses():
    """
    Discover and instantiate all harness classes.

    Scans this package plus any extension packages named in extension.ini.
    Modules starting with an underscore are skipped.

    Returns:
        dict: harness name -> harness instance, sorted by name.
    """
    packages = [(__name__, HARNESS_DIR)]
    for pkg_name in ExtensionConfig().get_harness_packages():
        try:
            pkg = importlib.import_module(pkg_name)
            packages.append((pkg_name, os.path.dirname(pkg.__file__)))
        except Exception as e:
            log.warning(f"Failed to load harness package {pkg_name}: {e}")

    harnesses = {}
    for pkg_name, pkg_dir in packages:
        for _, name, ispkg in pkgutil.iter_modules([pkg_dir]):
            if ispkg or name.startswith("_"):
                continue
            try:
                mod = importlib.import_module(f"{pkg_name}.{name}")
            except Exception as e:
                log.warning(f"Failed to load harness module {pkg_name}.{name}: {e}")
                continue
            for harness in _harnesses_in_module(mod):
                harnesses[harness.name] = harness
    return dict(sorted(harnesses.items()))


def get_harness(name):
    """Return the harness registered under name; raises ValueError if unknown."""
    harnesses = discover_harnesses()
    if name not in harnesses:
        raise ValueError(f"Unknown harness '{name}', available: {', '.join(harnesses) or 'none'}")
    return harnesses[name]


__all__ = [
    "BaseHarness",
    "Phase",
    "PhaseResult",
    "PhaseStatus",
    "discover_harnesses",
    "get_harness",
    "host_arch",
    "run_variants",
]
