"""benchrig configuration and context models."""

from .config import (
    HarnessDirs,
    SuiteConfig,
    SuiteConfigFile,
    load_suite_config,
    resolve_config_placeholders,
    validate_config_file,
)
from .contexts import (
    BuildContext,
    GetContext,
    RunContext,
)

__all__ = [
    'BuildContext',
    'GetContext',
    'HarnessDirs',
    'RunContext',
    'SuiteConfig',
    'SuiteConfigFile',
    'load_suite_config',
    'resolve_config_placeholders',
    'validate_config_file',
]
