"""
Extension configuration loader for benchrig.

This module provides functionality to load and parse extension configuration
from extension.ini files in installed extension packages. It lets extensions
contribute additional harness packages without modifying benchrig itself.
"""

import os
import configparser
import sys
import importlib.util


CORE_PKG_NAME = "benchrig"
EXTENSION_ENV_VAR = "BENCHRIG_EXTENSION_PKG_NAMES"


class ExtensionConfig:
    """Load and parse extension configuration from extension.ini files."""

    def __init__(self):
        """Initialize the extension config loader."""
        self.config = None
        self.extension_ini_base = None
        self.load_config()

    def load_config(self):
        """
        Load extension.ini from packages specified via environment variable or from benchrig itself.

        Search order:
        1. If BENCHRIG_EXTENSION_PKG_NAMES is set (comma-separated list):
           Look for extension.ini in each <extension_pkg>/extension.ini
        2. Otherwise, look for extension.ini in the benchrig package directory
        """
        config_file = None
        extension_pkg_names = os.environ.get(EXTENSION_ENV_VAR)
        if extension_pkg_names:
            # Try each package in order
            for pkg_name in extension_pkg_names.split(","):
                pkg_name = pkg_name.strip()
                if pkg_name:
                    config_file = self._find_config_in_package(pkg_name)
                    if config_file:
                        break

        # Fall back to looking in benchrig package
        if not config_file:
            config_file = self._find_config_in_package(CORE_PKG_NAME)

        if config_file and os.path.exists(config_file):
            try:
                self.config = configparser.ConfigParser()
                self.config.read(config_file)
                self.extension_ini_base = os.path.dirname(config_file)
            except configparser.Error as e:
                self.config = None
                print(f"Warning: Could not parse extension config {config_file}: {e}", file=sys.stderr)

    def _find_config_in_package(self, package_name):
        """
        Find extension.ini in an installed package.

        Args:
            package_name (str): The name of the package to search (e.g., 'benchrig', 'benchrig_extension')

        Returns:
            str or None: Path to extension.ini if found, None otherwise
        """
        try:
            spec = importlib.util.find_spec(package_name)
        except (ImportError, ValueError):
            return None
        if spec and spec.origin:
            pkg_dir = os.path.dirname(spec.origin)
            config_path = os.path.join(pkg_dir, "extension.ini")
            if os.path.exists(config_path):
                return os.path.abspath(config_path)
        return None

    def get_harness_packages(self):
        """
        Get the list of extra harness packages from config.

        Returns:
            list: Importable package names (e.g. ['benchrig_extension.harnesses'])
        """
        if self.config and self.config.has_option("extensions", "harness_packages"):
            value = self.config.get("extensions", "harness_packages")
            return [p.strip() for p in value.split(",") if p.strip()]
        return []
