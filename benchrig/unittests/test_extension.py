import unittest
from unittest.mock import patch, MagicMock
import os
import tempfile
import configparser

from benchrig.extension import EXTENSION_ENV_VAR, ExtensionConfig


def write_extension_ini(pkg_dir, harness_packages=None):
    parser = configparser.ConfigParser()
    parser.add_section("extensions")
    if harness_packages is not None:
        parser.set("extensions", "harness_packages", harness_packages)
    config_file = os.path.join(pkg_dir, "extension.ini")
    with open(config_file, "w") as f:
        parser.write(f)
    return config_file


class TestExtensionConfig(unittest.TestCase):
    """Test ExtensionConfig class for loading and parsing extension configuration."""

    def test_no_extension_configured(self):
        """Without an extension.ini there are no extra harness packages."""
        with patch.dict(os.environ, {}, clear=True):
            config = ExtensionConfig()
            self.assertEqual(config.get_harness_packages(), [])

    def test_harness_packages_parsed(self):
        """Comma-separated harness packages are split and stripped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            write_extension_ini(tmpdir, "ext_a.harnesses, ext_b.harnesses,")

            mock_spec = MagicMock()
            mock_spec.origin = os.path.join(tmpdir, "__init__.py")

            with patch("importlib.util.find_spec", return_value=mock_spec):
                config = ExtensionConfig()
                self.assertEqual(config.get_harness_packages(), ["ext_a.harnesses", "ext_b.harnesses"])
                self.assertEqual(config.extension_ini_base, tmpdir)

    def test_missing_option(self):
        """An [extensions] section without harness_packages contributes nothing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            write_extension_ini(tmpdir)

            mock_spec = MagicMock()
            mock_spec.origin = os.path.join(tmpdir, "__init__.py")

            with patch("importlib.util.find_spec", return_value=mock_spec):
                self.assertEqual(ExtensionConfig().get_harness_packages(), [])

    def test_env_var_packages_searched_in_order(self):
        """The first package named in the environment variable with an extension.ini wins."""
        with tempfile.TemporaryDirectory() as tmpdir:
            without_ini = os.path.join(tmpdir, "ext_empty")
            with_ini = os.path.join(tmpdir, "ext_full")
            os.makedirs(without_ini)
            os.makedirs(with_ini)
            write_extension_ini(with_ini, "ext_full.harnesses")

            def find_spec(name):
                spec = MagicMock()
                spec.origin = os.path.join(tmpdir, name, "__init__.py")
                return spec

            with patch.dict(os.environ, {EXTENSION_ENV_VAR: "ext_empty, ext_full"}), patch(
                "importlib.util.find_spec", side_effect=find_spec
            ) as mock_find_spec:
                config = ExtensionConfig()

            self.assertEqual(config.get_harness_packages(), ["ext_full.harnesses"])
            self.assertEqual([c.args[0] for c in mock_find_spec.call_args_list], ["ext_empty", "ext_full"])

    def test_unknown_package_is_ignored(self):
        with patch.dict(os.environ, {EXTENSION_ENV_VAR: "no_such_benchrig_extension"}):
            config = ExtensionConfig()
        self.assertEqual(config.get_harness_packages(), [])

    def test_unparsable_config(self):
        """A broken extension.ini is reported and ignored."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with open(os.path.join(tmpdir, "extension.ini"), "w") as f:
                f.write("harness_packages = no section header\n")

            mock_spec = MagicMock()
            mock_spec.origin = os.path.join(tmpdir, "__init__.py")

            with patch("importlib.util.find_spec", return_value=mock_spec), patch("sys.stderr"):
                config = ExtensionConfig()
            self.assertIsNone(config.config)
            self.assertEqual(config.get_harness_packages(), [])


if __name__ == "__main__":
    unittest.main()
