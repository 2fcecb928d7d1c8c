import io
import unittest
from unittest.mock import patch

from benchrig.cli_plugins.list_plugin import ListPlugin


class TestListPlugin(unittest.TestCase):
    """Test ListPlugin harness listing"""

    def test_harnesses_populated(self):
        """Test that harnesses are discovered in __init__"""
        plugin = ListPlugin()
        self.assertIn("cockroachdb", plugin.harnesses)

    def test_get_name(self):
        """Test get_name returns 'list'"""
        self.assertEqual(ListPlugin().get_name(), "list")

    def test_list_all(self):
        """Test listing every harness with its matrix sizes"""
        plugin = ListPlugin()
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            plugin.list_harnesses()
        output = out.getvalue()
        self.assertIn("Available harnesses", output)
        self.assertRegex(output, r"cockroachdb\s*\|\s*6\s*\|\s*2")

    def test_list_one(self):
        """Test listing the benchmarks of one harness, marking the short set"""
        plugin = ListPlugin()
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            plugin.list_harnesses("cockroachdb")
        lines = out.getvalue().splitlines()
        kv95_3 = next(line for line in lines if "kv95/nodes=3" in line)
        kv50_1 = next(line for line in lines if "kv50/nodes=1" in line)
        self.assertIn("yes", kv95_3)
        self.assertNotIn("yes", kv50_1)

    def test_list_unknown(self):
        """Test that an unknown harness exits with an error"""
        plugin = ListPlugin()
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            with self.assertRaises(SystemExit) as cm:
                plugin.list_harnesses("postgres")
        self.assertEqual(cm.exception.code, 1)
        self.assertIn("Unknown harness", out.getvalue())


if __name__ == "__main__":
    unittest.main()
