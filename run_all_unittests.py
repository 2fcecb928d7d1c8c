# run_all_unittests.py
import os
import sys

import unittest


def main():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    # Add all unit tests recursively from the benchrig package
    top_dir = os.path.dirname(os.path.abspath(__file__))
    suite.addTests(
        loader.discover(start_dir=os.path.join(top_dir, "benchrig"), pattern="test_*.py", top_level_dir=top_dir)
    )

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    # Return 0 if successful, 1 if failed
    return 0 if result.wasSuccessful() else 1


if __name__ == "__main__":
    sys.exit(main())
