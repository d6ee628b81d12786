import os
import unittest

from lessroutes.util.const import HERE


def test_suite_from_recursive_discover(pattern: str) -> unittest.TestSuite:
    # every directory below the package has an __init__.py, so one discover
    # from the package root finds all test modules
    return unittest.TestLoader().discover(
        start_dir=os.path.abspath(HERE),
        pattern=pattern,
        top_level_dir=os.path.abspath(HERE / '..'),
    )


if __name__ == '__main__':
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(test_suite_from_recursive_discover('*_test.py'))
    raise SystemExit(0 if result.wasSuccessful() else 1)
