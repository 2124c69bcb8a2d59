#!/usr/bin/env python3
"""
Test runner for the pattern replay suite.

Usage:
    python tests/run_tests.py                 # Run all tests
    python tests/run_tests.py simulator       # Run modules matching a name
    python tests/run_tests.py --list          # List available test modules
"""
import argparse
import os
import sys
import unittest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from logger import get_logger

logger = get_logger(__name__)

TESTS_DIR = os.path.dirname(os.path.abspath(__file__))


def available_modules():
    return sorted(
        name[:-3]
        for name in os.listdir(TESTS_DIR)
        if name.startswith("test_") and name.endswith(".py")
    )


def main():
    parser = argparse.ArgumentParser(description="Run the pattern replay test suite")
    parser.add_argument("filters", nargs="*", help="Only run modules whose name contains one of these")
    parser.add_argument("--list", action="store_true", help="List test modules and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose unittest output")
    args = parser.parse_args()

    modules = available_modules()
    if args.list:
        logger.info("=" * 70)
        for name in modules:
            logger.info(f"  {name}")
        logger.info("=" * 70)
        return

    if args.filters:
        modules = [name for name in modules if any(f in name for f in args.filters)]
    if not modules:
        logger.error("No test modules matched. Use --list to see available modules.")
        sys.exit(1)

    sys.path.insert(0, TESTS_DIR)
    suite = unittest.defaultTestLoader.loadTestsFromNames(modules)
    result = unittest.TextTestRunner(verbosity=2 if args.verbose else 1).run(suite)

    logger.info("=" * 70)
    logger.info(f"Ran {result.testsRun} test(s): {len(result.failures)} failure(s), {len(result.errors)} error(s)")
    logger.info("=" * 70)
    sys.exit(0 if result.wasSuccessful() else 1)


if __name__ == "__main__":
    main()
