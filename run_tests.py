#!/usr/bin/env python
"""
Simple Test Runner for keepertree
=================================

Runs the test suite with short tracebacks and the slowest tests listed.

Usage:
    python run_tests.py           # Run all tests
    python run_tests.py --cov     # Run with coverage for the keepertree package
"""

import subprocess
import sys
import argparse
from pathlib import Path


def run_tests(with_coverage=False):
    """Run the test suite."""
    cmd = [
        sys.executable, "-m", "pytest",
        "--tb=short",               # Short traceback format
        "--durations=10",           # Show 10 slowest tests
        "-v"                        # Verbose output
    ]

    if with_coverage:
        cmd.extend(["--cov=keepertree", "--cov-report=term-missing"])

    print("Running keepertree tests...")
    print("=" * 60)

    result = subprocess.run(cmd, cwd=Path(__file__).parent)
    return result.returncode


def main():
    parser = argparse.ArgumentParser(description="Run keepertree tests")
    parser.add_argument("--cov", action="store_true", help="Collect coverage")
    args = parser.parse_args()
    return run_tests(with_coverage=args.cov)


if __name__ == "__main__":
    sys.exit(main())
