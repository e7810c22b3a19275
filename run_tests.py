#!/usr/bin/env python
"""Test runner for Dataflow tips."""

import sys
import subprocess
import argparse


def main():
    """Run tests with various options."""
    parser = argparse.ArgumentParser(description="Run Dataflow tips tests")
    parser.add_argument("--unit", action="store_true", help="Run unit tests only")
    parser.add_argument("--integration", action="store_true", help="Run integration tests only")
    parser.add_argument("--coverage", action="store_true", help="Generate coverage report")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("-k", dest="keyword", help="Only run tests matching the keyword expression")
    
    args = parser.parse_args()
    
    cmd = [sys.executable, "-m", "tests"]
    
    if args.unit:
        cmd.append("tests/unit")
    if args.integration:
        cmd.append("tests/integration")
    
    if args.keyword:
        cmd.extend(["-k", args.keyword])
    
    if args.verbose:
        cmd.append("-vv")
    
    if args.coverage:
        cmd.extend([
            "--cov=dataflow_tips",
            "--cov-report=term-missing",
            "--cov-report=html"
        ])
    
    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=".")
    
    return result.returncode


if __name__ == "__main__":
    sys.exit(main())
