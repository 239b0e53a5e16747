#!/usr/bin/env python3
"""
HotelOps - Single-Command Test Runner
======================================
Run:  python run_tests.py
      python run_tests.py --html       (with HTML report)
      python run_tests.py --quick      (skip the timing-based persistence and API suites)
      python run_tests.py --verbose    (verbose output)
"""

import os
import sys
import subprocess
import datetime

ROOT_DIR = os.path.dirname(os.path.abspath(__file__))
ARTIFACTS_DIR = os.path.join(ROOT_DIR, "test_artifacts")


def main():
    args = sys.argv[1:]
    quick = "--quick" in args
    html = "--html" in args
    verbose = "--verbose" in args or "-v" in args

    cmd = [sys.executable, "-m", "pytest"]

    test_files = [
        "tests/test_config.py",
        "tests/test_storage.py",
        "tests/test_analytics.py",
        "tests/test_ops.py",
    ]
    if not quick:
        test_files.append("tests/test_persistence.py")
        test_files.append("tests/test_api.py")

    cmd.extend(test_files)
    cmd.append("-v" if verbose else "-q")
    cmd.append("--tb=short")

    # HTML report (needs pytest-html)
    if html:
        ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        report_dir = os.path.join(ARTIFACTS_DIR, ts)
        os.makedirs(report_dir, exist_ok=True)
        report_path = os.path.join(report_dir, "test_report.html")
        cmd.extend(["--html", report_path, "--self-contained-html"])
        print(f"[HotelOps] HTML report will be saved to: {report_path}")

    print(f"[HotelOps] Running: {' '.join(cmd)}")
    print(f"[HotelOps] {'Quick mode (unit suites only)' if quick else 'Full suite'}")
    print()

    result = subprocess.run(cmd, cwd=ROOT_DIR)

    if html and result.returncode == 0:
        print(f"\n[HotelOps] HTML report: {report_path}")

    return result.returncode


if __name__ == "__main__":
    sys.exit(main())
