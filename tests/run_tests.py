#!/usr/bin/env python3
"""
Fixture runner for the statewrap wrapper generator.

Expands every tests/fixtures/test_*.rs file with the statewrap CLI and
verifies the exit code:
- 0: Success (no errors, no warnings)
- 1: Success with warnings
- 2: Expansion reported errors

plus the output expectations written at the top of each fixture (see
tests/fixture_metadata.py).

Usage:
    python tests/run_tests.py
    python tests/run_tests.py --verbose
    python tests/run_tests.py --filter impl
"""

import argparse
import json
import subprocess
import sys
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from tqdm import tqdm

sys.path.insert(0, str(Path(__file__).parent))
from fixture_metadata import check_output, parse_fixture_metadata  # noqa: E402


def run_single_fixture(fixture: Path, project_root: Path) -> tuple[str, bool, int, int, str]:
    """Expand one fixture and return (name, passed, expected, actual, output)."""
    metadata = parse_fixture_metadata(fixture)
    try:
        result = subprocess.run(
            [sys.executable, "-m", "statewrap", str(fixture), *metadata.cmd_args],
            cwd=project_root,
            capture_output=True,
            text=True,
            timeout=metadata.timeout_seconds,
        )
    except subprocess.TimeoutExpired:
        return fixture.name, False, metadata.expect_exit, -1, "TEST TIMEOUT"
    except OSError as e:
        return fixture.name, False, metadata.expect_exit, -1, f"TEST ERROR: {e}"

    problems = check_output(metadata, result.returncode, result.stdout, result.stderr)
    output = ""
    if problems:
        output += "PROBLEMS:\n" + "\n".join(f"  {p}" for p in problems) + "\n"
    if result.stdout:
        output += f"STDOUT:\n{result.stdout}\n"
    if result.stderr:
        output += f"STDERR:\n{result.stderr}\n"
    return fixture.name, not problems, metadata.expect_exit, result.returncode, output


def collect_fixtures(fixtures_dir: Path, pattern: str = None) -> list[Path]:
    fixtures = sorted(fixtures_dir.rglob("test_*.rs"))
    if pattern:
        fixtures = [f for f in fixtures if pattern in str(f.relative_to(fixtures_dir))]
    return fixtures


def main():
    parser = argparse.ArgumentParser(description="Run statewrap fixture tests")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show detailed output for each fixture")
    parser.add_argument("-j", "--jobs", type=int, default=4,
                        help="Number of parallel jobs (default: 4)")
    parser.add_argument("--filter", type=str,
                        help="Only run fixtures whose path contains this text")
    parser.add_argument("--json", action="store_true",
                        help="Output results in JSON format")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    fixtures = collect_fixtures(project_root / "tests" / "fixtures", args.filter)
    if not fixtures:
        if not args.json:
            print("No fixtures found!")
        return 1

    if not args.json:
        print(f"Running {len(fixtures)} fixtures with {args.jobs} parallel jobs...")
        print()

    start_time = time.time()

    results = []
    show_progress = not args.json and not args.verbose
    with ThreadPoolExecutor(max_workers=args.jobs) as executor:
        futures = {executor.submit(run_single_fixture, f, project_root): f for f in fixtures}
        if show_progress:
            pbar = tqdm(total=len(fixtures), desc="Running fixtures", unit="test",
                        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]")
        for future in as_completed(futures):
            results.append(future.result())
            if show_progress:
                pbar.update(1)
        if show_progress:
            pbar.close()

    end_time = time.time()

    passed_tests = []
    failed_tests = []
    for name, passed, expected, actual, output in sorted(results):
        if passed:
            passed_tests.append(name)
            if args.verbose and not args.json:
                print(f"✓ {name} (expected: {expected}, actual: {actual})")
        else:
            failed_tests.append((name, expected, actual, output))
            if not args.json:
                print(f"✗ {name} (expected: {expected}, actual: {actual})")
                if args.verbose and output:
                    print(f"  Output: {output}")

    if args.json:
        print(json.dumps({
            "total_tests": len(results),
            "passed": len(passed_tests),
            "failed": len(failed_tests),
            "duration_seconds": round(end_time - start_time, 2),
            "failed_tests": [
                {"name": name, "expected_exit_code": expected, "actual_exit_code": actual}
                for name, expected, actual, _ in failed_tests
            ],
        }, indent=2))
        return 1 if failed_tests else 0

    print()
    print(f"Test Results ({end_time - start_time:.2f}s):")
    print(f"  Passed: {len(passed_tests)}")
    print(f"  Failed: {len(failed_tests)}")
    print(f"  Total:  {len(results)}")

    if failed_tests:
        print()
        print("Failed fixtures:")
        for name, expected, actual, output in failed_tests:
            print(f"  {name}: expected {expected}, got {actual}")
        return 1

    print()
    print("All fixtures passed! ✓")
    return 0


if __name__ == "__main__":
    sys.exit(main())
