"""Run ruff, mypy and pytest for kaiten-cli and print one JSON summary.

Usage:
    python scripts/quality_gate.py              # everything
    python scripts/quality_gate.py --skip-tests # lint + types only
    python scripts/quality_gate.py --fix        # let ruff fix what it can first
"""

from __future__ import annotations

import argparse
import json
import re
import subprocess
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

MYPY_TARGETS = [
    "kaiten_cli/_utils.py",
    "kaiten_cli/api.py",
    "kaiten_cli/cards.py",
    "kaiten_cli/client.py",
    "kaiten_cli/download.py",
    "kaiten_cli/exceptions.py",
    "kaiten_cli/formatters/",
    "kaiten_cli/models.py",
]


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", *args],
        capture_output=True,
        text=True,
        cwd=str(ROOT),
        timeout=300,
    )


def _count(pattern: str, text: str) -> int:
    return sum(1 for line in text.splitlines() if re.search(pattern, line))


def _timed(check):
    """Run *check* and attach its duration; drop output from passing checks."""
    t0 = time.monotonic()
    result = check()
    result["duration_s"] = round(time.monotonic() - t0, 1)
    if result["status"] == "pass":
        result.pop("output", None)
    return result


def _status(proc: subprocess.CompletedProcess) -> str:
    return "pass" if proc.returncode == 0 else "fail"


def ruff_lint(fix: bool = False) -> dict:
    if fix:
        _run("ruff", "check", "--fix", ".")
    proc = _run("ruff", "check", ".")
    return {
        "status": _status(proc),
        "errors": _count(r"^\S+:\d+:\d+:", proc.stdout),
        "output": proc.stdout.strip(),
    }


def ruff_format() -> dict:
    proc = _run("ruff", "format", "--check", ".")
    return {
        "status": _status(proc),
        "files_to_reformat": _count(r"^Would reformat", proc.stdout + proc.stderr),
        "output": proc.stderr.strip(),
    }


def mypy() -> dict:
    proc = _run("mypy", *MYPY_TARGETS)
    return {
        "status": _status(proc),
        "errors": _count(r": error:", proc.stdout),
        "output": proc.stdout.strip(),
    }


def pytest() -> dict:
    proc = _run("pytest", "tests/", "-q", "--no-header", "--tb=short")
    summary = proc.stdout.strip().splitlines()[-1:] or [""]
    passed = re.search(r"(\d+)\s+passed", summary[0])
    failed = re.search(r"(\d+)\s+failed", summary[0])
    return {
        "status": _status(proc),
        "passed": int(passed.group(1)) if passed else 0,
        "failed": int(failed.group(1)) if failed else 0,
        "output": proc.stdout.strip()[-2000:],
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Run all quality checks")
    parser.add_argument("--skip-tests", action="store_true", help="Skip pytest")
    parser.add_argument("--fix", action="store_true", help="Auto-fix ruff issues first")
    args = parser.parse_args()

    t0 = time.monotonic()
    checks: dict[str, dict] = {}
    steps = [
        ("ruff_lint", lambda: ruff_lint(fix=args.fix)),
        ("ruff_format", ruff_format),
        ("mypy", mypy),
    ]
    if not args.skip_tests:
        steps.append(("pytest", pytest))
    for name, check in steps:
        print(f"Running {name}...", file=sys.stderr)
        checks[name] = _timed(check)
    if args.skip_tests:
        checks["pytest"] = {"status": "skip", "reason": "--skip-tests"}

    overall = "pass" if all(c["status"] in ("pass", "skip") for c in checks.values()) else "fail"
    print(
        json.dumps(
            {
                "overall": overall,
                "checks": checks,
                "total_duration_s": round(time.monotonic() - t0, 1),
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
