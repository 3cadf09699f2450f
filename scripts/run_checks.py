#!/usr/bin/env python3
"""Lint, type-check and test the image_cropper package.

Exits with the first failing step's return code. Tests run with the Qt
offscreen platform so the controller tests work without a display.
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys

TARGETS = ["image_cropper", "tests"]


def run(cmd: list[str], env: dict[str, str] | None = None) -> int:
    print("=>", " ".join(cmd))
    return subprocess.run(cmd, check=False, env=env).returncode


def main() -> int:
    parser = argparse.ArgumentParser(description="Run ruff, pyright and pytest")
    parser.add_argument("--fix", action="store_true", help="Let ruff apply safe fixes")
    parser.add_argument("--no-types", action="store_true", help="Skip pyright")
    parser.add_argument("--no-tests", action="store_true", help="Skip pytest")
    parser.add_argument("pytest_args", nargs=argparse.REMAINDER, help="Extra pytest arguments")
    args = parser.parse_args()

    ruff = [sys.executable, "-m", "ruff", "check", *TARGETS]
    if args.fix:
        ruff.append("--fix")
    steps: list[tuple[str, list[str], dict[str, str] | None]] = [("ruff", ruff, None)]

    if not args.no_types:
        steps.append(("pyright", [sys.executable, "-m", "pyright", "image_cropper"], None))

    if not args.no_tests:
        env = os.environ.copy()
        env.setdefault("QT_QPA_PLATFORM", "offscreen")
        extra = [a for a in args.pytest_args if a != "--"]
        steps.append(("pytest", [sys.executable, "-m", "pytest", "-q", *extra], env))

    for name, cmd, env in steps:
        rc = run(cmd, env)
        if rc != 0:
            print(f"{name} failed")
            return rc

    print("All checks passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
