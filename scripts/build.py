#!/usr/bin/env python3
"""
Developer checks for gh-control.

"If it isn't checked, it's a rumor."

Usage:
    python scripts/build.py [--clean] [--lint] [--type-check] [--test] [--all]
"""

import argparse
import shutil
import subprocess
import sys
from pathlib import Path

PACKAGE = "ghcontrol"

ARTIFACTS = ["build", "dist", ".pytest_cache", ".mypy_cache", ".ruff_cache", "htmlcov", ".coverage"]

STEPS = {
    "lint": (["ruff", "check", PACKAGE, "tests"], "Linting with ruff"),
    "type_check": (["mypy", PACKAGE], "Type checking with mypy"),
    "test": (["pytest", "-v", f"--cov={PACKAGE}", "--cov-report=term-missing"], "Running tests with pytest"),
}


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and return success status."""
    print(f"\n{'=' * 60}\nRunning: {description}\n{'=' * 60}")

    try:
        subprocess.run(cmd, check=True)
    except subprocess.CalledProcessError as e:
        print(f"✗ {description} failed with exit code {e.returncode}")
        return False
    except FileNotFoundError:
        print(f"✗ Command not found: {cmd[0]} (pip install -e '.[dev,test]')")
        return False

    print(f"✓ {description} completed successfully")
    return True


def clean() -> bool:
    """Remove caches and build output."""
    for name in ARTIFACTS:
        path = Path(name)
        if path.is_dir():
            shutil.rmtree(path, ignore_errors=True)
        elif path.exists():
            path.unlink()
    for path in Path(".").rglob("__pycache__"):
        shutil.rmtree(path, ignore_errors=True)
    print("✓ Clean completed")
    return True


def main() -> int:
    parser = argparse.ArgumentParser(description="Developer checks for gh-control")
    parser.add_argument("--clean", action="store_true", help="Remove build artifacts")
    parser.add_argument("--lint", action="store_true", help="Run ruff")
    parser.add_argument("--type-check", action="store_true", help="Run mypy")
    parser.add_argument("--test", action="store_true", help="Run pytest with coverage")
    parser.add_argument("--all", action="store_true", help="Run everything")
    args = parser.parse_args()

    if not any(vars(args).values()):
        parser.print_help()
        return 0

    success = True
    if args.all or args.clean:
        success = clean() and success
    for step, (cmd, description) in STEPS.items():
        if args.all or getattr(args, step):
            success = run_command(cmd, description) and success

    print("\n" + ("✓ All checks passed" if success else "✗ Some checks failed"))
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
