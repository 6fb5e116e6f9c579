#!/usr/bin/env python3
"""
Example Validation Script

Validates that the lock examples in the examples/ directory:
1. Have valid Python syntax
2. Run to completion within a timeout

Examples use the in-memory backend unless DATABASE_URL is set, so they can be
run without a database. Pass --database-url to run them against PostgreSQL.

Optionally also syntax-checks the Python code blocks in README.md.

Usage:
    python scripts/validate_examples.py                  # Validate and run examples
    python scripts/validate_examples.py --syntax         # Syntax check only
    python scripts/validate_examples.py --readme         # Also check README code blocks
    python scripts/validate_examples.py --database-url postgresql+asyncpg://...
"""

from __future__ import annotations

import argparse
import ast
import os
import re
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass
class ValidationResult:
    """Validation outcome for one example."""

    path: str
    syntax_error: str | None = None
    execution_error: str | None = None
    executed: bool = False

    @property
    def ok(self) -> bool:
        return self.syntax_error is None and self.execution_error is None


def check_syntax(source: str, filename: str) -> str | None:
    """Return a syntax error description, or None if the source parses."""
    try:
        ast.parse(source, filename=filename)
    except SyntaxError as e:
        return f"Line {e.lineno}: {e.msg}"
    return None


def run_example(
    file_path: Path,
    project_root: Path,
    timeout: int,
    database_url: str | None,
) -> str | None:
    """
    Run an example in a subprocess.

    Returns:
        The tail of its output if it failed, None if it succeeded.
    """
    env = dict(os.environ)
    if database_url:
        env["DATABASE_URL"] = database_url
    else:
        env.pop("DATABASE_URL", None)

    try:
        result = subprocess.run(
            [sys.executable, str(file_path)],
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=project_root,
            env=env,
        )
    except subprocess.TimeoutExpired:
        return f"Execution timed out after {timeout}s"

    if result.returncode != 0:
        output = result.stderr.strip() or result.stdout.strip()
        return "\n".join(output.splitlines()[-10:])
    return None


def readme_code_blocks(readme: Path) -> list[tuple[int, str]]:
    """Extract (line_number, code) for each ```python block in a Markdown file."""
    content = readme.read_text(encoding="utf-8")
    return [
        (content[: match.start()].count("\n") + 1, match.group(1))
        for match in re.finditer(r"```(?:python|py)\n(.*?)```", content, re.DOTALL)
    ]


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate the pglock examples.")
    parser.add_argument("--syntax", action="store_true", help="Only check syntax")
    parser.add_argument("--readme", action="store_true", help="Also check README code blocks")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Run examples against this PostgreSQL URL instead of the in-memory backend",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=60,
        help="Timeout for each example in seconds (default: 60)",
    )
    args = parser.parse_args()

    project_root = Path(__file__).resolve().parent.parent
    examples_dir = project_root / "examples"

    print("=" * 60)
    print("Example Validation")
    print("=" * 60)

    example_files = sorted(p for p in examples_dir.glob("*.py") if p.name != "__init__.py")
    if not example_files:
        print(f"\nERROR: No example files found in {examples_dir}")
        return 1

    backend_name = "PostgreSQL" if args.database_url else "in-memory"
    print(f"\nFound {len(example_files)} example(s), backend: {backend_name}\n")

    results: list[ValidationResult] = []
    for file_path in example_files:
        result = ValidationResult(str(file_path.relative_to(project_root)))
        results.append(result)
        print(f"Checking: {result.path}")

        result.syntax_error = check_syntax(file_path.read_text(encoding="utf-8"), result.path)
        if result.syntax_error:
            print(f"  SYNTAX ERROR: {result.syntax_error}")
            continue
        print("  Syntax: OK")

        if args.syntax:
            continue
        result.executed = True
        result.execution_error = run_example(
            file_path, project_root, args.timeout, args.database_url
        )
        if result.execution_error:
            print(f"  EXECUTION ERROR:\n{result.execution_error}")
        else:
            print("  Execution: OK")

    readme_errors: list[str] = []
    readme = project_root / "README.md"
    if args.readme and readme.exists():
        for line_num, code in readme_code_blocks(readme):
            error = check_syntax(code, f"README.md:{line_num}")
            if error:
                readme_errors.append(f"README.md:{line_num}: {error}")

    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    print(f"\n  Passed: {sum(r.ok for r in results)}/{len(results)}")
    if args.readme:
        print(f"  README code blocks with errors: {len(readme_errors)}")
        for error in readme_errors:
            print(f"    {error}")

    if all(r.ok for r in results) and not readme_errors:
        print("\n[PASS] All validations passed!")
        return 0
    print("\n[FAIL] Some validations failed!")
    return 1


if __name__ == "__main__":
    sys.exit(main())
