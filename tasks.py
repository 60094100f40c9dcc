"""Invoke tasks for tagdir development.

Every task shells out to `uv` so the virtual environment, test run and lint
configuration match what CI uses.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"
SOURCE_DIRS = ("src", "tests")


def _uv(ctx: Context, args: Sequence[str], *, dry_run: bool = False) -> None:
    """Run a uv subcommand.

    Args:
        ctx: Invoke execution context.
        args: Arguments following the `uv` executable.
        dry_run: Print the command instead of running it.
    """
    command = shlex.join(("uv", *args))
    if dry_run:
        print(f"[dry-run] {command}")
        return
    ctx.run(command, echo=True, pty=True)


@task(help={"dev": "Install the dev extra (pytest, ruff, mypy, invoke)."})
def sync(ctx: Context, dev: bool = True) -> None:
    """Create or update the virtual environment."""
    _uv(ctx, ["sync", "--extra", "dev"] if dev else ["sync"])


@task(help={"clean": "Empty dist/ first."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into dist/."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _uv(ctx, ["build"])


@task(
    help={
        "k": "pytest -k expression.",
        "path": "Test path or module (defaults to tests/).",
        "options": "Extra pytest arguments.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite."""
    args = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    args.extend(shlex.split(options))
    args.append(path)
    _uv(ctx, args)


@task(help={"fix": "Let ruff apply fixes."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Check formatting and lint rules with ruff."""
    _uv(ctx, ["run", "ruff", "format", "--check", *SOURCE_DIRS])
    args = ["run", "ruff", "check", *SOURCE_DIRS]
    if fix:
        args.append("--fix")
    _uv(ctx, args)


@task
def typecheck(ctx: Context) -> None:
    """Run mypy over the package."""
    _uv(ctx, ["run", "mypy", "src"])


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks and tests in CI order."""
    ctx.invoke(lint)
    ctx.invoke(typecheck)
    ctx.invoke(tests)


namespace = Collection(sync, build, tests, lint, typecheck, ci)
