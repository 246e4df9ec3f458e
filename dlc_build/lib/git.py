from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def describe_last_tag(*, cwd: str | None = None) -> str:
    """Return the most recent tag reachable from HEAD (``git describe --tags --abbrev=0``)."""

    r = run_cmd(["git", "describe", "--tags", "--abbrev=0"], cwd=cwd)
    tag = r.stdout.strip()
    if not tag:
        raise RuntimeError("git describe returned no tag")
    return tag


def head_revision(*, cwd: str | None = None) -> str:
    r = run_cmd(["git", "rev-parse", "HEAD"], cwd=cwd)
    return r.stdout.strip()


def archive_zip(out_path: str, *, cwd: str | None = None, dry_run: bool = False) -> None:
    run_cmd(
        ["git", "archive", "--format=zip", "-9", "HEAD", "-o", out_path],
        cwd=cwd,
        dry_run=dry_run,
    )


def source_archive_name(root: Path, revision: str) -> str:
    return f"{root.resolve().name}-{revision}.zip"
