from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

# (source relative to repo root, destination name inside the doc source dir)
MARKDOWN_SOURCES = [
    ("README.md", "index.md"),
    ("CHANGELOG.md", "CHANGELOG.md"),
    ("LICENSE", "LICENSE.md"),
]


def copy_markdown_sources(root: Path, doc_dir: Path, *, dry_run: bool = False) -> List[Path]:
    copied: List[Path] = []
    for src_rel, dst_name in MARKDOWN_SOURCES:
        src = root / src_rel
        dst = doc_dir / dst_name
        if not src.exists():
            raise FileNotFoundError(str(src))
        if dry_run:
            logger.info("Would copy %s -> %s", src, dst)
        else:
            doc_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dst)
        copied.append(dst)
    return copied


def strip_doc_prefix(doc_dir: Path, prefix: str, *, dry_run: bool = False) -> List[Path]:
    """Remove ``prefix`` from every markdown file so repo-relative links work in the rendered docs."""

    changed: List[Path] = []
    prefix = prefix.rstrip("/") + "/"
    for p in sorted(doc_dir.glob("*.md")):
        text = p.read_text(encoding="utf-8")
        if prefix not in text:
            continue
        changed.append(p)
        if not dry_run:
            p.write_text(text.replace(prefix, ""), encoding="utf-8")
    logger.info("Stripped '%s' from %d files", prefix, len(changed))
    return changed


def venv_bin(venv_dir: Path, name: str) -> str:
    return str(venv_dir / "bin" / name)


def create_venv(venv_dir: Path, packages: Sequence[str], *, dry_run: bool = False) -> None:
    run_cmd(["python3", "-m", "venv", str(venv_dir)], dry_run=dry_run)
    run_cmd([venv_bin(venv_dir, "pip3"), "install", *packages], capture=False, dry_run=dry_run)


def sphinx_build(
    venv_dir: Path,
    source_dir: Path,
    build_dir: Path,
    *,
    opts: Sequence[str] = (),
    dry_run: bool = False,
) -> None:
    sphinx = venv_bin(venv_dir, "sphinx-build")
    if not dry_run and not Path(sphinx).exists():
        raise RuntimeError(f"{sphinx} not found; run the install_dev_docs target first")
    run_cmd(
        [sphinx, "-c", str(source_dir), "-b", "html", *opts, str(source_dir), str(build_dir)],
        capture=False,
        dry_run=dry_run,
    )
