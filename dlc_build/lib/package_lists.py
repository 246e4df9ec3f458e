"""Render live-build package lists as markdown.

live-build reads ``config/package-lists/*.list.chroot`` (and ``.list.binary``):
one or more package names per line, ``#`` comments, and ``!`` / ``#if``
directives that are evaluated by live-build itself. The documentation only
needs the package names and the leading comment of each file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)

LIST_SUFFIXES = (".list.chroot", ".list.binary", ".list")

GENERATED_MARKER = '<!-- This file is automatically generated by "dlc-build doc_package_lists" -->'


@dataclass
class PackageList:
    name: str
    description: str = ""
    packages: List[str] = field(default_factory=list)


def _list_name(path: Path) -> str:
    for suffix in LIST_SUFFIXES:
        if path.name.endswith(suffix):
            return path.name[: -len(suffix)]
    return path.stem


def parse_package_list(path: Path) -> PackageList:
    pl = PackageList(name=_list_name(path))
    header: List[str] = []
    in_header = True

    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line:
            in_header = False
            continue
        if line.startswith("#"):
            text = line.lstrip("#").strip()
            if in_header and text and not text.startswith(("if ", "endif", "include")):
                header.append(text)
            continue
        in_header = False
        if line.startswith("!"):
            continue
        # strip trailing comments
        line = line.split("#", 1)[0]
        pl.packages.extend(line.split())

    pl.description = " ".join(header)
    return pl


def find_package_lists(directory: Path) -> List[Path]:
    if not directory.is_dir():
        raise FileNotFoundError(str(directory))
    return sorted(p for p in directory.iterdir() if p.is_file() and p.name.endswith(LIST_SUFFIXES))


def render_markdown(lists: List[PackageList]) -> str:
    out = [GENERATED_MARKER, "", "# Packages", ""]
    total = sum(len(pl.packages) for pl in lists)
    out.append(f"{total} packages in {len(lists)} lists.")
    for pl in lists:
        out += ["", f"## {pl.name}", ""]
        if pl.description:
            out += [pl.description, ""]
        if not pl.packages:
            out.append("_No packages._")
            continue
        out += [f"- `{p}`" for p in sorted(pl.packages)]
    return "\n".join(out) + "\n"


def generate_package_doc(lists_dir: Path, out_path: Path) -> Path:
    lists = [parse_package_list(p) for p in find_package_lists(lists_dir)]
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(render_markdown(lists), encoding="utf-8")
    logger.info("Wrote %s from %d package lists", out_path, len(lists))
    return out_path
