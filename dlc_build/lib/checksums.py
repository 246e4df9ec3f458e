from __future__ import annotations

import hashlib
import logging
import shutil
from pathlib import Path
from typing import Dict, List

logger = logging.getLogger(__name__)

SUMS_NAME = "SHA512SUMS"
_CHUNK = 1024 * 1024


def collect_isos(*dirs: Path) -> List[Path]:
    out: List[Path] = []
    for d in dirs:
        if d.is_dir():
            out.extend(p for p in sorted(d.glob("*.iso")) if p.is_file())
    return out


def release_name(name: str, *, prefix: str, version: str, distribution: str) -> str:
    """Map a live-build output name to its release name.

    ``live-image-amd64.hybrid.iso`` -> ``dlc-3.0.0-debian-bookworm-amd64.hybrid.iso``.
    Names without ``live-image`` are kept as-is.
    """

    return name.replace("live-image", f"{prefix}-{version}-debian-{distribution}", 1)


def move_and_rename_isos(
    src_dir: Path,
    iso_dir: Path,
    *,
    prefix: str,
    version: str,
    distribution: str,
    dry_run: bool = False,
) -> List[Path]:
    """Move ``*.iso`` from src_dir into iso_dir, renaming every ISO in iso_dir."""

    if not dry_run:
        iso_dir.mkdir(parents=True, exist_ok=True)

    sources = collect_isos(src_dir)
    if iso_dir.resolve() != src_dir.resolve():
        sources += collect_isos(iso_dir)

    out: List[Path] = []
    for p in sources:
        dst = iso_dir / release_name(p.name, prefix=prefix, version=version, distribution=distribution)
        if dst != p:
            logger.info("Moving %s -> %s", p, dst)
            if not dry_run:
                shutil.move(str(p), str(dst))
        if dst not in out:
            out.append(dst)
    return sorted(out)


def sha512_file(path: Path) -> str:
    h = hashlib.sha512()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def write_sha512sums(files: List[Path], out_path: Path) -> Path:
    """Write digests in ``sha512sum`` format: ``<hex>  <name>`` per line."""

    lines = [f"{sha512_file(p)}  {p.name}" for p in files]
    out_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info("Wrote %s (%d entries)", out_path, len(lines))
    return out_path


def read_sha512sums(path: Path) -> Dict[str, str]:
    sums: Dict[str, str] = {}
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        if not line.strip():
            continue
        digest, sep, name = line.partition("  ")
        if not sep or len(digest) != 128:
            raise ValueError(f"{path}:{lineno}: malformed checksum line")
        # sha512sum marks binary mode with a leading '*'
        sums[name.lstrip("*")] = digest.lower()
    return sums


def verify_sha512sums(path: Path) -> List[str]:
    """Return the names whose digest does not match (missing files included)."""

    bad: List[str] = []
    for name, digest in read_sha512sums(path).items():
        f = path.parent / name
        if not f.is_file() or sha512_file(f) != digest:
            bad.append(name)
    return bad
