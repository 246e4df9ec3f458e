from __future__ import annotations

import logging
from pathlib import Path

from .command import run_cmd

logger = logging.getLogger(__name__)


def detach_sign(path: Path, *, key: str | None = None, dry_run: bool = False) -> Path:
    """Write an armored detached signature next to ``path`` as ``<name>.sign``.

    The signing key must already be imported in the build user's keyring.
    """

    argv = ["gpg", "--batch", "--yes", "--detach-sign", "--armor"]
    if key:
        argv += ["--local-user", key]
    argv.append(path.name)
    run_cmd(argv, cwd=str(path.parent), dry_run=dry_run)

    asc = path.with_name(path.name + ".asc")
    sign = path.with_name(path.name + ".sign")
    if not dry_run:
        asc.replace(sign)
    logger.info("Signature written to %s", sign)
    return sign


def export_public_key(key: str, out_path: Path, *, dry_run: bool = False) -> Path:
    r = run_cmd(["gpg", "--export", "--armor", key], dry_run=dry_run)
    if dry_run:
        return out_path
    if not r.stdout.strip():
        raise RuntimeError(f"No public key exported for {key}")
    out_path.write_text(r.stdout, encoding="utf-8")
    logger.info("Public key %s exported to %s", key, out_path)
    return out_path


def verify_signature(signature: Path, payload: Path) -> bool:
    r = run_cmd(["gpg", "--verify", str(signature), str(payload)], check=False)
    return r.returncode == 0
