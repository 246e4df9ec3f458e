from __future__ import annotations

import logging
from typing import Sequence

from ..context import BuildCtx
from ..lib import checksums, gpg
from ..lib.git import archive_zip, head_revision, source_archive_name

logger = logging.getLogger(__name__)


class BumpVersionTarget:
    target_id = "bump_version"
    description = "bump all version indicators before a new release"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        files = ctx.cfg.version_files
        logger.info("Please set version to %s in %s", ctx.version, " ".join(files))
        for rel in files:
            p = ctx.path(rel)
            if not p.is_file():
                logger.warning("Version file missing: %s", rel)
            elif ctx.version not in p.read_text(encoding="utf-8", errors="replace"):
                logger.warning("Not yet at %s: %s", ctx.version, rel)


class ChecksumsTarget:
    target_id = "checksums"
    description = "generate checksums of the resulting ISO image"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        isos = checksums.move_and_rename_isos(
            ctx.root,
            ctx.iso_dir,
            prefix=ctx.cfg.image_prefix,
            version=ctx.version,
            distribution=ctx.cfg.distribution,
            dry_run=ctx.dry_run,
        )
        if not isos:
            raise RuntimeError(f"No ISO image found in {ctx.root} or {ctx.iso_dir}")
        sums = ctx.iso_dir / checksums.SUMS_NAME
        if ctx.dry_run:
            logger.info("Would write %s for %s", sums, ", ".join(p.name for p in isos))
            return
        checksums.write_sha512sums(isos, sums)


class SignChecksumsTarget:
    target_id = "sign_checksums"
    description = "sign checksums with a GPG private key"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        sums = ctx.iso_dir / checksums.SUMS_NAME
        if not ctx.dry_run and not sums.is_file():
            raise RuntimeError(f"{sums} not found; run the checksums target first")
        if not ctx.dry_run:
            stale = checksums.verify_sha512sums(sums)
            if stale:
                raise RuntimeError(f"{sums} does not match: {', '.join(stale)}; run the checksums target again")

        key = ctx.cfg.signing_key
        signature = gpg.detach_sign(sums, key=key, dry_run=ctx.dry_run)
        if not ctx.dry_run and not gpg.verify_signature(signature, sums):
            raise RuntimeError(f"Signature verification failed for {signature}")
        gpg.export_public_key(key, ctx.iso_dir / ctx.cfg.public_key_name, dry_run=ctx.dry_run)


class ReleaseArchiveTarget:
    target_id = "release_archive"
    description = "generate a source code archive"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        revision = head_revision(cwd=str(ctx.root))
        out = ctx.root / source_archive_name(ctx.root, revision)
        archive_zip(str(out), cwd=str(ctx.root), dry_run=ctx.dry_run)
        logger.info("Source archive: %s", out)


class ReleaseTarget:
    target_id = "release"
    description = "generate release files"
    depends: Sequence[str] = ("checksums", "sign_checksums", "release_archive")
    aggregate = True

    def run(self, ctx: BuildCtx) -> None:
        return None
