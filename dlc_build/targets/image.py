from __future__ import annotations

import logging
from typing import Sequence

from ..context import BuildCtx
from ..lib.command import run_cmd

logger = logging.getLogger(__name__)


class InstallBuildenvTarget:
    target_id = "install_buildenv"
    description = "install packages required to build the image"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        run_cmd(
            ["apt", "-y", "install", *ctx.cfg.buildenv_packages],
            sudo=True,
            capture=False,
            dry_run=ctx.dry_run,
        )


class DownloadExtraTarget:
    target_id = "download_extra"
    description = "download third-party components"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        makefile = ctx.path(ctx.cfg.extra_makefile)
        if not ctx.dry_run and not makefile.is_file():
            raise RuntimeError(f"Third-party makefile not found: {makefile}")
        run_cmd(["make", "-f", str(makefile)], cwd=str(ctx.root), capture=False, dry_run=ctx.dry_run)


class CleanTarget:
    target_id = "clean"
    description = "clear all caches, only required when changing the mirrors/architecture config"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        run_cmd(["lb", "clean", "--all"], sudo=True, cwd=str(ctx.root), dry_run=ctx.dry_run)
        makefile = ctx.path(ctx.cfg.extra_makefile)
        if makefile.is_file() or ctx.dry_run:
            run_cmd(["make", "-f", str(makefile), "clean"], cwd=str(ctx.root), dry_run=ctx.dry_run)
        else:
            logger.info("No %s, skipping third-party cleanup", makefile.name)


class BuildTarget:
    target_id = "build"
    description = "build the live system/ISO image"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        for sub in (["clean", "--all"], ["config"], ["build"]):
            run_cmd(["lb", *sub], sudo=True, cwd=str(ctx.root), capture=False, dry_run=ctx.dry_run)


class AllTarget:
    target_id = "all"
    aggregate = True

    def __init__(self, *, download_extra: bool = True) -> None:
        deps = ["install_buildenv"]
        if download_extra:
            deps.append("download_extra")
        deps.append("build")
        self.depends: Sequence[str] = tuple(deps)
        self.description = "install the build environment and build the image" + (
            " (with third-party components)" if download_extra else ""
        )

    def run(self, ctx: BuildCtx) -> None:
        return None
