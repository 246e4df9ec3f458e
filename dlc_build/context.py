from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

from .build_config import BuildConfig
from .lib.git import describe_last_tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildCtx:
    cfg: BuildConfig
    root: Path
    dry_run: bool = False

    def path(self, rel: str) -> Path:
        p = Path(rel)
        return p if p.is_absolute() else self.root / p

    @property
    def iso_dir(self) -> Path:
        return self.path(self.cfg.iso_dir)

    @property
    def doc_source_dir(self) -> Path:
        return self.path(self.cfg.doc_source_dir)

    @property
    def doc_build_dir(self) -> Path:
        return self.path(self.cfg.doc_build_dir)

    @property
    def venv_dir(self) -> Path:
        return self.path(self.cfg.venv_dir)

    @cached_property
    def version(self) -> str:
        v = self.cfg.version
        if v:
            return v
        v = describe_last_tag(cwd=str(self.root))
        logger.debug("Version from last git tag: %s", v)
        return v

    @property
    def release_basename(self) -> str:
        """e.g. ``dlc-3.0.0-debian-bookworm``"""
        return f"{self.cfg.image_prefix}-{self.version}-debian-{self.cfg.distribution}"

    @property
    def test_iso_path(self) -> str:
        return str(Path(self.cfg.libvirt_storage_path) / f"{self.release_basename}-{self.cfg.arch}.hybrid.iso")
