from __future__ import annotations

from typing import Dict, List

from ..pipeline import Target
from .docs import (
    DocHtmlTarget,
    DocMdTarget,
    DocPackageListsTarget,
    DocTarget,
    InstallDevDocsTarget,
    UpdateTodoTarget,
)
from .image import AllTarget, BuildTarget, CleanTarget, DownloadExtraTarget, InstallBuildenvTarget
from .release import (
    BumpVersionTarget,
    ChecksumsTarget,
    ReleaseArchiveTarget,
    ReleaseTarget,
    SignChecksumsTarget,
)
from .smoke import ImageSizeTarget, KvmBiosTarget, KvmUefiTarget, SmokeTestsTarget

__all__ = [
    "AllTarget",
    "BuildTarget",
    "BumpVersionTarget",
    "ChecksumsTarget",
    "CleanTarget",
    "DocHtmlTarget",
    "DocMdTarget",
    "DocPackageListsTarget",
    "DocTarget",
    "DownloadExtraTarget",
    "HelpTarget",
    "ImageSizeTarget",
    "InstallBuildenvTarget",
    "InstallDevDocsTarget",
    "KvmBiosTarget",
    "KvmUefiTarget",
    "ReleaseArchiveTarget",
    "ReleaseTarget",
    "SignChecksumsTarget",
    "SmokeTestsTarget",
    "UpdateTodoTarget",
    "build_registry",
    "format_help",
]

HELP_COLUMN = 20


def format_help(registry: Dict[str, Target]) -> str:
    lines = []
    for t in registry.values():
        name = t.target_id
        pad = HELP_COLUMN - len(name) if len(name) < HELP_COLUMN else 1
        lines.append(f"{name}{' ' * pad}{t.description}")
    return "\n".join(lines)


class HelpTarget:
    target_id = "help"
    description = "generate list of targets with descriptions"
    depends = ()

    def __init__(self, registry: Dict[str, Target]) -> None:
        self.registry = registry

    def run(self, ctx) -> None:
        print(format_help(self.registry))


def build_targets(*, download_extra: bool = True) -> List[Target]:
    return [
        AllTarget(download_extra=download_extra),
        DownloadExtraTarget(),
        InstallBuildenvTarget(),
        CleanTarget(),
        BuildTarget(),
        BumpVersionTarget(),
        ReleaseTarget(),
        ChecksumsTarget(),
        SignChecksumsTarget(),
        ReleaseArchiveTarget(),
        SmokeTestsTarget(),
        ImageSizeTarget(),
        KvmBiosTarget(),
        KvmUefiTarget(),
        UpdateTodoTarget(),
        DocTarget(),
        InstallDevDocsTarget(),
        DocMdTarget(),
        DocPackageListsTarget(),
        DocHtmlTarget(),
    ]


def build_registry(*, download_extra: bool = True) -> Dict[str, Target]:
    registry: Dict[str, Target] = {t.target_id: t for t in build_targets(download_extra=download_extra)}
    registry["help"] = HelpTarget(registry)
    return registry
