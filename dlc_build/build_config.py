from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

DEFAULT_CONFIG_PATH = "dlc-build.yaml"

BUILDENV_PACKAGES = [
    "live-build",
    "make",
    "build-essential",
    "wget",
    "git",
    "unzip",
    "colordiff",
    "apt-transport-https",
    "rename",
    "ovmf",
    "rsync",
    "python3-venv",
    "gnupg",
]

DOC_PACKAGES = ["sphinx", "recommonmark", "sphinx_rtd_theme"]

# Files carrying a hardcoded version string, updated by hand before a release.
VERSION_FILES = [
    "doc/md/conf.py",
    "config/bootloaders/grub-pc/live-theme/theme.txt",
    "config/bootloaders/isolinux/live.cfg.in",
    "config/bootloaders/isolinux/menu.cfg",
    "auto/config",
    "doc/md/download-and-installation.md",
    "doc/md/index.md",
]


def _section(raw: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"config section '{name}' must be a mapping")
    return value


@dataclass(frozen=True)
class BuildConfig:
    raw: Dict[str, Any]
    env: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))

    # image

    @property
    def image_prefix(self) -> str:
        return str(_section(self.raw, "image").get("prefix") or "dlc")

    @property
    def distribution(self) -> str:
        return str(_section(self.raw, "image").get("distribution") or "bookworm")

    @property
    def arch(self) -> str:
        return str(_section(self.raw, "image").get("arch") or "amd64")

    @property
    def version(self) -> Optional[str]:
        """Release version; None means "ask git for the last tag"."""
        v = self.env.get("DLC_VERSION") or _section(self.raw, "image").get("version")
        return str(v) if v else None

    @property
    def download_extra(self) -> bool:
        return bool(_section(self.raw, "image").get("download_extra", True))

    @property
    def extra_makefile(self) -> str:
        return str(_section(self.raw, "image").get("extra_makefile") or "Makefile.extra")

    @property
    def buildenv_packages(self) -> List[str]:
        return list(_section(self.raw, "image").get("buildenv_packages") or BUILDENV_PACKAGES)

    # release

    @property
    def iso_dir(self) -> str:
        return str(_section(self.raw, "release").get("iso_dir") or "iso")

    @property
    def signing_key(self) -> str:
        return str(
            self.env.get("DLC_SIGNING_KEY")
            or _section(self.raw, "release").get("signing_key")
            or "nodiscc@gmail.com"
        )

    @property
    def public_key_name(self) -> str:
        return str(_section(self.raw, "release").get("public_key_name") or "dlc-release.key")

    @property
    def version_files(self) -> List[str]:
        return list(_section(self.raw, "release").get("version_files") or VERSION_FILES)

    # tests

    @property
    def max_image_size(self) -> int:
        value = _section(self.raw, "tests").get("max_image_size", 2147483648)
        try:
            size = int(value)
        except (TypeError, ValueError):
            raise ValueError(f"tests.max_image_size must be an integer, got {value!r}") from None
        if size <= 0:
            raise ValueError(f"tests.max_image_size must be positive, got {size}")
        return size

    @property
    def libvirt_storage_path(self) -> str:
        return str(
            self.env.get("LIBVIRT_STORAGE_PATH")
            or _section(self.raw, "tests").get("libvirt_storage_path")
            or "/var/lib/libvirt/images/"
        )

    @property
    def vm(self) -> Dict[str, Any]:
        defaults: Dict[str, Any] = {
            "name": "dlc-test",
            "memory": 3048,
            "vcpus": 2,
            "disk_size": 20,
            "ovmf_loader": "/usr/share/OVMF/OVMF_CODE.fd",
            "wait_minutes": None,
        }
        defaults.update(_section(_section(self.raw, "tests"), "vm"))
        return defaults

    # documentation

    @property
    def doc_source_dir(self) -> str:
        return str(_section(self.raw, "doc").get("source_dir") or "doc/md")

    @property
    def doc_build_dir(self) -> str:
        return str(_section(self.raw, "doc").get("build_dir") or "doc/html")

    @property
    def venv_dir(self) -> str:
        return str(_section(self.raw, "doc").get("venv_dir") or ".venv")

    @property
    def doc_packages(self) -> List[str]:
        return list(_section(self.raw, "doc").get("packages") or DOC_PACKAGES)

    @property
    def sphinx_opts(self) -> List[str]:
        return list(_section(self.raw, "doc").get("sphinx_opts") or [])

    @property
    def package_lists_dir(self) -> str:
        return str(_section(self.raw, "doc").get("package_lists_dir") or "config/package-lists")

    # issue tracker

    @property
    def gitea_url(self) -> Optional[str]:
        url = self.env.get("GITEA_URL") or _section(self.raw, "gitea").get("url")
        return str(url).rstrip("/") if url else None

    @property
    def gitea_repo(self) -> str:
        return str(_section(self.raw, "gitea").get("repo") or "baron/debian-live-config")

    @property
    def gitea_token(self) -> Optional[str]:
        return self.env.get("GITEA_API_TOKEN") or _section(self.raw, "gitea").get("token") or None

    @property
    def gitea_verify_tls(self) -> bool:
        return bool(_section(self.raw, "gitea").get("verify_tls", True))


def load_build_config(
    path: Optional[str] = None,
    *,
    root: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> BuildConfig:
    """Load the YAML build config.

    ``path=None`` reads ``dlc-build.yaml`` under ``root`` if present and
    otherwise uses the built-in defaults; an explicit path must exist.
    """

    env = dict(os.environ) if env is None else dict(env)

    if path is None:
        p = (root or Path(".")) / DEFAULT_CONFIG_PATH
        if not p.exists():
            return BuildConfig(raw={}, env=env)
    else:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("build config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p} must contain a mapping/object")

    return BuildConfig(raw=raw, env=env)
