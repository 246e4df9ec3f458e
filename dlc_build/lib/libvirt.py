from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .command import CommandError, run_cmd

logger = logging.getLogger(__name__)

BOOT_MODES = ("bios", "uefi")


@dataclass(frozen=True)
class VmSpec:
    name: str
    iso_path: str
    storage_path: str
    memory: int = 3048
    vcpus: int = 2
    disk_size: int = 20
    ovmf_loader: str = "/usr/share/OVMF/OVMF_CODE.fd"
    wait_minutes: Optional[int] = None

    @property
    def disk_path(self) -> str:
        return str(Path(self.storage_path) / f"{self.name}-disk0.qcow2")


def virt_install_argv(spec: VmSpec, boot: str) -> list[str]:
    if boot == "bios":
        boot_arg = "cdrom"
    elif boot == "uefi":
        boot_arg = f"loader={spec.ovmf_loader}"
    else:
        raise ValueError(f"Unknown boot mode: {boot}")

    argv = [
        "virt-install",
        "--name",
        spec.name,
        "--boot",
        boot_arg,
        "--video",
        "virtio",
        "--disk",
        f"path={spec.disk_path},format=qcow2,size={spec.disk_size},device=disk,bus=virtio,cache=none",
        "--cdrom",
        spec.iso_path,
        "--memory",
        str(spec.memory),
        "--vcpu",
        str(spec.vcpus),
    ]
    if spec.wait_minutes is not None:
        argv += ["--noautoconsole", "--wait", str(spec.wait_minutes)]
    return argv


def teardown(spec: VmSpec, *, dry_run: bool = False) -> None:
    """Destroy and undefine the test VM and delete its disk.

    Every step runs even if a previous one failed (e.g. the domain already
    shut down on its own).
    """

    for argv in (["virsh", "destroy", spec.name], ["virsh", "undefine", spec.name]):
        try:
            r = run_cmd(argv, check=False, dry_run=dry_run)
        except OSError as e:
            logger.warning("Could not run %s: %s", " ".join(argv), e)
            continue
        if r.returncode != 0:
            logger.warning("%s exited %d: %s", " ".join(argv), r.returncode, r.stderr.strip())

    disk = Path(spec.disk_path)
    if dry_run:
        logger.info("Would remove %s", disk)
        return
    try:
        disk.unlink()
        logger.info("Removed %s", disk)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove %s: %s", disk, e)


def boot_test(spec: VmSpec, boot: str, *, dry_run: bool = False) -> None:
    """Boot the ISO in a throwaway libvirt VM, then tear it down unconditionally."""

    argv = virt_install_argv(spec, boot)
    if not dry_run and not Path(spec.iso_path).is_file():
        raise RuntimeError(f"ISO image not found: {spec.iso_path}")

    logger.info("Boot test (%s): %s", boot, spec.iso_path)
    try:
        run_cmd(argv, capture=False, dry_run=dry_run)
    except CommandError:
        logger.error("virt-install failed for %s boot", boot)
        raise
    finally:
        teardown(spec, dry_run=dry_run)
