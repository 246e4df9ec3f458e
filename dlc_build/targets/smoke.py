from __future__ import annotations

import logging
from typing import Sequence

from ..context import BuildCtx
from ..lib.checksums import collect_isos
from ..lib.libvirt import VmSpec, boot_test

logger = logging.getLogger(__name__)


class ImageSizeTarget:
    target_id = "test_imagesize"
    description = "ensure the image size is less than 2GB"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        isos = collect_isos(ctx.iso_dir)
        if not isos:
            if ctx.dry_run:
                logger.info("No ISO image in %s yet", ctx.iso_dir)
                return
            raise RuntimeError(f"No ISO image found in {ctx.iso_dir}")

        limit = ctx.cfg.max_image_size
        too_big = []
        for p in isos:
            size = p.stat().st_size
            logger.info("ISO image size: %s: %d bytes", p.name, size)
            if size > limit:
                logger.warning("ISO image %s is larger than %d bytes!", p.name, limit)
                too_big.append(p.name)
        if too_big:
            raise RuntimeError(f"ISO image size over {limit} bytes: {', '.join(too_big)}")


def _vm_spec(ctx: BuildCtx) -> VmSpec:
    vm = ctx.cfg.vm
    wait = vm.get("wait_minutes")
    return VmSpec(
        name=str(vm["name"]),
        iso_path=ctx.test_iso_path,
        storage_path=ctx.cfg.libvirt_storage_path,
        memory=int(vm["memory"]),
        vcpus=int(vm["vcpus"]),
        disk_size=int(vm["disk_size"]),
        ovmf_loader=str(vm["ovmf_loader"]),
        wait_minutes=int(wait) if wait is not None else None,
    )


# The ISO must already be in the libvirt storage path, e.g.
# rsync -avzP $BUILD_HOST:/var/debian-live-config/iso ./ && cp iso/*.iso /var/lib/libvirt/images/
class KvmBiosTarget:
    target_id = "test_kvm_bios"
    description = "test resulting live image in libvirt VM with legacy BIOS"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        boot_test(_vm_spec(ctx), "bios", dry_run=ctx.dry_run)


# Requires UEFI firmware (OVMF) enabled in the QEMU/libvirt config.
class KvmUefiTarget:
    target_id = "test_kvm_uefi"
    description = "test resulting live image in libvirt VM with UEFI"
    depends: Sequence[str] = ()

    def run(self, ctx: BuildCtx) -> None:
        boot_test(_vm_spec(ctx), "uefi", dry_run=ctx.dry_run)


class SmokeTestsTarget:
    target_id = "tests"
    description = "run all tests"
    depends: Sequence[str] = ("test_imagesize", "test_kvm_bios", "test_kvm_uefi")
    aggregate = True

    def run(self, ctx: BuildCtx) -> None:
        return None
