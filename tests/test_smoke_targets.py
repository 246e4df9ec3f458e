from __future__ import annotations

import pytest

from dlc_build.lib.command import CommandError
from dlc_build.lib.libvirt import VmSpec, virt_install_argv
from dlc_build.targets import ImageSizeTarget, KvmBiosTarget, KvmUefiTarget

ISO = "dlc-3.0.0-debian-bookworm-amd64.hybrid.iso"


def _iso(tmp_path, size: int):
    iso_dir = tmp_path / "iso"
    iso_dir.mkdir(exist_ok=True)
    p = iso_dir / ISO
    p.write_bytes(b"\0" * size)
    return p


def test_imagesize_at_limit_passes(make_ctx, tmp_path) -> None:
    _iso(tmp_path, 8)
    ImageSizeTarget().run(make_ctx({"tests": {"max_image_size": 8}}))


def test_imagesize_over_limit_fails(make_ctx, tmp_path) -> None:
    _iso(tmp_path, 9)
    with pytest.raises(RuntimeError, match="over 8 bytes"):
        ImageSizeTarget().run(make_ctx({"tests": {"max_image_size": 8}}))


def test_imagesize_checks_every_iso(make_ctx, tmp_path) -> None:
    _iso(tmp_path, 4)
    (tmp_path / "iso" / "second.iso").write_bytes(b"\0" * 16)
    with pytest.raises(RuntimeError, match="second.iso"):
        ImageSizeTarget().run(make_ctx({"tests": {"max_image_size": 8}}))


def test_imagesize_without_iso_fails(make_ctx) -> None:
    with pytest.raises(RuntimeError, match="No ISO image"):
        ImageSizeTarget().run(make_ctx())


def _vm_ctx(make_ctx, tmp_path):
    storage = tmp_path / "images"
    storage.mkdir()
    (storage / ISO).write_bytes(b"iso")
    (storage / "dlc-test-disk0.qcow2").write_bytes(b"disk")
    ctx = make_ctx(env={"DLC_VERSION": "3.0.0", "LIBVIRT_STORAGE_PATH": str(storage)})
    return ctx, storage


def test_kvm_bios_boots_and_tears_down(make_ctx, tmp_path, fake_run) -> None:
    ctx, storage = _vm_ctx(make_ctx, tmp_path)
    KvmBiosTarget().run(ctx)

    virt = fake_run.calls[0]
    assert virt[0] == "virt-install"
    assert virt[virt.index("--boot") + 1] == "cdrom"
    assert virt[virt.index("--cdrom") + 1] == str(storage / ISO)
    assert virt[virt.index("--memory") + 1] == "3048"
    assert fake_run.calls[1:] == [["virsh", "destroy", "dlc-test"], ["virsh", "undefine", "dlc-test"]]
    assert not (storage / "dlc-test-disk0.qcow2").exists()


def test_kvm_uefi_teardown_runs_after_failure(make_ctx, tmp_path, fake_run) -> None:
    ctx, storage = _vm_ctx(make_ctx, tmp_path)
    fake_run.respond(["virt-install"], returncode=1)
    fake_run.respond(["virsh", "destroy"], returncode=1, stderr="domain is not running")

    with pytest.raises(CommandError):
        KvmUefiTarget().run(ctx)

    virt = fake_run.calls[0]
    assert virt[virt.index("--boot") + 1] == "loader=/usr/share/OVMF/OVMF_CODE.fd"
    assert ["virsh", "undefine", "dlc-test"] in fake_run.calls
    assert not (storage / "dlc-test-disk0.qcow2").exists()


def test_kvm_missing_iso(make_ctx, tmp_path, fake_run) -> None:
    ctx = make_ctx(env={"DLC_VERSION": "3.0.0", "LIBVIRT_STORAGE_PATH": str(tmp_path)})
    with pytest.raises(RuntimeError, match="ISO image not found"):
        KvmBiosTarget().run(ctx)
    assert fake_run.calls == []


def test_virt_install_wait_flags() -> None:
    spec = VmSpec(name="dlc-test", iso_path="/x.iso", storage_path="/img", wait_minutes=5)
    argv = virt_install_argv(spec, "bios")
    assert argv[-3:] == ["--noautoconsole", "--wait", "5"]
    assert "path=/img/dlc-test-disk0.qcow2,format=qcow2,size=20,device=disk,bus=virtio,cache=none" in argv
    with pytest.raises(ValueError):
        virt_install_argv(spec, "coreboot")


def test_teardown_continues_when_virsh_is_missing(make_ctx, tmp_path, fake_run) -> None:
    ctx, storage = _vm_ctx(make_ctx, tmp_path)
    fake_run.respond(["virt-install"], returncode=1)

    def no_virsh(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "virsh")

    fake_run.on(["virsh"], no_virsh)

    with pytest.raises(CommandError):
        KvmBiosTarget().run(ctx)

    assert ["virsh", "destroy", "dlc-test"] in fake_run.calls
    assert ["virsh", "undefine", "dlc-test"] in fake_run.calls
    assert not (storage / "dlc-test-disk0.qcow2").exists()
