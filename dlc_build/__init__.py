"""dlc-build: task runner for the debian-live-config ISO image.

Wraps live-build and friends:
- Build environment setup and image build (lb)
- Release packaging (SHA512SUMS, detached GPG signature, source archive)
- Smoke tests (image size, BIOS and UEFI boot in libvirt)
- Documentation generation (markdown + sphinx)
"""

__all__ = []
