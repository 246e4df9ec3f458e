"""Shared fixtures.

External tools (lb, gpg, virt-install, git, ...) are never executed: the
``fake_run`` fixture replaces ``subprocess.run`` as seen by
``dlc_build.lib.command`` and records every argv.
"""

from __future__ import annotations

import os
import subprocess
import sys
from typing import Callable, Dict, List, Optional

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from dlc_build.build_config import BuildConfig  # noqa: E402
from dlc_build.context import BuildCtx  # noqa: E402


class FakeRun:
    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.kwargs: List[Dict] = []
        # argv prefix (tuple) -> (returncode, stdout, stderr) or a callable(argv, **kw)
        self.responses: Dict[tuple, object] = {}

    def respond(self, prefix: List[str], returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses[tuple(prefix)] = (returncode, stdout, stderr)

    def on(self, prefix: List[str], fn: Callable) -> None:
        self.responses[tuple(prefix)] = fn

    def __call__(self, argv, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        self.kwargs.append(kwargs)
        best: Optional[tuple] = None
        for prefix in self.responses:
            if tuple(argv[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        rc, out, err = 0, "", ""
        if best is not None:
            resp = self.responses[best]
            if callable(resp):
                resp = resp(argv, **kwargs)
            if resp is not None:
                rc, out, err = resp
        return subprocess.CompletedProcess(argv, rc, stdout=out, stderr=err)

    def commands(self) -> List[str]:
        return [" ".join(c) for c in self.calls]


@pytest.fixture
def fake_run(monkeypatch) -> FakeRun:
    fr = FakeRun()
    monkeypatch.setattr("dlc_build.lib.command.subprocess.run", fr)
    return fr


@pytest.fixture
def make_ctx(tmp_path):
    def _make(raw: Optional[dict] = None, *, env: Optional[dict] = None, dry_run: bool = False) -> BuildCtx:
        env = {"DLC_VERSION": "3.0.0"} if env is None else env
        cfg = BuildConfig(raw=raw or {}, env=env)
        return BuildCtx(cfg=cfg, root=tmp_path, dry_run=dry_run)

    return _make
