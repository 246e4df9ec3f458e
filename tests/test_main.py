from __future__ import annotations

import json

from dlc_build.main import main
from dlc_build.targets import build_registry, format_help


def test_help_lists_targets_with_descriptions(capsys) -> None:
    assert main(["help"]) == 0
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert any(line.startswith("build               build the live system/ISO image") for line in lines)
    assert any(line.startswith("test_kvm_uefi       test resulting live image") for line in lines)
    assert len(lines) == len(build_registry())


def test_format_help_long_name() -> None:
    class Long:
        target_id = "a_very_long_target_name_x"
        description = "desc"

    assert format_help({"x": Long()}) == "a_very_long_target_name_x desc"


def test_dry_run_all_runs_nothing(tmp_path, fake_run, monkeypatch) -> None:
    monkeypatch.setenv("DLC_VERSION", "3.0.0")
    rc = main(["--root", str(tmp_path), "--dry-run", "all"])
    assert rc == 0
    assert fake_run.calls == []
    assert not (tmp_path / "build" / "dlc-build-state.json").exists()


def test_unknown_target_exits_nonzero(tmp_path) -> None:
    assert main(["--root", str(tmp_path), "bulid"]) == 1


def test_failure_is_recorded_and_resumable(tmp_path, fake_run, monkeypatch) -> None:
    monkeypatch.setenv("DLC_VERSION", "3.0.0")
    fake_run.respond(["sudo", "lb", "build"], returncode=3)

    rc = main(["--root", str(tmp_path), "--no-extra", "all"])
    assert rc == 3

    state_path = tmp_path / "build" / "dlc-build-state.json"
    state = json.loads(state_path.read_text(encoding="utf-8"))
    assert state["execution"]["completed_targets"] == ["install_buildenv"]
    assert state["execution"]["errors"][-1]["target"] == "build"
    assert state["execution"]["errors"][-1]["type"] == "CommandError"

    fake_run.responses.clear()
    fake_run.calls.clear()
    rc = main(["--root", str(tmp_path), "--no-extra", "--resume", "all"])
    assert rc == 0
    assert [c[:2] for c in fake_run.calls] == [["sudo", "lb"]] * 3

    state = json.loads(state_path.read_text(encoding="utf-8"))
    assert state["execution"]["summary"]["skipped_targets"] == ["install_buildenv"]
    assert state["execution"]["completed_targets"] == ["install_buildenv", "build"]


def test_missing_extra_makefile_fails(tmp_path, fake_run) -> None:
    assert main(["--root", str(tmp_path), "download_extra"]) == 1
    assert fake_run.calls == []


def test_help_also_lists_undocumented_make_targets(capsys) -> None:
    main(["help"])
    names = [line.split()[0] for line in capsys.readouterr().out.splitlines()]
    assert names[:1] == ["all"]
    assert "build" in names
