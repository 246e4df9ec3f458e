from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .build_config import load_build_config
from .context import BuildCtx
from .lib.command import CommandError
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import resolve_targets, run_pipeline
from .state_store import (
    DEFAULT_STATE_PATH,
    ensure_defaults,
    load_state,
    record_error,
    reset_completed,
    save_state,
)
from .targets import build_registry, format_help

logger = logging.getLogger(__name__)

DEFAULT_TARGETS = ["all"]


def run(
    targets: Sequence[str],
    *,
    root: str = ".",
    config_path: Optional[str] = None,
    state_path: str = DEFAULT_STATE_PATH,
    log_path: str = DEFAULT_LOG_PATH,
    dry_run: bool = False,
    resume: bool = False,
    no_extra: bool = False,
    verbose: bool = False,
) -> Dict[str, Any]:
    """Run the requested targets, persisting the run record for --resume."""

    root_path = Path(root).resolve()
    actual_log_path = configure_logging(
        log_path=str(root_path / log_path),
        console_level=logging.DEBUG if verbose else logging.INFO,
    )

    try:
        cfg = load_build_config(config_path, root=root_path)
        registry = build_registry(download_extra=cfg.download_extra and not no_extra)
        plan = resolve_targets(list(targets) or DEFAULT_TARGETS, registry)
    except (ValueError, FileNotFoundError) as e:
        logger.error("%s", e)
        raise

    abs_state_path = str(root_path / state_path)
    state = ensure_defaults(load_state(abs_state_path))
    if not resume:
        reset_completed(state)
    state["execution"]["requested"] = list(targets) or DEFAULT_TARGETS
    state["execution"]["log_path"] = actual_log_path

    ctx = BuildCtx(cfg=cfg, root=root_path, dry_run=dry_run)
    logger.info("Plan: %s%s", " ".join(t.target_id for t in plan), " (dry run)" if dry_run else "")

    try:
        result = run_pipeline(ctx=ctx, state=state, targets=plan, resume=resume)
        state = result.state
        summary = state["execution"].setdefault("summary", {})
        summary["ran_targets"] = result.ran_targets
        summary["skipped_targets"] = result.skipped_targets
        return state
    except Exception as e:
        logger.exception("Target %s failed", state["execution"].get("current_target"))
        record_error(state, state["execution"].get("current_target"), e)
        raise
    finally:
        if not dry_run:
            save_state(abs_state_path, state)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dlc-build",
        description="Build, release, test and document the debian-live-config ISO image.",
    )
    p.add_argument("targets", nargs="*", metavar="target", help="targets to run (default: all; see 'help')")
    p.add_argument("--root", default=".", help="Repository root (default: current directory)")
    p.add_argument("--config", default=None, help="Path to build config (YAML, default: dlc-build.yaml if present)")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to the run record, relative to --root")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the build log, relative to --root")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("--resume", action="store_true", help="Skip targets completed by the previous run")
    p.add_argument("--no-extra", action="store_true", help="Build without third-party software/dotfiles")
    p.add_argument("-v", "--verbose", action="store_true", help="Show command output on the console")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.targets == ["help"]:
        print(format_help(build_registry()))
        return 0

    try:
        run(
            args.targets,
            root=args.root,
            config_path=args.config,
            state_path=args.state,
            log_path=args.log,
            dry_run=bool(args.dry_run),
            resume=bool(args.resume),
            no_extra=bool(args.no_extra),
            verbose=bool(args.verbose),
        )
    except CommandError as e:
        return e.returncode or 1
    except (RuntimeError, ValueError, OSError, httpx.HTTPError):
        return 1
    return 0
