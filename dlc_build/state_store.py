from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = "build/dlc-build-state.json"


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"yaml", "yml"}:
        return "yaml"
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    text = p.read_text(encoding="utf-8")
    if _detect_format(p) == "yaml":
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text) if text.strip() else {}

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")
    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) == "yaml":
        p.write_text(yaml.safe_dump(state, sort_keys=False), encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys without overriding recorded values."""

    exe = state.setdefault("execution", {})
    exe.setdefault("current_target", None)
    exe.setdefault("completed_targets", [])
    exe.setdefault("errors", [])
    return state


def reset_completed(state: Dict[str, Any]) -> None:
    state.setdefault("execution", {})["completed_targets"] = []


def mark_target_completed(state: Dict[str, Any], target_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_targets", [])
    if target_id not in completed:
        completed.append(target_id)


def is_target_completed(state: Dict[str, Any], target_id: str) -> bool:
    exe = state.get("execution") or {}
    return target_id in (exe.get("completed_targets") or [])


def record_error(state: Dict[str, Any], target_id: str | None, error: BaseException) -> None:
    state.setdefault("execution", {}).setdefault("errors", []).append(
        {
            "target": target_id,
            "error": str(error),
            "type": type(error).__name__,
            "ts": time.time(),
        }
    )
