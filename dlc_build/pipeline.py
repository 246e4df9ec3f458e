from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Protocol, Sequence

from .state_store import is_target_completed, mark_target_completed

logger = logging.getLogger(__name__)


class Target(Protocol):
    """A named unit of work, like a phony make target."""

    target_id: str
    description: str
    depends: Sequence[str]

    def run(self, ctx: Any) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_targets: List[str]
    skipped_targets: List[str]


def resolve_targets(requested: Sequence[str], registry: Mapping[str, Target]) -> List[Target]:
    """Expand requested targets into an ordered run list.

    Prerequisites come before the target that names them (depth first, in
    declaration order). A target appears once, at its first position.
    Aggregate targets only contribute their prerequisites.
    """

    unknown = [t for t in requested if t not in registry]
    if unknown:
        raise ValueError(
            f"Unknown target(s): {', '.join(unknown)}. Valid targets: {', '.join(sorted(registry))}"
        )

    order: List[Target] = []
    seen: set[str] = set()
    visiting: set[str] = set()

    def visit(target_id: str) -> None:
        if target_id in seen:
            return
        if target_id in visiting:
            raise ValueError(f"Dependency cycle through target {target_id}")
        if target_id not in registry:
            raise ValueError(f"Unknown prerequisite target: {target_id}")
        visiting.add(target_id)
        target = registry[target_id]
        for dep in target.depends:
            visit(dep)
        visiting.discard(target_id)
        seen.add(target_id)
        if not getattr(target, "aggregate", False):
            order.append(target)

    for t in requested:
        visit(t)
    return order


def run_pipeline(
    *,
    ctx: Any,
    state: Dict[str, Any],
    targets: Sequence[Target],
    resume: bool = False,
) -> PipelineResult:
    """Run targets in order; the first failure propagates."""

    ran: List[str] = []
    skipped: List[str] = []

    for target in targets:
        state.setdefault("execution", {})["current_target"] = target.target_id

        if resume and is_target_completed(state, target.target_id):
            logger.info("Skipping target %s (already completed)", target.target_id)
            skipped.append(target.target_id)
            continue

        logger.info("Running target %s", target.target_id)
        target.run(ctx)
        if not ctx.dry_run:
            mark_target_completed(state, target.target_id)
        ran.append(target.target_id)

    state.setdefault("execution", {})["current_target"] = None
    return PipelineResult(state=state, ran_targets=ran, skipped_targets=skipped)
