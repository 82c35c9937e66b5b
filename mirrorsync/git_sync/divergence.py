"""Divergence analysis between a source ref and its destination counterpart."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .repository_info import RefSnapshot

# (commit_a, commit_b) -> best common ancestor, or None for unrelated histories
CommonAncestorFn = Callable[[str, str], Optional[str]]


class DivergenceState(Enum):
    """Relationship of a destination ref to its source ref."""
    MISSING = "missing"                      # destination branch does not exist yet
    IDENTICAL = "identical"                  # same commit
    FAST_FORWARD = "fast_forward"            # destination is a strict ancestor of source
    DESTINATION_AHEAD = "destination_ahead"  # source is a strict ancestor of destination
    DIVERGED = "diverged"                    # destination holds commits absent from source


_LABELS = {
    DivergenceState.MISSING: "is a new branch",
    DivergenceState.IDENTICAL: "is already up to date",
    DivergenceState.FAST_FORWARD: "is clean, source is ahead",
    DivergenceState.DESTINATION_AHEAD: "is ahead of source, nothing to sync",
    DivergenceState.DIVERGED: "has diverged from source",
}


@dataclass(frozen=True)
class DivergenceResult:
    """Outcome of comparing one source ref with its destination ref."""
    state: DivergenceState
    source_commit: str
    destination_commit: Optional[str] = None
    merge_base: Optional[str] = None

    @property
    def label(self) -> str:
        return _LABELS[self.state]


def analyze_divergence(
    source: RefSnapshot,
    destination: Optional[RefSnapshot],
    common_ancestor: CommonAncestorFn
) -> DivergenceResult:
    """
    Classify how destination relates to source.

    Only commit identity and ancestry are used; commit timestamps are never
    consulted because rewritten history makes them meaningless for ordering.

    Args:
        source: Snapshot of the source branch
        destination: Snapshot of the destination branch, or None if absent
        common_ancestor: Merge-base capability of the executor

    Returns:
        DivergenceResult
    """
    logger = logging.getLogger('mirrorsync.git_sync.divergence')

    if destination is None:
        return DivergenceResult(DivergenceState.MISSING, source.commit)

    if source.commit == destination.commit:
        return DivergenceResult(
            DivergenceState.IDENTICAL, source.commit, destination.commit, merge_base=source.commit
        )

    merge_base = common_ancestor(source.commit, destination.commit)
    if merge_base is None:
        logger.debug(f"No common history found between {source.name} and {destination.name}")
        return DivergenceResult(DivergenceState.DIVERGED, source.commit, destination.commit)

    if merge_base == destination.commit:
        state = DivergenceState.FAST_FORWARD
    elif merge_base == source.commit:
        state = DivergenceState.DESTINATION_AHEAD
    else:
        state = DivergenceState.DIVERGED

    logger.debug(
        f"{source.name}@{source.commit[:12]} vs {destination.name}@{destination.commit[:12]}: "
        f"merge base {merge_base[:12]} -> {state.value}"
    )
    return DivergenceResult(state, source.commit, destination.commit, merge_base)
