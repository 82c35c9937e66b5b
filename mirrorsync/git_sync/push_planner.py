"""Push planning: turn a divergence result into a single push action."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import SyncError, destination_modified
from .branch_utils import branch_ref
from .divergence import DivergenceResult, DivergenceState
from .remote_utils import gerrit_review_ref
from .repository_info import RemoteKind


class PushActionKind(Enum):
    """What to do with one destination branch."""
    CREATE_NEW = "create_new"
    FAST_FORWARD = "fast_forward"
    FORCE_PUSH = "force_push"
    GERRIT_SUBMIT = "gerrit_submit"
    NO_OP = "no_op"
    ABORT = "abort"


@dataclass(frozen=True)
class PushAction:
    """
    The planned operation for one branch.

    target_ref is the destination ref to push to (refs/heads/<branch> or
    refs/for/<branch>); it is None for NO_OP and ABORT. error is set only for ABORT.
    """
    kind: PushActionKind
    destination_branch: str
    target_ref: Optional[str] = None
    force: bool = False
    error: Optional[SyncError] = None

    @property
    def pushes(self) -> bool:
        return self.kind not in (PushActionKind.NO_OP, PushActionKind.ABORT)


def plan_push(
    remote_kind: RemoteKind,
    divergence: DivergenceResult,
    destination_branch: str,
    allow_force: bool = False
) -> PushAction:
    """
    Decide the push action for a branch.

    Gerrit destinations never receive direct branch updates: anything that
    needs syncing is submitted to refs/for/<branch> and review arbitrates
    conflicting history. For standard destinations a DIVERGED branch is
    force-pushed only when allow_force is set; otherwise the branch is
    aborted with DESTINATION_MODIFIED.

    Args:
        remote_kind: Classification of the destination
        divergence: Result of analyze_divergence for this branch
        destination_branch: Name of the destination branch
        allow_force: Whether destination-only commits may be discarded

    Returns:
        PushAction
    """
    logger = logging.getLogger('mirrorsync.git_sync.push_planner')
    state = divergence.state

    if state in (DivergenceState.IDENTICAL, DivergenceState.DESTINATION_AHEAD):
        action = PushAction(PushActionKind.NO_OP, destination_branch)

    elif remote_kind is RemoteKind.GERRIT:
        action = PushAction(
            PushActionKind.GERRIT_SUBMIT, destination_branch, target_ref=gerrit_review_ref(destination_branch)
        )

    elif state is DivergenceState.MISSING:
        action = PushAction(PushActionKind.CREATE_NEW, destination_branch, target_ref=branch_ref(destination_branch))

    elif state is DivergenceState.FAST_FORWARD:
        action = PushAction(PushActionKind.FAST_FORWARD, destination_branch, target_ref=branch_ref(destination_branch))

    elif allow_force:
        action = PushAction(
            PushActionKind.FORCE_PUSH, destination_branch, target_ref=branch_ref(destination_branch), force=True
        )

    else:
        action = PushAction(
            PushActionKind.ABORT,
            destination_branch,
            error=destination_modified(
                destination_branch,
                source_commit=divergence.source_commit,
                destination_commit=divergence.destination_commit,
                merge_base=divergence.merge_base
            )
        )

    logger.debug(f"Planned {action.kind.value} for {destination_branch} ({remote_kind.value}, {state.value})")
    return action
