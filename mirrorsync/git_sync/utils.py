"""Result types reported by a sync run."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import SyncError
from .divergence import DivergenceState
from .push_planner import PushActionKind
from .tags import TagSelection


class BranchOutcome(Enum):
    PUSHED = "pushed"
    UP_TO_DATE = "up_to_date"
    PLANNED = "planned"    # dry run: the push was decided but not executed
    ABORTED = "aborted"
    FAILED = "failed"


class TagOutcome(Enum):
    PUSHED = "pushed"
    PLANNED = "planned"
    FAILED = "failed"


@dataclass
class BranchResult:
    """Outcome of syncing one branch mapping."""
    source_branch: str
    destination_branch: str
    outcome: BranchOutcome
    action: Optional[PushActionKind] = None
    divergence: Optional[DivergenceState] = None
    source_commit: Optional[str] = None
    destination_commit: Optional[str] = None
    error: Optional[SyncError] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome not in (BranchOutcome.ABORTED, BranchOutcome.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "branch": self.destination_branch,
            "source_branch": self.source_branch,
            "action": self.action.value if self.action else None,
            "outcome": self.outcome.value,
            "divergence": self.divergence.value if self.divergence else None,
            "source_commit": self.source_commit,
            "destination_commit": self.destination_commit,
        }
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result


@dataclass
class TagResult:
    """Outcome of pushing one tag."""
    tag: str
    outcome: TagOutcome
    error: Optional[SyncError] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"tag": self.tag, "outcome": self.outcome.value}
        if self.error is not None:
            result["error"] = self.error.to_dict()
        return result


@dataclass
class SyncReport:
    """
    Everything one run did.

    success is False when a required phase failed (fatal_error) or any
    branch aborted or failed. Failed tag pushes only mark the run degraded.
    """
    source: str
    destination: str
    remote_kind: Optional[str] = None
    dry_run: bool = False
    branch_results: List[BranchResult] = field(default_factory=list)
    tag_selection: Optional[TagSelection] = None
    tag_results: List[TagResult] = field(default_factory=list)
    fatal_error: Optional[SyncError] = None

    @property
    def failed_branches(self) -> List[BranchResult]:
        return [result for result in self.branch_results if not result.succeeded]

    @property
    def failed_tags(self) -> List[TagResult]:
        return [result for result in self.tag_results if result.outcome is TagOutcome.FAILED]

    @property
    def success(self) -> bool:
        return self.fatal_error is None and not self.failed_branches

    @property
    def degraded(self) -> bool:
        return bool(self.failed_tags)

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "success": self.success,
            "degraded": self.degraded,
            "dry_run": self.dry_run,
            "source": self.source,
            "destination": self.destination,
            "remote_kind": self.remote_kind,
            "branches": [branch.to_dict() for branch in self.branch_results],
            "tag_mode": self.tag_selection.mode.value if self.tag_selection is not None else None,
            "tags": [tag.to_dict() for tag in self.tag_results],
        }
        if self.fatal_error is not None:
            result["error"] = self.fatal_error.to_dict()
        return result

    def summary_lines(self) -> List[str]:
        lines = []
        for branch in self.branch_results:
            action = branch.action.value if branch.action else "-"
            lines.append(
                f"branch {branch.source_branch} -> {branch.destination_branch}: {action} ({branch.outcome.value})"
            )
        for tag in self.tag_results:
            lines.append(f"tag {tag.tag}: {tag.outcome.value}")
        return lines
