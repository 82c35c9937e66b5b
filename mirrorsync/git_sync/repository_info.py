"""Repository endpoint, branch mapping and ref data structures."""

from dataclasses import dataclass
from enum import Enum

from ..errors import invalid_branch_mapping


class RemoteKind(Enum):
    """Push model of a destination remote."""
    STANDARD = "standard"  # direct branch refs (GitHub, GitLab, Gitea, plain git)
    GERRIT = "gerrit"      # review queue via refs/for/<branch>


@dataclass(frozen=True)
class RepositoryEndpoint:
    """A repository URL together with its classified push model."""
    url: str
    kind: RemoteKind


@dataclass(frozen=True)
class BranchMapping:
    """Which source branch is mirrored onto which destination branch."""
    source_branch: str
    destination_branch: str

    def __post_init__(self):
        if not self.source_branch or not self.destination_branch:
            raise invalid_branch_mapping(f"{self.source_branch}:{self.destination_branch}")

    @property
    def is_identity(self) -> bool:
        return self.source_branch == self.destination_branch

    def __str__(self) -> str:
        return f"{self.source_branch}:{self.destination_branch}"


@dataclass(frozen=True)
class RefSnapshot:
    """A named ref and the commit it pointed to when it was read."""
    name: str
    commit: str
