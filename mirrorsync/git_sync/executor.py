"""Abstract git capabilities used by the sync orchestrator."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class GitExecutor(ABC):
    """
    The git operations a sync run needs, independent of how they are executed.

    Implementations operate on one local working copy of the destination
    with two remotes: the destination (destination_remote) and the source
    (source_remote). Every failing remote operation raises SyncError.
    """

    def __init__(self, source_remote: str = "source", destination_remote: str = "origin"):
        self.source_remote = source_remote
        self.destination_remote = destination_remote

    @abstractmethod
    def prepare(self, source_url: str, destination_url: str) -> None:
        """Create or refresh the working copy and fetch both remotes' branches."""

    @abstractmethod
    def fetch(self, remote: str, refspec: Optional[str] = None, tags: bool = False) -> None:
        """Fetch from remote, including all of its tags when tags is set."""

    @abstractmethod
    def list_remote_branches(self) -> List[str]:
        """Raw `git branch -r` lines for every configured remote."""

    @abstractmethod
    def rev_parse(self, ref: str) -> Optional[str]:
        """Commit id a ref points to, or None if the ref does not exist."""

    @abstractmethod
    def common_ancestor(self, commit_a: str, commit_b: str) -> Optional[str]:
        """Best common ancestor of two commits, or None for unrelated histories."""

    @abstractmethod
    def push(self, remote: str, refspec: str, force: bool = False) -> None:
        """Push refspec ("<src>:<dst>") to remote."""

    @abstractmethod
    def list_tags(self) -> Dict[str, str]:
        """Local tags mapped to the object id they point at."""

    @abstractmethod
    def list_remote_tags(self, remote: str) -> Dict[str, str]:
        """Tags advertised by remote mapped to the object id they point at."""

    @abstractmethod
    def delete_local_tags(self) -> int:
        """Delete every local tag and return how many were removed."""

    def cleanup(self) -> None:
        """Release the working copy. The default keeps it."""
