"""In-memory GitExecutor over a synthetic commit graph."""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..errors import remote_unreachable
from .executor import GitExecutor
from .remote_utils import GERRIT_REVIEW_PREFIX


class CommitGraph:
    """Commit ids and their parents; ancestry is the only ordering it knows."""

    def __init__(self):
        self._parents: Dict[str, Tuple[str, ...]] = {}

    def commit(self, commit_id: str, *parents: str) -> str:
        for parent in parents:
            if parent not in self._parents:
                raise KeyError(f"Unknown parent commit {parent}")
        self._parents[commit_id] = tuple(parents)
        return commit_id

    def chain(self, base: Optional[str], *commit_ids: str) -> str:
        """Append a linear run of commits on top of base and return the tip."""
        tip = base
        for commit_id in commit_ids:
            tip = self.commit(commit_id, *([tip] if tip else []))
        return tip

    def __contains__(self, commit_id: str) -> bool:
        return commit_id in self._parents

    def ancestors(self, commit_id: str) -> Set[str]:
        """All commits reachable from commit_id, itself included."""
        seen = set()
        queue = deque([commit_id])
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen.add(current)
            queue.extend(self._parents.get(current, ()))
        return seen

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        return ancestor in self.ancestors(descendant)

    def merge_base(self, commit_a: str, commit_b: str) -> Optional[str]:
        common = self.ancestors(commit_a) & self.ancestors(commit_b)
        if not common:
            return None
        best = [
            candidate for candidate in common
            if not any(other != candidate and self.is_ancestor(candidate, other) for other in common)
        ]
        return sorted(best)[0]


@dataclass
class InMemoryRemote:
    """Branches, tags and (for Gerrit) submitted review refs of one remote."""
    url: str = ""
    branches: Dict[str, str] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)
    reviews: List[Tuple[str, str]] = field(default_factory=list)  # (target branch, commit)


class InMemoryGitExecutor(GitExecutor):
    """
    GitExecutor whose remotes live in memory.

    Mirrors git's behaviour where the orchestrator can observe it: fetched
    remote-tracking refs, non-fast-forward rejection without force, and
    Gerrit review refs that never move branches. Failures can be injected
    per remote (unreachable) or per refspec (failing pushes).
    """

    def __init__(
        self,
        graph: CommitGraph,
        source: InMemoryRemote,
        destination: InMemoryRemote,
        source_remote: str = "source",
        destination_remote: str = "origin"
    ):
        super().__init__(source_remote, destination_remote)
        self.graph = graph
        self.remotes = {source_remote: source, destination_remote: destination}
        self.unreachable: Set[str] = set()
        self.failing_refspecs: Set[str] = set()
        self.pushes: List[Tuple[str, str, bool]] = []
        self.prepared_urls: Optional[Tuple[str, str]] = None
        self.cleaned_up = False
        self._tracking: Dict[str, Dict[str, str]] = {}
        self._local_tags: Dict[str, str] = {}

    def _remote(self, name: str) -> InMemoryRemote:
        if name in self.unreachable:
            raise remote_unreachable(f"Could not resolve host for remote '{name}'", f"fetch {name}")
        if name not in self.remotes:
            raise remote_unreachable(f"'{name}' does not appear to be a git repository", f"fetch {name}")
        return self.remotes[name]

    def prepare(self, source_url: str, destination_url: str) -> None:
        self.prepared_urls = (source_url, destination_url)
        destination = self._remote(self.destination_remote)
        self._tracking = {self.destination_remote: dict(destination.branches)}
        self._local_tags = dict(destination.tags)
        self.fetch(self.source_remote)

    def fetch(self, remote: str, refspec: Optional[str] = None, tags: bool = False) -> None:
        state = self._remote(remote)
        self._tracking[remote] = dict(state.branches)
        if tags:
            for name, target in state.tags.items():
                self._local_tags.setdefault(name, target)

    def list_remote_branches(self) -> List[str]:
        lines = []
        for remote, branches in self._tracking.items():
            if "main" in branches:
                lines.append(f"  {remote}/HEAD -> {remote}/main")
            lines.extend(f"  {remote}/{name}" for name in branches)
        return lines

    def rev_parse(self, ref: str) -> Optional[str]:
        if ref.startswith("refs/remotes/"):
            remote, _, branch = ref[len("refs/remotes/"):].partition("/")
            return self._tracking.get(remote, {}).get(branch)
        if ref.startswith("refs/tags/"):
            return self._local_tags.get(ref[len("refs/tags/"):])
        return None

    def common_ancestor(self, commit_a: str, commit_b: str) -> Optional[str]:
        return self.graph.merge_base(commit_a, commit_b)

    def push(self, remote: str, refspec: str, force: bool = False) -> None:
        operation = f"push {refspec}"
        state = self._remote(remote)
        if refspec in self.failing_refspecs:
            raise remote_unreachable("The remote end hung up unexpectedly", operation)

        source_ref, _, target_ref = refspec.partition(":")
        commit = self.rev_parse(source_ref)
        if commit is None:
            raise remote_unreachable(f"src refspec {source_ref} does not match any", operation)

        if target_ref.startswith(GERRIT_REVIEW_PREFIX):
            state.reviews.append((target_ref[len(GERRIT_REVIEW_PREFIX):], commit))
        elif target_ref.startswith("refs/heads/"):
            branch = target_ref[len("refs/heads/"):]
            current = state.branches.get(branch)
            if current and not force and not self.graph.is_ancestor(current, commit):
                raise remote_unreachable(f"! [rejected] {branch} (non-fast-forward)", operation)
            state.branches[branch] = commit
            self._tracking.setdefault(remote, {})[branch] = commit
        elif target_ref.startswith("refs/tags/"):
            tag = target_ref[len("refs/tags/"):]
            if tag in state.tags and state.tags[tag] != commit and not force:
                raise remote_unreachable(f"! [rejected] {tag} (already exists)", operation)
            state.tags[tag] = commit
        else:
            raise remote_unreachable(f"unsupported target ref {target_ref}", operation)

        self.pushes.append((remote, refspec, force))

    def list_tags(self) -> Dict[str, str]:
        return dict(self._local_tags)

    def list_remote_tags(self, remote: str) -> Dict[str, str]:
        return dict(self._remote(remote).tags)

    def delete_local_tags(self) -> int:
        count = len(self._local_tags)
        self._local_tags.clear()
        return count

    def cleanup(self) -> None:
        self.cleaned_up = True
