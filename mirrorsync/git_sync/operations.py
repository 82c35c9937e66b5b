"""Git command operations and execution logic using GitPython."""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from git import Repo, GitCommandError, InvalidGitRepositoryError

from ..masking import mask_secrets
from .error_recovery import GitErrorHandler
from .executor import GitExecutor

T = TypeVar("T")


class GitPythonExecutor(GitExecutor):
    """
    GitExecutor backed by a real working copy driven through GitPython.

    The destination is cloned into work_dir (or a temporary directory that
    cleanup() removes). Operations run once; failures are converted into
    SyncErrors by GitErrorHandler with secrets masked.
    """

    def __init__(
        self,
        work_dir: Optional[Path] = None,
        source_remote: str = "source",
        destination_remote: str = "origin",
        user_name: str = "github-sync-action",
        user_email: str = "github-sync@github.com",
        secrets: Iterable[Optional[str]] = ()
    ):
        super().__init__(source_remote, destination_remote)
        self.work_dir = work_dir
        self.user_name = user_name
        self.user_email = user_email
        self.secrets = [secret for secret in secrets if secret]
        self.error_handler = GitErrorHandler(self.secrets)
        self.logger = logging.getLogger('mirrorsync.git_sync.operations')
        self._temp_dir: Optional[Path] = None
        self._repo: Optional[Repo] = None

    @property
    def repo(self) -> Repo:
        if self._repo is None:
            raise RuntimeError("Working copy not prepared; call prepare() first")
        return self._repo

    def _run(self, operation: str, func: Callable[..., T], *args, **kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except GitCommandError as e:
            raise self.error_handler.handle_error(e, operation) from e

    def _repo_dir(self) -> Path:
        if self.work_dir is not None:
            return self.work_dir / "repo"
        if self._temp_dir is None:
            self._temp_dir = Path(tempfile.mkdtemp(prefix="mirrorsync-"))
        return self._temp_dir / "repo"

    def prepare(self, source_url: str, destination_url: str) -> None:
        repo_dir = self._repo_dir()

        self._repo = None
        if (repo_dir / ".git").exists():
            try:
                self._repo = Repo(repo_dir)
                self.logger.info(f"Reusing working copy at {repo_dir}")
            except InvalidGitRepositoryError:
                self.logger.warning(f"Working copy at {repo_dir} is not a valid repository, cloning again")
                shutil.rmtree(repo_dir, ignore_errors=True)

        if self._repo is None:
            self.logger.info(f"Cloning: {mask_secrets(destination_url, self.secrets)}")
            repo_dir.parent.mkdir(parents=True, exist_ok=True)
            self._repo = self._run(
                "clone destination", Repo.clone_from, destination_url, str(repo_dir),
                origin=self.destination_remote, no_tags=True
            )
            self.logger.info("✓ Destination repository cloned successfully")
        else:
            self._set_remote(self.destination_remote, destination_url)
            self.fetch(self.destination_remote)

        self._run("configure user", self.repo.git.config, "user.name", self.user_name)
        self._run("configure user", self.repo.git.config, "user.email", self.user_email)

        self._set_remote(self.source_remote, source_url)
        self.fetch(self.source_remote)

    def _set_remote(self, name: str, url: str) -> None:
        existing = [remote.name for remote in self.repo.remotes]
        if name in existing:
            self.logger.debug(f"Updating existing remote {name}")
            self._run(f"set remote {name}", self.repo.git.remote, "set-url", name, url)
        else:
            self._run(f"add remote {name}", self.repo.git.remote, "add", name, url)

    def fetch(self, remote: str, refspec: Optional[str] = None, tags: bool = False) -> None:
        args = ["--tags" if tags else "--no-tags", "--prune", remote]
        if refspec:
            args.append(refspec)
        self.logger.debug(f"Fetching {remote}{' tags' if tags else ''}")
        self._run(f"fetch {remote}", self.repo.git.fetch, *args)

    def list_remote_branches(self) -> List[str]:
        output = self._run("list branches", self.repo.git.branch, "-r")
        return output.splitlines()

    def rev_parse(self, ref: str) -> Optional[str]:
        try:
            return self.repo.git.rev_parse("--verify", "--quiet", f"{ref}^{{commit}}").strip() or None
        except GitCommandError:
            return None

    def common_ancestor(self, commit_a: str, commit_b: str) -> Optional[str]:
        try:
            return self.repo.git.merge_base(commit_a, commit_b).strip() or None
        except GitCommandError as e:
            # merge-base exits 1 when the histories share no commit
            if e.status == 1:
                return None
            raise self.error_handler.handle_error(e, "merge-base") from e

    def push(self, remote: str, refspec: str, force: bool = False) -> None:
        args = ["--force"] if force else []
        args.extend([remote, refspec])
        self._run(f"push {refspec}", self.repo.git.push, *args)

    def list_tags(self) -> Dict[str, str]:
        output = self._run(
            "list tags", self.repo.git.for_each_ref, "--format=%(refname:short) %(objectname)", "refs/tags"
        )
        tags = {}
        for line in output.splitlines():
            name, _, object_id = line.strip().partition(" ")
            if name and object_id:
                tags[name] = object_id
        return tags

    def list_remote_tags(self, remote: str) -> Dict[str, str]:
        output = self._run(f"list tags on {remote}", self.repo.git.ls_remote, "--tags", remote)
        tags = {}
        for line in output.splitlines():
            object_id, _, ref = line.strip().partition("\t")
            # peeled entries describe the commit behind an annotated tag, not the tag object
            if not ref.startswith("refs/tags/") or ref.endswith("^{}"):
                continue
            tags[ref[len("refs/tags/"):]] = object_id
        return tags

    def delete_local_tags(self) -> int:
        tags = list(self.list_tags())
        if tags:
            self._run("delete local tags", self.repo.git.tag, "-d", *tags)
        return len(tags)

    def cleanup(self) -> None:
        if self._repo is not None:
            if self.work_dir is not None and self.source_remote in [r.name for r in self._repo.remotes]:
                self.logger.info(f"Removing {self.source_remote} remote")
                self._repo.delete_remote(self.source_remote)
            self._repo.close()
            self._repo = None

        if self._temp_dir is not None:
            shutil.rmtree(self._temp_dir, ignore_errors=True)
            self._temp_dir = None
