#!/usr/bin/env python3
"""
Integration tests running real git through GitPython against local bare
repositories standing in for the source and destination remotes.
"""

import sys
import tempfile
import unittest
from pathlib import Path

from git import Repo

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from mirrorsync.config import Config
from mirrorsync.errors import ErrorKind, SyncError
from mirrorsync.git_sync import BranchOutcome, GitPythonExecutor, PushActionKind, SyncOrchestrator
from mirrorsync.platform import validate_git_availability

GIT_AVAILABLE, GIT_ERROR = validate_git_availability()


def init_bare(path: Path) -> Repo:
    repo = Repo.init(path, bare=True)
    repo.git.symbolic_ref("HEAD", "refs/heads/main")
    return repo


def init_workspace(path: Path) -> Repo:
    repo = Repo.init(path)
    repo.git.symbolic_ref("HEAD", "refs/heads/main")
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
    return repo


def commit(repo: Repo, message: str) -> str:
    repo.git.commit("--allow-empty", "-m", message)
    return repo.head.commit.hexsha


@unittest.skipUnless(GIT_AVAILABLE, f"git not available: {GIT_ERROR}")
class TestGitPythonSync(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        root = Path(self.temp_dir.name)

        self.source_path = root / "source.git"
        self.destination_path = root / "destination.git"
        self.source = init_bare(self.source_path)
        self.destination = init_bare(self.destination_path)

        self.upstream = init_workspace(root / "upstream")
        self.upstream.create_remote("source", str(self.source_path))
        self.first = commit(self.upstream, "first")
        self.second = commit(self.upstream, "second")
        self.upstream.git.push("source", "main")

        self.work_root = root / "work"

    def tearDown(self):
        for repo in (self.source, self.destination, self.upstream):
            repo.close()
        self.temp_dir.cleanup()

    def config(self, **overrides) -> Config:
        values = dict(source_repo=str(self.source_path), destination_repo=str(self.destination_path))
        values.update(overrides)
        return Config(**values)

    def destination_head(self, branch: str = "main") -> str:
        return self.destination.git.rev_parse(f"refs/heads/{branch}")

    def diverge_destination(self) -> str:
        """Add a commit on the destination that the source does not have."""
        clone = Repo.clone_from(str(self.destination_path), str(Path(self.temp_dir.name) / "downstream"))
        with clone.config_writer() as writer:
            writer.set_value("user", "name", "Downstream User")
            writer.set_value("user", "email", "downstream@example.com")
        local = commit(clone, "downstream only")
        clone.git.push("origin", "main")
        clone.close()
        return local

    def test_creates_then_fast_forwards(self):
        report = SyncOrchestrator(self.config()).run()

        self.assertTrue(report.success)
        self.assertEqual(report.branch_results[0].action, PushActionKind.CREATE_NEW)
        self.assertEqual(self.destination_head(), self.second)

        third = commit(self.upstream, "third")
        self.upstream.git.push("source", "main")
        report = SyncOrchestrator(self.config()).run()

        self.assertEqual(report.branch_results[0].action, PushActionKind.FAST_FORWARD)
        self.assertEqual(self.destination_head(), third)

        report = SyncOrchestrator(self.config()).run()
        self.assertEqual(report.branch_results[0].outcome, BranchOutcome.UP_TO_DATE)

    def test_diverged_destination_is_protected(self):
        SyncOrchestrator(self.config()).run()
        downstream = self.diverge_destination()
        commit(self.upstream, "upstream only")
        self.upstream.git.push("source", "main")

        report = SyncOrchestrator(self.config()).run()

        result = report.branch_results[0]
        self.assertEqual(result.outcome, BranchOutcome.ABORTED)
        self.assertEqual(result.error.kind, ErrorKind.DESTINATION_MODIFIED)
        self.assertEqual(result.error.context["merge_base"], self.second)
        self.assertEqual(self.destination_head(), downstream)

        report = SyncOrchestrator(self.config(force_push=True)).run()
        self.assertEqual(report.branch_results[0].action, PushActionKind.FORCE_PUSH)
        self.assertEqual(self.destination_head(), self.upstream.head.commit.hexsha)

    def test_tag_pattern_sync(self):
        self.upstream.git.tag("v1.0", self.first)
        self.upstream.git.tag("-a", "v1.1", "-m", "release 1.1")
        self.upstream.git.tag("v2.0")
        self.upstream.git.push("source", "--tags")

        report = SyncOrchestrator(self.config(sync_tags=r"^v1\.")).run()

        self.assertEqual([tag.tag for tag in report.tag_results], ["v1.0", "v1.1"])
        remote_tags = self.destination.git.tag("--list").split()
        self.assertEqual(sorted(remote_tags), ["v1.0", "v1.1"])

        report = SyncOrchestrator(self.config(sync_tags=r"^v1\.")).run()
        self.assertEqual(report.tag_results, [])

    def test_persistent_work_dir_is_reused(self):
        config = self.config(work_dir=self.work_root, branch_mapping="main:mirror")
        SyncOrchestrator(config).run()
        self.assertTrue((self.work_root / "repo" / ".git").exists())

        commit(self.upstream, "third")
        self.upstream.git.push("source", "main")
        report = SyncOrchestrator(config).run()

        self.assertEqual(report.branch_results[0].action, PushActionKind.FAST_FORWARD)
        self.assertEqual(self.destination_head("mirror"), self.upstream.head.commit.hexsha)

        working_copy = Repo(self.work_root / "repo")
        self.assertEqual([remote.name for remote in working_copy.remotes], ["origin"])
        working_copy.close()

    def test_unreachable_source(self):
        report = SyncOrchestrator(self.config(source_repo=str(self.source_path.parent / "missing.git"))).run()

        self.assertEqual(report.fatal_error.kind, ErrorKind.REMOTE_UNREACHABLE)
        self.assertEqual(report.fatal_error.context["operation"], "fetch source")


@unittest.skipUnless(GIT_AVAILABLE, f"git not available: {GIT_ERROR}")
class TestGitPythonExecutor(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        root = Path(self.temp_dir.name)
        self.source_path = root / "source.git"
        self.destination_path = root / "destination.git"
        init_bare(self.source_path).close()
        init_bare(self.destination_path).close()

        upstream = init_workspace(root / "upstream")
        upstream.create_remote("source", str(self.source_path))
        self.base = commit(upstream, "base")
        upstream.git.push("source", "main")
        upstream.git.checkout("-b", "feature")
        self.feature = commit(upstream, "feature")
        upstream.git.push("source", "feature")
        upstream.close()

        self.executor = GitPythonExecutor()
        self.executor.prepare(str(self.source_path), str(self.destination_path))

    def tearDown(self):
        self.executor.cleanup()
        self.temp_dir.cleanup()

    def test_listing_and_ancestry(self):
        lines = [line.strip() for line in self.executor.list_remote_branches()]
        self.assertIn("source/main", lines)
        self.assertIn("source/feature", lines)

        self.assertEqual(self.executor.rev_parse("refs/remotes/source/main"), self.base)
        self.assertIsNone(self.executor.rev_parse("refs/remotes/origin/main"))
        self.assertEqual(self.executor.common_ancestor(self.base, self.feature), self.base)

    def test_push_failure_is_a_sync_error(self):
        with self.assertRaises(SyncError) as ctx:
            self.executor.push("origin", "refs/remotes/source/missing:refs/heads/missing")

        self.assertEqual(ctx.exception.kind, ErrorKind.REMOTE_UNREACHABLE)

    def test_cleanup_removes_temporary_working_copy(self):
        repo_dir = Path(self.executor.repo.working_tree_dir)
        self.executor.cleanup()

        self.assertFalse(repo_dir.exists())
        with self.assertRaises(RuntimeError):
            self.executor.repo


if __name__ == "__main__":
    unittest.main()
