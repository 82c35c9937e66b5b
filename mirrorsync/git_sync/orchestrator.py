"""Sync orchestration: reconcile every configured branch, then tags."""

import logging
from typing import List, Optional, Sequence, Tuple

from ..config import Config
from ..credentials import inject_token, resolve_destination_token, resolve_source_token
from ..errors import ErrorKind, SyncError, branch_not_found, log_sync_error, tag_push_failed
from ..masking import mask_url
from .branch_utils import parse_branch_mapping, parse_remote_branches, remote_tracking_ref, resolve_branch
from .divergence import analyze_divergence
from .executor import GitExecutor
from .operations import GitPythonExecutor
from .push_planner import PushActionKind, plan_push
from .remote_utils import describe_endpoint, normalize_repository_url
from .repository_info import BranchMapping, RefSnapshot, RemoteKind, RepositoryEndpoint
from .tags import TagMode, TagSelection, TagSyncStrategy, compute_candidate_tags, parse_tag_mode, select_tags
from .utils import BranchOutcome, BranchResult, SyncReport, TagOutcome, TagResult

# Deterministic outcomes that need operator action rather than another attempt
_ABORT_KINDS = (ErrorKind.BRANCH_NOT_FOUND, ErrorKind.DESTINATION_MODIFIED)


class SyncOrchestrator:
    """
    Runs one sync: classify the destination, reconcile each branch mapping,
    then sync tags.

    Branches are processed sequentially in configured order (listing order
    when syncing all branches) against one working copy. A branch that
    aborts or fails is recorded and the next branch is still processed.

    Features:
    - Gerrit destinations receive review-queue pushes, never branch updates
    - Diverged standard branches are force-pushed only when force_push is set
    - Per-tag pushes, so one failing tag does not block the others
    - Dry run: every decision is made and reported, nothing is pushed
    """

    def __init__(self, config: Config, executor: Optional[GitExecutor] = None):
        self.config = config
        self.executor = executor or GitPythonExecutor(
            work_dir=config.work_dir,
            source_remote=config.source_remote_name,
            destination_remote=config.destination_remote_name,
            user_name=config.git_user_name,
            user_email=config.git_user_email,
            secrets=config.secrets
        )
        self.logger = logging.getLogger('mirrorsync.sync')
        self.endpoint: Optional[RepositoryEndpoint] = None

    @property
    def remote_kind(self) -> RemoteKind:
        return self.endpoint.kind if self.endpoint else RemoteKind.STANDARD

    def run(self) -> SyncReport:
        """Execute the sync and report per-branch and per-tag outcomes."""
        config = self.config
        source_url = normalize_repository_url(config.source_repo)
        report = SyncReport(
            source=mask_url(source_url),
            destination=mask_url(config.destination_repo),
            dry_run=config.dry_run
        )

        self.logger.info("=== Mirror Sync Started ===")
        self.logger.info(f"Source: {mask_url(source_url)} (branch: {config.source_branch})")
        self.logger.info(f"Destination: {mask_url(config.destination_repo)} (branch: {config.destination_branch})")
        self.logger.info(f"Sync all branches: {config.sync_all_branches}")
        self.logger.info(f"Sync tags: {config.sync_tags or 'false'}")

        try:
            try:
                self.endpoint = describe_endpoint(config.destination_repo)
                report.remote_kind = self.endpoint.kind.value
                mappings = self.branch_mappings()
                self.prepare(source_url)
                available = self.source_branches()
            except SyncError as e:
                report.fatal_error = e
                log_sync_error(e, "setup")
                return report

            if config.sync_all_branches:
                self.logger.info("=== Syncing All Branches ===")
                self.logger.info(f"Found {len(available)} branches to sync")
                mappings = [BranchMapping(branch, branch) for branch in available]

            for mapping in mappings:
                report.branch_results.append(self.sync_branch(mapping, available))

            try:
                report.tag_selection, report.tag_results = self.sync_tags()
            except SyncError as e:
                report.fatal_error = e
                log_sync_error(e, "tags")

            return report
        finally:
            self.executor.cleanup()
            self._log_summary(report)

    def branch_mappings(self) -> List[BranchMapping]:
        """Configured mappings; empty when every source branch is synced."""
        if self.config.sync_all_branches:
            return []
        if self.config.branch_mapping:
            return [parse_branch_mapping(self.config.branch_mapping)]
        return [BranchMapping(self.config.source_branch, self.config.destination_branch)]

    def prepare(self, source_url: str) -> None:
        """Resolve credentials, then create the working copy and fetch both remotes."""
        self.logger.info("=== Preparing Working Copy ===")
        destination_token = resolve_destination_token(self.config)
        source_token = resolve_source_token(self.config)

        self.executor.prepare(
            inject_token(source_url, source_token),
            inject_token(self.config.destination_repo, destination_token)
        )
        self.logger.info("✓ Fetch from source completed")

        if self.remote_kind is RemoteKind.GERRIT:
            self.logger.info("Push Reference: refs/for/* (Gerrit review queue)")
            self.logger.info("Note: Changes will be created in Gerrit review queue")

    def source_branches(self) -> List[str]:
        """Fresh list of source branch names, without review artifacts for Gerrit destinations."""
        return parse_remote_branches(
            self.executor.list_remote_branches(),
            self.config.source_remote_name,
            exclude_gerrit_refs=self.remote_kind is RemoteKind.GERRIT
        )

    def sync_branch(self, mapping: BranchMapping, available: Sequence[str]) -> BranchResult:
        """Resolve, analyze, plan and (unless dry run) push one branch mapping."""
        config = self.config
        source_remote = config.source_remote_name
        destination_remote = config.destination_remote_name

        self.logger.info(f"=== Syncing Branch {mapping} ===")
        result = BranchResult(mapping.source_branch, mapping.destination_branch, BranchOutcome.FAILED)

        try:
            source_branch = resolve_branch(mapping.source_branch, available, config.fallback_branches)
            destination_branch = mapping.destination_branch
            if source_branch != mapping.source_branch and mapping.is_identity:
                destination_branch = source_branch
            result.source_branch = source_branch
            result.destination_branch = destination_branch

            source_commit = self.executor.rev_parse(remote_tracking_ref(source_remote, source_branch))
            if source_commit is None:
                raise branch_not_found(source_branch, available)
            destination_commit = self.executor.rev_parse(remote_tracking_ref(destination_remote, destination_branch))
            result.source_commit = source_commit
            result.destination_commit = destination_commit

            divergence = analyze_divergence(
                RefSnapshot(f"{source_remote}/{source_branch}", source_commit),
                RefSnapshot(f"{destination_remote}/{destination_branch}", destination_commit)
                if destination_commit else None,
                self.executor.common_ancestor
            )
            result.divergence = divergence.state
            self.logger.info(f"Destination branch {destination_branch} {divergence.label}")

            action = plan_push(self.remote_kind, divergence, destination_branch, config.force_push)
            result.action = action.kind

            if action.kind is PushActionKind.ABORT:
                raise action.error

            if not action.pushes:
                result.outcome = BranchOutcome.UP_TO_DATE
                self.logger.info(f"✓ {destination_branch}: nothing to push")
                return result

            refspec = f"{remote_tracking_ref(source_remote, source_branch)}:{action.target_ref}"
            if config.dry_run:
                result.outcome = BranchOutcome.PLANNED
                self.logger.info(
                    f"[dry-run] Would {action.kind.value}: {refspec}{' (force)' if action.force else ''}"
                )
                return result

            if action.force:
                self.logger.warning(f"Force pushing {destination_branch}: destination-only commits will be discarded")
            self.logger.info(f"Pushing to: {action.target_ref}")
            self.executor.push(destination_remote, refspec, force=action.force)
            result.outcome = BranchOutcome.PUSHED
            self.logger.info(f"✓ Pushed to: {action.target_ref}")

        except SyncError as e:
            result.outcome = BranchOutcome.ABORTED if e.kind in _ABORT_KINDS else BranchOutcome.FAILED
            result.error = e
            log_sync_error(e, f"sync {mapping}")

        return result

    def sync_tags(self) -> Tuple[TagSelection, List[TagResult]]:
        """Select and push tags after all branches are done."""
        config = self.config
        mode, pattern = parse_tag_mode(config.sync_tags)

        if mode is TagMode.DISABLED:
            self.logger.info("Tag syncing disabled")
            return TagSelection(TagMode.DISABLED), []

        strategy = TagSyncStrategy(config.tag_sync_strategy)
        if mode is TagMode.ALL:
            self.logger.info("=== Syncing All Tags ===")
        else:
            self.logger.info("=== Syncing Tags Matching Pattern ===")
            self.logger.info(f"Pattern: {pattern}")

        removed = self.executor.delete_local_tags()
        self.logger.debug(f"Deleted {removed} local tags before fetching")
        self.executor.fetch(config.source_remote_name, tags=True)
        self.logger.info("✓ Tags fetched")

        candidates = compute_candidate_tags(
            self.executor.list_tags(),
            self.executor.list_remote_tags(config.destination_remote_name),
            strategy
        )
        selection = select_tags(mode, candidates, pattern)
        self.logger.info(f"Found {len(selection)} tags to sync ({strategy.value})")

        results = []
        for tag in selection.ordered():
            refspec = f"refs/tags/{tag}:refs/tags/{tag}"
            if config.dry_run:
                self.logger.info(f"[dry-run] Would push tag: {tag}")
                results.append(TagResult(tag, TagOutcome.PLANNED))
                continue

            try:
                self.executor.push(config.destination_remote_name, refspec, force=True)
            except SyncError as e:
                error = tag_push_failed(tag, e.message)
                log_sync_error(error, f"push tag {tag}", level=logging.WARNING)
                results.append(TagResult(tag, TagOutcome.FAILED, error))
                continue

            self.logger.info(f"✓ Tag pushed: {tag}")
            results.append(TagResult(tag, TagOutcome.PUSHED))

        return selection, results

    def _log_summary(self, report: SyncReport) -> None:
        for line in report.summary_lines():
            self.logger.info(line)

        if report.degraded:
            self.logger.warning(f"{len(report.failed_tags)} tag(s) failed to sync")

        if report.success:
            self.logger.info("=== Mirror Sync Completed Successfully ===")
        else:
            self.logger.error("=== Mirror Sync Failed ===")


def run_sync(config: Config, executor: Optional[GitExecutor] = None) -> SyncReport:
    """Run one sync with config and return its report."""
    return SyncOrchestrator(config, executor).run()
