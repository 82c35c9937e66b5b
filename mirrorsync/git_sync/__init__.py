"""Branch and tag reconciliation for mirrorsync."""

from .branch_utils import parse_branch_mapping, parse_remote_branches, resolve_branch
from .divergence import DivergenceResult, DivergenceState, analyze_divergence
from .executor import GitExecutor
from .memory_executor import CommitGraph, InMemoryGitExecutor, InMemoryRemote
from .operations import GitPythonExecutor
from .orchestrator import SyncOrchestrator, run_sync
from .push_planner import PushAction, PushActionKind, plan_push
from .remote_utils import classify_remote, normalize_repository_url
from .repository_info import BranchMapping, RefSnapshot, RemoteKind, RepositoryEndpoint
from .tags import TagMode, TagSelection, TagSyncStrategy, select_tags
from .utils import BranchOutcome, BranchResult, SyncReport, TagOutcome, TagResult

__all__ = [
    'BranchMapping',
    'BranchOutcome',
    'BranchResult',
    'CommitGraph',
    'DivergenceResult',
    'DivergenceState',
    'GitExecutor',
    'GitPythonExecutor',
    'InMemoryGitExecutor',
    'InMemoryRemote',
    'PushAction',
    'PushActionKind',
    'RefSnapshot',
    'RemoteKind',
    'RepositoryEndpoint',
    'SyncOrchestrator',
    'SyncReport',
    'TagMode',
    'TagOutcome',
    'TagResult',
    'TagSelection',
    'TagSyncStrategy',
    'analyze_divergence',
    'classify_remote',
    'normalize_repository_url',
    'parse_branch_mapping',
    'parse_remote_branches',
    'plan_push',
    'resolve_branch',
    'run_sync',
    'select_tags',
]
