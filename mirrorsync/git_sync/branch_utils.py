"""Branch listing, resolution and mapping utilities."""

import logging
from typing import Iterable, List, Sequence

from ..config import DEFAULT_FALLBACK_BRANCHES
from ..errors import branch_not_found, invalid_branch_mapping
from .remote_utils import is_gerrit_synthetic_ref
from .repository_info import BranchMapping


def parse_remote_branches(lines: Iterable[str], remote: str, exclude_gerrit_refs: bool = False) -> List[str]:
    """
    Extract branch names for one remote from `git branch -r` output.

    Strips the "<remote>/" prefix, drops "HEAD -> ..." alias lines and, for
    Gerrit, the refs/for/* and refs/changes/* review artifacts. Order of the
    listing is preserved and duplicates are dropped.
    """
    prefix = f"{remote}/"
    branches = []

    for raw_line in lines:
        line = raw_line.strip()
        if not line.startswith(prefix) or "->" in line:
            continue
        if exclude_gerrit_refs and is_gerrit_synthetic_ref(line):
            continue

        name = line[len(prefix):]
        if name and name not in branches:
            branches.append(name)

    return branches


def resolve_branch(
    requested: str,
    available: Sequence[str],
    fallback_order: Sequence[str] = DEFAULT_FALLBACK_BRANCHES
) -> str:
    """
    Resolve the branch to sync.

    An exact match always wins. Otherwise the first fallback branch present
    in available is used.

    Raises:
        SyncError: BRANCH_NOT_FOUND listing every available branch
    """
    logger = logging.getLogger('mirrorsync.git_sync.branch_utils')

    if requested in available:
        return requested

    for branch in fallback_order:
        if branch in available:
            logger.info(f"Branch {requested!r} not found, using fallback branch: {branch}")
            return branch

    raise branch_not_found(requested, available, fallback_order)


def parse_branch_mapping(value: str) -> BranchMapping:
    """
    Parse "SOURCE_BRANCH:DESTINATION_BRANCH".

    Raises:
        SyncError: INVALID_BRANCH_MAPPING if either side is empty or there is more than one colon
    """
    parts = (value or "").split(":")
    if len(parts) != 2:
        raise invalid_branch_mapping(value)

    source, destination = (part.strip() for part in parts)
    if not source or not destination:
        raise invalid_branch_mapping(value)

    return BranchMapping(source_branch=source, destination_branch=destination)


def remote_tracking_ref(remote: str, branch: str) -> str:
    return f"refs/remotes/{remote}/{branch}"


def branch_ref(branch: str) -> str:
    return f"refs/heads/{branch}"
