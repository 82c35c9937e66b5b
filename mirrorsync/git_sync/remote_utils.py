"""Remote repository classification and URL utilities."""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..masking import mask_url
from .repository_info import RemoteKind, RepositoryEndpoint

GERRIT_REVIEW_PREFIX = "refs/for/"
GERRIT_CHANGES_PREFIX = "refs/changes/"


@dataclass(frozen=True)
class RemoteDetector:
    """A named predicate recognising one Gerrit URL signature."""
    name: str
    matches: Callable[[str], bool]


def pattern_detector(name: str, pattern: str, flags: int = 0) -> RemoteDetector:
    """Build a detector that matches when the regex is found anywhere in the URL."""
    compiled = re.compile(pattern, flags)
    return RemoteDetector(name=name, matches=lambda url: compiled.search(url) is not None)


# Heuristic only: git remotes expose no authoritative "this is Gerrit" capability.
# Order matters, the first matching detector names the classification.
GERRIT_DETECTORS: List[RemoteDetector] = [
    pattern_detector("gerrit-host", r"gerrit", re.IGNORECASE),
    pattern_detector("gerrit-ssh-port", r":29418"),
    pattern_detector("gerrit-review-path", r"/r/"),
]


def classify_remote(url: str, detectors: Optional[List[RemoteDetector]] = None) -> RemoteKind:
    """
    Classify a repository URL as a Gerrit or a standard remote.

    Never fails: a URL matching no detector is STANDARD.

    Args:
        url: Repository URL as configured (before any token injection)
        detectors: Ordered detectors to apply, GERRIT_DETECTORS by default

    Returns:
        RemoteKind of the URL
    """
    logger = logging.getLogger('mirrorsync.git_sync.remote_utils')
    detectors = GERRIT_DETECTORS if detectors is None else detectors

    for detector in detectors:
        if detector.matches(url or ""):
            logger.info(f"✓ Gerrit repository detected ({detector.name}): {mask_url(url)}")
            return RemoteKind.GERRIT

    logger.info("✓ Standard Git repository detected (GitHub, GitLab, Gitea, etc.)")
    return RemoteKind.STANDARD


def describe_endpoint(url: str) -> RepositoryEndpoint:
    """Classify a URL once and freeze the result."""
    return RepositoryEndpoint(url=url, kind=classify_remote(url))


def gerrit_review_ref(branch: str) -> str:
    """Review-queue ref that Gerrit turns into changes targeting branch."""
    return f"{GERRIT_REVIEW_PREFIX}{branch}"


def is_gerrit_synthetic_ref(name: str) -> bool:
    """True for Gerrit review artifacts that look like branches but are not."""
    return GERRIT_REVIEW_PREFIX in name or GERRIT_CHANGES_PREFIX in name


def normalize_repository_url(repository: str) -> str:
    """
    Turn a GitHub "owner/repo" slug into an HTTPS clone URL.

    Anything that already looks like a git URI (contains ':' or '@', or ends
    in '.git') is returned unchanged.
    """
    logger = logging.getLogger('mirrorsync.git_sync.remote_utils')

    if re.search(r":|@|\.git/?$", repository):
        return repository

    normalized = f"https://github.com/{repository}.git"
    logger.info(f"Repository {repository!r} is not a git URI, assuming a GitHub repository: {normalized}")
    return normalized
