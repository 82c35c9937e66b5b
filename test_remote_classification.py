#!/usr/bin/env python3
"""
Tests for remote classification and repository URL normalization.

Gerrit detection is heuristic: host name, SSH port 29418 or a /r/ path.
Everything else is a standard remote.
"""

import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from mirrorsync.git_sync.remote_utils import (
    RemoteDetector,
    classify_remote,
    describe_endpoint,
    gerrit_review_ref,
    is_gerrit_synthetic_ref,
    normalize_repository_url,
    pattern_detector,
)
from mirrorsync.git_sync.repository_info import RemoteKind


def test_gerrit_host_detection():
    """A host name containing gerrit, in any case, is Gerrit."""
    print("Testing Gerrit host detection")

    assert classify_remote("https://gerrit.example.com/project") is RemoteKind.GERRIT
    assert classify_remote("https://review.GERRIT-internal.net/p.git") is RemoteKind.GERRIT
    print("  ✓ gerrit host names classified as GERRIT")


def test_gerrit_ssh_port_detection():
    print("Testing Gerrit SSH port detection")

    assert classify_remote("ssh://user@review.example.com:29418/project") is RemoteKind.GERRIT
    print("  ✓ port 29418 classified as GERRIT")


def test_gerrit_review_path_detection():
    print("Testing Gerrit /r/ path detection")

    assert classify_remote("https://review.example.com/r/project") is RemoteKind.GERRIT
    print("  ✓ /r/ path classified as GERRIT")


def test_standard_remotes():
    """GitHub, GitLab, Gitea and local paths are standard remotes."""
    print("Testing standard remote detection")

    urls = [
        "https://github.com/owner/repo.git",
        "git@github.com:owner/repo.git",
        "https://gitlab.com/group/sub/repo.git",
        "https://gitea.example.org/owner/repo",
        "/srv/git/repo.git",
        "",
    ]
    for url in urls:
        assert classify_remote(url) is RemoteKind.STANDARD, url
        print(f"  ✓ {url!r} classified as STANDARD")


def test_custom_detectors():
    """Detectors can be replaced; an empty list classifies everything as standard."""
    print("Testing custom detectors")

    assert classify_remote("https://gerrit.example.com/p", detectors=[]) is RemoteKind.STANDARD

    internal = pattern_detector("internal-review", r"^https://codereview\.corp/")
    assert classify_remote("https://codereview.corp/project", detectors=[internal]) is RemoteKind.GERRIT

    always = RemoteDetector(name="always", matches=lambda url: True)
    assert classify_remote("https://github.com/o/r.git", detectors=[always]) is RemoteKind.GERRIT
    print("  ✓ custom detectors honoured")


def test_describe_endpoint():
    endpoint = describe_endpoint("https://gerrit.example.com/p")
    assert endpoint.url == "https://gerrit.example.com/p"
    assert endpoint.kind is RemoteKind.GERRIT
    print("  ✓ endpoint keeps url and kind")


def test_gerrit_refs():
    print("Testing Gerrit ref helpers")

    assert gerrit_review_ref("main") == "refs/for/main"
    assert is_gerrit_synthetic_ref("source/refs/for/main")
    assert is_gerrit_synthetic_ref("source/refs/changes/01/1/1")
    assert not is_gerrit_synthetic_ref("source/feature/refs")
    print("  ✓ review refs recognised")


def test_normalize_repository_url():
    """Slugs become GitHub HTTPS URLs; real git URIs are untouched."""
    print("Testing repository URL normalization")

    assert normalize_repository_url("owner/repo") == "https://github.com/owner/repo.git"
    unchanged = [
        "https://gitlab.com/owner/repo.git",
        "git@github.com:owner/repo.git",
        "ssh://git@host:22/repo",
        "owner/repo.git",
    ]
    for url in unchanged:
        assert normalize_repository_url(url) == url
    print("  ✓ slugs expanded, URIs unchanged")


if __name__ == "__main__":
    print("Remote Classification Tests")
    print("=" * 50)
    test_gerrit_host_detection()
    test_gerrit_ssh_port_detection()
    test_gerrit_review_path_detection()
    test_standard_remotes()
    test_custom_detectors()
    test_describe_endpoint()
    test_gerrit_refs()
    test_normalize_repository_url()
    print("🎉 All remote classification tests passed!")
