"""
mirrorsync - Mirror branches and tags from a source repository into a destination.

Works with standard remotes (GitHub, GitLab, Gitea) and Gerrit review-queue
remotes, and refuses to overwrite destination branches that hold commits
missing from the source unless force pushing is explicitly enabled.
"""

__version__ = "1.0.0"
__author__ = "mirrorsync Team"
__description__ = "Branch and tag mirroring between git hosting backends"

from .cli import main

__all__ = ["main"]
