"""Error handling framework for mirrorsync."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Iterable, List, Optional


class ErrorKind(Enum):
    """Kinds of sync errors, each requiring a different operator response."""
    AUTHENTICATION_MISSING = "authentication_missing"
    BRANCH_NOT_FOUND = "branch_not_found"
    DESTINATION_MODIFIED = "destination_modified"
    REMOTE_UNREACHABLE = "remote_unreachable"
    INVALID_BRANCH_MAPPING = "invalid_branch_mapping"
    TAG_PUSH_FAILED = "tag_push_failed"


@dataclass
class ErrorResponse:
    """Standardized error payload used in reports and tool responses."""
    error: str
    error_code: str
    message: str
    timestamp: str
    details: Optional[str] = None
    resolution: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert error response to dictionary format."""
        result = {
            "error": self.error,
            "error_code": self.error_code,
            "message": self.message,
            "timestamp": self.timestamp
        }
        if self.details:
            result["details"] = self.details
        if self.resolution:
            result["resolution"] = self.resolution
        if self.context:
            result["context"] = self.context
        return result


class SyncError(Exception):
    """
    A sync failure with enough context for an operator to act on it.

    Attributes:
        kind: The ErrorKind of the failure
        message: One-line summary
        details: Longer explanation of what was found
        resolution: Suggested fix
        context: Structured diagnostics (available branches, commits, ...)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: Optional[str] = None,
        resolution: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details
        self.resolution = resolution
        self.context = context or {}
        self.timestamp = datetime.now().isoformat()

    @property
    def error_code(self) -> str:
        return self.kind.name

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.kind.value.replace("_", " ").capitalize(),
            error_code=self.error_code,
            message=self.message,
            timestamp=self.timestamp,
            details=self.details,
            resolution=self.resolution,
            context=self.context or None
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.to_response().to_dict()

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(self.details)
        if self.resolution:
            parts.append(self.resolution)
        return " ".join(parts)


def _format_available(available: Iterable[str]) -> str:
    names = list(available)
    return ", ".join(names) if names else "none"


def branch_not_found(requested: str, available: Iterable[str], fallback_order: Iterable[str] = ()) -> SyncError:
    """Build a BRANCH_NOT_FOUND error that always lists what was available."""
    available = list(available)
    fallback_order = list(fallback_order)
    if fallback_order:
        message = (
            f'Branch "{requested}" not found, and no fallback ({"/".join(fallback_order)}) available. '
            f"Available branches: {_format_available(available)}"
        )
    else:
        message = (
            f'Branch "{requested}" not found in source repository. '
            f"Available branches: {_format_available(available)}"
        )
    return SyncError(
        ErrorKind.BRANCH_NOT_FOUND,
        message,
        resolution="Check the configured branch name or add the branch to the source repository.",
        context={
            "requested": requested,
            "available": available,
            "fallback_order": fallback_order
        }
    )


def destination_modified(
    branch: str,
    source_commit: Optional[str] = None,
    destination_commit: Optional[str] = None,
    merge_base: Optional[str] = None
) -> SyncError:
    """Build the DESTINATION_MODIFIED abort error for a diverged branch."""
    return SyncError(
        ErrorKind.DESTINATION_MODIFIED,
        f'Destination branch "{branch}" has been modified since last sync.',
        details="The destination contains commits that don't exist in the source.",
        resolution="To resolve this, manually merge or rebase the destination changes.",
        context={
            "branch": branch,
            "source_commit": source_commit,
            "destination_commit": destination_commit,
            "merge_base": merge_base
        }
    )


def invalid_branch_mapping(value: str) -> SyncError:
    return SyncError(
        ErrorKind.INVALID_BRANCH_MAPPING,
        f'Invalid branch mapping "{value}".',
        details="Expected format: SOURCE_BRANCH:DESTINATION_BRANCH",
        resolution="Provide both branch names separated by a single colon, e.g. main:mirror-main.",
        context={"value": value}
    )


def authentication_missing(url: str) -> SyncError:
    return SyncError(
        ErrorKind.AUTHENTICATION_MISSING,
        "Either github_token (PAT) or github_app credentials (app_id, private_key, installation_id) must be provided",
        details=f"Pushing to {url} over HTTP(S) requires a token.",
        resolution="Set destination_token, or all three github_app_id, github_app_private_key and "
                   "github_app_installation_id.",
        context={"url": url}
    )


def app_token_exchange_failed(installation_id: str, reason: str) -> SyncError:
    return SyncError(
        ErrorKind.AUTHENTICATION_MISSING,
        f"GitHub App token exchange failed: {reason}",
        resolution="Check the app ID, that the private key belongs to the app, and that the app is "
                   "installed on the destination repository with contents: write.",
        context={"installation_id": installation_id}
    )


def remote_unreachable(
    message: str,
    operation: str,
    details: Optional[str] = None,
    resolution_steps: Optional[List[str]] = None,
    context: Optional[Dict[str, Any]] = None
) -> SyncError:
    context = dict(context or {})
    context["operation"] = operation
    return SyncError(
        ErrorKind.REMOTE_UNREACHABLE,
        f"{operation} failed: {message}",
        details=details,
        resolution=" ".join(resolution_steps) if resolution_steps else None,
        context=context
    )


def tag_push_failed(tag: str, reason: str) -> SyncError:
    return SyncError(
        ErrorKind.TAG_PUSH_FAILED,
        f'Pushing tag "{tag}" failed: {reason}',
        context={"tag": tag}
    )


def log_sync_error(error: SyncError, operation: str, level: int = logging.ERROR) -> None:
    """Log a SyncError with its details and resolution on the error handler logger."""
    logger = logging.getLogger('mirrorsync.error_handler')
    logger.log(level, f"✗ {error.message}", extra={'operation': operation, 'error_code': error.error_code})
    if error.details:
        logger.log(level, f"  {error.details}", extra={'operation': operation})
    if error.resolution:
        logger.log(level, f"  {error.resolution}", extra={'operation': operation})
