"""Conversion of git command failures into SyncErrors with resolution guidance."""

import logging
from typing import Any, Dict, Iterable, Optional

from git import GitCommandError

from ..errors import SyncError, remote_unreachable
from ..masking import mask_secrets
from .error_strategies import build_error_patterns, build_error_strategies
from .error_types import ErrorCategory


class GitErrorHandler:
    """
    Translates git failures into REMOTE_UNREACHABLE SyncErrors.

    Failures are never retried here; the message is categorized so the
    report carries actionable resolution steps, and every secret is masked
    before the message is logged or stored.
    """

    def __init__(self, secrets: Iterable[Optional[str]] = ()):
        self.secrets = [secret for secret in secrets if secret]
        self.logger = logging.getLogger('mirrorsync.git_sync.error_recovery')
        self._error_patterns = build_error_patterns()
        self._strategies = build_error_strategies()

    def categorize_error(self, error_message: str) -> ErrorCategory:
        """Categorize a git error message by the first matching known fragment."""
        if not error_message:
            return ErrorCategory.UNKNOWN

        error_lower = error_message.lower()
        for pattern, category in self._error_patterns.items():
            if pattern in error_lower:
                self.logger.debug(f"Categorized error as {category.value}: pattern '{pattern}' found")
                return category

        return ErrorCategory.UNKNOWN

    def describe(self, error: Exception) -> str:
        """Masked, single-line description of a git failure."""
        if isinstance(error, GitCommandError):
            message = (error.stderr or error.stdout or str(error)).strip()
            # GitPython wraps stderr as "\n  stderr: '...'"
            if message.startswith("stderr:"):
                message = message[len("stderr:"):].strip()
            message = message.strip("'\"")
        else:
            message = str(error)
        return " ".join(mask_secrets(message, self.secrets).split())

    def handle_error(
        self,
        error: Exception,
        operation: str,
        context: Optional[Dict[str, Any]] = None
    ) -> SyncError:
        """
        Build the SyncError for a failed git operation.

        Args:
            error: The exception raised by git
            operation: Short description of what was attempted
            context: Extra diagnostics to attach

        Returns:
            SyncError of kind REMOTE_UNREACHABLE
        """
        message = self.describe(error)
        category = self.categorize_error(message)
        resolution = self._strategies.get(category)

        context = dict(context or {})
        context["category"] = category.value
        if isinstance(error, GitCommandError):
            context["exit_status"] = error.status if isinstance(error.status, int) else str(error.status)

        sync_error = remote_unreachable(
            message or "git command failed",
            operation,
            details=resolution.user_message if resolution else None,
            resolution_steps=resolution.resolution_steps if resolution else None,
            context=context
        )

        self.logger.error(
            f"Git error in {operation}: {message} (category: {category.value})",
            extra={'operation': operation}
        )
        return sync_error
