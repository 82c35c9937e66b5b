"""Resolution guidance and message patterns for git transport failures."""

from typing import Dict

from .error_types import ErrorCategory, ErrorResolution


def build_error_strategies() -> Dict[ErrorCategory, ErrorResolution]:
    """Build resolution guidance for each error category."""
    return {
        ErrorCategory.NETWORK: ErrorResolution(
            category=ErrorCategory.NETWORK,
            user_message="Network connection issue detected",
            resolution_steps=[
                "Check network connectivity from the runner.",
                "Verify the repository host is reachable.",
                "Re-run the sync once the remote is available."
            ]
        ),

        ErrorCategory.AUTHENTICATION: ErrorResolution(
            category=ErrorCategory.AUTHENTICATION,
            user_message="Authentication failed - please check your credentials",
            resolution_steps=[
                "Verify the token is valid and not expired.",
                "Ensure the token has push access to the destination (contents: write).",
                "For SSH remotes, check that the configured private key is authorized."
            ]
        ),

        ErrorCategory.REPOSITORY_ACCESS: ErrorResolution(
            category=ErrorCategory.REPOSITORY_ACCESS,
            user_message="Repository not accessible - please verify the URL",
            resolution_steps=[
                "Verify the repository URL is correct.",
                "Check that the repository exists and the credentials can read it."
            ]
        ),

        ErrorCategory.REF_REJECTED: ErrorResolution(
            category=ErrorCategory.REF_REJECTED,
            user_message="The remote rejected the ref update",
            resolution_steps=[
                "Check branch protection rules on the destination.",
                "Fetch again: the destination may have moved during the sync."
            ]
        ),

        ErrorCategory.MISSING_REF: ErrorResolution(
            category=ErrorCategory.MISSING_REF,
            user_message="A requested ref does not exist on the remote",
            resolution_steps=[
                "Check the configured branch names against the remote's branch list."
            ]
        )
    }


def build_error_patterns() -> Dict[str, ErrorCategory]:
    """Build mapping of git error message fragments to categories."""
    return {
        # Network errors
        "could not resolve host": ErrorCategory.NETWORK,
        "connection refused": ErrorCategory.NETWORK,
        "network is unreachable": ErrorCategory.NETWORK,
        "connection timed out": ErrorCategory.NETWORK,
        "timed out": ErrorCategory.NETWORK,
        "no route to host": ErrorCategory.NETWORK,
        "temporary failure in name resolution": ErrorCategory.NETWORK,
        "the remote end hung up unexpectedly": ErrorCategory.NETWORK,

        # Authentication errors
        "authentication failed": ErrorCategory.AUTHENTICATION,
        "permission denied": ErrorCategory.AUTHENTICATION,
        "invalid username or password": ErrorCategory.AUTHENTICATION,
        "could not read username": ErrorCategory.AUTHENTICATION,
        "returned error: 403": ErrorCategory.AUTHENTICATION,
        "returned error: 401": ErrorCategory.AUTHENTICATION,

        # Ref updates refused by the remote
        "[rejected]": ErrorCategory.REF_REJECTED,
        "[remote rejected]": ErrorCategory.REF_REJECTED,
        "non-fast-forward": ErrorCategory.REF_REJECTED,
        "protected branch": ErrorCategory.REF_REJECTED,
        "no new changes": ErrorCategory.REF_REJECTED,

        # Repository access errors
        "repository not found": ErrorCategory.REPOSITORY_ACCESS,
        "does not appear to be a git repository": ErrorCategory.REPOSITORY_ACCESS,
        "could not read from remote repository": ErrorCategory.REPOSITORY_ACCESS,

        # Missing refs
        "couldn't find remote ref": ErrorCategory.MISSING_REF,
        "src refspec": ErrorCategory.MISSING_REF,
        "unknown revision": ErrorCategory.MISSING_REF,
    }
