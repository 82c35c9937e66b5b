"""Error categories for git transport failures."""

from dataclasses import dataclass
from enum import Enum
from typing import List


class ErrorCategory(Enum):
    """Categories of git command failures, used to pick resolution guidance."""
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    REPOSITORY_ACCESS = "repository_access"
    REF_REJECTED = "ref_rejected"
    MISSING_REF = "missing_ref"
    UNKNOWN = "unknown"


@dataclass
class ErrorResolution:
    """Information about how to resolve a specific error."""
    category: ErrorCategory
    user_message: str
    resolution_steps: List[str]
