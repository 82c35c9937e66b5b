"""Platform helpers: OS detection, paths and git availability."""

import platform
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from git import Git
from git.exc import GitCommandError, GitCommandNotFound

# clone --no-tags needs 2.14
MINIMUM_GIT_VERSION = (2, 14)


class PlatformType(Enum):
    """Supported platform types."""
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    UNKNOWN = "unknown"


_SYSTEMS = {
    "windows": PlatformType.WINDOWS,
    "darwin": PlatformType.MACOS,
    "linux": PlatformType.LINUX,
}


@dataclass(frozen=True)
class PlatformInfo:
    platform_type: PlatformType

    @property
    def is_windows(self) -> bool:
        return self.platform_type is PlatformType.WINDOWS


_platform_info: Optional[PlatformInfo] = None


def get_platform_info() -> PlatformInfo:
    """Detect the running platform once and cache it."""
    global _platform_info
    if _platform_info is None:
        _platform_info = PlatformInfo(_SYSTEMS.get(platform.system().lower(), PlatformType.UNKNOWN))
    return _platform_info


def normalize_path(path: Union[str, Path]) -> Path:
    """Expand ~ and make the path absolute."""
    return Path(path).expanduser().resolve()


def get_default_ssh_dir() -> Path:
    return Path.home() / ".ssh"


def validate_git_availability() -> Tuple[bool, Optional[str]]:
    """
    Check that a usable git executable is on PATH.

    Returns:
        Tuple of (is_available, error_message)
    """
    try:
        version = Git().version_info
    except GitCommandNotFound:
        return False, "Git executable not found; install git or set GIT_PYTHON_GIT_EXECUTABLE"
    except GitCommandError as e:
        return False, f"Git command failed: {e.stderr.strip() or e}"

    if version[:2] < MINIMUM_GIT_VERSION:
        found = ".".join(str(part) for part in version)
        required = ".".join(str(part) for part in MINIMUM_GIT_VERSION)
        return False, f"Git {found} is too old, {required} or newer is required"

    return True, None
