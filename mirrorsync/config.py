"""Configuration management for mirrorsync."""

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Mapping

from dotenv import load_dotenv

from .platform import normalize_path

DEFAULT_FALLBACK_BRANCHES = ["main", "master"]
TAG_SYNC_STRATEGIES = ["prune", "additive"]
VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class Config:
    """Configuration for one sync run, built once at the entrypoint and passed down."""

    # Repositories
    source_repo: str = ""
    destination_repo: str = ""

    # Branches
    source_branch: str = "main"
    destination_branch: Optional[str] = None  # defaults to source_branch
    branch_mapping: Optional[str] = None      # "source:destination", overrides the two above
    sync_all_branches: bool = False
    fallback_branches: List[str] = field(default_factory=lambda: list(DEFAULT_FALLBACK_BRANCHES))

    # Tags
    sync_tags: str = ""                       # "" / "false", "true", or a regex pattern
    tag_sync_strategy: str = "prune"

    # Push policy
    force_push: bool = False
    dry_run: bool = False

    # Credentials
    source_token: Optional[str] = None
    destination_token: Optional[str] = None
    github_app_id: Optional[str] = None
    github_app_private_key: Optional[str] = None
    github_app_installation_id: Optional[str] = None
    github_api_url: str = "https://api.github.com"
    ssh_private_key: Optional[str] = None

    # Working copy
    work_dir: Optional[Path] = None           # temporary directory when unset
    source_remote_name: str = "source"
    destination_remote_name: str = "origin"
    git_user_name: str = "github-sync-action"
    git_user_email: str = "github-sync@github.com"

    # Logging and reporting
    log_level: str = "INFO"
    report_file: Optional[Path] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.source_repo:
            raise ValueError("source_repo is required")
        if not self.destination_repo:
            raise ValueError("destination_repo is required")

        if not self.source_branch:
            raise ValueError("source_branch must not be empty")
        if not self.destination_branch:
            self.destination_branch = self.source_branch

        self.fallback_branches = [branch.strip() for branch in self.fallback_branches if branch and branch.strip()]

        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}. Must be one of {VALID_LOG_LEVELS}")

        self.tag_sync_strategy = self.tag_sync_strategy.lower()
        if self.tag_sync_strategy not in TAG_SYNC_STRATEGIES:
            raise ValueError(
                f"Invalid tag sync strategy: {self.tag_sync_strategy}. Must be one of {TAG_SYNC_STRATEGIES}"
            )

        self.sync_tags = (self.sync_tags or "").strip()
        if self.sync_tags.lower() not in ("", "false", "true"):
            try:
                re.compile(self.sync_tags)
            except re.error as e:
                raise ValueError(f"Invalid tag pattern {self.sync_tags!r}: {e}")

        if not self.source_remote_name or not self.destination_remote_name:
            raise ValueError("Remote names must not be empty")
        if self.source_remote_name == self.destination_remote_name:
            raise ValueError("source_remote_name and destination_remote_name must differ")

        if isinstance(self.work_dir, str):
            self.work_dir = Path(self.work_dir)
        if self.work_dir is not None:
            self.work_dir = normalize_path(self.work_dir)

        if isinstance(self.report_file, str):
            self.report_file = Path(self.report_file)

    @property
    def secrets(self) -> List[str]:
        """Values that must never appear unmasked in logs."""
        return [
            value for value in (self.source_token, self.destination_token, self.github_app_private_key) if value
        ]

    @property
    def has_app_credentials(self) -> bool:
        return bool(self.github_app_id and self.github_app_private_key and self.github_app_installation_id)


def _first(environ: Mapping[str, str], *names: str, default: Optional[str] = None) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value is not None and value != "":
            return value
    return default


def _as_bool(value: Optional[str]) -> bool:
    return str(value).strip().lower() in _TRUE_VALUES


def load_configuration(environ: Optional[Mapping[str, str]] = None, **overrides) -> Config:
    """
    Load configuration from environment variables.

    Precedence, highest first: MIRRORSYNC_* variables, GitHub Action INPUT_*
    variables, then the legacy UPSTREAM_REPO / BRANCHES / SYNC_TAGS variables.
    Keyword overrides that are not None win over the environment.

    Args:
        environ: Mapping to read instead of os.environ (a .env file is only loaded for os.environ)
        **overrides: Config field values taking precedence over the environment

    Returns:
        Validated Config instance

    Raises:
        ValueError: If any value is missing or malformed
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    try:
        destination_repo = _first(environ, "MIRRORSYNC_DESTINATION_REPO", "INPUT_DESTINATION_REPO")
        if not destination_repo and environ.get("GITHUB_REPOSITORY"):
            destination_repo = f"https://github.com/{environ['GITHUB_REPOSITORY']}.git"

        fallback = _first(environ, "MIRRORSYNC_FALLBACK_BRANCHES")
        work_dir = _first(environ, "MIRRORSYNC_WORK_DIR")
        report_file = _first(environ, "MIRRORSYNC_REPORT_FILE")

        values = dict(
            source_repo=_first(environ, "MIRRORSYNC_SOURCE_REPO", "INPUT_SOURCE_REPO", "UPSTREAM_REPO", default=""),
            destination_repo=destination_repo or "",
            source_branch=_first(environ, "MIRRORSYNC_SOURCE_BRANCH", "INPUT_SOURCE_BRANCH", default="main"),
            destination_branch=_first(environ, "MIRRORSYNC_DESTINATION_BRANCH", "INPUT_DESTINATION_BRANCH"),
            branch_mapping=_first(environ, "MIRRORSYNC_BRANCH_MAPPING", "BRANCHES"),
            sync_all_branches=_as_bool(_first(
                environ, "MIRRORSYNC_SYNC_ALL_BRANCHES", "INPUT_SYNC_ALL_BRANCHES", default="false"
            )),
            fallback_branches=(
                fallback.split(",") if fallback is not None else list(DEFAULT_FALLBACK_BRANCHES)
            ),
            sync_tags=_first(environ, "MIRRORSYNC_SYNC_TAGS", "INPUT_SYNC_TAGS", "SYNC_TAGS", default=""),
            tag_sync_strategy=_first(environ, "MIRRORSYNC_TAG_SYNC_STRATEGY", default="prune"),
            force_push=_as_bool(_first(environ, "MIRRORSYNC_FORCE_PUSH", "INPUT_FORCE_PUSH", default="false")),
            dry_run=_as_bool(_first(environ, "MIRRORSYNC_DRY_RUN", default="false")),
            source_token=_first(environ, "MIRRORSYNC_SOURCE_TOKEN", "INPUT_SOURCE_TOKEN"),
            destination_token=_first(
                environ, "MIRRORSYNC_DESTINATION_TOKEN", "INPUT_GITHUB_TOKEN", "GITHUB_TOKEN"
            ),
            github_app_id=_first(environ, "MIRRORSYNC_GITHUB_APP_ID", "INPUT_GITHUB_APP_ID"),
            github_app_private_key=_first(
                environ, "MIRRORSYNC_GITHUB_APP_PRIVATE_KEY", "INPUT_GITHUB_APP_PRIVATE_KEY"
            ),
            github_app_installation_id=_first(
                environ, "MIRRORSYNC_GITHUB_APP_INSTALLATION_ID", "INPUT_GITHUB_APP_INSTALLATION_ID"
            ),
            github_api_url=_first(
                environ, "MIRRORSYNC_GITHUB_API_URL", "GITHUB_API_URL", default="https://api.github.com"
            ),
            ssh_private_key=_first(environ, "MIRRORSYNC_SSH_PRIVATE_KEY", "SSH_PRIVATE_KEY"),
            work_dir=Path(work_dir) if work_dir else None,
            log_level=_first(environ, "MIRRORSYNC_LOG_LEVEL", default="INFO"),
            report_file=Path(report_file) if report_file else None,
        )
        values.update({key: value for key, value in overrides.items() if value is not None})

        return Config(**values)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Configuration error: {e}")


def validate_configuration(config: Config) -> List[str]:
    """Validate configuration and return any errors or warnings."""
    errors = []

    known_prefixes = ("http://", "https://", "git@", "ssh://", "git://", "file://", "/")
    if not config.destination_repo.startswith(known_prefixes):
        errors.append(f"WARNING: Destination repository URL may be invalid: {config.destination_repo}")

    if config.force_push:
        errors.append(
            "WARNING: Force push enabled: diverged destination branches will lose commits that are not in the source"
        )

    if config.sync_all_branches and config.branch_mapping:
        errors.append("WARNING: branch_mapping is ignored when sync_all_branches is enabled")

    app_fields = (config.github_app_id, config.github_app_private_key, config.github_app_installation_id)
    if any(app_fields) and not all(app_fields):
        errors.append(
            "WARNING: GitHub App authentication needs github_app_id, github_app_private_key "
            "and github_app_installation_id; the partial App credentials are ignored"
        )

    if not config.fallback_branches:
        errors.append("WARNING: No fallback branches configured; missing branches will always fail")

    if config.work_dir is not None:
        try:
            config.work_dir.mkdir(parents=True, exist_ok=True)
            test_file = config.work_dir / ".test_write"
            test_file.write_text("test")
            test_file.unlink()
        except PermissionError:
            errors.append(f"ERROR: No write permission for work directory: {config.work_dir}")
        except OSError as e:
            errors.append(f"ERROR: Cannot access work directory {config.work_dir}: {e}")

    logger = logging.getLogger('mirrorsync.config')
    for message in errors:
        logger.debug(message)

    return errors
