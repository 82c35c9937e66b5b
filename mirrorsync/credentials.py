"""Credential resolution, token injection and SSH key provisioning."""

import logging
import os
from pathlib import Path
from typing import Optional

import httpx

from .config import Config
from .errors import authentication_missing
from .github_app import fetch_installation_token
from .masking import mask_url
from .platform import get_default_ssh_dir, get_platform_info

TOKEN_USER = "x-access-token"
SSH_KEY_NAME = "id_rsa"
SSH_DIR_PERMISSIONS = 0o700
SSH_FILE_PERMISSIONS = 0o600
SSH_CONFIG_LINE = "StrictHostKeyChecking no"


def _is_http_url(url: str) -> bool:
    return url.startswith(("https://", "http://"))


def resolve_destination_token(config: Config, http_client: Optional[httpx.Client] = None) -> Optional[str]:
    """
    Token used to push to the destination.

    A configured token wins. Otherwise, for an HTTP(S) destination, complete
    GitHub App credentials are exchanged for an installation token.

    Raises:
        SyncError: AUTHENTICATION_MISSING when the destination is HTTP(S) and neither a token
            nor complete GitHub App credentials are configured, or the App exchange fails
    """
    logger = logging.getLogger('mirrorsync.credentials')

    if config.destination_token:
        logger.info("Using configured token for destination authentication")
        return config.destination_token

    if _is_http_url(config.destination_repo):
        if config.has_app_credentials:
            return fetch_installation_token(
                config.github_app_id,
                config.github_app_private_key,
                config.github_app_installation_id,
                client=http_client,
                api_url=config.github_api_url
            )
        raise authentication_missing(mask_url(config.destination_repo))

    logger.info("Destination is not an HTTP(S) remote, relying on SSH or local access")
    return None


def resolve_source_token(config: Config) -> Optional[str]:
    logger = logging.getLogger('mirrorsync.credentials')

    if config.source_token:
        return config.source_token
    if _is_http_url(config.source_repo):
        logger.info("ℹ Source repo is treated as public (no token provided)")
    return None


def inject_token(url: str, token: Optional[str]) -> str:
    """Embed token into an HTTP(S) URL as x-access-token basic auth; other URLs are unchanged."""
    if not token or not _is_http_url(url):
        return url

    scheme, _, rest = url.partition("://")
    host, slash, path = rest.partition("/")
    if "@" in host:
        host = host.rsplit("@", 1)[1]
    return f"{scheme}://{TOKEN_USER}:{token}@{host}{slash}{path}"


def setup_ssh_key(private_key: str, ssh_dir: Optional[Path] = None) -> Path:
    """
    Install a private key for git over SSH.

    Writes <ssh_dir>/id_rsa with 0600 permissions in a 0700 directory and
    disables strict host key checking in <ssh_dir>/config (added once).

    Returns:
        Path of the written key
    """
    logger = logging.getLogger('mirrorsync.credentials')
    ssh_dir = ssh_dir or get_default_ssh_dir()
    use_permissions = not get_platform_info().is_windows

    logger.info("Saving SSH private key")
    ssh_dir.mkdir(parents=True, exist_ok=True)
    if use_permissions:
        os.chmod(ssh_dir, SSH_DIR_PERMISSIONS)

    key_path = ssh_dir / SSH_KEY_NAME
    key_text = private_key if private_key.endswith("\n") else private_key + "\n"
    key_path.write_text(key_text)
    if use_permissions:
        os.chmod(key_path, SSH_FILE_PERMISSIONS)

    config_path = ssh_dir / "config"
    existing = config_path.read_text() if config_path.exists() else ""
    if SSH_CONFIG_LINE not in existing.splitlines():
        with open(config_path, "a") as f:
            if existing and not existing.endswith("\n"):
                f.write("\n")
            f.write(SSH_CONFIG_LINE + "\n")
    if use_permissions:
        os.chmod(config_path, SSH_FILE_PERMISSIONS)

    logger.info(f"✓ SSH key written to {key_path}")
    return key_path
