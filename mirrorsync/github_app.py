"""GitHub App installation token exchange."""

import logging
import time
from typing import Optional

import httpx
import jwt

from .errors import app_token_exchange_failed

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"

# GitHub rejects app JWTs valid for more than ten minutes; iat is backdated for clock drift
JWT_BACKDATE_SECONDS = 60
JWT_LIFETIME_SECONDS = 540

REQUEST_TIMEOUT = 30.0


def create_app_jwt(app_id: str, private_key: str, now: Optional[int] = None) -> str:
    """Sign the short-lived RS256 JWT that authenticates as the app itself."""
    now = int(time.time()) if now is None else now
    payload = {
        "iat": now - JWT_BACKDATE_SECONDS,
        "exp": now + JWT_LIFETIME_SECONDS,
        "iss": str(app_id),
    }
    return jwt.encode(payload, private_key, algorithm="RS256")


def fetch_installation_token(
    app_id: str,
    private_key: str,
    installation_id: str,
    client: Optional[httpx.Client] = None,
    api_url: str = GITHUB_API_URL
) -> str:
    """
    Exchange app credentials for an installation access token.

    Args:
        app_id: GitHub App ID
        private_key: PEM private key of the app
        installation_id: Installation the token is scoped to
        client: HTTP client to use; a short-lived one is created when omitted
        api_url: GitHub API base URL (GitHub Enterprise installs differ)

    Returns:
        The installation token

    Raises:
        SyncError: AUTHENTICATION_MISSING when the key is unusable or GitHub refuses the exchange
    """
    logger = logging.getLogger('mirrorsync.credentials')
    logger.info("Authenticating as GitHub App installation...")

    try:
        app_jwt = create_app_jwt(app_id, private_key)
    except (jwt.PyJWTError, ValueError, TypeError) as e:
        raise app_token_exchange_failed(installation_id, f"could not sign app JWT: {e}") from e

    url = f"{api_url.rstrip('/')}/app/installations/{installation_id}/access_tokens"
    headers = {
        "Authorization": f"Bearer {app_jwt}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }

    owns_client = client is None
    client = client or httpx.Client(timeout=REQUEST_TIMEOUT)
    try:
        response = client.post(url, headers=headers)
        response.raise_for_status()
        data = response.json()
        token = data.get("token") if isinstance(data, dict) else None
    except httpx.HTTPStatusError as e:
        raise app_token_exchange_failed(
            installation_id, f"GitHub returned HTTP {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        raise app_token_exchange_failed(installation_id, str(e) or type(e).__name__) from e
    except ValueError as e:
        raise app_token_exchange_failed(installation_id, f"unreadable response: {e}") from e
    finally:
        if owns_client:
            client.close()

    if not token:
        raise app_token_exchange_failed(installation_id, "response did not contain a token")

    logger.info("GitHub App token obtained successfully")
    return token
