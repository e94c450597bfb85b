"""Cached user token for Gmail API authentication."""

import json
import os
from pathlib import Path
from typing import Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

DEFAULT_TOKEN_PATH = "~/.labeller.token.json"


def get_token_path() -> Path:
    """Get the path of the cached user token from environment."""
    return Path(os.getenv("TOKEN_PATH", DEFAULT_TOKEN_PATH)).expanduser()


def has_scopes(creds: Credentials, scopes: list[str]) -> bool:
    """Check that a token was granted every scope in scopes."""
    granted = set(creds.scopes or [])
    return all(scope in granted for scope in scopes)


def load_credentials(scopes: Optional[list[str]] = None) -> Optional[Credentials]:
    """
    Load the cached user token.

    Args:
        scopes: Scopes the token must have been granted. A token missing any
            of them is treated as absent, so the OAuth flow runs again.

    Returns:
        Credentials if a readable, sufficiently scoped token exists, None otherwise.
    """
    token_path = get_token_path()

    if not token_path.exists():
        return None

    try:
        creds = Credentials.from_authorized_user_file(str(token_path))
    except (json.JSONDecodeError, ValueError):
        return None

    if scopes and not has_scopes(creds, scopes):
        return None

    return creds


def save_credentials(creds: Credentials) -> None:
    """Save the user token, readable by the owner only."""
    token_path = get_token_path()
    token_path.parent.mkdir(parents=True, exist_ok=True)

    fd = os.open(token_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(creds.to_json())


def refresh_if_needed(creds: Credentials) -> Credentials:
    """
    Refresh an expired token and cache the result.

    Raises:
        google.auth.exceptions.RefreshError: If refresh fails.
    """
    if creds.expired and creds.refresh_token:
        creds.refresh(Request())
        save_credentials(creds)

    return creds


def delete_credentials() -> bool:
    """
    Delete the cached user token.

    Returns:
        True if a token was deleted, False if there was none.
    """
    token_path = get_token_path()

    if token_path.exists():
        token_path.unlink()
        return True

    return False
