"""OAuth 2.0 flow for Gmail API authentication."""

import os
from pathlib import Path

import requests
from google.auth.exceptions import RefreshError
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource

from .credentials import (
    delete_credentials,
    load_credentials,
    refresh_if_needed,
    save_credentials,
)

# Reading headers and adding/removing labels, including label creation.
SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]

DEFAULT_CREDENTIALS_PATH = "~/.labeller.credentials"


def get_credentials_path() -> Path:
    """Get the path to the OAuth client credentials file."""
    return Path(os.getenv("GOOGLE_CREDENTIALS_PATH", DEFAULT_CREDENTIALS_PATH)).expanduser()


def authenticate() -> object:
    """
    Authenticate with Gmail API using OAuth 2.0.

    This function will:
    1. Try to load existing credentials from token file
    2. Refresh if expired
    3. Run OAuth flow if no valid credentials exist

    Returns:
        Valid Google OAuth credentials.

    Raises:
        FileNotFoundError: If the client credentials file is not found.
    """
    creds = load_credentials(SCOPES)

    if creds and creds.valid:
        return creds

    if creds and creds.expired and creds.refresh_token:
        try:
            return refresh_if_needed(creds)
        except RefreshError:
            # Refresh failed, need to re-authenticate
            creds = None

    credentials_path = get_credentials_path()

    if not credentials_path.exists():
        raise FileNotFoundError(
            f"OAuth client credentials not found at {credentials_path}. "
            "Download them from https://console.developers.google.com/apis/credentials "
            "or set GOOGLE_CREDENTIALS_PATH."
        )

    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), SCOPES)
    creds = flow.run_local_server(port=0)

    save_credentials(creds)

    return creds


def get_gmail_service() -> Resource:
    """
    Get an authenticated Gmail API service.

    Raises:
        FileNotFoundError: If the client credentials file is not found.
    """
    creds = authenticate()
    return build("gmail", "v1", credentials=creds)


def revoke_credentials() -> bool:
    """
    Revoke current OAuth credentials.

    Returns:
        True if a stored token was removed, False otherwise.
    """
    creds = load_credentials()

    if creds:
        try:
            requests.post(
                "https://oauth2.googleapis.com/revoke",
                params={"token": creds.token},
                headers={"content-type": "application/x-www-form-urlencoded"},
                timeout=10,
            )
        except requests.RequestException:
            pass  # Revocation is best-effort

    return delete_credentials()
