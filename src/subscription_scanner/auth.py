"""Authentication and session handling for the Gmail API."""

from __future__ import annotations

import logging
from pathlib import Path

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError

from .constants import CREDENTIALS_PATH, SCOPES, TOKEN_PATH
from .exceptions import AuthError

logger = logging.getLogger(__name__)


class GmailSession:
    """An authenticated Gmail API session owned by the caller.

    Use it as a context manager; the service is dropped on exit and the
    session cannot be reused afterwards.
    """

    def __init__(self, credentials: Credentials, service: Resource | None = None) -> None:
        self.credentials = credentials
        self._service = service or build("gmail", "v1", credentials=credentials, cache_discovery=False)

    @property
    def service(self) -> Resource:
        if self._service is None:
            raise AuthError("Gmail session is closed.")
        return self._service

    @property
    def closed(self) -> bool:
        return self._service is None

    def email_address(self) -> str:
        """Return the address of the authenticated mailbox."""
        try:
            profile = self.service.users().getProfile(userId="me").execute()
        except (HttpError, RefreshError) as exc:
            raise AuthError(f"Could not read Gmail profile: {exc}") from exc
        return profile["emailAddress"]

    def close(self) -> None:
        if self._service is not None:
            self._service.close()
        self._service = None

    def __enter__(self) -> GmailSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()


def load_credentials(
    credentials_path: Path | None = None,
    token_path: Path | None = None,
) -> Credentials:
    """Load cached credentials, refreshing or running the OAuth flow as needed.

    When the token is expired it is silently refreshed.  If no token
    exists, an OAuth browser flow is launched (requires credentials.json
    at CREDENTIALS_PATH).  The resulting token is written back.
    """
    credentials_path = Path(credentials_path or CREDENTIALS_PATH)
    token_path = Path(token_path or TOKEN_PATH)
    token_path.parent.mkdir(parents=True, exist_ok=True)

    creds: Credentials | None = None

    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)

    if creds and creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except RefreshError as exc:
            raise AuthError(
                f"Stored Gmail token could not be refreshed ({exc}). "
                f"Delete {token_path} and re-authorize."
            ) from exc
        logger.debug("Refreshed Gmail token")
    elif not creds or not creds.valid:
        if not credentials_path.exists():
            raise AuthError(
                f"Credentials file not found at {credentials_path}.\n"
                "Download your OAuth client credentials from the Google Cloud Console "
                "and save them as:\n"
                f"  {credentials_path}"
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), SCOPES)
        creds = flow.run_local_server(port=0)

    token_path.write_text(creds.to_json())
    return creds


def open_session(
    credentials_path: Path | None = None,
    token_path: Path | None = None,
) -> GmailSession:
    """Return a new authenticated GmailSession."""
    return GmailSession(load_credentials(credentials_path, token_path))


def check_auth() -> tuple[bool, str]:
    """Test whether Gmail authentication is working.

    Returns (ok, message) where message is the mailbox address on success
    and the failure reason otherwise.
    """
    try:
        with open_session() as session:
            return True, session.email_address()
    except AuthError as exc:
        return False, str(exc)
