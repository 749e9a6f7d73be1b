import logging
from pathlib import Path
from typing import Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SCOPES = ['https://www.googleapis.com/auth/drive']


# cached token, or None when there is nothing usable on disk
def load_cached_credentials(token_file: Path) -> Optional[Credentials]:
    if not token_file.exists():
        return None
    logger.debug("Loading Drive token from %s", token_file)
    creds = Credentials.from_authorized_user_file(str(token_file), SCOPES)
    if creds.valid:
        return creds
    if not (creds.expired and creds.refresh_token):
        return None

    logger.info("Refreshing expired Drive token")
    try:
        creds.refresh(Request())
    except RefreshError as e:
        logger.warning("Drive token could not be refreshed, signing in again: %s", e)
        return None
    return creds


def authorize(credentials_file: Path, token_file: Path) -> Credentials:
    """Run the browser consent flow and store the resulting token."""
    if not credentials_file.exists():
        raise ConfigurationError(
            f"Drive client secrets '{credentials_file}' not found; set STUDY_DRIVE_CREDENTIALS "
            "to the OAuth client file downloaded from Google Cloud Console"
        )
    logger.info("Opening a browser for Drive consent")
    flow = InstalledAppFlow.from_client_secrets_file(str(credentials_file), SCOPES)
    creds = flow.run_local_server(port=0)
    token_file.write_text(creds.to_json())
    logger.info("Saved Drive token to %s", token_file)
    return creds


def get_drive_service(credentials_path: str = 'credentials.json', token_path: str = 'token.json'):
    token_file = Path(token_path)
    creds = load_cached_credentials(token_file) or authorize(Path(credentials_path), token_file)
    return build('drive', 'v3', credentials=creds, cache_discovery=False)
