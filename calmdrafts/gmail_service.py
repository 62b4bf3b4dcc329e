#!/usr/bin/env python3
"""
Gmail Service - Facade for Gmail draft operations
Handles authentication and delegates listing to DraftCollector
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional, Callable

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from calmdrafts.collector import DraftCollector
from calmdrafts.errors import AuthenticationError, DraftDeleteError, DraftFetchError
from calmdrafts.models import Draft


logger = logging.getLogger(__name__)

# If modifying these scopes, delete the token file.
SCOPES = [
    'https://www.googleapis.com/auth/gmail.readonly',
    'https://www.googleapis.com/auth/gmail.modify',
]


class GmailService:
    """Facade for Gmail drafts - handles auth, listing and deletion"""

    def __init__(
        self,
        credentials_path: str = 'credentials.json',
        token_path: str = 'token.json',
        service=None  # prebuilt Gmail API service object
    ):
        self.credentials_path = credentials_path
        self.token_path = token_path
        self.service = service

        # Progress callback
        self.progress_callback: Optional[Callable] = None

    def set_progress_callback(self, callback: Callable):
        """Set callback for progress updates"""
        self.progress_callback = callback

    # === Authentication ===

    def authenticate(self) -> None:
        """Load, refresh or obtain OAuth credentials and build the Gmail client"""
        token_path = Path(self.token_path)
        creds = None

        try:
            if token_path.exists():
                creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)

            if not creds or not creds.valid:
                if creds and creds.expired and creds.refresh_token:
                    logger.info("Refreshing expired credentials")
                    creds.refresh(Request())
                else:
                    creds = self._run_oauth_flow()
                self._save_token(creds)

        except (GoogleAuthError, ValueError, OSError) as error:
            raise AuthenticationError(f"Authentication failed: {error}") from error

        self.service = build('gmail', 'v1', credentials=creds)
        logger.info("Successfully authenticated with Gmail")

    def _run_oauth_flow(self) -> Credentials:
        """Ask the user to authorize access in the browser"""
        if not os.path.exists(self.credentials_path):
            raise AuthenticationError(
                f"Credentials file not found at {self.credentials_path}. "
                "Download credentials.json from Google Cloud Console."
            )

        logger.info("No valid token found - starting OAuth flow")
        flow = InstalledAppFlow.from_client_secrets_file(self.credentials_path, SCOPES)
        return flow.run_local_server(port=0)

    def _save_token(self, creds: Credentials) -> None:
        """Persist credentials for the next run, readable by the owner only"""
        token_path = Path(self.token_path)
        token_path.parent.mkdir(parents=True, exist_ok=True)
        token_path.write_text(creds.to_json())
        token_path.chmod(0o600)
        logger.info(f"Saved credentials to {token_path}")

    def _require_service(self):
        if not self.service:
            raise AuthenticationError("Not authenticated. Call authenticate() first.")
        return self.service

    # === Drafts ===

    async def list_drafts(self) -> List[Draft]:
        """Fetch a fresh snapshot of every draft"""
        service = self._require_service()
        collector = DraftCollector(service, self.progress_callback)

        try:
            return await collector.collect()
        except (HttpError, HttpLib2Error, GoogleAuthError, OSError) as error:
            raise DraftFetchError(f"unable to retrieve drafts: {error}") from error

    async def delete_draft(self, draft_id: str) -> None:
        """Permanently delete a single draft"""
        service = self._require_service()

        try:
            await asyncio.to_thread(
                lambda: service.users().drafts().delete(
                    userId='me',
                    id=draft_id
                ).execute()
            )
        except (HttpError, HttpLib2Error, GoogleAuthError, OSError) as error:
            raise DraftDeleteError(draft_id, f"unable to delete draft {draft_id}: {error}") from error
