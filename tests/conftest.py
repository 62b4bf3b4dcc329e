"""
Shared test fixtures for CalmDrafts tests
"""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set
from googleapiclient.errors import HttpError
from httplib2 import ServerNotFoundError

from calmdrafts.errors import NotificationError
from calmdrafts.gmail_service import GmailService
from calmdrafts.models import CheckConfig
from calmdrafts.notifier import Notifier


NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


# === Mock Gmail API Service ===

class MockHttpResponse:
    """Mock HTTP response for HttpError"""
    def __init__(self, status: int, reason: str):
        self.status = status
        self.reason = reason


def make_http_error(status: int = 500, reason: str = 'Backend Error') -> HttpError:
    return HttpError(resp=MockHttpResponse(status, reason), content=reason.encode())


def make_transport_error() -> ServerNotFoundError:
    """What httplib2 raises when the machine is offline"""
    return ServerNotFoundError('Unable to find the server at gmail.googleapis.com')


class MockExecute:
    """Mock for the .execute() call that returns stored data or raises"""
    def __init__(self, data, error: Optional[Exception] = None):
        self._data = data
        self._error = error

    def execute(self):
        if self._error:
            raise self._error
        return self._data


class MockDrafts:
    """Mock for users().drafts()"""
    def __init__(self, mailbox: dict, deleted: List[str], fail_list: bool,
                 fail_get: Set[str], fail_delete: Set[str], offline: bool, offline_ids: Set[str]):
        self._mailbox = mailbox
        self._drafts_by_id = {d['id']: d for d in mailbox.get('drafts', [])}
        self._deleted = deleted
        self._fail_list = fail_list
        self._fail_get = fail_get
        self._fail_delete = fail_delete
        self._offline = offline
        self._offline_ids = offline_ids

    def list(self, userId: str, maxResults: int = 100, pageToken: Optional[str] = None):
        if self._offline:
            return MockExecute(None, make_transport_error())
        if self._fail_list:
            return MockExecute(None, make_http_error(401, 'Invalid Credentials'))

        drafts = self._mailbox.get('drafts', [])
        start_idx = int(pageToken) if pageToken else 0
        end_idx = min(start_idx + maxResults, len(drafts))

        result: Dict = {'resultSizeEstimate': len(drafts)}
        page = drafts[start_idx:end_idx]
        # Real API omits the key entirely when there are no drafts
        if page:
            result['drafts'] = [{'id': d['id'], 'message': {'id': d['message']['id']}} for d in page]
        if end_idx < len(drafts):
            result['nextPageToken'] = str(end_idx)

        return MockExecute(result)

    def get(self, userId: str, id: str, format: str = None):
        if id in self._offline_ids:
            return MockExecute(None, make_transport_error())
        if id in self._fail_get or id not in self._drafts_by_id:
            return MockExecute(None, make_http_error(404, 'Not Found'))
        return MockExecute(self._drafts_by_id[id])

    def delete(self, userId: str, id: str):
        if id in self._offline_ids:
            return MockExecute(None, make_transport_error())
        if id in self._fail_delete:
            return MockExecute(None, make_http_error(404, 'Not Found'))
        self._deleted.append(id)
        return MockExecute('')


class MockUsers:
    """Mock for service.users()"""
    def __init__(self, drafts: MockDrafts):
        self._drafts = drafts

    def drafts(self):
        return self._drafts


class MockGmailService:
    """Mock Gmail API service that simulates a drafts folder"""

    def __init__(self, mailbox: dict, fail_list: bool = False,
                 fail_get: Set[str] = None, fail_delete: Set[str] = None,
                 offline: bool = False, offline_ids: Set[str] = None):
        self._deleted: List[str] = []
        self._drafts = MockDrafts(
            mailbox, self._deleted, fail_list, fail_get or set(), fail_delete or set(),
            offline, offline_ids or set()
        )

    def users(self):
        return MockUsers(self._drafts)

    @property
    def deleted_drafts(self) -> List[str]:
        """Draft IDs passed to drafts().delete(), in call order"""
        return self._deleted


# === Helpers to create draft data ===

def to_internal_date(moment: datetime) -> str:
    """Gmail returns internalDate as a string of epoch milliseconds"""
    return str(int(moment.timestamp() * 1000))


def make_draft(
    draft_id: str,
    subject: Optional[str] = None,
    to: Optional[str] = None,
    body_size: int = 0,
    parts: Optional[List[dict]] = None,
    created_at: Optional[datetime] = None
) -> dict:
    """Helper to create a drafts.get(format='full') response"""
    headers = []
    if subject is not None:
        headers.append({'name': 'Subject', 'value': subject})
    if to is not None:
        headers.append({'name': 'To', 'value': to})

    payload = {
        'mimeType': 'multipart/alternative' if parts else 'text/plain',
        'headers': headers,
        'body': {'size': body_size}
    }
    if parts:
        payload['parts'] = parts

    message = {
        'id': f'{draft_id}_msg',
        'labelIds': ['DRAFT'],
        'payload': payload
    }
    if created_at is not None:
        message['internalDate'] = to_internal_date(created_at)

    return {'id': draft_id, 'message': message}


def make_part(size: int = 0, parts: Optional[List[dict]] = None) -> dict:
    """Helper to create a MessagePart"""
    part = {'mimeType': 'text/plain', 'body': {'size': size}}
    if parts:
        part['parts'] = parts
    return part


# === Recording Notifier ===

class RecordingNotifier(Notifier):
    """Notifier that records messages instead of showing them"""

    def __init__(self, fail: bool = False):
        super().__init__()
        self.sent: List[tuple] = []
        self.fail = fail

    def notify(self, title: str, message: str) -> None:
        if self.fail:
            raise NotificationError("notification daemon not running")
        self.sent.append((title, message))


# === Fixtures ===

@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def sample_mailbox() -> dict:
    """Five drafts: two empty, one of which is past a seven day cleanup age"""
    drafts = [
        # Subject only, old but not empty
        make_draft('draft_001', subject='Hi', created_at=NOW - timedelta(days=30)),
        # Empty and ten days old
        make_draft('draft_002', subject='', to='', created_at=NOW - timedelta(days=10)),
        # Empty but recent
        make_draft('draft_003', created_at=NOW - timedelta(days=2)),
        # Recipient and body
        make_draft('draft_004', to='bob@example.com', body_size=120, created_at=NOW - timedelta(days=40)),
        # Body only in a nested part
        make_draft(
            'draft_005',
            parts=[make_part(0), make_part(0, parts=[make_part(42)])],
            created_at=NOW - timedelta(days=20)
        ),
    ]

    return {'drafts': drafts}


@pytest.fixture
def empty_mailbox() -> dict:
    return {'drafts': []}


@pytest.fixture
def mock_gmail_service(sample_mailbox) -> MockGmailService:
    return MockGmailService(sample_mailbox)


@pytest.fixture
def mock_gmail_service_empty(empty_mailbox) -> MockGmailService:
    return MockGmailService(empty_mailbox)


@pytest.fixture
def gmail(mock_gmail_service) -> GmailService:
    """GmailService wired to the mock API"""
    return GmailService(service=mock_gmail_service)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def default_check_config() -> CheckConfig:
    return CheckConfig(cleanup_age=timedelta(days=7))


@pytest.fixture
def dry_run_check_config() -> CheckConfig:
    return CheckConfig(cleanup_age=timedelta(days=7), dry_run=True)
