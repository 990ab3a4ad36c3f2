"""Shared fixtures and test doubles."""
import asyncio
import json

import httpx
import pytest

from canvaslms.exceptions import NetworkError

BASE = 'https://canvas.test/api/v1'


def link_header(path: str, last: int, current: int = 1) -> str:
    """Build a Canvas style Link header for `path` with `last` pages."""
    links = [f'<{BASE}/{path}?page={current}&per_page=10>; rel="current"']
    if current < last:
        links.append(f'<{BASE}/{path}?page={current + 1}&per_page=10>; rel="next"')
    if current > 1:
        links.append(f'<{BASE}/{path}?page={current - 1}&per_page=10>; rel="prev"')
    links.append(f'<{BASE}/{path}?page=1&per_page=10>; rel="first"')
    links.append(f'<{BASE}/{path}?page={last}&per_page=10>; rel="last"')
    return ','.join(links)


class StubDoer:
    """
    Deterministic transport serving fixed pages.

    `pages` maps page number to the JSON body for that page. Pages listed in
    `failures` raise NetworkError instead. `delays` lets a page answer late so
    tests can shuffle completion order.
    """

    def __init__(self, path: str, pages: dict[int, list], failures: set[int] | None = None,
                 delays: dict[int, float] | None = None, link: str | None = None) -> None:
        self.path = path
        self.pages = pages
        self.failures = failures or set()
        self.delays = delays or {}
        self.link = link
        self.calls: list[tuple[str, str, httpx.QueryParams]] = []

    async def request(self, method, path, query=None):
        query = httpx.QueryParams(query)
        self.calls.append((method, path, query))
        page = int(query['page'])
        if page in self.delays:
            await asyncio.sleep(self.delays[page])
        if page in self.failures:
            raise NetworkError(f'Connection reset on page {page}')
        link = self.link if self.link is not None else link_header(self.path, len(self.pages), page)
        return httpx.Response(
            200,
            headers={'Link': link} if link else {},
            content=json.dumps(self.pages.get(page, [])).encode(),
        )

    @property
    def pages_requested(self) -> list[int]:
        return sorted(int(q['page']) for _, _, q in self.calls)


def json_decoder(page, body):
    return json.loads(body)


@pytest.fixture
def sample_file_data():
    """Sample file data as returned by the files endpoint."""
    return {
        'id': 501,
        'folder_id': 42,
        'display_name': 'syllabus.pdf',
        'filename': 'syllabus.pdf',
        'content-type': 'application/pdf',
        'url': 'https://canvas.test/files/501/download',
        'size': 20480,
        'created_at': '2024-01-15T10:00:00Z',
        'updated_at': '2024-01-16T10:00:00Z',
        'locked': False,
        'hidden': False,
        'lock_at': None,
        'unlock_at': None,
        'thumbnail_url': None,
        'mime_class': 'pdf',
        'locked_for_user': False,
    }


@pytest.fixture
def sample_folder_data():
    """Sample folder data as returned by the folders endpoint."""
    return {
        'id': 42,
        'parent_folder_id': 7,
        'name': 'Week 1',
        'full_name': 'course files/Week 1',
        'files_url': 'https://canvas.test/api/v1/folders/42/files',
        'folders_url': 'https://canvas.test/api/v1/folders/42/folders',
        'context_type': 'Course',
        'context_id': 1234,
        'position': 3,
        'files_count': 4,
        'folders_count': 0,
        'created_at': '2024-01-10T09:00:00Z',
        'updated_at': '2024-01-10T09:00:00Z',
        'lock_at': None,
        'unlock_at': None,
        'locked': False,
        'hidden': None,
        'hidden_for_user': False,
        'locked_for_user': False,
        'for_submissions': False,
    }


@pytest.fixture
def sample_course_data():
    return {
        'id': 1234,
        'name': 'Introduction to Biology',
        'course_code': 'BIO-101',
        'workflow_state': 'available',
        'account_id': 1,
        'created_at': '2023-08-01T00:00:00Z',
        'time_zone': 'America/Denver',
    }


@pytest.fixture
def make_doer():
    """Factory for StubDoer transports."""
    return StubDoer


@pytest.fixture
def make_link():
    """Factory for Canvas style Link headers."""
    return link_header


@pytest.fixture
def decode_json():
    """Page decoder returning the raw JSON elements."""
    return json_decoder
