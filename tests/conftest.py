import pytest
from typer.testing import CliRunner
from typing import Dict, List, Optional, Set

from ytcomments.domain.exceptions import RemoteError
from ytcomments.domain.interfaces.comment_source import CommentSource
from ytcomments.domain.models.common import BackoffPolicy, CommentPage, CommentRecord, PageToken
from ytcomments.infrastructure.cli.display import ConsoleDisplay
from ytcomments.infrastructure.config.settings import clear_test_config


class StubCommentSource(CommentSource):
    """In-memory CommentSource.

    `comments` maps video id -> records; pages are sliced by `page_size`.
    Videos in `always_fail` raise RemoteError on every call; `fail_times`
    makes a video fail that many calls before succeeding.
    """

    def __init__(
        self,
        comments: Optional[Dict[str, List[CommentRecord]]] = None,
        always_fail: Optional[Set[str]] = None,
        fail_times: Optional[Dict[str, int]] = None,
        page_size: int = 100,
    ):
        self.comments = comments or {}
        self.always_fail = always_fail or set()
        self.fail_times = dict(fail_times or {})
        self.page_size = page_size
        self.calls: List[tuple] = []

    async def list_comments(self, video_id, max_results, page_token=None) -> CommentPage:
        self.calls.append((video_id, max_results, page_token))
        if video_id in self.always_fail:
            raise RemoteError(f"quotaExceeded for {video_id}", status=403)
        if self.fail_times.get(video_id, 0) > 0:
            self.fail_times[video_id] -= 1
            raise RemoteError(f"backendError for {video_id}", status=503)

        records = self.comments.get(video_id, [])
        offset = int(page_token) if page_token else 0
        size = min(self.page_size, max_results)
        page = records[offset:offset + size]
        next_offset = offset + len(page)
        next_token = PageToken(str(next_offset)) if next_offset < len(records) else None
        return CommentPage(records=page, next_page_token=next_token)


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture
def fast_policy() -> BackoffPolicy:
    """Backoff policy with tiny, deterministic delays."""
    return BackoffPolicy(
        initial_interval=0.01,
        multiplier=2.0,
        randomization_factor=0.0,
        max_interval=0.05,
        max_elapsed_seconds=None,
        max_retries=3,
    )


@pytest.fixture
def sample_records() -> List[CommentRecord]:
    return [CommentRecord("Alice", "hi"), CommentRecord("Bob", "nice video")]


@pytest.fixture
def stub_source_cls():
    """The StubCommentSource class, for tests that need custom behaviour."""
    return StubCommentSource


@pytest.fixture
def stub_source(sample_records) -> StubCommentSource:
    return StubCommentSource(comments={"abc123": sample_records})


@pytest.fixture
def mock_console_display(mocker):
    """ Mocks the ConsoleDisplay to capture output easily.
        Patches the ConsoleDisplay where main.py builds it.
    """
    mock = mocker.MagicMock(spec=ConsoleDisplay)
    mocker.patch('ytcomments.main.ConsoleDisplay', return_value=mock)
    return mock


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Runs every test from an empty working directory with a dummy developer key."""
    workdir = tmp_path / "workdir"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.setenv("YOUTUBE_API_KEY", "DUMMY_TEST_KEY")
    clear_test_config()
    yield workdir
    clear_test_config()
