"""Defines common Value Objects used across the fetch pipeline.

These objects represent simple values or concepts like video identifiers,
comment records and retry policies, ensuring consistency and type safety.
"""

import enum
import re
from dataclasses import dataclass
from typing import List, NewType, Optional

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are strings at runtime.
VideoId = NewType("VideoId", str)          # Key extracted from a video URL
VideoLocator = NewType("VideoLocator", str)  # Human-supplied URL (or short link)
ApiKey = NewType("ApiKey", str)            # Opaque developer key
PageToken = NewType("PageToken", str)      # Continuation token from the API

# Every separator str.splitlines() honours
LINE_BREAKS = re.compile(r"\s*[\r\n\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029]+\s*")


@dataclass(frozen=True)
class CommentRecord:
    """A single top-level comment, as written to the sink."""
    author_display_name: str
    text: str

    def format_line(self) -> str:
        """Renders the record as one stored line (no trailing newline).

        Line breaks inside the author or text collapse to a single space.
        """
        author = LINE_BREAKS.sub(" ", self.author_display_name)
        text = LINE_BREAKS.sub(" ", self.text)
        return f"Comment from {author}: {text}"


@dataclass(frozen=True)
class CommentPage:
    """One page of results from a comment source."""
    records: List[CommentRecord]
    next_page_token: Optional[PageToken] = None


@dataclass(frozen=True)
class BackoffPolicy:
    """Value Object representing retry backoff configuration.

    max_retries of None means attempts are bounded by max_elapsed_seconds only.
    """
    initial_interval: float = 0.5
    multiplier: float = 1.5
    randomization_factor: float = 0.5
    max_interval: float = 60.0
    max_elapsed_seconds: Optional[float] = 15 * 60.0
    max_retries: Optional[int] = None


# === Task Bookkeeping ===

class TaskState(str, enum.Enum):
    PENDING = "pending"
    PERMIT_ACQUIRED = "permit_acquired"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.SUCCEEDED, TaskState.EXHAUSTED, TaskState.CANCELLED)


@dataclass
class FetchTask:
    """Ephemeral unit of work for one locator. Owned by a single asyncio task."""
    locator: VideoLocator
    max_results: int
    state: TaskState = TaskState.PENDING
    attempts: int = 0
    video_id: Optional[VideoId] = None
    records_written: int = 0
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class TaskOutcome:
    """Final, read-only view of a FetchTask once it reached a terminal state."""
    locator: VideoLocator
    state: TaskState
    attempts: int
    records_written: int = 0
    video_id: Optional[VideoId] = None
    output_path: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.state is TaskState.SUCCEEDED
