"""Error taxonomy for the fetch pipeline.

Every failure inside a task attempt surfaces as one of these (or as an
unexpected built-in exception, which the retry service treats the same way).
"""

from typing import Optional


class CommentFetchError(Exception):
    """Base class for all ytcomments errors."""


class InputError(CommentFetchError, ValueError):
    """Malformed locator, empty video id, or invalid user input."""


class SinkError(CommentFetchError, OSError):
    """The output stream could not be opened or written."""


class RemoteError(CommentFetchError):
    """Transport or API-level failure (quota and rate responses included)."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class CancellationError(CommentFetchError):
    """The shared cancellation signal fired while a task was suspended."""


class MaxRetryError(CommentFetchError):
    """Exception raised when the retry budget is exhausted."""

    def __init__(self, original_exception: BaseException, attempts: int):
        self.original_exception = original_exception
        self.attempts = attempts
        super().__init__(f"Max retries ({attempts} attempts) exceeded. Last error: {original_exception}")
