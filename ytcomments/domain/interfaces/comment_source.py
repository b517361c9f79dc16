"""Interface for remote comment-listing providers.

Defines the contract for fetching one page of top-level comments for a
video, allowing the orchestrator to stay independent of the concrete
API client (e.g., YouTube Data API v3, a stub in tests).
"""

import abc
from typing import Optional

from ..models.common import CommentPage, PageToken, VideoId


class CommentSource(abc.ABC):
    """Abstract Base Class for comment listing."""

    @abc.abstractmethod
    async def list_comments(
        self,
        video_id: VideoId,
        max_results: int,
        page_token: Optional[PageToken] = None,
    ) -> CommentPage:
        """Fetches one page of comments for a video asynchronously.

        Args:
            video_id: The video to list comments for.
            max_results: Upper bound on records in this page.
            page_token: Continuation token from a previous page, if any.

        Returns:
            A CommentPage with the records and the next page token (None when
            there are no more pages).

        Raises:
            RemoteError: If the call fails (transient or permanent; the caller
                does not distinguish them).
        """
        pass
