"""Concrete implementation of the CommentSource interface using the YouTube Data API v3.

Hides the specifics of `google-api-python-client` and translates
`commentThreads.list` responses into CommentPage/CommentRecord objects.
The client library is synchronous, so each call runs in a worker thread.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ytcomments.domain.exceptions import RemoteError
from ytcomments.domain.interfaces.comment_source import CommentSource
from ytcomments.domain.models.common import CommentPage, CommentRecord, PageToken, VideoId

logger = logging.getLogger(__name__)

YOUTUBE_API_SERVICE_NAME = "youtube"
YOUTUBE_API_VERSION = "v3"
MAX_PAGE_SIZE = 100  # API limit for commentThreads.list


class YouTubeCommentSource(CommentSource):
    """YouTube implementation of the CommentSource interface."""

    def __init__(self, api_key: str, text_format: str = "plainText", client: Any = None):
        """Initializes the YouTube client.

        Args:
            api_key: Developer key, attached to every request.
            text_format: 'plainText' or 'html' for the comment text.
            client: Pre-built discovery client (tests); built from api_key if None.
        """
        if not api_key:
            raise ValueError("YouTube developer key not provided.")
        self.text_format = text_format
        if client is not None:
            self.client = client
        else:
            try:
                self.client = build(
                    YOUTUBE_API_SERVICE_NAME,
                    YOUTUBE_API_VERSION,
                    developerKey=api_key,
                    cache_discovery=False,
                )
            except Exception as e:
                logger.error(f"Failed to initialize YouTube client: {e}", exc_info=True)
                raise RemoteError(f"Error creating new YouTube client: {e}") from e
        logger.debug("YouTubeCommentSource initialized.")

    @staticmethod
    def _parse_item(item: Dict[str, Any]) -> CommentRecord:
        snippet = item["snippet"]["topLevelComment"]["snippet"]
        return CommentRecord(
            author_display_name=snippet.get("authorDisplayName", ""),
            text=snippet.get("textDisplay", ""),
        )

    def _list_sync(self, video_id: VideoId, page_size: int, page_token: Optional[PageToken]) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "part": "snippet",
            "videoId": video_id,
            "maxResults": page_size,
            "textFormat": self.text_format,
        }
        if page_token:
            params["pageToken"] = page_token
        return self.client.commentThreads().list(**params).execute()

    async def list_comments(
        self,
        video_id: VideoId,
        max_results: int,
        page_token: Optional[PageToken] = None,
    ) -> CommentPage:
        page_size = max(1, min(MAX_PAGE_SIZE, max_results))
        logger.debug(f"commentThreads.list videoId={video_id} maxResults={page_size} pageToken={page_token}")
        try:
            response = await asyncio.to_thread(self._list_sync, video_id, page_size, page_token)
        except HttpError as e:
            status = getattr(getattr(e, "resp", None), "status", None)
            logger.warning(f"YouTube API error for {video_id} (status={status}): {e}")
            raise RemoteError(f"Error during API call for {video_id}: {e}", status=status) from e
        except (ConnectionError, TimeoutError, OSError) as e:
            logger.warning(f"Network error fetching comments for {video_id}: {e}")
            raise RemoteError(f"Network error fetching comments for {video_id}: {e}") from e

        try:
            records = [self._parse_item(item) for item in response.get("items", [])]
        except (KeyError, TypeError) as e:
            raise RemoteError(f"Unexpected response shape for {video_id}: {e}") from e

        next_token = response.get("nextPageToken")
        return CommentPage(records=records, next_page_token=PageToken(next_token) if next_token else None)
