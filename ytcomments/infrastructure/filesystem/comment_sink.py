"""Durable per-video output for fetched comments.

Each video gets its own append-only text file, `comments_<video_id>.txt` by
default. Uses `aiofiles` so writes do not block the event loop.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Sequence, Union

import aiofiles

from ytcomments.domain.exceptions import SinkError
from ytcomments.domain.models.common import CommentRecord, VideoId

logger = logging.getLogger(__name__)

DEFAULT_FILENAME_TEMPLATE = "comments_{video_id}.txt"


class SinkHandle:
    """Open append stream for one video. Obtained from CommentSink.open()."""

    def __init__(self, video_id: VideoId, path: Path, stream):
        self.video_id = video_id
        self.path = path
        self._stream = stream
        self.records_written = 0

    async def append(self, record: CommentRecord) -> None:
        """Writes one record as a single line with one write call.

        The stream is unbuffered and opened with O_APPEND, so concurrent
        writers to the same file interleave whole lines.
        """
        line = (record.format_line() + "\n").encode("utf-8")
        try:
            await self._stream.write(line)
        except Exception as e:
            logger.error(f"Error writing to file {self.path}: {e}", exc_info=True)
            raise SinkError(f"Error writing to file {self.path}: {e}") from e
        self.records_written += 1

    async def append_many(self, records: Sequence[CommentRecord]) -> None:
        """Writes a whole batch of records with a single write call.

        A failed write leaves records_written unchanged.
        """
        if not records:
            return
        payload = "".join(record.format_line() + "\n" for record in records).encode("utf-8")
        try:
            await self._stream.write(payload)
        except Exception as e:
            logger.error(f"Error writing to file {self.path}: {e}", exc_info=True)
            raise SinkError(f"Error writing to file {self.path}: {e}") from e
        self.records_written += len(records)


class CommentSink:
    """Opens per-video append streams under an output directory."""

    def __init__(
        self,
        output_dir: Union[str, Path] = ".",
        filename_template: str = DEFAULT_FILENAME_TEMPLATE,
    ):
        self.output_dir = Path(output_dir)
        self.filename_template = filename_template
        logger.info(f"CommentSink initialized: dir={self.output_dir}, template={filename_template}")

    def path_for(self, video_id: VideoId) -> Path:
        """Output path derived deterministically from the video id."""
        return self.output_dir / self.filename_template.format(video_id=video_id)

    @asynccontextmanager
    async def open(self, video_id: VideoId) -> AsyncIterator[SinkHandle]:
        """Opens (creating if needed) the video's file in append mode.

        The stream is closed on every exit path, including errors raised by
        the caller inside the `async with` block.

        Raises:
            SinkError: If the file cannot be opened.
        """
        path = self.path_for(video_id)
        logger.debug(f"Opening sink for {video_id}: {path}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            stream = await aiofiles.open(path, mode="ab", buffering=0)
        except PermissionError as e:
            logger.error(f"Permission denied opening file: {path}")
            raise SinkError(f"Permission denied: {path}") from e
        except OSError as e:
            logger.error(f"Error opening file {path}: {e}", exc_info=True)
            raise SinkError(f"Error writing to file {path}: {e}") from e

        handle = SinkHandle(video_id, path, stream)
        try:
            yield handle
        finally:
            await stream.close()
            logger.debug(f"Closed sink for {video_id} after {handle.records_written} record(s).")
