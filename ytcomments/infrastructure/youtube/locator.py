"""Extracts video ids from user-supplied locators (watch URLs, short links)."""

import logging
import re
from urllib.parse import parse_qs, urlparse

from ytcomments.domain.exceptions import InputError
from ytcomments.domain.models.common import VideoId

logger = logging.getLogger(__name__)

INVALID_URL_MSG = "Invalid YouTube URL"
SHORT_LINK_HOSTS = {"youtu.be", "www.youtu.be"}
PATH_PREFIXES = ("/shorts/", "/embed/", "/live/")
VIDEO_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def extract_video_id(locator: str) -> VideoId:
    """Returns the video id named by `locator`.

    Supports `...watch?v=<id>` URLs (the `v` query parameter), `youtu.be/<id>`
    short links and `/shorts/<id>`-style paths. Ids are limited to letters,
    digits, `-` and `_`.

    Raises:
        InputError: If the locator cannot be parsed or yields an empty or
            malformed id.
    """
    if not locator or not locator.strip():
        raise InputError(f"{INVALID_URL_MSG}: empty locator")
    try:
        parsed = urlparse(locator.strip())
    except ValueError as e:
        raise InputError(f"{INVALID_URL_MSG}: failed to parse URL: {e}") from e

    video_id = ""
    query_values = parse_qs(parsed.query).get("v")
    if query_values:
        video_id = query_values[0].strip()
    elif parsed.netloc.lower() in SHORT_LINK_HOSTS:
        video_id = parsed.path.strip("/").split("/")[0]
    else:
        for prefix in PATH_PREFIXES:
            if parsed.path.startswith(prefix):
                video_id = parsed.path[len(prefix):].split("/")[0]
                break

    if not video_id:
        raise InputError(f"{INVALID_URL_MSG}: no video id in '{locator}'")
    if not VIDEO_ID_PATTERN.fullmatch(video_id):
        raise InputError(f"{INVALID_URL_MSG}: malformed video id '{video_id}'")
    logger.debug(f"Extracted video id '{video_id}' from '{locator}'")
    return VideoId(video_id)
