"""Utility helper functions for the relay."""

import time
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote


IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "svg", "icon"}
VIDEO_EXTENSIONS = {"mp4", "webm"}
AUDIO_EXTENSIONS = {"mp3", "wav", "ogg"}


def extension_of(file_name: Optional[str]) -> str:
    """
    Get the lower-cased extension of a file name.

    Args:
        file_name: Original file name

    Returns:
        Extension without the dot, empty string when the name has no dot
    """
    if not file_name or "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[1].lower()


def current_millis() -> int:
    """
    Get the current time as epoch milliseconds.

    Returns:
        Milliseconds since the epoch
    """
    return int(time.time() * 1000)


def offset_timestamp(offset_hours: int, now: Optional[datetime] = None) -> str:
    """
    Get an ISO timestamp shifted by a fixed number of hours.

    Args:
        offset_hours: Hours added to UTC before formatting
        now: Reference time, defaults to the current UTC time

    Returns:
        ISO-8601 string with millisecond precision and a trailing Z
    """
    now = now or datetime.now(timezone.utc)
    shifted = now.astimezone(timezone.utc) + timedelta(hours=offset_hours)
    return shifted.strftime("%Y-%m-%dT%H:%M:%S.") + f"{shifted.microsecond // 1000:03d}Z"


def build_file_url(origin: str, millis: int, extension: str) -> str:
    return f"{origin}/{millis}.{extension}"


def content_disposition(file_name: Optional[str]) -> str:
    """
    Build an inline Content-Disposition header value.

    Args:
        file_name: Display name, may be None

    Returns:
        Header value carrying the percent-encoded name
    """
    encoded = quote(file_name or "", safe="!~*'()")
    return f"inline; filename*=UTF-8''{encoded}"


def format_size(size: Optional[int]) -> str:
    """
    Format a byte count for humans.

    Args:
        size: Byte count, None treated as zero

    Returns:
        Size string like '1.50 KB'
    """
    units = ["B", "KB", "MB", "GB"]
    value = float(size or 0)
    unit_index = 0
    while value >= 1024 and unit_index < len(units) - 1:
        value /= 1024
        unit_index += 1
    return f"{value:.2f} {units[unit_index]}"


def preview_kind(url: str) -> str:
    """
    Guess how a stored file should be previewed from its URL.

    Args:
        url: Public file URL

    Returns:
        One of 'image', 'video', 'audio' or 'file'
    """
    ext = extension_of(url.rsplit("/", 1)[-1])
    if ext in IMAGE_EXTENSIONS:
        return "image"
    if ext in VIDEO_EXTENSIONS:
        return "video"
    if ext in AUDIO_EXTENSIONS:
        return "audio"
    return "file"
