#!/usr/bin/env python3
"""
Common utility functions for media handling
"""

import logging
import os
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


# ============================================================================
# Media Type Detection
# ============================================================================

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
VIDEO_EXTENSIONS = {".mp4", ".mov"}


def get_media_type(file_path) -> Optional[str]:
    """Determine media type from file extension

    Args:
        file_path: Path to the file (string or Path object)

    Returns:
        "image" if image file, "video" if video file, None if unsupported

    Example:
        >>> get_media_type("2023-01-01_ABC-main.jpg")
        'image'
        >>> get_media_type("2023-01-01_ABC-main.mp4")
        'video'
    """
    ext = os.path.splitext(str(file_path))[1].lower()

    if ext in IMAGE_EXTENSIONS:
        return "image"
    elif ext in VIDEO_EXTENSIONS:
        return "video"
    else:
        return None


def is_video(file_path) -> bool:
    """Check if file is a video based on its extension"""
    return get_media_type(file_path) == "video"


def get_gps_format(file_path) -> str:
    """Get GPS coordinate format for file type

    Different file types require different GPS coordinate formats in exiftool:
    - Images: Use absolute values with explicit hemisphere reference fields
    - Videos: Use signed coordinates (exiftool auto-sets hemisphere)

    Args:
        file_path: Path to the file (string or Path object)

    Returns:
        "absolute" for images, "signed" for videos
    """
    return "signed" if is_video(file_path) else "absolute"


def parse_bool_env(value: str) -> bool:
    """Parse boolean from environment variable string.

    Example:
        >>> parse_bool_env("true")
        True
        >>> parse_bool_env("0")
        False
    """
    return value.strip().lower() in ("true", "1", "yes", "on")


def update_file_timestamps(file_path, moment: Optional[datetime]) -> bool:
    """Set filesystem access and modification times to a capture instant.

    Args:
        file_path: Path to the file (string or Path object)
        moment: Timezone-aware capture time, or None

    Returns:
        True if timestamps were updated successfully, False otherwise
    """
    if moment is None:
        return False

    try:
        timestamp = moment.timestamp()
        os.utime(file_path, (timestamp, timestamp))
        return True
    except (ValueError, TypeError, OSError) as e:
        logger.warning(f"Failed to update timestamps for {file_path}: {e}")
        return False
