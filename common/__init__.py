"""
Common modules shared by snapback's processors.

This package holds the infrastructure around the pipeline: logging,
configuration, progress reporting, and the external tools (zip extraction,
exiftool, ffmpeg).
"""

from .logging_config import setup_logging
from .dependency_checker import (
    check_exiftool,
    check_ffmpeg,
    print_exiftool_error,
    print_ffmpeg_error,
)

__version__ = "0.1.0"
__all__ = [
    "setup_logging",
    "check_exiftool",
    "check_ffmpeg",
    "print_exiftool_error",
    "print_ffmpeg_error",
]
