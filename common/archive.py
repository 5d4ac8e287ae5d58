#!/usr/bin/env python3
"""
Archive extraction

Snapchat delivers memories as one or more zip archives. Each archive is
extracted into its own directory; a broken archive is reported and skipped
without affecting the others.
"""

import logging
import zipfile
from pathlib import Path

logger = logging.getLogger(__name__)


def extract_archive(zip_path: Path, dest_dir: Path) -> bool:
    """Extract every entry of a zip archive into a directory.

    Args:
        zip_path: Archive to extract
        dest_dir: Destination directory (created if needed)

    Returns:
        True if the archive was fully extracted, False otherwise
    """
    try:
        with zipfile.ZipFile(zip_path, "r") as zip_ref:
            dest_dir.mkdir(parents=True, exist_ok=True)
            zip_ref.extractall(dest_dir)
        logger.debug(f"Extracted {zip_path.name} -> {dest_dir}")
        return True
    except (zipfile.BadZipFile, OSError) as e:
        logger.error(f"Failed to extract {zip_path}: {e}")
        return False
