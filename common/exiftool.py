#!/usr/bin/env python3
"""
ExifTool metadata writer

Stamps a single media file in place with a capture timestamp and GPS
coordinates. Only the exiftool exit status is consulted to decide success.

Images get EXIF date tags plus absolute GPS values with hemisphere refs.
Videos get QuickTime date tags (written as UTC) plus signed GPS values,
which exiftool maps onto the QuickTime location atoms.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from common.utils import get_gps_format, is_video

logger = logging.getLogger(__name__)


def build_metadata_command(
    file_path: Path, timestamp: str, latitude: str, longitude: str
) -> List[str]:
    """Build the exiftool argv for one file.

    Args:
        file_path: File to stamp in place
        timestamp: Capture time in exiftool format ("YYYY:MM:DD HH:MM:SS")
        latitude: Signed decimal latitude as text
        longitude: Signed decimal longitude as text

    Returns:
        Command list suitable for subprocess.run
    """
    cmd = [
        "exiftool",
        "-overwrite_original",
        "-api",
        "largefilesupport=1",
    ]

    if is_video(file_path):
        # QuickTime stores UTC; an explicit zone stops exiftool reading it as local time
        cmd += ["-api", "QuickTimeUTC"]
        timestamp = f"{timestamp}+00:00"

    cmd += [
        f"-DateTimeOriginal={timestamp}",
        f"-CreateDate={timestamp}",
        f"-ModifyDate={timestamp}",
    ]

    if get_gps_format(file_path) == "absolute":
        lat = float(latitude)
        lon = float(longitude)
        cmd += [
            f"-GPSLatitude={latitude.lstrip('-')}",
            f"-GPSLatitudeRef={'N' if lat >= 0 else 'S'}",
            f"-GPSLongitude={longitude.lstrip('-')}",
            f"-GPSLongitudeRef={'E' if lon >= 0 else 'W'}",
        ]
    else:
        cmd += [
            f"-GPSLatitude={latitude}",
            f"-GPSLongitude={longitude}",
            f"-Keys:GPSCoordinates={latitude}, {longitude}",
        ]

    cmd.append(str(file_path))
    return cmd


def write_metadata(
    file_path: Path,
    timestamp: str,
    latitude: str,
    longitude: str,
    timeout: Optional[float] = None,
) -> bool:
    """Write timestamp and location metadata into a file in place.

    Writing the same values twice leaves the same tags behind, exiftool
    replaces tag values rather than appending to them.

    Args:
        file_path: File to stamp
        timestamp: Capture time in exiftool format ("YYYY:MM:DD HH:MM:SS")
        latitude: Signed decimal latitude as text
        longitude: Signed decimal longitude as text
        timeout: Optional limit in seconds; None waits indefinitely

    Returns:
        True if exiftool exited successfully, False otherwise
    """
    cmd = build_metadata_command(Path(file_path), timestamp, latitude, longitude)
    logger.debug(f"[{Path(file_path).name}] exiftool command: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired:
        logger.error(f"[{Path(file_path).name}] exiftool timed out after {timeout}s")
        return False
    except OSError as e:
        logger.error(f"[{Path(file_path).name}] Could not run exiftool: {e}")
        return False

    if result.returncode != 0:
        logger.error(
            f"[{Path(file_path).name}] exiftool failed (exit code {result.returncode}): "
            f"{result.stderr.strip()}"
        )
        return False

    return True
