#!/usr/bin/env python3
"""
Snapchat Overlay Module

Composites caption/sticker overlays onto memory media with ffmpeg.

Snapchat ships overlays with a `.png` extension, but the bytes are usually a
WebP image with a separate alpha channel. ffmpeg's PNG demuxer rejects those,
so overlays are first decoded with Pillow and re-encoded as a literal PNG.

For videos the still overlay is looped for the clip's duration, scaled to the
video frame, and the audio stream is passed through untouched. For images a
single frame is rendered at the overlay's resolution.
"""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from PIL import Image

logger = logging.getLogger(__name__)


def normalize_overlay(overlay_path: Path, dest_path: Path) -> bool:
    """
    Decode an overlay regardless of its extension and save it as RGBA PNG.

    Args:
        overlay_path: Overlay as exported (any format Pillow can read)
        dest_path: Where to write the PNG

    Returns:
        True if the PNG was written, False if the overlay could not be
        decoded or re-encoded
    """
    try:
        with Image.open(overlay_path) as overlay_img:
            logger.debug(
                f"[{overlay_path.name}] Overlay decoded as {overlay_img.format} "
                f"{overlay_img.size[0]}x{overlay_img.size[1]} ({overlay_img.mode})"
            )
            if overlay_img.mode != "RGBA":
                overlay_img = overlay_img.convert("RGBA")
            overlay_img.save(dest_path, format="PNG")
        return True
    except Exception as e:  # noqa: BLE001
        logger.warning(f"Cannot decode overlay (possibly corrupted): {overlay_path}: {e}")
        try:
            dest_path.unlink(missing_ok=True)
        except OSError as cleanup_error:
            logger.debug(f"Could not remove partial overlay {dest_path}: {cleanup_error}")
        return False


def build_composite_command(
    base_path: Path, overlay_path: Path, output_path: Path, is_video: bool
) -> List[str]:
    """
    Build the ffmpeg command that renders an overlay on top of a base file.

    Args:
        base_path: Video or image to draw on
        overlay_path: Overlay image (PNG with alpha)
        output_path: Where ffmpeg writes the composited file
        is_video: True for video bases, False for images

    Returns:
        Command list suitable for subprocess.run
    """
    if is_video:
        # [1] is the looped overlay, scaled to the size of [0]
        filter_complex = (
            "[1:v][0:v]scale2ref[ovr][base];"
            "[base][ovr]overlay=0:0:shortest=1:format=auto,format=yuv420p[v]"
        )
        return [
            "ffmpeg",
            "-y",
            "-i",
            str(base_path),
            "-loop",
            "1",
            "-i",
            str(overlay_path),
            "-filter_complex",
            filter_complex,
            "-map",
            "[v]",
            "-map",
            "0:a?",
            "-map_metadata",
            "0",
            "-c:a",
            "copy",
            "-movflags",
            "+faststart",
            str(output_path),
        ]

    # Base scaled to the overlay's resolution, single output frame
    filter_complex = "[0:v][1:v]scale2ref[base][ovr];[base][ovr]overlay=0:0[v]"
    return [
        "ffmpeg",
        "-y",
        "-i",
        str(base_path),
        "-i",
        str(overlay_path),
        "-filter_complex",
        filter_complex,
        "-map",
        "[v]",
        "-frames:v",
        "1",
        "-update",
        "1",
        "-q:v",
        "2",
        str(output_path),
    ]


def composite_overlay(
    base_path: Path,
    overlay_path: Path,
    output_path: Path,
    is_video: bool,
    timeout: Optional[float] = None,
) -> bool:
    """
    Render an overlay on top of a base file into a new output file.

    Args:
        base_path: Video or image to draw on
        overlay_path: Overlay image (PNG with alpha)
        output_path: Where the composited file is written
        is_video: True for video bases, False for images
        timeout: Optional limit in seconds; None waits indefinitely

    Returns:
        True if ffmpeg exited successfully, False otherwise
    """
    cmd = build_composite_command(base_path, overlay_path, output_path, is_video)
    logger.debug(f"[{base_path.name}] ffmpeg command: {' '.join(cmd)}")

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
        logger.error(f"[{base_path.name}] ffmpeg timed out after {timeout}s")
        return False
    except OSError as e:
        logger.error(f"[{base_path.name}] Could not run ffmpeg: {e}")
        return False

    if result.returncode != 0:
        logger.error(
            f"[{base_path.name}] ffmpeg failed (exit code {result.returncode})"
        )
        if result.stderr:
            logger.debug(f"[{base_path.name}] ffmpeg stderr:\n{result.stderr}")
        return False

    return True
