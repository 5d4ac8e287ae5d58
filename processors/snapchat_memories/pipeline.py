"""
Per-file restoration pipeline

For every candidate file:

1. Metadata: if the file name carries an identifier that matches a manifest
   record, stamp the file in place with the capture time and location.
2. Overlay: unless overlays are ignored, look for the `-overlay.png` sibling,
   normalize it to a real PNG and composite it with ffmpeg.
   - COPY: the original is duplicated as `*_with_overlay.*` and only the
     duplicate is composited.
   - OVERWRITE: the original itself is replaced by the composited file.
3. Report what was applied.

Failures are contained per file: nothing in here raises to the caller, and
temporary files are removed on every path.
"""

import logging
import os
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from common import exiftool, overlay
from common.utils import is_video, update_file_timestamps
from processors.snapchat_memories.manifest import Record
from processors.snapchat_memories.matching import (
    companion_path_for,
    extract_identifier,
    overlay_path_for,
)

logger = logging.getLogger(__name__)


class OverlayMode(str, Enum):
    IGNORE = "ignore"
    COPY = "copy"
    OVERWRITE = "overwrite"


class MetadataStatus(str, Enum):
    APPLIED = "applied"
    FAILED = "failed"
    NO_IDENTIFIER = "no_identifier"
    NO_RECORD = "no_record"


class OverlayStatus(str, Enum):
    APPLIED = "applied"
    FAILED = "failed"
    DISABLED = "disabled"
    NO_OVERLAY = "no_overlay"


class MediaTools(ABC):
    """The two external operations the pipeline depends on."""

    @abstractmethod
    def write_metadata(self, path: Path, record: Record) -> bool:
        """Stamp `path` in place with the record's time and location.

        Returns:
            True on success, False otherwise
        """

    @abstractmethod
    def composite_overlay(
        self, base: Path, overlay_image: Path, output: Path, is_video: bool
    ) -> bool:
        """Render `overlay_image` on top of `base` into `output`.

        Returns:
            True on success, False otherwise
        """


class ExternalMediaTools(MediaTools):
    """MediaTools backed by exiftool and ffmpeg."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def write_metadata(self, path: Path, record: Record) -> bool:
        return exiftool.write_metadata(
            path,
            record.exif_timestamp,
            record.latitude_text,
            record.longitude_text,
            timeout=self.timeout,
        )

    def composite_overlay(
        self, base: Path, overlay_image: Path, output: Path, is_video: bool
    ) -> bool:
        return overlay.composite_overlay(
            base, overlay_image, output, is_video, timeout=self.timeout
        )


@dataclass
class FileOutcome:
    """What happened to one file."""

    path: Path
    identifier: Optional[str] = None
    metadata: MetadataStatus = MetadataStatus.NO_IDENTIFIER
    overlay: OverlayStatus = OverlayStatus.DISABLED
    degraded_overlay: bool = False
    output: Optional[Path] = None
    error: Optional[str] = None

    @property
    def metadata_applied(self) -> bool:
        return self.metadata is MetadataStatus.APPLIED

    @property
    def overlay_applied(self) -> bool:
        return self.overlay is OverlayStatus.APPLIED

    @property
    def failed(self) -> bool:
        return (
            self.metadata is MetadataStatus.FAILED
            or self.overlay is OverlayStatus.FAILED
            or self.error is not None
        )

    @property
    def summary(self) -> str:
        applied = []
        if self.metadata_applied:
            applied.append("metadata")
        if self.overlay_applied:
            applied.append("overlay")
        return "+".join(applied) if applied else "none"


def normalized_overlay_path(overlay_path: Path) -> Path:
    """Temporary PNG path for a normalized overlay."""
    return overlay_path.with_name(f".{overlay_path.stem}.normalized.png")


def composite_temp_path(target: Path) -> Path:
    """Temporary compositor output path; keeps the extension for ffmpeg."""
    return target.with_name(f".{target.stem}.composite{target.suffix}")


def _remove(path: Optional[Path], label: str) -> None:
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to clean up {label} {path}: {e}")


def _stamp(path: Path, record: Record, tools: MediaTools) -> bool:
    if not tools.write_metadata(path, record):
        return False
    update_file_timestamps(path, record.capture_time)
    return True


def _restamp(target: Path, record: Record, tools: MediaTools) -> None:
    try:
        restored = _stamp(target, record, tools)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"[{target.name}] Metadata writer raised after compositing: {e}")
        return
    if not restored:
        logger.warning(f"[{target.name}] Could not restore metadata after compositing")


def _apply_metadata(
    path: Path, record: Record, tools: MediaTools, outcome: FileOutcome
) -> None:
    try:
        if _stamp(path, record, tools):
            outcome.metadata = MetadataStatus.APPLIED
            logger.debug(f"[{path.name}] Metadata written ({record.exif_timestamp})")
        else:
            outcome.metadata = MetadataStatus.FAILED
            logger.error(f"[{path.name}] Metadata writer failed")
    except Exception as e:  # noqa: BLE001
        outcome.metadata = MetadataStatus.FAILED
        outcome.error = f"metadata: {e}"
        logger.error(f"[{path.name}] Metadata step raised: {e}")


def _apply_overlay(
    path: Path,
    record: Optional[Record],
    mode: OverlayMode,
    tools: MediaTools,
    outcome: FileOutcome,
) -> None:
    if mode is OverlayMode.IGNORE:
        outcome.overlay = OverlayStatus.DISABLED
        return

    overlay_path = overlay_path_for(path)
    if overlay_path is None or not overlay_path.is_file():
        outcome.overlay = OverlayStatus.NO_OVERLAY
        logger.debug(f"[{path.name}] No overlay found")
        return

    normalized = normalized_overlay_path(overlay_path)
    duplicate = None
    temp_output = None

    try:
        if overlay.normalize_overlay(overlay_path, normalized):
            overlay_input = normalized
        else:
            overlay_input = overlay_path
            outcome.degraded_overlay = True
            logger.warning(
                f"[{path.name}] Overlay could not be normalized, using original bytes"
            )

        if mode is OverlayMode.COPY:
            duplicate = companion_path_for(path)
            shutil.copy2(path, duplicate)
            target = duplicate
        else:
            target = path

        temp_output = composite_temp_path(target)
        if tools.composite_overlay(target, overlay_input, temp_output, is_video(path)):
            os.replace(temp_output, target)
            temp_output = None
            outcome.overlay = OverlayStatus.APPLIED
            outcome.output = target
            logger.debug(f"[{path.name}] Overlay composited into {target.name}")

            # The compositor re-encodes and drops the stamp
            if record is not None:
                _restamp(target, record, tools)
        else:
            outcome.overlay = OverlayStatus.FAILED
            logger.error(f"[{path.name}] Compositor failed")
    except Exception as e:  # noqa: BLE001
        outcome.overlay = OverlayStatus.FAILED
        outcome.error = f"overlay: {e}"
        logger.error(f"[{path.name}] Overlay step raised: {e}")
    finally:
        _remove(temp_output, "composite output")
        if duplicate is not None and outcome.overlay is not OverlayStatus.APPLIED:
            _remove(duplicate, "partial copy")
        _remove(normalized, "normalized overlay")


def process_file(
    path: Path,
    index: Mapping[str, Record],
    mode: OverlayMode,
    tools: MediaTools,
) -> FileOutcome:
    """Run metadata restoration and overlay compositing for one file.

    Args:
        path: Candidate media file
        index: identifier -> Record lookup
        mode: Overlay policy
        tools: Metadata writer and compositor

    Returns:
        FileOutcome describing what was applied; never raises
    """
    path = Path(path)
    outcome = FileOutcome(path=path)
    record = None

    try:
        outcome.identifier = extract_identifier(path.stem)
        if outcome.identifier is None:
            outcome.metadata = MetadataStatus.NO_IDENTIFIER
            logger.warning(f"[{path.name}] No identifier in file name, skipping metadata")
        else:
            record = index.get(outcome.identifier)
            if record is None:
                outcome.metadata = MetadataStatus.NO_RECORD
                logger.warning(
                    f"[{path.name}] No manifest record for {outcome.identifier}, skipping metadata"
                )
            else:
                _apply_metadata(path, record, tools, outcome)

        _apply_overlay(path, record, mode, tools, outcome)
    except Exception as e:  # noqa: BLE001
        outcome.error = str(e)
        logger.error(f"[{path.name}] Unexpected error: {e}")

    logger.info(f"[{path.name}] Done: {outcome.summary}")
    return outcome
