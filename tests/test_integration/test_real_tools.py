"""
Tests against the real exiftool and ffmpeg binaries.

Skipped when the tools are not installed.
"""

import json
import shutil
import subprocess
from pathlib import Path
from typing import Dict

import pytest
from PIL import Image

from processors.snapchat_memories.manifest import parse_manifest
from processors.snapchat_memories.matching import build_index
from processors.snapchat_memories.pipeline import (
    ExternalMediaTools,
    OverlayMode,
    process_file,
)
from tests.fixtures.generators import make_entry
from tests.fixtures.media_samples import write_jpeg, write_webp_overlay

EXIFTOOL_AVAILABLE = shutil.which("exiftool") is not None
FFMPEG_AVAILABLE = shutil.which("ffmpeg") is not None

skip_no_exiftool = pytest.mark.skipif(
    not EXIFTOOL_AVAILABLE, reason="exiftool not installed"
)
skip_no_ffmpeg = pytest.mark.skipif(
    not FFMPEG_AVAILABLE, reason="ffmpeg not installed"
)

pytestmark = pytest.mark.integration


def read_tags(path: Path, *tags: str) -> Dict:
    result = subprocess.run(
        ["exiftool", "-j", "-n", *[f"-{tag}" for tag in tags], str(path)],
        capture_output=True,
        text=True,
        check=True,
    )
    return json.loads(result.stdout)[0]


def make_index(**entry_kwargs):
    entry = make_entry(**entry_kwargs)
    return build_index(parse_manifest(json.dumps({"Saved Media": [entry]}).encode()))


def make_video(path: Path, size: str = "32x32") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    subprocess.run(
        [
            "ffmpeg", "-y", "-f", "lavfi", "-i", f"color=c=blue:s={size}:d=1",
            "-pix_fmt", "yuv420p", str(path),
        ],
        capture_output=True,
        check=True,
    )
    return path


@skip_no_exiftool
class TestRealMetadata:
    def test_image_is_stamped(self, tmp_path):
        image = write_jpeg(tmp_path / "2023-06-01_XYZ-main.jpg")
        index = make_index(identifier="XYZ", location="x: -33.8688, 151.2093")

        outcome = process_file(image, index, OverlayMode.IGNORE, ExternalMediaTools())

        assert outcome.metadata_applied
        tags = read_tags(
            image,
            "EXIF:DateTimeOriginal",
            "EXIF:GPSLatitude",
            "EXIF:GPSLatitudeRef",
            "EXIF:GPSLongitude",
            "EXIF:GPSLongitudeRef",
        )
        assert tags["DateTimeOriginal"] == "2023:06:01 12:00:00"
        assert tags["GPSLatitude"] == pytest.approx(33.8688)
        assert tags["GPSLatitudeRef"] == "S"
        assert tags["GPSLongitude"] == pytest.approx(151.2093)
        assert tags["GPSLongitudeRef"] == "E"

    def test_stamping_twice_gives_same_tags(self, tmp_path):
        image = write_jpeg(tmp_path / "2023-06-01_XYZ-main.jpg")
        index = make_index(identifier="XYZ")
        tools = ExternalMediaTools()
        tag_names = ("EXIF:DateTimeOriginal", "EXIF:GPSLatitude", "EXIF:GPSLongitude")

        process_file(image, index, OverlayMode.IGNORE, tools)
        first = read_tags(image, *tag_names)
        process_file(image, index, OverlayMode.IGNORE, tools)
        second = read_tags(image, *tag_names)

        assert first == second

    def test_unreadable_file_reports_failure(self, tmp_path):
        bogus = tmp_path / "2023-06-01_XYZ-main.jpg"
        bogus.write_bytes(b"definitely not a jpeg")
        index = make_index(identifier="XYZ")

        outcome = process_file(bogus, index, OverlayMode.IGNORE, ExternalMediaTools())

        assert outcome.failed
        assert not outcome.metadata_applied

    @skip_no_ffmpeg
    def test_video_creation_date_is_utc(self, tmp_path):
        video = make_video(tmp_path / "2023-06-01_VID-main.mp4")
        index = make_index(identifier="VID", media_type="Video")

        outcome = process_file(video, index, OverlayMode.IGNORE, ExternalMediaTools())

        assert outcome.metadata_applied
        tags = read_tags(video, "QuickTime:CreateDate")
        assert tags["CreateDate"] == "2023:06:01 12:00:00"


@skip_no_exiftool
@skip_no_ffmpeg
class TestRealComposite:
    def test_image_overlay_overwrite(self, tmp_path):
        image = write_jpeg(tmp_path / "2023-06-01_XYZ-main.jpg", size=(32, 32))
        write_webp_overlay(tmp_path / "2023-06-01_XYZ-overlay.png", size=(64, 64))
        index = make_index(identifier="XYZ")

        outcome = process_file(image, index, OverlayMode.OVERWRITE, ExternalMediaTools())

        assert outcome.overlay_applied
        assert not outcome.degraded_overlay
        with Image.open(image) as result:
            assert result.format == "JPEG"
            assert result.size == (64, 64)
        assert read_tags(image, "EXIF:DateTimeOriginal")["DateTimeOriginal"] == (
            "2023:06:01 12:00:00"
        )
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "2023-06-01_XYZ-main.jpg",
            "2023-06-01_XYZ-overlay.png",
        ]

    def test_video_overlay_copy(self, tmp_path):
        video = make_video(tmp_path / "2023-06-01_VID-main.mp4")
        original = video.read_bytes()
        write_webp_overlay(tmp_path / "2023-06-01_VID-overlay.png", size=(16, 16))
        index = make_index(identifier="VID", media_type="Video")

        outcome = process_file(video, index, OverlayMode.COPY, ExternalMediaTools())

        assert outcome.overlay_applied
        assert outcome.output.name == "2023-06-01_VID-main_with_overlay.mp4"
        assert outcome.output.stat().st_size > 0
        assert read_tags(video, "QuickTime:CreateDate")["CreateDate"] == "2023:06:01 12:00:00"
        assert video.read_bytes() != original  # stamped in place, not composited
