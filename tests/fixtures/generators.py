"""
Test export generator functions.

These functions create manifests and extracted export trees shaped like a
Snapchat memories download:

    {root}/
        json/memories_history.json
        memories/
            2023-06-01_XYZ-main.jpg
            2023-06-01_XYZ-overlay.png
"""

import json
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

from tests.fixtures.media_samples import (
    write_jpeg,
    write_media_file,
    write_webp_overlay,
)


def make_download_link(identifier: str) -> str:
    """Build a download link carrying the identifier like Snapchat's do."""
    return (
        "https://app.snapchat.com/dmd/memories?uid=00000000-aaaa-bbbb-cccc-000000000000"
        f"&sid={identifier}&mid={identifier}-mid&ts=1685620800000"
    )


def make_entry(
    identifier: str,
    date: str = "2023-06-01 12:00:00 UTC",
    media_type: str = "Image",
    location: str = "Latitude, Longitude: 10.0, 20.0",
) -> Dict[str, str]:
    """Build one "Saved Media" entry."""
    return {
        "Date": date,
        "Media Type": media_type,
        "Location": location,
        "Download Link": make_download_link(identifier),
    }


def create_manifest(path: Path, entries: List[Dict[str, str]]) -> Path:
    """Write a memories_history.json with the given entries."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"Saved Media": entries}, indent=2), encoding="utf-8")
    return path


def create_memories_export(
    base_path: Path,
    folder: str = "memories",
    memories: Optional[List[Dict]] = None,
) -> Path:
    """Create a manifest plus extracted files under base_path.

    Args:
        base_path: Export root
        folder: Name of the extracted folder (must match the discovery prefix)
        memories: List of dicts with keys identifier, date, media_type,
                  location, overlay (bool), in_manifest (bool)

    Returns:
        base_path
    """
    if memories is None:
        memories = [
            {"identifier": "AAA111", "media_type": "Image", "overlay": True},
            {"identifier": "BBB222", "media_type": "Image", "overlay": False},
            {
                "identifier": "CCC333",
                "media_type": "Video",
                "date": "2022-12-24 18:30:05 UTC",
                "location": "Latitude, Longitude: -33.8688, 151.2093",
                "overlay": True,
            },
        ]

    media_dir = base_path / folder
    entries = []
    for memory in memories:
        identifier = memory["identifier"]
        date = memory.get("date", "2023-06-01 12:00:00 UTC")
        media_type = memory.get("media_type", "Image")
        ext = "mp4" if media_type == "Video" else "jpg"
        day = date.split(" ")[0]

        main_path = media_dir / f"{day}_{identifier}-main.{ext}"
        if ext == "jpg":
            write_jpeg(main_path)
        else:
            write_media_file(main_path, "mp4")

        if memory.get("overlay"):
            write_webp_overlay(media_dir / f"{day}_{identifier}-overlay.png")

        if memory.get("in_manifest", True):
            entries.append(
                make_entry(
                    identifier,
                    date=date,
                    media_type=media_type,
                    location=memory.get("location", "Latitude, Longitude: 10.0, 20.0"),
                )
            )

    create_manifest(base_path / "json" / "memories_history.json", entries)
    return base_path


def zip_directory(source_dir: Path, zip_path: Path) -> Path:
    """Pack a directory's files into a zip archive (paths relative to it)."""
    with zipfile.ZipFile(zip_path, "w") as zf:
        for path in sorted(source_dir.rglob("*")):
            if path.is_file():
                zf.write(path, path.relative_to(source_dir))
    return zip_path
