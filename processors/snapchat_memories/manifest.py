"""
Snapchat Memories manifest parsing

Decodes `memories_history.json` into typed records. Three fields use irregular
text encodings in the export and are normalized here:

- "Date": "2023-06-01 12:00:00 UTC"
- "Location": "Latitude, Longitude: 12.5, -45.25"
- "Download Link": a URL carrying the memory id between `&sid=` and `&mid`

One malformed entry fails the whole load; there is no partial recovery.
"""

import json
import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d %H:%M:%S UTC"
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} UTC", re.ASCII)
EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"

ID_START_MARKER = "&sid="
ID_END_MARKER = "&mid"

SAVED_MEDIA_KEY = "Saved Media"

NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


class ManifestError(ValueError):
    """Raised when the manifest cannot be decoded into records."""


class MediaKind(str, Enum):
    IMAGE = "Image"
    VIDEO = "Video"


@dataclass(frozen=True)
class Record:
    """One saved memory from the manifest."""

    capture_time: datetime
    kind: MediaKind
    latitude: float
    longitude: float
    identifier: str

    @property
    def exif_timestamp(self) -> str:
        """Capture time in the format exiftool expects."""
        return self.capture_time.strftime(EXIF_DATE_FORMAT)

    @property
    def latitude_text(self) -> str:
        return decimal_text(self.latitude)

    @property
    def longitude_text(self) -> str:
        return decimal_text(self.longitude)


def decimal_text(value: float) -> str:
    """Shortest round-tripping form of a float, never in exponent notation.

    Example:
        >>> decimal_text(10.0), decimal_text(1e-05)
        ('10.0', '0.00001')
    """
    return format(Decimal(repr(value)), "f")


def parse_identifier(link: str) -> str:
    """Extract the memory id from a download link.

    Example:
        >>> parse_identifier("https://x/dl?uid=u&sid=ABC123&mid=M&ts=1")
        'ABC123'

    Raises:
        ManifestError: If either marker is missing (malformed download link)
    """
    start = link.find(ID_START_MARKER)
    if start == -1:
        raise ManifestError(f"Malformed download link, no '{ID_START_MARKER}': {link!r}")
    rest = link[start + len(ID_START_MARKER):]

    end = rest.find(ID_END_MARKER)
    if end == -1:
        raise ManifestError(f"Malformed download link, no '{ID_END_MARKER}': {link!r}")
    return rest[:end]


def parse_coordinates(text: str) -> Tuple[float, float]:
    """Parse a "label: lat, lon" location string into (lat, lon).

    Values are not range-checked; anything that parses as a finite number is
    accepted.

    Example:
        >>> parse_coordinates("Latitude, Longitude: 12.5, -45.25")
        (12.5, -45.25)

    Raises:
        ManifestError: If there is no colon, not exactly two components, or a
            component is not a finite number
    """
    if ":" not in text:
        raise ManifestError(f"Missing colon in location string: {text!r}")

    parts = [part.strip() for part in text.split(":")[-1].split(",")]
    if len(parts) != 2:
        raise ManifestError(f"Expected two comma-separated values in location: {text!r}")

    if not all(NUMBER_PATTERN.fullmatch(part) for part in parts):
        raise ManifestError(f"Non-numeric coordinates in location: {text!r}")
    lat, lon = float(parts[0]), float(parts[1])

    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ManifestError(f"Non-finite coordinates in location: {text!r}")
    return lat, lon


def parse_capture_time(text: str) -> datetime:
    """Parse "YYYY-MM-DD HH:MM:SS UTC" into an aware UTC datetime.

    Raises:
        ManifestError: On any deviation from the format
    """
    if not isinstance(text, str) or not DATE_PATTERN.fullmatch(text):
        raise ManifestError(f"Invalid date {text!r}, expected 'YYYY-MM-DD HH:MM:SS UTC'")
    try:
        return datetime.strptime(text, DATE_FORMAT).replace(tzinfo=timezone.utc)
    except (TypeError, ValueError):
        raise ManifestError(f"Invalid date {text!r}, expected 'YYYY-MM-DD HH:MM:SS UTC'")


def _parse_entry(entry: Dict[str, Any]) -> Record:
    for field in ("Date", "Media Type", "Location", "Download Link"):
        if field not in entry:
            raise ManifestError(f"Missing field '{field}'")
        if not isinstance(entry[field], str):
            raise ManifestError(f"Field '{field}' must be a string")

    try:
        kind = MediaKind(entry["Media Type"])
    except ValueError:
        raise ManifestError(f"Unknown media type {entry['Media Type']!r}")

    lat, lon = parse_coordinates(entry["Location"])
    return Record(
        capture_time=parse_capture_time(entry["Date"]),
        kind=kind,
        latitude=lat,
        longitude=lon,
        identifier=parse_identifier(entry["Download Link"]),
    )


def parse_manifest(data: bytes) -> List[Record]:
    """Decode raw manifest bytes into records, in manifest order.

    Args:
        data: UTF-8 JSON bytes of memories_history.json

    Returns:
        List of Record

    Raises:
        ManifestError: If the JSON is invalid, the structure is unexpected,
            or any single entry fails to decode
    """
    try:
        document = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestError(f"Manifest is not valid UTF-8 JSON: {e}")

    if not isinstance(document, dict) or SAVED_MEDIA_KEY not in document:
        raise ManifestError(f"Manifest has no '{SAVED_MEDIA_KEY}' array")

    entries = document[SAVED_MEDIA_KEY]
    if not isinstance(entries, list):
        raise ManifestError(f"'{SAVED_MEDIA_KEY}' must be an array")

    records = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ManifestError(f"Entry {position}: expected an object")
        try:
            records.append(_parse_entry(entry))
        except ManifestError as e:
            raise ManifestError(f"Entry {position}: {e}") from e

    return records


def load_manifest(path: Path) -> List[Record]:
    """Read and parse a manifest file.

    Raises:
        ManifestError: If the file cannot be read or decoded
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}")

    records = parse_manifest(data)
    logger.info(f"Loaded {len(records)} records from {path}")
    return records
