"""
Matching files on disk to manifest records

Extracted memories are named `{date}_{identifier}-{role}.{ext}`, e.g.
`2023-06-01_ABC123-main.jpg` with an optional `2023-06-01_ABC123-overlay.png`
beside it. Matching uses only the file name, never the content.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional

from processors.snapchat_memories.manifest import Record

logger = logging.getLogger(__name__)

MEDIA_PATTERNS = ("*.jpg", "*.mp4")
MAIN_SUFFIX = "-main"
OVERLAY_SUFFIX = "-overlay.png"
COPY_SUFFIX = "_with_overlay"


def build_index(records: Iterable[Record]) -> Mapping[str, Record]:
    """Map identifier -> record for constant-time lookup.

    Duplicate identifiers overwrite earlier ones (last one wins); each
    duplicate is logged so it doesn't go unnoticed.

    Returns:
        Read-only mapping
    """
    index = {}
    for record in records:
        if record.identifier in index:
            logger.warning(
                f"Duplicate identifier {record.identifier} in manifest, "
                f"keeping entry dated {record.capture_time:%Y-%m-%d %H:%M:%S}"
            )
        index[record.identifier] = record
    return MappingProxyType(index)


def discover_files(root: Path, prefix: str) -> List[Path]:
    """Find candidate media files under `{prefix}*/` directories.

    Copy-mode duplicates and hidden temporary files left behind by an
    earlier (possibly interrupted) run are skipped.

    Args:
        root: Directory holding the extracted export folders
        prefix: Folder name prefix (e.g. "memories")

    Returns:
        Sorted list of files; empty if root does not exist
    """
    root = Path(root)
    if not root.is_dir():
        logger.warning(f"Input directory does not exist: {root}")
        return []

    found = set()
    for pattern in MEDIA_PATTERNS:
        for path in root.glob(f"{prefix}*/**/{pattern}"):
            if not path.is_file() or path.name.startswith("."):
                continue
            if not path.stem.endswith(COPY_SUFFIX):
                found.add(path)

    files = sorted(found)
    logger.info(f"Discovered {len(files)} media files under {root}")
    return files


def extract_identifier(stem: str) -> Optional[str]:
    """Return the identifier between the first "_" and the last "-".

    Example:
        >>> extract_identifier("2023-01-01_ABC123-main")
        'ABC123'
        >>> extract_identifier("2023-01-01") is None
        True
    """
    _, sep, rest = stem.partition("_")
    if not sep:
        return None
    identifier, sep, _ = rest.rpartition("-")
    if not sep or not identifier:
        return None
    return identifier


def overlay_path_for(path: Path) -> Optional[Path]:
    """Expected overlay sibling of a `*-main.jpg`/`*-main.mp4` file."""
    if not path.stem.endswith(MAIN_SUFFIX) or path.suffix.lower() not in (".jpg", ".mp4"):
        return None
    base = path.stem[: -len(MAIN_SUFFIX)]
    return path.with_name(f"{base}{OVERLAY_SUFFIX}")


def companion_path_for(path: Path) -> Path:
    """Path of the copy-mode duplicate that carries the overlay."""
    return path.with_name(f"{path.stem}{COPY_SUFFIX}{path.suffix}")
