"""Snapchat Memories: manifest matching, metadata restoration and overlays."""

from processors.snapchat_memories.manifest import (
    ManifestError,
    MediaKind,
    Record,
    load_manifest,
    parse_manifest,
)
from processors.snapchat_memories.pipeline import (
    ExternalMediaTools,
    FileOutcome,
    MediaTools,
    OverlayMode,
    process_file,
)

__all__ = [
    "ExternalMediaTools",
    "FileOutcome",
    "ManifestError",
    "MediaKind",
    "MediaTools",
    "OverlayMode",
    "Record",
    "load_manifest",
    "parse_manifest",
    "process_file",
]
