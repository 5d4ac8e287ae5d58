"""
Snapchat Memories Processor

Restores capture time, location and overlays to media files extracted from a
Snapchat "memories" export, then moves the results into an output directory.

Phases:
    1. Extract (optional): unzip `{prefix}*.zip` archives in the input directory
    2. Load the manifest and index records by identifier
    3. Discover `{prefix}*/**/*.jpg|mp4` files
    4. Process every file in a worker pool (metadata + overlay policy)
    5. Move every discovered file (and copy-mode companions) to the output
"""

import logging
import multiprocessing
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from common.archive import extract_archive
from common.failure_tracker import FailureTracker
from common.logging_config import init_worker_logging
from common.processing import print_processing_summary
from common.processor_config import RunConfig
from common.progress import PHASE_EXTRACT, PHASE_MOVE, PHASE_PROCESS, progress_bar
from processors.snapchat_memories.manifest import Record, load_manifest
from processors.snapchat_memories.matching import (
    build_index,
    companion_path_for,
    discover_files,
)
from processors.snapchat_memories.pipeline import (
    ExternalMediaTools,
    FileOutcome,
    MediaTools,
    MetadataStatus,
    OverlayMode,
    OverlayStatus,
    process_file,
)

logger = logging.getLogger(__name__)

PROCESSOR_NAME = "Snapchat Memories"

# Per-process state installed once by the pool initializer
_worker_state: Dict[str, object] = {}


@dataclass
class MoveReport:
    moved: int = 0
    failed: List[Tuple[Path, str]] = field(default_factory=list)


@dataclass
class RunSummary:
    """Totals for one run."""

    discovered: int = 0
    metadata_applied: int = 0
    overlay_applied: int = 0
    degraded_overlays: int = 0
    unmatched: int = 0
    failed: int = 0
    moved: int = 0
    move_failures: int = 0
    archives_extracted: int = 0
    archives_failed: int = 0


# ============================================================================
# Phase 1: Archive extraction
# ============================================================================


def extract_archives(root: Path, prefix: str) -> Tuple[int, int]:
    """Extract every `{prefix}*.zip` directly under root.

    Each archive goes into a sibling directory named after its stem; archives
    whose directory already exists are treated as extracted.

    Returns:
        Tuple of (succeeded, failed)
    """
    root = Path(root)
    archives = sorted(p for p in root.glob(f"{prefix}*.zip") if p.is_file())
    if not archives:
        logger.info(f"No {prefix}*.zip archives found in {root}")
        return 0, 0

    succeeded = 0
    failed = 0
    for archive in progress_bar(
        archives, PHASE_EXTRACT, "Extracting archives", total=len(archives), unit="archive"
    ):
        dest = archive.with_suffix("")
        if dest.is_dir():
            logger.info(f"Skipping {archive.name}, already extracted to {dest.name}")
            succeeded += 1
        elif extract_archive(archive, dest):
            succeeded += 1
        else:
            failed += 1

    logger.info(f"Extracted {succeeded} archive(s), {failed} failed")
    return succeeded, failed


# ============================================================================
# Phase 4: Concurrent per-file processing
# ============================================================================


def _install_state(records: Dict[str, Record], mode: OverlayMode, tools: MediaTools) -> None:
    _worker_state["index"] = MappingProxyType(records)
    _worker_state["mode"] = mode
    _worker_state["tools"] = tools


def _init_worker(
    records: Dict[str, Record],
    mode: OverlayMode,
    tools: MediaTools,
    log_filename: Optional[str],
) -> None:
    """Pool initializer: logging plus the read-only index for this worker."""
    init_worker_logging(log_filename)
    _install_state(records, mode, tools)


def _process_task(path: Path) -> FileOutcome:
    """Worker entry point; always returns an outcome."""
    try:
        return process_file(
            path, _worker_state["index"], _worker_state["mode"], _worker_state["tools"]
        )
    except Exception as e:  # noqa: BLE001
        logger.error(f"[{Path(path).name}] Worker error: {e}")
        return FileOutcome(path=Path(path), error=str(e))


def run_pipeline(
    files: Sequence[Path],
    index: Mapping[str, Record],
    mode: OverlayMode,
    tools: MediaTools,
    workers: int = 1,
    log_filename: Optional[str] = None,
) -> List[FileOutcome]:
    """Apply the per-file pipeline to every file.

    Args:
        files: Candidate files (the whole batch, known upfront)
        index: identifier -> Record lookup, not mutated
        mode: Overlay policy
        tools: Metadata writer and compositor; must be picklable when
               workers > 1
        workers: Pool width; 1 runs in the calling process
        log_filename: Log file for worker processes (verbose runs)

    Returns:
        One FileOutcome per file, in no particular order
    """
    if not files:
        return []

    records = dict(index)

    if workers <= 1:
        _install_state(records, mode, tools)
        return list(
            progress_bar(
                map(_process_task, files),
                PHASE_PROCESS,
                "Restoring memories",
                total=len(files),
            )
        )

    logger.debug(f"Using {workers} parallel workers")
    with multiprocessing.Pool(
        processes=workers,
        initializer=_init_worker,
        initargs=(records, mode, tools, log_filename),
    ) as pool:
        return list(
            progress_bar(
                pool.imap_unordered(_process_task, files),
                PHASE_PROCESS,
                "Restoring memories",
                total=len(files),
            )
        )


# ============================================================================
# Phase 5: Archival move
# ============================================================================


def move_outputs(
    files: Sequence[Path], output_dir: Path, mode: OverlayMode
) -> MoveReport:
    """Move processed files (and copy-mode companions) into output_dir.

    A failure for one file is logged and the remaining files are still moved.

    Returns:
        MoveReport with the number of moved artifacts and the failures
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    report = MoveReport()

    for path in progress_bar(files, PHASE_MOVE, "Moving files", total=len(files)):
        artifacts = [Path(path)]
        if mode is OverlayMode.COPY:
            companion = companion_path_for(Path(path))
            if companion.exists():
                artifacts.append(companion)

        for artifact in artifacts:
            dest = output_dir / artifact.name
            if dest.exists():
                logger.warning(f"Overwriting existing {dest}")
            try:
                shutil.move(str(artifact), str(dest))
                report.moved += 1
            except OSError as e:
                logger.error(f"Failed to move {artifact} -> {dest}: {e}")
                report.failed.append((artifact, str(e)))

    logger.info(f"Moved {report.moved} file(s), {len(report.failed)} failed")
    return report


# ============================================================================
# Orchestration
# ============================================================================


def _describe_failure(outcome: FileOutcome) -> str:
    if outcome.error:
        return outcome.error
    reasons = []
    if outcome.metadata is MetadataStatus.FAILED:
        reasons.append("metadata writer failed")
    if outcome.overlay is OverlayStatus.FAILED:
        reasons.append("compositor failed")
    return ", ".join(reasons)


def process_logic(config: RunConfig, tools: Optional[MediaTools] = None) -> RunSummary:
    """Run every phase for one configuration.

    Args:
        config: Resolved run configuration
        tools: Metadata writer and compositor; defaults to exiftool/ffmpeg

    Returns:
        RunSummary with the run's totals

    Raises:
        ManifestError: If the manifest cannot be read or decoded
    """
    mode = OverlayMode(config.overlay_mode)
    if tools is None:
        tools = ExternalMediaTools(timeout=config.tool_timeout)
    summary = RunSummary()

    logger.info("Snapback - restore Snapchat memories")
    logger.info("=" * 50)

    if config.extract_archives:
        summary.archives_extracted, summary.archives_failed = extract_archives(
            config.input_dir, config.prefix
        )

    records = load_manifest(config.manifest_path)
    index = build_index(records)

    files = discover_files(config.input_dir, config.prefix)
    summary.discovered = len(files)

    failure_tracker = FailureTracker(
        processor_name=PROCESSOR_NAME,
        input_directory=str(config.input_dir),
    )

    print(f"\nProcessing {len(files)} memories (overlays: {mode.value})")
    outcomes = run_pipeline(
        files, index, mode, tools, workers=config.workers, log_filename=config.log_file
    )

    for outcome in sorted(outcomes, key=lambda o: str(o.path)):
        if outcome.metadata_applied:
            summary.metadata_applied += 1
        if outcome.overlay_applied:
            summary.overlay_applied += 1
        if outcome.degraded_overlay:
            summary.degraded_overlays += 1
        if outcome.metadata in (MetadataStatus.NO_IDENTIFIER, MetadataStatus.NO_RECORD):
            summary.unmatched += 1
            failure_tracker.add_unmatched_file(outcome.path, outcome.metadata.value)
        if outcome.failed:
            summary.failed += 1
            reason = _describe_failure(outcome)
            print(f"  FAILED {outcome.path.name}: {reason}")
            failure_tracker.add_processing_failure(
                outcome.path,
                reason,
                context={
                    "identifier": outcome.identifier,
                    "metadata": outcome.metadata.value,
                    "overlay": outcome.overlay.value,
                },
            )

    move_report = move_outputs(files, config.output_dir, mode)
    summary.moved = move_report.moved
    summary.move_failures = len(move_report.failed)
    for path, error in move_report.failed:
        print(f"  FAILED to move {path.name}: {error}")
        failure_tracker.add_move_failure(path, error)

    failure_tracker.save_report(config.output_dir)

    print_processing_summary(
        success=summary.discovered - summary.failed,
        failed=summary.failed,
        total=summary.discovered,
        output_dir=str(config.output_dir),
        extra_stats={
            "Metadata applied": summary.metadata_applied,
            "Overlays applied": summary.overlay_applied,
            "Overlays used unnormalized": summary.degraded_overlays,
            "Without manifest match": summary.unmatched,
            "Files moved": summary.moved,
            "Move failures": summary.move_failures,
        },
    )
    return summary
