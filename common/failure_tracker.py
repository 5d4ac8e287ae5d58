#!/usr/bin/env python3
"""
Failure Tracker Module

Tracks per-file failures of a run:
- Processing failures (metadata or overlay step failed for a file)
- Unmatched files (no identifier in the name, or no manifest record)
- Move failures (file could not be relocated to the output directory)

Generates a JSON report in the output directory when anything went wrong.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

REPORT_FILENAME = "failure_report.json"


class FailureTracker:
    """
    Collects failures during processing and moving, then writes a report.
    """

    def __init__(self, processor_name: str, input_directory: str):
        """
        Initialize failure tracker.

        Args:
            processor_name: Name of the processor (e.g., "Snapchat Memories")
            input_directory: Path to the directory being processed
        """
        self.processor_name = processor_name
        self.input_directory = input_directory
        self.timestamp = datetime.now().isoformat()

        self.processing_failures: List[Dict[str, Any]] = []
        self.unmatched_files: List[Dict[str, Any]] = []
        self.move_failures: List[Dict[str, Any]] = []

    def add_processing_failure(
        self,
        media_path: Path,
        reason: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Track a file whose metadata or overlay step failed."""
        self.processing_failures.append(
            {"file_path": str(media_path), "reason": reason, "context": context or {}}
        )
        logger.debug(f"Tracked processing failure: {media_path}")

    def add_unmatched_file(self, media_path: Path, reason: str) -> None:
        """Track a file that could not be associated with a manifest record."""
        self.unmatched_files.append({"file_path": str(media_path), "reason": reason})
        logger.debug(f"Tracked unmatched file: {media_path}")

    def add_move_failure(self, media_path: Path, error_details: str) -> None:
        """Track a file that could not be moved to the output directory."""
        self.move_failures.append(
            {"file_path": str(media_path), "error_details": error_details}
        )
        logger.debug(f"Tracked move failure: {media_path}")

    def has_failures(self) -> bool:
        """Check if any failures have been tracked."""
        return bool(self.processing_failures or self.unmatched_files or self.move_failures)

    def get_summary(self) -> Dict[str, int]:
        """
        Get summary statistics of tracked failures.

        Returns:
            Dict with counts of each failure type
        """
        return {
            "total_failures": len(self.processing_failures)
            + len(self.unmatched_files)
            + len(self.move_failures),
            "failed_processing": len(self.processing_failures),
            "unmatched": len(self.unmatched_files),
            "failed_moves": len(self.move_failures),
        }

    def generate_report(self) -> Dict[str, Any]:
        """Generate the full failure report as a dict."""
        return {
            "processor_name": self.processor_name,
            "input_directory": self.input_directory,
            "timestamp": self.timestamp,
            "summary": self.get_summary(),
            "failed_processing": self.processing_failures,
            "unmatched": self.unmatched_files,
            "failed_moves": self.move_failures,
        }

    def save_report(self, output_dir: Path) -> Optional[Path]:
        """
        Write the failure report into the output directory.

        Args:
            output_dir: Output directory of the run

        Returns:
            Path of the written report, or None if there was nothing to report
            or the report could not be written
        """
        if not self.has_failures():
            return None

        report_path = Path(output_dir) / REPORT_FILENAME
        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            with open(report_path, "w", encoding="utf-8") as f:
                json.dump(self.generate_report(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Failed to write failure report {report_path}: {e}")
            return None

        summary = self.get_summary()
        logger.info(
            f"Failure report saved to {report_path} "
            f"({summary['total_failures']} issue(s))"
        )
        return report_path
