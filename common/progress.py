#!/usr/bin/env python3
"""
Unified progress bar utilities.

Provides standardized progress bar formatting with phase prefixes to clearly
indicate which stage of a run is active.
"""

from typing import Iterable, Optional, TypeVar

from tqdm import tqdm

# Phase constants for consistent naming
PHASE_EXTRACT = "Extract"
PHASE_PROCESS = "Process"
PHASE_MOVE = "Move"

T = TypeVar("T")


def progress_bar(
    iterable: Iterable[T],
    phase: str,
    action: str,
    total: Optional[int] = None,
    unit: str = "file",
) -> tqdm:
    """Wrap iterable with standardized progress bar.

    Args:
        iterable: The iterable to wrap
        phase: Phase name (use PHASE_* constants)
        action: Action description (e.g., "Restoring memories")
        total: Total count if known
        unit: Unit name for display

    Returns:
        tqdm progress bar wrapping the iterable
    """
    return tqdm(iterable, desc=f"[{phase}] {action}", total=total, unit=unit)
