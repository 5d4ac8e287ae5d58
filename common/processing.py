#!/usr/bin/env python3
"""
Processing summary helpers
"""

import os
from typing import Dict, Optional


def print_processing_summary(
    success: int,
    failed: int,
    total: int,
    output_dir: str,
    extra_stats: Optional[Dict[str, int]] = None,
) -> None:
    """
    Print standardized processing completion summary.

    Args:
        success: Number of successfully processed items
        failed: Number of failed items
        total: Total number of items processed
        output_dir: Path to output directory (will be converted to absolute path)
        extra_stats: Optional dict of additional statistics to display
                     Keys are labels, values are counts

    Example:
        >>> print_processing_summary(
        ...     success=95,
        ...     failed=5,
        ...     total=100,
        ...     output_dir="./output",
        ...     extra_stats={"Metadata applied": 90, "Overlays applied": 12}
        ... )
        ==================================================
        Processing complete!
          Successfully processed: 95
          Failed: 5
          Metadata applied: 90
          Overlays applied: 12
          Total: 100

        Final files saved to: /absolute/path/to/output
    """
    print("\n" + "=" * 50)
    print("Processing complete!")
    print(f"  Successfully processed: {success}")
    print(f"  Failed: {failed}")

    if extra_stats:
        for label, count in extra_stats.items():
            print(f"  {label}: {count}")

    print(f"  Total: {total}")
    print(f"\nFinal files saved to: {os.path.abspath(output_dir)}")
