#!/usr/bin/env python3
"""
Snapback - restore metadata and captions to Snapchat memory exports

Matches extracted memory files to the entries of memories_history.json,
writes the capture date and GPS location back into each file, optionally
composites the caption/sticker overlay, and moves the results into an
output directory.

Usage:
    snapback.py [-m manifest] [-i input_dir] [-o output_dir]
                [--overlay {ignore,copy,overwrite}] [--workers N] [--extract]
"""

import argparse
import sys
from pathlib import Path

# Add current directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from common.dependency_checker import (  # noqa: E402
    check_exiftool,
    check_ffmpeg,
    print_exiftool_error,
    print_ffmpeg_error,
)
from common.env_loader import load_dotenv_file  # noqa: E402
from common.logging_config import default_log_file, setup_logging  # noqa: E402
from common.processor_config import OVERLAY_MODES, resolve_config  # noqa: E402
from processors.snapchat_memories.manifest import ManifestError  # noqa: E402
from processors.snapchat_memories.processor import process_logic  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snapback",
        description="Restore metadata and captions to Snapchat memory exports.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Settings can also come from SNAPBACK_* environment variables or a .env file
(flag > environment > .env > default).

Examples:
  # Stamp date/location only, results in ./output
  %(prog)s -m json/memories_history.json -i .

  # Unzip memories*.zip first, keep originals and add captioned copies
  %(prog)s --extract --overlay copy -o restored

  # Burn captions into the originals using 4 workers
  %(prog)s --overlay overwrite --workers 4
        """,
    )
    parser.add_argument(
        "-m",
        "--manifest",
        help="Path to memories_history.json (default: ./json/memories_history.json)",
    )
    parser.add_argument(
        "-i",
        "--input-dir",
        help="Directory containing the extracted export folders (default: .)",
    )
    parser.add_argument(
        "-p",
        "--prefix",
        help="Name prefix of export folders and archives (default: memories)",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Directory the processed files are moved to (default: ./output)",
    )
    parser.add_argument(
        "--overlay",
        choices=OVERLAY_MODES,
        type=str.lower,
        help="Overlay handling: ignore, copy (add *_with_overlay files) "
        "or overwrite (burn into originals) (default: ignore)",
    )
    parser.add_argument(
        "--workers",
        "-w",
        type=int,
        help="Number of parallel workers (default: 1)",
    )
    parser.add_argument(
        "--extract",
        action="store_true",
        default=None,
        help="Extract {prefix}*.zip archives in the input directory first",
    )
    parser.add_argument(
        "--tool-timeout",
        type=float,
        metavar="SECONDS",
        help="Abort a single exiftool/ffmpeg call after this many seconds (default: no limit)",
    )
    parser.add_argument(
        "--skip-dependency-check",
        action="store_true",
        help="Don't check for exiftool/ffmpeg before starting",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to .env file to load (default: ./.env if present)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (also writes logs/snapback_*.log)",
    )
    return parser


def main(argv=None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load .env early (CLI > env > .env precedence is enforced by resolve_config)
    load_dotenv_file(args.env_file)

    log_file = str(default_log_file()) if args.verbose else None
    setup_logging(verbose=args.verbose, log_file=log_file)

    try:
        config = resolve_config(
            manifest_path=args.manifest,
            input_dir=args.input_dir,
            prefix=args.prefix,
            output_dir=args.output,
            overlay_mode=args.overlay,
            workers=args.workers,
            extract_archives=args.extract,
            tool_timeout=args.tool_timeout,
            verbose=args.verbose,
            log_file=log_file,
        )
    except ValueError as e:
        print(f"ERROR: {e}")
        return 2

    if not args.skip_dependency_check:
        if not check_exiftool():
            print_exiftool_error()
            return 1
        if config.overlay_mode != "ignore" and not check_ffmpeg():
            print_ffmpeg_error()
            return 1

    if not config.input_dir.is_dir():
        print(f"ERROR: Input directory does not exist: {config.input_dir}")
        return 1

    try:
        process_logic(config)
    except ManifestError as e:
        print(f"ERROR: Could not load manifest: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted; temporary files may remain next to the media files")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
