#!/usr/bin/env python3
"""
Dependency Checker

Checks for the system-level tools (exiftool, ffmpeg) that the metadata
writer and the compositor shell out to.
"""

import subprocess


def check_exiftool() -> bool:
    """Check if exiftool is installed and available in PATH

    Returns:
        True if exiftool is available, False otherwise
    """
    try:
        subprocess.run(["exiftool", "-ver"], capture_output=True, check=True, stdin=subprocess.DEVNULL)
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def check_ffmpeg() -> bool:
    """Check if ffmpeg is installed and available in PATH

    Returns:
        True if ffmpeg is available, False otherwise
    """
    try:
        subprocess.run(["ffmpeg", "-version"], capture_output=True, check=True, stdin=subprocess.DEVNULL)
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False


def print_exiftool_error() -> None:
    """Print installation instructions for exiftool"""
    print("ERROR: exiftool is not installed or not in PATH")
    print("Please install exiftool:")
    print("  macOS: brew install exiftool")
    print("  Linux: sudo apt-get install libimage-exiftool-perl")
    print("  Windows: Download from https://exiftool.org/")


def print_ffmpeg_error() -> None:
    """Print installation instructions for ffmpeg"""
    print("ERROR: ffmpeg is not installed or not in PATH")
    print("Please install ffmpeg:")
    print("  macOS: brew install ffmpeg")
    print("  Linux: sudo apt-get install ffmpeg")
    print("  Windows: Download from https://ffmpeg.org/")
