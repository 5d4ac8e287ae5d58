#!/usr/bin/env python3
"""
Run Configuration Module

Centralized configuration for a snapback run. Values are resolved with the
precedence CLI flag > environment variable > .env file > default; the .env
file is loaded into the environment beforehand (see common.env_loader), so
only the first three tiers need handling here.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from common.utils import parse_bool_env

# Defaults used when neither a flag nor an environment variable is set
DEFAULTS = {
    "manifest_path": "./json/memories_history.json",
    "input_dir": ".",
    "prefix": "memories",
    "output_dir": "./output",
    "overlay_mode": "ignore",
    "workers": 1,
    "extract_archives": False,
    "tool_timeout": None,
}

# Environment variable backing each setting
ENV_VARS = {
    "manifest_path": "SNAPBACK_MANIFEST",
    "input_dir": "SNAPBACK_INPUT_DIR",
    "prefix": "SNAPBACK_PREFIX",
    "output_dir": "SNAPBACK_OUTPUT",
    "overlay_mode": "SNAPBACK_OVERLAY_MODE",
    "workers": "SNAPBACK_WORKERS",
    "extract_archives": "SNAPBACK_EXTRACT",
    "tool_timeout": "SNAPBACK_TOOL_TIMEOUT",
}

OVERLAY_MODES = ("ignore", "copy", "overwrite")


@dataclass
class RunConfig:
    """Resolved settings for one run."""

    manifest_path: Path
    input_dir: Path
    prefix: str
    output_dir: Path
    overlay_mode: str
    workers: int = 1
    extract_archives: bool = False
    tool_timeout: Optional[float] = None
    verbose: bool = False
    log_file: Optional[str] = None


def _pick(name: str, cli_value):
    """Return the CLI value, else the environment value, else the default."""
    if cli_value is not None:
        return cli_value
    env_value = os.environ.get(ENV_VARS[name])
    if env_value is not None and env_value.strip() != "":
        return env_value
    return DEFAULTS[name]


def _parse_workers(value) -> int:
    try:
        workers = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid worker count: {value!r}")
    if workers < 1:
        raise ValueError(f"Worker count must be at least 1, got {workers}")
    return workers


def _parse_timeout(value) -> Optional[float]:
    if value is None:
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid tool timeout: {value!r}")
    if timeout <= 0:
        raise ValueError(f"Tool timeout must be positive, got {timeout}")
    return timeout


def resolve_config(
    manifest_path: Optional[str] = None,
    input_dir: Optional[str] = None,
    prefix: Optional[str] = None,
    output_dir: Optional[str] = None,
    overlay_mode: Optional[str] = None,
    workers: Optional[int] = None,
    extract_archives: Optional[bool] = None,
    tool_timeout: Optional[float] = None,
    verbose: bool = False,
    log_file: Optional[str] = None,
) -> RunConfig:
    """Build a RunConfig from CLI values, falling back to env and defaults.

    Args:
        Each argument mirrors a RunConfig field; None means "not given on
        the command line".

    Returns:
        Fully resolved RunConfig

    Raises:
        ValueError: If a value is malformed (unknown overlay mode,
            non-numeric or non-positive worker count or timeout)

    Example:
        >>> resolve_config(workers=4).workers
        4
    """
    mode = str(_pick("overlay_mode", overlay_mode)).strip().lower()
    if mode not in OVERLAY_MODES:
        raise ValueError(
            f"Unknown overlay mode {mode!r} (expected one of: {', '.join(OVERLAY_MODES)})"
        )

    extract = _pick("extract_archives", extract_archives)
    if isinstance(extract, str):
        extract = parse_bool_env(extract)

    return RunConfig(
        manifest_path=Path(_pick("manifest_path", manifest_path)),
        input_dir=Path(_pick("input_dir", input_dir)),
        prefix=str(_pick("prefix", prefix)),
        output_dir=Path(_pick("output_dir", output_dir)),
        overlay_mode=mode,
        workers=_parse_workers(_pick("workers", workers)),
        extract_archives=bool(extract),
        tool_timeout=_parse_timeout(_pick("tool_timeout", tool_timeout)),
        verbose=verbose,
        log_file=log_file,
    )
