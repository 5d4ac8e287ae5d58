"""
Pytest configuration and shared fixtures for Snapback tests.

This module provides:
- Per-test temporary export/output directories
- A ready-made memories export (manifest + extracted files)
- Fake media tools for running the pipeline without exiftool/ffmpeg
- Custom markers for slow and tool-dependent tests
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from common.processor_config import ENV_VARS  # noqa: E402
from tests.fixtures.fake_tools import FakeMediaTools  # noqa: E402


# ============================================================================
# Session-scoped fixtures
# ============================================================================


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


# ============================================================================
# Function-scoped fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_snapback_env(monkeypatch):
    """Keep SNAPBACK_* variables from the developer's shell out of tests.

    setenv first so monkeypatch also undoes values a .env load sets later.
    """
    for name in ENV_VARS.values():
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


@pytest.fixture
def temp_output_dir(tmp_path) -> Path:
    """Output directory path for a single test (not created)."""
    return tmp_path / "output"


@pytest.fixture
def temp_export_dir(tmp_path) -> Path:
    """Create a temporary export root for a single test."""
    export_dir = tmp_path / "export"
    export_dir.mkdir()
    return export_dir


@pytest.fixture
def fake_tools() -> FakeMediaTools:
    """Media tools that succeed without touching exiftool or ffmpeg."""
    return FakeMediaTools()


@pytest.fixture
def memories_export(temp_export_dir) -> Path:
    """Create a small export: two images (one with overlay) and a video."""
    from tests.fixtures.generators import create_memories_export

    return create_memories_export(temp_export_dir)


# ============================================================================
# Pytest configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests requiring external tools (exiftool, ffmpeg)"
    )
