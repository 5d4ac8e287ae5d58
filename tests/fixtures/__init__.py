# Test fixtures for Snapback
from tests.fixtures.media_samples import (
    MINIMAL_JPEG as MINIMAL_JPEG,
    MINIMAL_PNG as MINIMAL_PNG,
    MINIMAL_MP4 as MINIMAL_MP4,
    write_media_file as write_media_file,
)
from tests.fixtures.generators import (
    create_manifest as create_manifest,
    create_memories_export as create_memories_export,
    make_entry as make_entry,
)
from tests.fixtures.fake_tools import FakeMediaTools as FakeMediaTools
