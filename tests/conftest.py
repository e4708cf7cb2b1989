"""
Shared fixtures for md2medium tests.
"""

import pytest
from PIL import Image


class RecordingResolver:
    """Resolver that maps local paths to a fake CDN and remembers every call."""

    def __init__(self, prefix='https://cdn/', fail_on=None):
        self.prefix = prefix
        self.fail_on = fail_on
        self.calls = []

    def __call__(self, path):
        self.calls.append(path)
        if path == self.fail_on:
            raise OSError(f"upload failed for {path}")
        return self.prefix + path.rsplit('/', 1)[-1]


@pytest.fixture
def resolver():
    return RecordingResolver()


@pytest.fixture
def make_resolver():
    return RecordingResolver


@pytest.fixture
def png_image(tmp_path):
    """A 12x7 PNG at <tmp_path>/img/a.png."""
    img_dir = tmp_path / 'img'
    img_dir.mkdir()
    path = img_dir / 'a.png'
    Image.new('RGB', (12, 7), color='red').save(path)
    return path
