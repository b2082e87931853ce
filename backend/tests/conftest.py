"""
Shared fixtures: synthetic images and an in-memory storage.
"""

import numpy as np
import pytest
from PIL import Image


def create_test_image(size=(320, 240)) -> Image.Image:
    """Create a simple test image with a gradient and a bright disc."""
    arr = np.zeros((size[1], size[0], 3), dtype=np.uint8)

    # Horizontal gradient (left=dark, right=bright)
    for x in range(size[0]):
        arr[:, x, :] = int(255 * x / size[0])

    center = (size[0] // 2, size[1] // 2)
    radius = min(size) // 4
    y, x = np.ogrid[:size[1], :size[0]]
    mask = (x - center[0]) ** 2 + (y - center[1]) ** 2 <= radius ** 2
    arr[mask] = [255, 200, 150]

    return Image.fromarray(arr)


class FakeStorage:
    """Records uploads and returns predictable URLs; can fail on one key."""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.calls = []

    def upload(self, local_path, remote_key, content_type, visibility):
        with open(local_path, "rb") as f:
            data = f.read()
        self.calls.append({
            "local_path": local_path,
            "remote_key": remote_key,
            "content_type": content_type,
            "visibility": visibility,
            "data": data,
        })
        if self.fail_on and remote_key.endswith(f"_{self.fail_on}.jpg"):
            raise ConnectionError(f"bucket unavailable for {remote_key}")
        return f"https://storage.test/photos{remote_key}"


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def image_path(tmp_path):
    """A 320x240 PNG on disk."""
    path = tmp_path / "source.png"
    create_test_image().save(path)
    return str(path)


@pytest.fixture
def jpeg_path(tmp_path):
    """A 640x480 JPEG on disk."""
    path = tmp_path / "source.jpg"
    create_test_image((640, 480)).save(path, format="JPEG")
    return str(path)
