import sys
from pathlib import Path

import cv2
import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bbtxt_data.data import AnnotatedImage, AnnotationStore


@pytest.fixture
def make_image(tmp_path):
    """Write an image into tmp_path; random content unless a fill value is given."""
    def _make(name, width=200, height=200, value=None, seed=0):
        path = tmp_path / name
        if value is None:
            rng = np.random.default_rng(seed)
            image = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
        else:
            image = np.full((height, width, 3), value, dtype=np.uint8)
        assert cv2.imwrite(str(path), image)
        return path
    return _make


@pytest.fixture
def write_bbtxt(tmp_path):
    def _write(lines, name='annotations.bbtxt'):
        path = tmp_path / name
        path.write_text(''.join(f'{line}\n' for line in lines))
        return path
    return _write


def make_store(num_images, boxes_per_image=0, capacity=20):
    """In-memory store whose images do not exist on disk (enough for cursor tests)."""
    images = []
    for i in range(num_images):
        entry = AnnotatedImage(f'img{i}.png', capacity=capacity)
        for b in range(boxes_per_image):
            entry.add_box(b, 10, 10, 20, 20)
        entry.finalize()
        images.append(entry)
    return AnnotationStore(images)
