"""
Crop window selection.

A crop is anchored on one randomly chosen bounding box and sized so that the
larger side of that box ends up `reference_size` pixels long once the crop is
resized to the network input. The crop may extend past the image borders, in
which case the image is padded by edge replication.
"""
import math
from typing import NamedTuple, Optional, Tuple

import numpy as np

from .annotations import count_boxes


class CropPlan(NamedTuple):
    """
    Crop rectangle in original image coordinates plus the padding needed to
    realize it.

    x, y, width, height: source rectangle, may lie partially outside the image
    top, bottom, left, right: edge-replication padding
    output_width, output_height: network input size
    reference_index: row of the box the crop was anchored on (None for whole image)
    contains_reference: False when the sampling range had to be clamped and
        the reference box does not fit into the crop
    """
    x: int
    y: int
    width: int
    height: int
    top: int
    bottom: int
    left: int
    right: int
    output_width: int
    output_height: int
    reference_index: Optional[int] = None
    contains_reference: bool = True

    @classmethod
    def whole_image(cls, img_w: int, img_h: int, output_width: int, output_height: int) -> 'CropPlan':
        return cls(0, 0, img_w, img_h, 0, 0, 0, 0, output_width, output_height)

    @property
    def source_rect(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.width, self.height

    @property
    def padding(self) -> Tuple[int, int, int, int]:
        return self.top, self.bottom, self.left, self.right

    @property
    def padded_rect(self) -> Tuple[int, int, int, int]:
        """The same rectangle expressed in padded image coordinates."""
        return self.x + self.left, self.y + self.top, self.width, self.height

    @property
    def scale(self) -> Tuple[float, float]:
        """(x, y) factors from crop pixels to output pixels."""
        return self.output_width / self.width, self.output_height / self.height

    @property
    def needs_padding(self) -> bool:
        return any(self.padding)


class CropSampler:
    """
    Chooses a crop for each sample.

    Args:
        width: Network input width
        height: Network input height
        reference_size: Size (in output pixels) the larger side of the anchor box is scaled to
        rng: numpy Generator shared with the worker's EpochCursor
    """

    def __init__(self, width: int, height: int, reference_size: float,
                 rng: Optional[np.random.Generator] = None):
        self.width = width
        self.height = height
        self.reference_size = reference_size
        self.rng = rng if rng is not None else np.random.default_rng()

    def crop_size(self, size: float) -> Tuple[int, int]:
        """Crop dimensions that map a box side of `size` to reference_size."""
        # Halves round up
        crop_width = math.floor(self.width / self.reference_size * size + 0.5)
        crop_height = math.floor(self.height / self.reference_size * size + 0.5)
        # Zero-sized boxes would produce an empty crop
        return max(1, crop_width), max(1, crop_height)

    def _sample_origin(self, start: float, extent: float, crop_extent: int) -> Tuple[int, bool]:
        """
        Integer crop origin in [start + extent - crop_extent, start] so the
        interval [start, start + extent] stays inside the crop.

        An inverted range (box larger than the crop) is clamped to its upper
        end, i.e. the crop starts at the box origin.
        """
        low = math.ceil(start + extent - crop_extent)
        high = math.floor(start)
        if high < low:
            return high, False
        return int(self.rng.integers(low, high, endpoint=True)), True

    def sample(self, image: np.ndarray, labels: np.ndarray) -> CropPlan:
        """
        Args:
            image: [H, W, C] image
            labels: [C, 5] label array of the image

        Returns:
            CropPlan
        """
        img_h, img_w = image.shape[:2]

        num_bbs = count_boxes(labels)
        if num_bbs == 0:
            # No boxes, the whole image is resized to the network input
            return CropPlan.whole_image(img_w, img_h, self.width, self.height)

        bb_id = int(self.rng.integers(0, num_bbs))
        assert 0 <= bb_id < num_bbs, f'Box index {bb_id} out of range [0, {num_bbs})'

        _, xmin, ymin, xmax, ymax = (float(v) for v in labels[bb_id])
        w = xmax - xmin
        h = ymax - ymin

        crop_width, crop_height = self.crop_size(max(w, h))

        crop_x, fits_x = self._sample_origin(xmin, w, crop_width)
        crop_y, fits_y = self._sample_origin(ymin, h, crop_height)

        border_left = max(0, -crop_x)
        border_top = max(0, -crop_y)
        border_right = max(0, crop_x + crop_width - img_w)
        border_bottom = max(0, crop_y + crop_height - img_h)

        return CropPlan(crop_x, crop_y, crop_width, crop_height,
                        border_top, border_bottom, border_left, border_right,
                        self.width, self.height,
                        reference_index=bb_id, contains_reference=fits_x and fits_y)
