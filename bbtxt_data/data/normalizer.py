"""
Realizes a CropPlan: pad, crop, resize, normalize, and move the boxes into
the output image space.
"""
from typing import Tuple

import cv2
import numpy as np

from .annotations import count_boxes
from .crop import CropPlan
from .image import normalize_pixels


class SampleNormalizer:
    """
    Args:
        width: Network input width
        height: Network input height
        dtype: Numeric type of the produced pixel and label data
    """

    def __init__(self, width: int, height: int, dtype=np.float32):
        self.width = width
        self.height = height
        self.dtype = dtype

    def crop(self, image: np.ndarray, plan: CropPlan) -> np.ndarray:
        """
        Cut the plan's rectangle out of the (padded) image and resize it.

        Returns:
            [height, width, 3] uint8 image
        """
        if plan.needs_padding:
            # Replicate the border, zero padding would add black frames to the training data
            image = cv2.copyMakeBorder(image, plan.top, plan.bottom, plan.left, plan.right,
                                       cv2.BORDER_REPLICATE)

        x, y, w, h = plan.padded_rect
        cropped = image[y:y + h, x:x + w]
        if cropped.size == 0:
            raise ValueError(f'Something went wrong with cropping: empty crop {plan.source_rect}')

        resized = cv2.resize(cropped, (self.width, self.height), interpolation=cv2.INTER_LINEAR)
        if resized.shape[0] != self.height:
            raise ValueError(f'Wrong crop height {resized.shape[0]}! Does not match network ({self.height})')
        if resized.shape[1] != self.width:
            raise ValueError(f'Wrong crop width {resized.shape[1]}! Does not match network ({self.width})')
        return resized

    @staticmethod
    def transform_boxes(labels: np.ndarray, plan: CropPlan) -> np.ndarray:
        """
        Shift every real box by the crop origin and scale it to the output
        size, in place. The sentinel and rows after it are untouched.
        """
        num_bbs = count_boxes(labels)
        if num_bbs == 0:
            return labels

        x_scaling, y_scaling = plan.scale
        boxes = labels[:num_bbs]
        boxes[:, [1, 3]] = (boxes[:, [1, 3]] - plan.x) * x_scaling
        boxes[:, [2, 4]] = (boxes[:, [2, 4]] - plan.y) * y_scaling
        return labels

    def apply(self, image: np.ndarray, labels: np.ndarray, plan: CropPlan) -> Tuple[np.ndarray, np.ndarray]:
        """
        Args:
            image: [H, W, 3] uint8 source image
            labels: [C, 5] label array, modified in place
            plan: Crop to realize

        Returns:
            data: [3, height, width] normalized pixels
            labels: the transformed label array
        """
        resized = self.crop(image, plan)
        return normalize_pixels(resized, self.dtype), self.transform_boxes(labels, plan)
