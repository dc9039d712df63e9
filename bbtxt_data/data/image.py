"""
Image loading and pixel normalization.

Pixels are mapped with the fixed transform (v - 128) / 128, so 0 -> -1.0,
128 -> 0.0 and 255 -> 0.9921875. No per-image statistics are used.
"""
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np
import torch

from ..errors import ImageDecodeError
from ..utils.general import check_file

PIXEL_MEAN = 128.0
PIXEL_SCALE = 128.0


def load_image(path: Union[str, Path], to_rgb: bool = False, index: Optional[int] = None) -> np.ndarray:
    """
    Read a 3-channel image.

    Args:
        path: Image file
        to_rgb: Convert from OpenCV's BGR order to RGB
        index: Dataset index, only used in error messages

    Returns:
        [H, W, 3] uint8 array

    Raises:
        FileNotFoundError: The file does not exist
        ImageDecodeError: OpenCV could not decode the file
    """
    context = f'dataset index {index}' if index is not None else None
    path = check_file(path, context=context)

    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise ImageDecodeError(path, index=index)

    if to_rgb:
        image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    return image


def normalize_pixels(image: np.ndarray, dtype=np.float32) -> np.ndarray:
    """
    [H, W, 3] uint8 image -> [3, H, W] planar array of (v - 128) / 128.
    """
    data = (image.astype(dtype) - PIXEL_MEAN) / PIXEL_SCALE
    return np.ascontiguousarray(data.transpose(2, 0, 1), dtype=dtype)


def denormalize_to_uint8(img: Union[np.ndarray, torch.Tensor]) -> np.ndarray:
    """
    Inverse of normalize_pixels.

    Args:
        img: Normalized [3, H, W] tensor or array

    Returns:
        [H, W, 3] uint8 array
    """
    if isinstance(img, torch.Tensor):
        img = img.detach().cpu().numpy()
    result = np.clip(np.rint(img * PIXEL_SCALE + PIXEL_MEAN), 0, 255)
    return np.ascontiguousarray(result.transpose(1, 2, 0), dtype=np.uint8)
