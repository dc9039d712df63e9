"""
Visualization helpers for inspecting produced samples.
"""
from pathlib import Path
from typing import List, Optional, Union

import cv2
import numpy as np

from ..data.annotations import count_boxes


def get_color_palette(n_colors: int = 20) -> List[tuple]:
    """
    Color palette for drawing boxes.

    Args:
        n_colors: Number of colors needed

    Returns:
        List of (B, G, R) tuples
    """
    colors = [
        (56, 56, 255),    # red
        (31, 112, 255),   # orange
        (29, 178, 255),   # yellow-orange
        (49, 210, 207),   # yellow-green
        (10, 249, 72),    # green
        (134, 219, 61),   # cyan-green
        (187, 212, 0),    # cyan
        (255, 194, 0),    # sky blue
        (255, 115, 100),  # blue-purple
        (236, 24, 0),     # blue
        (255, 56, 132),   # purple
        (199, 55, 255),   # magenta
    ]
    while len(colors) < n_colors:
        colors = colors + colors
    return colors[:n_colors]


def draw_boxes(image: np.ndarray, labels: np.ndarray, thickness: int = 2) -> np.ndarray:
    """
    Draw the real boxes of a [C, 5] label array onto a copy of the image.

    Args:
        image: [H, W, 3] uint8 image
        labels: [C, 5] label array in the image's pixel space

    Returns:
        Annotated copy of the image
    """
    vis_image = image.copy()
    colors = get_color_palette()

    for label, xmin, ymin, xmax, ymax in labels[:count_boxes(labels)]:
        color = colors[int(label) % len(colors)]
        p1 = (int(round(xmin)), int(round(ymin)))
        p2 = (int(round(xmax)), int(round(ymax)))
        cv2.rectangle(vis_image, p1, p2, color, thickness)
        cv2.putText(vis_image, str(int(label)), (p1[0], max(p1[1] - 4, 10)),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.4, color, 1, cv2.LINE_AA)

    return vis_image


class SampleDumper:
    """
    Diagnostic hook for BatchAssembler(on_sample=...).

    Writes every produced crop with its transformed boxes drawn on it as
    `<prefix><counter>_<dataset index>.png` into `out_dir`.

    Args:
        out_dir: Output directory, created if missing
        prefix: File name prefix
        limit: Stop writing after this many images (None for no limit)
    """

    def __init__(self, out_dir: Union[str, Path], prefix: str = 'cropped', limit: Optional[int] = None):
        self.out_dir = Path(out_dir)
        self.out_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix
        self.limit = limit
        self.count = 0

    def __call__(self, index: int, image: np.ndarray, labels: np.ndarray):
        if self.limit is not None and self.count >= self.limit:
            return
        path = self.out_dir / f'{self.prefix}{self.count:06d}_{index}.png'
        if not cv2.imwrite(str(path), draw_boxes(image, labels)):
            raise OSError(f'Could not write {path}')
        self.count += 1
