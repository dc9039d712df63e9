"""
BBTXT annotation loading.

A BBTXT file lists one bounding box per line:

    <filename> <label> <confidence> <xmin> <ymin> <xmax> <ymax>

Consecutive lines with the same filename belong to the same image. Each image
keeps its boxes in a fixed-capacity [C, 5] array of rows
[label, xmin, ymin, xmax, ymax]; when fewer than C boxes are present the row
after the last real box holds the sentinel label -1.

An image without boxes has to be written as a single line whose label is -1
(the sentinel ends up in row 0). Producers of BBTXT files are responsible for
that convention, the format has no other way to express it.
"""
from pathlib import Path
from typing import Dict, Iterator, List, NamedTuple, Optional, Union

import numpy as np

from ..errors import CorruptAnnotation, EmptyDataset
from ..utils.general import check_file, colorstr

# Maximum number of bounding boxes kept per image, the label blob is shaped by it
MAX_NUM_BBS_PER_IMAGE = 20
# [label, xmin, ymin, xmax, ymax]
LABEL_FIELDS = 5
SENTINEL_LABEL = -1.0
NUM_LINE_FIELDS = 7


class BoundingBox(NamedTuple):
    """One annotation row in the coordinate space of the current image or crop."""
    label: float
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin


def count_boxes(labels: np.ndarray) -> int:
    """
    Number of real boxes in a [C, 5] label array.

    Counts rows up to the first sentinel (label == -1). Without a sentinel
    the whole capacity is in use.
    """
    sentinels = np.flatnonzero(labels[:, 0] == SENTINEL_LABEL)
    if len(sentinels) > 0:
        return int(sentinels[0])
    return labels.shape[0]


class AnnotatedImage:
    """
    Image path together with its fixed-capacity label array.

    Rows after the sentinel are zero and carry no meaning.
    """

    def __init__(self, path: str, capacity: int = MAX_NUM_BBS_PER_IMAGE, dtype=np.float32):
        self.path = path
        self.labels = np.zeros((capacity, LABEL_FIELDS), dtype=dtype)
        self._filled = 0

    @property
    def capacity(self) -> int:
        return self.labels.shape[0]

    @property
    def num_boxes(self) -> int:
        return count_boxes(self.labels)

    def add_box(self, label: float, xmin: float, ymin: float, xmax: float, ymax: float) -> bool:
        """Append a row; returns False (and stores nothing) when the capacity is reached."""
        if self._filled >= self.capacity:
            return False
        self.labels[self._filled] = (label, xmin, ymin, xmax, ymax)
        self._filled += 1
        return True

    def finalize(self):
        """Mark the end of the box list with a sentinel if there is room for it."""
        if self._filled < self.capacity:
            self.labels[self._filled, 0] = SENTINEL_LABEL

    def boxes(self) -> List[BoundingBox]:
        return [BoundingBox(*map(float, row)) for row in self.labels[:self.num_boxes]]

    def __repr__(self):
        return f'AnnotatedImage(path={self.path!r}, num_boxes={self.num_boxes})'


class AnnotationStore:
    """
    Ordered, read-only collection of annotated images parsed from a BBTXT file.

    The store itself is never reordered; iteration order is owned by an
    EpochCursor so several workers can share one store.
    """

    def __init__(self, images: List[AnnotatedImage], source: Optional[str] = None,
                 dropped: Optional[Dict[str, int]] = None):
        self.images = list(images)
        self.source = source
        # Number of boxes skipped per image because the capacity was reached
        self.dropped = dict(dropped or {})

    @property
    def capacity(self) -> int:
        return self.images[0].capacity if self.images else MAX_NUM_BBS_PER_IMAGE

    def __len__(self) -> int:
        return len(self.images)

    def __getitem__(self, idx: int) -> AnnotatedImage:
        return self.images[idx]

    def __iter__(self) -> Iterator[AnnotatedImage]:
        return iter(self.images)

    @classmethod
    def from_file(cls, source: Union[str, Path], capacity: int = MAX_NUM_BBS_PER_IMAGE,
                  image_root: Optional[Union[str, Path]] = None, dtype=np.float32,
                  verbose: bool = True) -> 'AnnotationStore':
        """
        Parse a BBTXT file.

        Args:
            source: Path to the BBTXT annotation file
            capacity: Maximum number of boxes kept per image (C)
            image_root: Directory that relative image paths are resolved against
                (defaults to the working directory)
            dtype: Numeric type of the label arrays
            verbose: Print warnings and a summary

        Raises:
            FileNotFoundError: The annotation file or a referenced image is missing
            CorruptAnnotation: A line does not have exactly 7 fields or has non-numeric values
            EmptyDataset: The file does not describe any image
        """
        source = check_file(source)

        images = []
        dropped = {}
        current = None
        current_filename = None

        with open(source, 'r') as f:
            for lineno, raw in enumerate(f, start=1):
                line = raw.rstrip('\r\n')
                if not line.strip():
                    continue

                # [filename label confidence xmin ymin xmax ymax]
                data = line.split()
                if len(data) != NUM_LINE_FIELDS:
                    raise CorruptAnnotation(source, lineno, line)

                try:
                    label = float(data[1])
                    xmin, ymin, xmax, ymax = (float(v) for v in data[3:7])
                except ValueError:
                    raise CorruptAnnotation(source, lineno, line, reason='non-numeric field') from None

                if data[0] != current_filename:
                    if current is not None:
                        current.finalize()

                    path = Path(data[0])
                    if image_root is not None and not path.is_absolute():
                        path = Path(image_root) / path
                    check_file(path, context=f'referenced on line {lineno} of {source}')

                    current = AnnotatedImage(str(path), capacity=capacity, dtype=dtype)
                    current_filename = data[0]
                    images.append(current)

                if not current.add_box(label, xmin, ymin, xmax, ymax):
                    dropped[current.path] = dropped.get(current.path, 0) + 1
                    if verbose:
                        print(colorstr('bright_yellow',
                                       f'Warning: skipping box on line {lineno} - max number of '
                                       f'bounding boxes per image ({capacity}) reached for {current.path}'))

        # The last group ends with the file, not with a new filename
        if current is not None:
            current.finalize()

        if not images:
            raise EmptyDataset(source)

        if verbose:
            print(colorstr('bright_green', f'Loaded {len(images)} images from {source}'))

        return cls(images, source=str(source), dropped=dropped)


def load_bbtxt(source: Union[str, Path], capacity: int = MAX_NUM_BBS_PER_IMAGE,
               image_root: Optional[Union[str, Path]] = None, dtype=np.float32,
               verbose: bool = True) -> AnnotationStore:
    """Shortcut for AnnotationStore.from_file."""
    return AnnotationStore.from_file(source, capacity=capacity, image_root=image_root,
                                     dtype=dtype, verbose=verbose)
