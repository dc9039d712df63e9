"""
BBTXT data pipeline.

This subpackage contains:
- Annotation parsing (AnnotationStore)
- Epoch iteration order (EpochCursor)
- Crop sampling and realization (CropSampler, SampleNormalizer)
- Batch assembly and torch integration
"""

from .annotations import (
    MAX_NUM_BBS_PER_IMAGE, SENTINEL_LABEL,
    BoundingBox, AnnotatedImage, AnnotationStore, load_bbtxt, count_boxes,
)
from .cursor import EpochCursor
from .crop import CropPlan, CropSampler
from .image import load_image, normalize_pixels, denormalize_to_uint8
from .normalizer import SampleNormalizer
from .batch import BatchAssembler, BBTXTIterableDataset, collate_fn

__all__ = [
    # Annotations
    'MAX_NUM_BBS_PER_IMAGE', 'SENTINEL_LABEL',
    'BoundingBox', 'AnnotatedImage', 'AnnotationStore', 'load_bbtxt', 'count_boxes',
    # Sampling
    'EpochCursor', 'CropPlan', 'CropSampler', 'SampleNormalizer',
    # Image preprocessing
    'load_image', 'normalize_pixels', 'denormalize_to_uint8',
    # Batching
    'BatchAssembler', 'BBTXTIterableDataset', 'collate_fn',
]
