from .errors import BBTXTError, ConfigError, CorruptAnnotation, EmptyDataset, ImageDecodeError
from .data import (
    BoundingBox, AnnotatedImage, AnnotationStore, load_bbtxt, count_boxes,
    EpochCursor, CropPlan, CropSampler, SampleNormalizer,
    BatchAssembler, BBTXTIterableDataset, collate_fn,
)
from .config import DEFAULT_CONFIG, load_config, build_config, validate_config
from .utils.plots import SampleDumper

__version__ = '0.1.0'

__all__ = [
    'BBTXTError', 'ConfigError', 'CorruptAnnotation', 'EmptyDataset', 'ImageDecodeError',
    'BoundingBox', 'AnnotatedImage', 'AnnotationStore', 'load_bbtxt', 'count_boxes',
    'EpochCursor', 'CropPlan', 'CropSampler', 'SampleNormalizer',
    'BatchAssembler', 'BBTXTIterableDataset', 'collate_fn',
    'DEFAULT_CONFIG', 'load_config', 'build_config', 'validate_config',
    'SampleDumper',
]
