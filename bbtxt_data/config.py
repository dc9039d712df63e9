"""
Pipeline configuration.
Configs are plain dicts with a 'data' section; they can be loaded from YAML
or built from command line arguments.
"""
import copy
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np
import yaml

from .errors import ConfigError
from .data.annotations import MAX_NUM_BBS_PER_IMAGE
from .utils.general import colorstr

DTYPES = {
    'float32': np.float32,
    'float64': np.float64,
}

REQUIRED_FIELDS = ('source', 'height', 'width', 'reference_size')

DEFAULT_CONFIG = {
    'data': {
        'source': None,
        'image_root': None,
        'height': None,
        'width': None,
        'reference_size': None,
        'batch_size': 1,
        'shuffle': False,
        'max_boxes_per_image': MAX_NUM_BBS_PER_IMAGE,
        'seed': None,
        'dtype': 'float32',
        'to_rgb': False,
        'dump_dir': None,
    }
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(config: Dict[str, Any], verbose: bool = True) -> Dict[str, Any]:
    """
    Check the 'data' section of a config.

    Args:
        config: Config dict (already merged over DEFAULT_CONFIG)
        verbose: Print warnings

    Returns:
        The same config

    Raises:
        ConfigError: A required field is missing or a value is invalid
    """
    data = config.get('data')
    if not isinstance(data, dict):
        raise ConfigError("Config must contain a 'data' section")

    for field in REQUIRED_FIELDS:
        if data.get(field) is None:
            raise ConfigError(f"'data.{field}' must be set!")

    for field in ('height', 'width', 'batch_size', 'max_boxes_per_image'):
        value = data.get(field)
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"'data.{field}' must be a positive integer, got {value!r}")

    reference_size = data['reference_size']
    if isinstance(reference_size, bool) or not isinstance(reference_size, (int, float)) or reference_size <= 0:
        raise ConfigError(f"'data.reference_size' must be a positive number, got {reference_size!r}")

    if data.get('dtype') not in DTYPES:
        raise ConfigError(f"'data.dtype' must be one of {sorted(DTYPES)}, got {data.get('dtype')!r}")

    seed = data.get('seed')
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ConfigError(f"'data.seed' must be an integer, got {seed!r}")

    if verbose and reference_size > min(data['height'], data['width']):
        print(colorstr('bright_yellow',
                       f"Warning: reference_size {reference_size} is larger than the network input "
                       f"{data['width']}x{data['height']}; reference boxes will not fit into their crops"))

    return config


def load_config(path: Union[str, Path], verbose: bool = True) -> Dict[str, Any]:
    """
    Load a YAML config file, fill in defaults and validate it.

    Relative 'source', 'image_root' and 'dump_dir' paths are kept as written,
    i.e. relative to the working directory.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file '{path}' not found!")

    with open(path, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping")

    return validate_config(_merge(DEFAULT_CONFIG, loaded), verbose=verbose)


def build_config(args, verbose: bool = True) -> Dict[str, Any]:
    """
    Build configuration dictionary from command line arguments.

    Arguments left at None fall back to DEFAULT_CONFIG.

    Args:
        args: Parsed command line arguments
    """
    overrides = {
        'source': args.source,
        'image_root': args.image_root,
        'height': args.height,
        'width': args.width,
        'reference_size': args.reference_size,
        'batch_size': args.batch_size,
        'shuffle': args.shuffle,
        'max_boxes_per_image': args.max_boxes,
        'seed': args.seed,
        'dtype': args.dtype,
        'to_rgb': args.rgb,
        'dump_dir': args.dump_dir,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return validate_config(_merge(DEFAULT_CONFIG, {'data': overrides}), verbose=verbose)


def get_dtype(config: Dict[str, Any]):
    """numpy dtype selected by 'data.dtype'."""
    return DTYPES[config['data']['dtype']]
