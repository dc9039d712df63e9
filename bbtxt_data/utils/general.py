"""
General utility functions.
Provides file checks, seeding, and terminal utilities.
"""

import random
import time
from pathlib import Path
from typing import Optional, Union

import numpy as np
import torch


def init_seeds(seed: int = 0):
    """
    Seed python, numpy and torch global random state.

    The data pipeline itself draws from its own numpy Generator; this only
    covers code that still touches the global generators.

    Args:
        seed: Random seed
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)


def check_file(file: Union[str, Path], context: Optional[str] = None) -> Path:
    """
    Verify that a file exists.

    Args:
        file: File path
        context: Extra location info appended to the error message

    Returns:
        Path object

    Raises:
        FileNotFoundError: If the file does not exist
    """
    file = Path(file)
    if not file.is_file():
        msg = f"File '{file}' not found!"
        if context:
            msg += f' ({context})'
        raise FileNotFoundError(msg)
    return file


def increment_path(path: Union[str, Path], exist_ok: bool = False, sep: str = '_') -> Path:
    """
    Append an increasing suffix to a path so previous runs are not overwritten.

    Example:
        runs/preview -> runs/preview_2 -> runs/preview_3
    """
    path = Path(path)

    if not path.exists() or exist_ok:
        return path

    for n in range(2, 100):
        p = Path(f'{path}{sep}{n}')
        if not p.exists():
            return p

    return Path(f"{path}{sep}{time.strftime('%Y%m%d_%H%M%S')}")


def colorstr(*args):
    """
    Wrap a string in ANSI color codes for terminal output.

    Example:
        colorstr('blue', 'bold', 'hello')
    """
    *args, string = args if len(args) > 1 else ('blue', 'bold', args[0])
    colors = {
        'red': '\033[31m',
        'green': '\033[32m',
        'yellow': '\033[33m',
        'blue': '\033[34m',
        'cyan': '\033[36m',
        'bright_red': '\033[91m',
        'bright_green': '\033[92m',
        'bright_yellow': '\033[93m',
        'bright_cyan': '\033[96m',
        'end': '\033[0m',
        'bold': '\033[1m',
        'underline': '\033[4m'
    }

    return ''.join(colors.get(x, '') for x in args) + f'{string}' + colors['end']
