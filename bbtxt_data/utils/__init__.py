"""
General utilities: seeding, file checks, terminal colors.

Plotting helpers live in `bbtxt_data.utils.plots` and are not imported here
because they depend on the data package.
"""

from .general import init_seeds, check_file, increment_path, colorstr

__all__ = ['init_seeds', 'check_file', 'increment_path', 'colorstr']
