"""
Utils module for the Hat Pack Editor
Contains filename parsing, frame range helpers and settings
"""

from .file_utils import HatNameAndSize, file_stem, file_modified_time, parse_name_and_size
from .ranges import is_range, frames_from_range

__all__ = [
    'HatNameAndSize',
    'file_stem',
    'file_modified_time',
    'parse_name_and_size',
    'is_range',
    'frames_from_range',
]
