"""
File utilities
Filename parsing and file metadata helpers for hat pack directories
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

PathLike = Union[str, os.PathLike]

SEPARATOR = '_'
_POSITIVE_INT = re.compile(r'^[0-9]+$')


@dataclass(frozen=True)
class HatNameAndSize:
    """Element name and optional art area size taken from a file stem"""
    name: str
    size: Optional[Tuple[int, int]] = None


def file_stem(path: PathLike) -> str:
    """Return the file name without its last extension"""
    return Path(path).stem


def file_modified_time(path: PathLike) -> Optional[int]:
    """
    Get the modification time of a file in milliseconds

    Returns:
        Milliseconds since the epoch, or None if the file cannot be stat'ed
    """
    try:
        return os.stat(path).st_mtime_ns // 1_000_000
    except OSError:
        return None


def _parse_dimension(text: str) -> Optional[int]:
    if not _POSITIVE_INT.match(text):
        return None
    value = int(text)
    return value if value > 0 else None


def parse_name_and_size(stem: str) -> HatNameAndSize:
    """
    Split a `<name>_<w>_<h>` stem into the element name and art area size.

    When the stem has fewer than three underscore separated parts, or the two
    trailing parts are not both positive integers, the whole stem is the name
    and the size is left unset (the caller falls back to the PNG size).

    Args:
        stem: File name without extension

    Returns:
        HatNameAndSize with a non-empty name whenever the stem is non-empty
    """
    parts = stem.split(SEPARATOR)
    if len(parts) < 3:
        return HatNameAndSize(stem)

    name = SEPARATOR.join(parts[:-2])
    width = _parse_dimension(parts[-2])
    height = _parse_dimension(parts[-1])
    if not name or width is None or height is None:
        return HatNameAndSize(stem)

    return HatNameAndSize(name, (width, height))
