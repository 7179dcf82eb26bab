"""
Texture reloader
Polls the source files of loaded textures and re-uploads the ones that
changed on disk, so edits made in an external image editor show up live.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from utils.file_utils import file_modified_time

logger = logging.getLogger(__name__)


@dataclass
class _Watched:
    texture: object
    path: Path
    modified_time: int


class TextureReloader:
    """Reload-by-path registry of textures"""

    def __init__(self):
        self._watched: List[_Watched] = []

    def __len__(self) -> int:
        return len(self._watched)

    def __contains__(self, texture) -> bool:
        return any(w.texture is texture for w in self._watched)

    def add_texture(self, texture) -> bool:
        """
        Start watching a texture's source file

        Returns:
            False if the texture has no path or its file cannot be stat'ed
        """
        path = getattr(texture, 'path', None)
        if path is None:
            return False
        return self.retarget(texture, path)

    def retarget(self, texture, path) -> bool:
        """Watch `path` for a texture, replacing any previous registration"""
        self.remove_texture(texture)
        modified_time = file_modified_time(path)
        if modified_time is None:
            return False
        self._watched.append(_Watched(texture, Path(path), modified_time))
        return True

    def remove_texture(self, texture):
        self._watched = [w for w in self._watched if w.texture is not texture]

    def poll(self) -> int:
        """
        Forget deleted textures and reload those whose file changed

        Returns:
            Number of textures reloaded
        """
        self._watched = [w for w in self._watched if not getattr(w.texture, 'deleted', False)]
        reloaded = 0
        for watched in self._watched:
            modified_time = file_modified_time(watched.path)
            if modified_time is None or modified_time == watched.modified_time:
                continue
            watched.modified_time = modified_time
            if watched.texture.replace_from_path(watched.path):
                logger.info("Reloaded texture from %s", watched.path)
                reloaded += 1
        return reloaded
