"""
Settings Manager
Handles editor settings persistence
"""

from typing import List, Optional

from PyQt6.QtCore import QSettings

MAX_RECENT_DIRECTORIES = 10


class SettingsManager:
    """Manages editor settings"""

    def __init__(self, path: Optional[str] = None):
        """
        Args:
            path: Optional INI file to use instead of the per-user store
        """
        if path is None:
            self.settings = QSettings('HatPackEditor', 'Settings')
        else:
            self.settings = QSettings(str(path), QSettings.Format.IniFormat)

    def get_last_directory(self) -> str:
        """Get the last opened or saved hat directory"""
        return self.settings.value('last_directory', '', type=str)

    def set_last_directory(self, path: str):
        self.settings.setValue('last_directory', str(path))
        self.add_recent_directory(path)

    def get_keep_metapixels(self) -> bool:
        """Whether replacing an element's image keeps its metapixel fields"""
        return self.settings.value('keep_metapixels', True, type=bool)

    def set_keep_metapixels(self, keep: bool):
        self.settings.setValue('keep_metapixels', bool(keep))

    def get_recent_directories(self) -> List[str]:
        """Most recently used hat directories, newest first"""
        value = self.settings.value('recent_directories', [])
        # INI storage reads a one-entry list back as a plain string
        if isinstance(value, str):
            value = [value]
        return [str(v) for v in value or []]

    def add_recent_directory(self, path: str):
        recent = [p for p in self.get_recent_directories() if p != str(path)]
        recent.insert(0, str(path))
        self.settings.setValue('recent_directories', recent[:MAX_RECENT_DIRECTORIES])

    def sync(self):
        """Flush pending changes to storage"""
        self.settings.sync()
