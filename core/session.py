"""
Editor session
The set of hats open in the editor and the operations the UI performs on
them: open, close, save, add elements, swap element images.
"""

import logging
from pathlib import Path
from typing import List, Optional

from utils.file_utils import file_stem, parse_name_and_size

from .bitmap import read_bitmap
from .bundle import HatBundle
from .errors import BundleIOError, InvalidBundleError
from .hats import HatElement, HatKind, TextureLoader, load_element
from .ids import ElementId

logger = logging.getLogger(__name__)


def _same_path(a: Optional[Path], b: Optional[Path]) -> bool:
    if a is None or b is None:
        return False
    return Path(a).resolve() == Path(b).resolve()


class HatSession:
    """
    Open hats of one editor window.

    Args:
        texture_loader: Creates a texture for each loaded element (None: no textures)
        reloader: Optional TextureReloader notified about textures
        settings: Optional SettingsManager remembering directories
    """

    def __init__(self, texture_loader: Optional[TextureLoader] = None, reloader=None,
                 settings=None):
        self.texture_loader = texture_loader
        self.reloader = reloader
        self.settings = settings
        self.bundles: List[HatBundle] = []

    def is_open(self, path) -> bool:
        return any(_same_path(b.path, path) for b in self.bundles)

    def new_bundle(self) -> HatBundle:
        bundle = HatBundle()
        self.bundles.append(bundle)
        return bundle

    def open_bundle(self, path) -> HatBundle:
        """
        Load a hat directory

        Raises:
            InvalidBundleError: The directory is already open
            BundleIOError: The directory cannot be read
        """
        if self.is_open(path):
            raise InvalidBundleError(f"hat {path} is already open")
        bundle = HatBundle.load(path, self.texture_loader)
        self._watch(bundle.textures())
        self.bundles.append(bundle)
        self._remember(path)
        return bundle

    def close_bundle(self, bundle: HatBundle):
        """Drop a hat and release its textures"""
        self._unwatch(bundle.textures())
        bundle.release_textures()
        if bundle in self.bundles:
            self.bundles.remove(bundle)

    def close_all(self):
        for bundle in list(self.bundles):
            self.close_bundle(bundle)

    def save_bundle(self, bundle: HatBundle, path=None):
        """
        Save a hat, to a new directory when `path` is given ("save as")

        Raises:
            InvalidBundleError: `path` belongs to another open hat
            BundleIOError: Nothing to save to, or the write failed
        """
        target = Path(path) if path is not None else bundle.path
        if target is None:
            raise BundleIOError("hat has no directory to save to")
        if any(b is not bundle and _same_path(b.path, target) for b in self.bundles):
            raise InvalidBundleError(f"hat {target} is open in another tab")
        bundle.save(target)
        bundle.path = target
        self._remember(target)

    def add_element_from_file(self, bundle: HatBundle, kind: HatKind, png) -> HatElement:
        """
        Load a PNG as a new element of `kind` and add it

        Raises:
            OSError: The image could not be read
            InvalidBundleError: The hat already has MAX_PETS pets
        """
        if kind.is_pet and not bundle.can_add_pets():
            raise InvalidBundleError("no room for another pet")
        element = load_element(kind, png, self.texture_loader)
        bundle.add_element(element)
        self._watch([element.texture])
        return element

    def remove_element(self, bundle: HatBundle, element_id: ElementId) -> Optional[HatElement]:
        element = bundle.element_by_id(element_id)
        if element is not None:
            self._unwatch([element.texture])
        return bundle.remove_element(element_id)

    def set_element_image(self, bundle: HatBundle, element_id: ElementId, png,
                          keep_metapixels: Optional[bool] = None) -> HatElement:
        """
        Replace the image of an element.

        With keep_metapixels the element keeps its id and parsed fields and
        only its art and texture change. Otherwise the PNG is loaded as a new
        element of the same kind (new id, fields read from the new file) that
        takes the old one's place. Previews are always replaced.

        Returns:
            The element now holding the image

        Raises:
            InvalidBundleError: Unknown id, or the art area does not fit the image
            OSError: The image could not be read
        """
        element = bundle.element_by_id(element_id)
        if element is None:
            raise InvalidBundleError(f"hat has no element with id {element_id}")
        if keep_metapixels is None:
            keep_metapixels = self.settings.get_keep_metapixels() if self.settings else True

        png = Path(png)
        if not keep_metapixels or element.kind == HatKind.PREVIEW:
            replacement = load_element(element.kind, png, self.texture_loader)
            self._unwatch([element.texture])
            bundle.replace_element(element_id, replacement)
            self._watch([replacement.texture])
            return replacement

        bitmap = read_bitmap(png)
        element.replace_image(bitmap, parse_name_and_size(file_stem(png)).size)
        if element.texture is not None:
            element.texture.replace_from_path(png)
            if self.reloader is not None:
                self.reloader.retarget(element.texture, png)
        elif self.texture_loader is not None:
            element.texture = self.texture_loader(png)
            self._watch([element.texture])
        logger.info("Replaced the image of %s with %s", element.kind.display_name, png.name)
        return element

    def _watch(self, textures):
        if self.reloader is None:
            return
        for texture in textures:
            if texture is not None:
                self.reloader.add_texture(texture)

    def _unwatch(self, textures):
        if self.reloader is None:
            return
        for texture in textures:
            if texture is not None:
                self.reloader.remove_texture(texture)

    def _remember(self, path):
        if self.settings is not None:
            self.settings.set_last_directory(str(path))
