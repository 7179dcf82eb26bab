"""
Hat bundle
A directory-level collection of hat elements: at most one element of each
unique kind plus an ordered list of up to MAX_PETS pets.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from utils.file_utils import file_stem, parse_name_and_size

from .errors import BundleIOError, InvalidBundleError
from .hats import (
    MAX_PETS,
    PET_KINDS,
    UNIQUE_KINDS,
    HatElement,
    HatKind,
    TextureLoader,
    classify_stem,
    element_class,
)
from .ids import ElementId

logger = logging.getLogger(__name__)


class HatBundle:
    """One hat: the elements stored in a single directory"""

    def __init__(self, path: Optional[Path] = None):
        self.path: Optional[Path] = Path(path) if path is not None else None
        self.unique_elements: Dict[HatKind, HatElement] = {}
        self.pets: List[HatElement] = []

    def __repr__(self) -> str:
        kinds = [e.kind.name for e in self.iter_all()]
        return f"HatBundle(path={self.path!r}, elements={kinds})"

    def __iter__(self) -> Iterator[HatElement]:
        return self.iter_all()

    def __len__(self) -> int:
        return len(self.unique_elements) + len(self.pets)

    # Loading / saving

    @classmethod
    def load(cls, dir_path, texture_loader: Optional[TextureLoader] = None) -> 'HatBundle':
        """
        Load every recognised PNG of a directory.

        Files are visited in sorted name order. A file that cannot be decoded
        is logged and skipped; pets past MAX_PETS are skipped (first wins).

        Args:
            dir_path: Bundle directory
            texture_loader: Optional callable creating a texture for each file

        Returns:
            The loaded bundle, with `path` set to dir_path

        Raises:
            BundleIOError: The directory is missing or cannot be listed
        """
        path = Path(dir_path)
        if not path.is_dir():
            raise BundleIOError(f"path to hat was not found: {path}")
        try:
            entries = sorted(path.iterdir())
        except OSError as e:
            raise BundleIOError(f"could not read hat directory {path}: {e}") from e

        bundle = cls(path)
        for entry in entries:
            if not entry.is_file() or entry.suffix.lower() != '.png':
                continue
            kind = classify_stem(parse_name_and_size(file_stem(entry)).name)
            if kind is None:
                logger.debug("Ignoring %s: not a hat element", entry.name)
                continue
            if kind in PET_KINDS and not bundle.can_add_pets():
                logger.warning("Skipping %s: a hat holds at most %d pets", entry.name, MAX_PETS)
                continue
            try:
                element = element_class(kind).load(entry, texture_loader)
            except Exception as e:
                logger.warning("Skipping %s: %s", entry.name, e)
                continue
            bundle.add_element(element)

        logger.info("Loaded hat %s with %d element(s)", path, len(bundle))
        return bundle

    def save(self, dir_path=None):
        """
        Write every element into a directory, replacing its previous content.

        The files are first written to a temporary sibling directory that is
        then swapped in, so a failed write leaves the old directory intact.

        Raises:
            BundleIOError: No target path, or a filesystem operation failed
        """
        target = Path(dir_path) if dir_path is not None else self.path
        if target is None:
            raise BundleIOError("hat has no directory to save to")

        staging = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            staging = Path(tempfile.mkdtemp(prefix=f".{target.name}-", dir=target.parent))
            for element, save_name in self._save_names():
                element.save(staging, save_name)
            if target.exists():
                shutil.rmtree(target)
            staging.rename(target)
            staging = None
        except OSError as e:
            raise BundleIOError(f"could not save hat to {target}: {e}") from e
        finally:
            if staging is not None:
                shutil.rmtree(staging, ignore_errors=True)

        logger.info("Saved hat %s with %d element(s)", target, len(self))

    def _save_names(self):
        """Pair elements with unique file names (pets may share a name)"""
        used = set()
        for element in self.iter_all():
            base = element.save_name()
            name, counter = base, 1
            while name.lower() in used:
                counter += 1
                name = f"{base}{counter}"
            used.add(name.lower())
            yield element, name

    # Composition

    def add_element(self, element: HatElement):
        """
        Add a pet to the pet list or put a unique element in its slot,
        replacing (and releasing) any previous element of that kind.

        Raises:
            InvalidBundleError: The bundle already holds MAX_PETS pets, or
                already holds an element with the same id elsewhere
        """
        if element.kind in PET_KINDS:
            self.add_pet(element)
        else:
            self.add_unique_element(element.kind, element)

    def add_pet(self, element: HatElement):
        if element.kind not in PET_KINDS:
            raise ValueError(f"{element.kind.display_name} is not a pet")
        self._check_new_id(element)
        if not self.can_add_pets():
            raise InvalidBundleError(f"a hat holds at most {MAX_PETS} pets")
        self.pets.append(element)

    def add_unique_element(self, kind: HatKind, element: HatElement):
        if kind not in UNIQUE_KINDS or element.kind != kind:
            raise ValueError(f"cannot store a {element.kind.display_name} as unique {kind!r}")
        previous = self.unique_elements.get(kind)
        if previous is element:
            return
        self._check_new_id(element)
        if previous is not None:
            previous.release()
        self.unique_elements[kind] = element

    def remove_element(self, element_id: ElementId) -> Optional[HatElement]:
        """Remove an element by id and release its texture"""
        element = self._detach(element_id)
        if element is not None:
            element.release()
        return element

    def replace_element(self, element_id: ElementId, element: HatElement):
        """
        Swap the element with the given id for another one.

        Nothing changes when the swap is rejected. A replaced pet keeps its
        position in the pet list.

        Raises:
            InvalidBundleError: No element has `element_id`, the new element's
                id is already used by another element, or a new pet does not
                fit in a full pet list
        """
        old = self.element_by_id(element_id)
        if old is None:
            raise InvalidBundleError(f"hat has no element with id {element_id}")
        if element is old:
            return
        if element.id != element_id:
            self._check_new_id(element)

        if element.kind in PET_KINDS:
            if old.kind in PET_KINDS:
                self.pets[self.pets.index(old)] = element
                old.release()
                return
            if not self.can_add_pets():
                raise InvalidBundleError(f"a hat holds at most {MAX_PETS} pets")

        self.remove_element(element_id)
        self.add_element(element)

    def _check_new_id(self, element: HatElement):
        if self.element_by_id(element.id) is not None:
            raise InvalidBundleError(
                f"{element.kind.display_name} with id {element.id} is already in the hat")

    def _detach(self, element_id: ElementId) -> Optional[HatElement]:
        for kind, element in list(self.unique_elements.items()):
            if element.id == element_id:
                return self.unique_elements.pop(kind)
        for index, element in enumerate(self.pets):
            if element.id == element_id:
                return self.pets.pop(index)
        return None

    # Lookup

    def iter_all(self) -> Iterator[HatElement]:
        """Unique elements first, then pets in insertion order"""
        yield from self.unique_elements.values()
        yield from self.pets

    def element_by_id(self, element_id: ElementId) -> Optional[HatElement]:
        return next((e for e in self.iter_all() if e.id == element_id), None)

    def element_by_kind(self, kind: HatKind) -> Optional[HatElement]:
        """The unique element of a kind, or the first pet of a pet kind"""
        if kind in UNIQUE_KINDS:
            return self.unique_elements.get(kind)
        return next((p for p in self.pets if p.kind == kind), None)

    def kind_by_id(self, element_id: ElementId) -> Optional[HatKind]:
        element = self.element_by_id(element_id)
        return element.kind if element is not None else None

    def id_by_kind(self, kind: HatKind) -> Optional[ElementId]:
        element = self.element_by_kind(kind)
        return element.id if element is not None else None

    def first_element(self) -> Optional[HatElement]:
        """Default UI selection: the lowest unique kind, else the first pet"""
        for kind in sorted(self.unique_elements):
            return self.unique_elements[kind]
        return self.pets[0] if self.pets else None

    def has_elements(self) -> bool:
        return bool(self.unique_elements or self.pets)

    def can_add_pets(self) -> bool:
        return len(self.pets) < MAX_PETS

    @property
    def wearable(self) -> Optional[HatElement]:
        return self.unique_elements.get(HatKind.WEARABLE)

    @property
    def wings(self) -> Optional[HatElement]:
        return self.unique_elements.get(HatKind.WINGS)

    @property
    def extra(self) -> Optional[HatElement]:
        return self.unique_elements.get(HatKind.EXTRA)

    @property
    def room(self) -> Optional[HatElement]:
        return self.unique_elements.get(HatKind.ROOM)

    @property
    def preview(self) -> Optional[HatElement]:
        return self.unique_elements.get(HatKind.PREVIEW)

    # Resources

    def textures(self) -> List:
        return [e.texture for e in self.iter_all() if e.texture is not None]

    def release_textures(self):
        """Release the textures of every element (bundle closed)"""
        for element in self.iter_all():
            element.release()
