"""
Library Service — the reference photo library and its tags.

Imports copy the original file into PhotoStorage; the library only ever
points at the stored copy.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union

from PySide6.QtGui import QImageReader

from drawing_trainer.data.models import ReferencePhoto, Tag
from drawing_trainer.data.repository import Repository
from drawing_trainer.services.photo_storage import PhotoStorage

logger = logging.getLogger(__name__)

VALID_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".webp", ".tiff", ".tif"}


class LibraryService:
    """Tags, photo import, and photo tagging."""

    def __init__(self, repo: Repository, storage: PhotoStorage) -> None:
        self.repo = repo
        self.storage = storage

    # ── Tags ────────────────────────────────────────────────────────────────

    def list_tags(self) -> List[Tag]:
        return self.repo.list_tags()

    def create_tag(self, name: str) -> Tag:
        name = (name or "").strip()
        if not name:
            raise ValueError("Tag name cannot be empty.")
        return self.repo.create_tag(name)

    # ── Photos ──────────────────────────────────────────────────────────────

    @staticmethod
    def is_valid_image_file(path: Union[str, Path]) -> bool:
        return Path(path).suffix.lower() in VALID_EXTENSIONS

    def import_photo(self, path: Union[str, Path], tag_ids: Iterable[int] = ()) -> ReferencePhoto:
        path = Path(path)
        if not self.is_valid_image_file(path):
            raise ValueError(f"Unsupported image type: {path.name}")
        stored = self.storage.store_reference(path)
        width, height = self._image_size(stored)
        photo = self.repo.add_photo(stored, path.name, width, height, tag_ids)
        logger.info("Imported %s as photo %d (%dx%d)", path.name, photo.id, width, height)
        return photo

    def import_folder(
        self,
        folder: Union[str, Path],
        tag_ids: Iterable[int] = (),
        progress: Optional[Callable[[int, int], None]] = None,
    ) -> List[ReferencePhoto]:
        """Import every supported image directly inside folder (not recursive)."""
        tag_ids = list(tag_ids)
        files = sorted(p for p in Path(folder).iterdir()
                       if p.is_file() and self.is_valid_image_file(p))
        imported: List[ReferencePhoto] = []
        for i, f in enumerate(files, start=1):
            imported.append(self.import_photo(f, tag_ids))
            if progress:
                progress(i, len(files))
        logger.info("Imported %d photos from %s", len(imported), folder)
        return imported

    def get_photo(self, photo_id: int) -> Optional[ReferencePhoto]:
        return self.repo.get_photo(photo_id)

    def list_photos(self, tag_id: Optional[int] = None) -> List[ReferencePhoto]:
        return self.repo.list_photos(tag_id)

    def set_photo_tag(self, photo_id: int, tag_id: int, enabled: bool) -> None:
        if enabled:
            self.repo.add_photo_tag(photo_id, tag_id)
        else:
            self.repo.remove_photo_tag(photo_id, tag_id)

    def delete_photo(self, photo_id: int) -> None:
        """Remove a photo from the library and its stored copy from disk."""
        photo = self.repo.get_photo(photo_id)
        if photo is None:
            return
        self.repo.delete_photo(photo_id)
        self.storage.remove(photo.file_path)

    @staticmethod
    def _image_size(path: str) -> Tuple[int, int]:
        size = QImageReader(path).size()
        if not size.isValid():
            logger.warning("Could not read image size for %s", path)
            return 0, 0
        return size.width(), size.height()
