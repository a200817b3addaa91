"""
Gallery Service — completed drawings, uploaded after a session or by hand.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from drawing_trainer.data.models import CompletedDrawing
from drawing_trainer.data.repository import Repository
from drawing_trainer.services.library_service import LibraryService
from drawing_trainer.services.photo_storage import PhotoStorage

logger = logging.getLogger(__name__)


class GalleryService:
    """Stores drawings and lists them for the gallery."""

    def __init__(self, repo: Repository, storage: PhotoStorage) -> None:
        self.repo = repo
        self.storage = storage

    def upload_drawing(self, result_id: int, file_path: Union[str, Path],
                       artist_id: Optional[int] = None) -> CompletedDrawing:
        """Attach a drawing to one exercise result of a finished session."""
        path = self._check_image(file_path)
        stored = self.storage.store_drawing(path)
        drawing = self.repo.add_drawing(CompletedDrawing(
            exercise_result_id=result_id,
            file_path=stored,
            original_file_name=path.name,
            artist_id=artist_id,
        ))
        logger.info("Uploaded drawing %d for result %d", drawing.id, result_id)
        return drawing

    def add_drawing(
        self,
        file_path: Union[str, Path],
        tag_id: Optional[int],
        duration_seconds: int,
        drawn_at: Optional[datetime] = None,
        reference_photo_id: Optional[int] = None,
        artist_id: Optional[int] = None,
    ) -> CompletedDrawing:
        """Add a drawing made outside a session."""
        if duration_seconds < 0:
            raise ValueError("Duration cannot be negative.")
        path = self._check_image(file_path)
        stored = self.storage.store_drawing(path)
        drawing = self.repo.add_drawing(CompletedDrawing(
            file_path=stored,
            original_file_name=path.name,
            tag_id=tag_id,
            duration_seconds=duration_seconds,
            drawn_at=drawn_at or datetime.now(),
            reference_photo_id=reference_photo_id,
            artist_id=artist_id,
        ))
        logger.info("Added manual drawing %d", drawing.id)
        return drawing

    def list_drawings(self, tag_id: Optional[int] = None,
                      artist_id: Optional[int] = None) -> List[CompletedDrawing]:
        return self.repo.list_drawings(tag_id=tag_id, artist_id=artist_id)

    def set_artist(self, drawing_id: int, artist_id: Optional[int]) -> None:
        self.repo.set_drawing_artist(drawing_id, artist_id)

    @staticmethod
    def _check_image(file_path: Union[str, Path]) -> Path:
        path = Path(file_path)
        if not LibraryService.is_valid_image_file(path):
            raise ValueError(f"Unsupported image type: {path.name}")
        return path
