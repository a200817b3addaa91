"""Random reference-photo picking for an exercise's tag."""

from __future__ import annotations

import logging
import random
import sqlite3
from typing import Optional

from drawing_trainer.data.models import ReferencePhoto
from drawing_trainer.data.repository import Repository
from drawing_trainer.services.errors import PersistenceError

logger = logging.getLogger(__name__)


class PhotoSelector:
    """Picks a photo for a tag, avoiding an immediate repeat when it can."""

    def __init__(self, repo: Repository, rng: Optional[random.Random] = None) -> None:
        self.repo = repo
        self.rng = rng or random.Random()

    def pick(self, tag_id: int, exclude_photo_id: Optional[int] = None) -> Optional[ReferencePhoto]:
        """
        Uniform-random photo tagged tag_id, other than exclude_photo_id.

        Falls back to the excluded photo when it is the only one tagged, and
        returns None when the tag has no photos at all.
        """
        try:
            photos = self.repo.list_photos(tag_id)
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not load photos for tag {tag_id}: {e}") from e
        candidates = [p for p in photos if p.id != exclude_photo_id]
        if not candidates:
            candidates = photos
        if not candidates:
            logger.info("No reference photos tagged %s", tag_id)
            return None
        return self.rng.choice(candidates)
