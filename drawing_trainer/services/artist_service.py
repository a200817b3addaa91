"""Artists that completed drawings can be attributed to."""

from __future__ import annotations

import logging
from typing import List

from drawing_trainer.data.models import Artist
from drawing_trainer.data.repository import Repository

logger = logging.getLogger(__name__)


class ArtistService:

    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def list_artists(self) -> List[Artist]:
        return self.repo.list_artists()

    def create_artist(self, name: str) -> Artist:
        artist = self.repo.create_artist(self._clean(name))
        logger.info("Created artist %d '%s'", artist.id, artist.name)
        return artist

    def rename_artist(self, artist_id: int, name: str) -> None:
        self.repo.rename_artist(artist_id, self._clean(name))

    def delete_artist(self, artist_id: int) -> None:
        """Delete the artist; their drawings remain, unattributed."""
        self.repo.delete_artist(artist_id)

    @staticmethod
    def _clean(name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValueError("Artist name cannot be empty.")
        return name
