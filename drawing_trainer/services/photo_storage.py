"""
Photo Storage — copies imported images into the app's storage folder.

Layout:
    <base>/references/YYYY-MM/<uuid><ext>
    <base>/drawings/YYYY-MM/<uuid><ext>
"""

from __future__ import annotations

import logging
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

REFERENCES_DIR = "references"
DRAWINGS_DIR = "drawings"


class PhotoStorage:
    """Owns the on-disk copies of reference photos and drawings."""

    def __init__(self, base_path: Union[str, Path]) -> None:
        self.base_path = Path(base_path)
        (self.base_path / REFERENCES_DIR).mkdir(parents=True, exist_ok=True)
        (self.base_path / DRAWINGS_DIR).mkdir(parents=True, exist_ok=True)

    def store_reference(self, source: Union[str, Path], now: Optional[datetime] = None) -> str:
        return self._store(Path(source), REFERENCES_DIR, now)

    def store_drawing(self, source: Union[str, Path], now: Optional[datetime] = None) -> str:
        return self._store(Path(source), DRAWINGS_DIR, now)

    def _store(self, source: Path, subfolder: str, now: Optional[datetime]) -> str:
        date_folder = (now or datetime.now()).strftime("%Y-%m")
        target_dir = self.base_path / subfolder / date_folder
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / f"{uuid.uuid4()}{source.suffix}"
        shutil.copyfile(source, target)
        logger.debug("Stored %s -> %s", source, target)
        return str(target)

    def remove(self, path: Union[str, Path]) -> bool:
        """Delete a stored file. A missing or locked file is logged, not raised."""
        try:
            Path(path).unlink()
        except FileNotFoundError:
            logger.warning("Stored file already gone: %s", path)
            return False
        except OSError as e:
            logger.error("Could not delete stored file %s: %s", path, e)
            return False
        logger.debug("Removed %s", path)
        return True
