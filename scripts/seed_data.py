"""
Seed Data — fills the library from a folder of images and adds a demo plan.

Run: python scripts/seed_data.py <image-folder> [tag-name]
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from drawing_trainer.config import load_config
from drawing_trainer.data.database import Database
from drawing_trainer.data.repository import Repository
from drawing_trainer.services.library_service import LibraryService
from drawing_trainer.services.photo_storage import PhotoStorage
from drawing_trainer.services.plan_service import PlanService

logger = logging.getLogger(__name__)

# Classic gesture warm-up: short poses first, then longer studies
DEMO_PLAN = [(30, 10), (60, 5), (120, 2), (300, 1)]  # (seconds, count)


def seed(folder: Path, tag_name: str = "Figure") -> None:
    config = load_config()
    db = Database(Path(config["db_path"]))
    db.connect()
    repo = Repository(db.conn)
    try:
        library = LibraryService(repo, PhotoStorage(config["storage_dir"]))
        plans = PlanService(repo)

        tag = repo.get_tag_by_name(tag_name) or library.create_tag(tag_name)

        def report(done: int, total: int) -> None:
            print(f"\r  imported {done}/{total}", end="", flush=True)

        photos = library.import_folder(folder, [tag.id], report)
        print()

        exercises = PlanService.expand_groups(
            [(tag.id, seconds, count) for seconds, count in DEMO_PLAN]
        )
        plan = plans.create_plan(f"{tag.name} Warm-up", exercises)

        print(f"Imported {len(photos)} photos tagged '{tag.name}'.")
        print(f"Created plan '{plan.name}' with {len(plan.exercises)} exercises.")
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) < 2:
        print(__doc__.strip())
        sys.exit(1)
    seed(Path(sys.argv[1]), *sys.argv[2:3])
