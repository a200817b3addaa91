"""Unit tests for the data layer (database, repository, models)."""

import sqlite3
from datetime import datetime, timedelta

import pytest

from drawing_trainer.data.database import DEFAULT_TAGS, Database, init_schema
from drawing_trainer.data.models import CompletedDrawing, SessionExercise, SessionPlan
from drawing_trainer.data.repository import Repository


class TestSchema:
    def test_default_tags_seeded(self, repo: Repository):
        names = {t.name for t in repo.list_tags()}
        assert set(DEFAULT_TAGS) <= names

    def test_init_schema_is_idempotent(self, repo: Repository):
        init_schema(repo.conn)
        assert len(repo.list_tags()) == len(DEFAULT_TAGS)

    def test_file_database(self, tmp_path):
        db = Database(tmp_path / "trainer.db")
        conn = db.connect()
        assert db.connect() is conn
        assert Repository(conn).get_tag_by_name("Portrait") is not None
        db.close()
        assert db.conn is None

    def test_photo_columns(self, repo: Repository):
        cols = [r["name"] for r in repo.conn.execute("PRAGMA table_info(reference_photos)")]
        assert cols == ["id", "file_path", "original_file_name", "width", "height", "imported_at"]


class TestTags:
    def test_create_tag(self, repo: Repository):
        tag = repo.create_tag("Hands")
        assert tag.id is not None
        assert repo.get_tag(tag.id).name == "Hands"

    def test_duplicate_tag(self, repo: Repository):
        first = repo.create_tag("Hands")
        second = repo.create_tag("Hands")
        assert first.id == second.id


class TestPhotos:
    def test_add_and_get(self, repo: Repository):
        tag = repo.create_tag("Hands")
        photo = repo.add_photo("/ref/a.jpg", "a.jpg", 640, 480, [tag.id])
        got = repo.get_photo(photo.id)
        assert got.file_path == "/ref/a.jpg"
        assert (got.width, got.height) == (640, 480)
        assert got.tag_ids == [tag.id]
        assert got.imported_at is not None

    def test_list_by_tag(self, repo: Repository):
        hands = repo.create_tag("Hands")
        feet = repo.create_tag("Feet")
        repo.add_photo("/ref/h.jpg", "h.jpg", tag_ids=[hands.id])
        repo.add_photo("/ref/f.jpg", "f.jpg", tag_ids=[feet.id])
        repo.add_photo("/ref/both.jpg", "both.jpg", tag_ids=[hands.id, feet.id])
        assert [p.original_file_name for p in repo.list_photos(hands.id)] == ["h.jpg", "both.jpg"]
        assert len(repo.list_photos()) == 3

    def test_tag_toggle(self, repo: Repository):
        tag = repo.create_tag("Hands")
        photo = repo.add_photo("/ref/a.jpg", "a.jpg")
        repo.add_photo_tag(photo.id, tag.id)
        repo.add_photo_tag(photo.id, tag.id)
        assert repo.get_photo(photo.id).tag_ids == [tag.id]
        repo.remove_photo_tag(photo.id, tag.id)
        assert repo.list_photos(tag.id) == []

    def test_delete_photo_keeps_results(self, repo: Repository):
        tag = repo.create_tag("Hands")
        photo = repo.add_photo("/ref/a.jpg", "a.jpg", tag_ids=[tag.id])
        plan = repo.create_plan("P", [(tag.id, 30)])
        session = repo.create_session(plan.id, datetime.now())
        repo.add_result(session.id, plan.exercises[0].id, photo.id, 0, False)

        repo.delete_photo(photo.id)

        assert repo.get_photo(photo.id) is None
        (result,) = repo.list_results(session.id)
        assert result.reference_photo_id is None


class TestPlans:
    def test_create_plan_numbers_exercises(self, repo: Repository):
        tag = repo.create_tag("Hands")
        plan = repo.create_plan("Warm-up", [(tag.id, 30), (tag.id, 60)])
        assert [e.sort_order for e in plan.exercises] == [0, 1]
        assert [e.duration_seconds for e in plan.exercises] == [30, 60]
        assert plan.exercises[0].tag_name == "Hands"
        assert plan.total_seconds == 90

    def test_replace_plan(self, repo: Repository):
        tag = repo.create_tag("Hands")
        plan = repo.create_plan("Warm-up", [(tag.id, 30), (tag.id, 60)])
        repo.replace_plan(plan.id, "Long", [(tag.id, 600)])
        updated = repo.get_plan(plan.id)
        assert updated.name == "Long"
        assert [(e.duration_seconds, e.sort_order) for e in updated.exercises] == [(600, 0)]

    def test_list_plans_newest_first(self, repo: Repository):
        tag = repo.create_tag("Hands")
        old = repo.create_plan("Old", [(tag.id, 30)], created_at=datetime.now() - timedelta(days=1))
        new = repo.create_plan("New", [(tag.id, 30)])
        assert [p.id for p in repo.list_plans()] == [new.id, old.id]

    def test_delete_plan_keeps_history(self, repo: Repository):
        tag = repo.create_tag("Hands")
        plan = repo.create_plan("Gone", [(tag.id, 30)])
        session = repo.create_session(plan.id, datetime.now())
        repo.add_result(session.id, plan.exercises[0].id, None, 0, False)
        repo.complete_session(session.id, datetime.now())

        repo.delete_plan(plan.id)

        assert repo.get_plan(plan.id) is None
        kept = repo.get_session(session.id)
        assert kept.plan_id is None
        assert kept.plan_name == ""
        (result,) = repo.list_results(session.id)
        assert result.exercise_id is None


class TestSessions:
    def test_complete_once(self, repo: Repository):
        tag = repo.create_tag("Hands")
        plan = repo.create_plan("P", [(tag.id, 30)])
        session = repo.create_session(plan.id, datetime.now())
        assert repo.complete_session(session.id, datetime(2026, 1, 1, 12, 0))
        assert not repo.complete_session(session.id, datetime(2026, 1, 2, 12, 0))
        stored = repo.get_session(session.id)
        assert stored.is_completed
        assert stored.completed_at == datetime(2026, 1, 1, 12, 0)
        assert stored.plan_name == "P"

    def test_list_completed_only(self, repo: Repository):
        tag = repo.create_tag("Hands")
        plan = repo.create_plan("P", [(tag.id, 30)])
        done = repo.create_session(plan.id, datetime.now())
        repo.create_session(plan.id, datetime.now())
        repo.complete_session(done.id, datetime.now())
        assert [s.id for s in repo.list_completed_sessions()] == [done.id]

    def test_results_ordered_and_joined(self, repo: Repository):
        tag = repo.create_tag("Hands")
        photo = repo.add_photo("/ref/a.jpg", "a.jpg", tag_ids=[tag.id])
        plan = repo.create_plan("P", [(tag.id, 30)])
        session = repo.create_session(plan.id, datetime.now())
        ex_id = plan.exercises[0].id
        repo.add_result(session.id, ex_id, photo.id, 1, False)
        repo.add_result(session.id, ex_id, photo.id, 0, True)
        results = repo.list_results(session.id)
        assert [r.sort_order for r in results] == [0, 1]
        assert [r.was_skipped for r in results] == [True, False]
        assert results[0].photo_path == "/ref/a.jpg"
        assert results[0].tag_name == "Hands"

    def test_duplicate_sort_order_rejected(self, repo: Repository):
        tag = repo.create_tag("Hands")
        plan = repo.create_plan("P", [(tag.id, 30)])
        session = repo.create_session(plan.id, datetime.now())
        repo.add_result(session.id, plan.exercises[0].id, None, 0, False)
        with pytest.raises(sqlite3.IntegrityError):
            repo.add_result(session.id, plan.exercises[0].id, None, 0, False)


class TestDrawingsAndArtists:
    def _result(self, repo, tag_id):
        plan = repo.create_plan("P", [(tag_id, 30)])
        session = repo.create_session(plan.id, datetime.now())
        return repo.add_result(session.id, plan.exercises[0].id, None, 0, False)

    def test_drawing_for_result_takes_exercise_tag(self, repo: Repository):
        tag = repo.create_tag("Hands")
        result = self._result(repo, tag.id)
        repo.add_drawing(CompletedDrawing(exercise_result_id=result.id,
                                          file_path="/d/1.png", original_file_name="1.png"))
        (attached,) = [r.drawing for r in repo.list_results(result.session_id)]
        assert attached.tag_name == "Hands"
        assert repo.list_drawings(tag_id=tag.id)[0].id == attached.id

    def test_filter_by_artist(self, repo: Repository):
        ann = repo.create_artist("Ann")
        repo.add_drawing(CompletedDrawing(file_path="/d/1.png", artist_id=ann.id))
        repo.add_drawing(CompletedDrawing(file_path="/d/2.png"))
        assert [d.file_path for d in repo.list_drawings(artist_id=ann.id)] == ["/d/1.png"]
        assert len(repo.list_drawings()) == 2

    def test_delete_artist_unlinks_drawings(self, repo: Repository):
        ann = repo.create_artist("Ann")
        drawing = repo.add_drawing(CompletedDrawing(file_path="/d/1.png", artist_id=ann.id))
        assert drawing.artist_name == "Ann"
        repo.delete_artist(ann.id)
        assert repo.get_artist(ann.id) is None
        assert repo.get_drawing(drawing.id).artist_id is None

    def test_rename_artist(self, repo: Repository):
        ann = repo.create_artist("Ann")
        repo.rename_artist(ann.id, "Anne")
        assert [a.name for a in repo.list_artists()] == ["Anne"]


class TestModels:
    def test_plan_total_seconds(self):
        plan = SessionPlan(exercises=[SessionExercise(duration_seconds=30),
                                      SessionExercise(duration_seconds=45)])
        assert plan.total_seconds == 75
        assert SessionPlan().total_seconds == 0
