"""Tests for the PracticeSession state machine."""

import random

import pytest

from drawing_trainer.services.countdown_timer import CountdownTimer
from drawing_trainer.services.errors import PersistenceError, SessionStateError
from drawing_trainer.services.history_service import HistoryService
from drawing_trainer.services.photo_selector import PhotoSelector
from drawing_trainer.services.practice_session import (
    BREAK_DURATION_SECONDS,
    PracticeSession,
    SessionState,
)


class SpyTimer(CountdownTimer):
    """CountdownTimer that remembers every start() duration."""

    def __init__(self, clock):
        super().__init__(clock=clock)
        self.starts = []

    def start(self, duration):
        self.starts.append(duration)
        super().start(duration)


class FlakyHistory(HistoryService):
    """HistoryService whose writes can be switched to fail."""

    fail_start = False
    fail_record = False

    def start_session(self, plan_id):
        if self.fail_start:
            raise PersistenceError("disk full")
        return super().start_session(plan_id)

    def record_result(self, *args, **kwargs):
        if self.fail_record:
            raise PersistenceError("disk full")
        return super().record_result(*args, **kwargs)


class Recorder:
    """Collects every callback a PracticeSession makes."""

    def __init__(self):
        self.states = []
        self.ticks = []
        self.photos = []
        self.paused = []
        self.finished = []
        self.errors = []

    def callbacks(self):
        return dict(
            on_state_changed=self.states.append,
            on_tick=self.ticks.append,
            on_photo_changed=self.photos.append,
            on_paused_changed=self.paused.append,
            on_finished=self.finished.append,
            on_error=self.errors.append,
        )


@pytest.fixture
def tags(repo):
    a = repo.create_tag("Gesture")
    b = repo.create_tag("Hands")
    for i in range(3):
        repo.add_photo(f"/ref/gesture{i}.jpg", f"gesture{i}.jpg", tag_ids=[a.id])
        repo.add_photo(f"/ref/hands{i}.jpg", f"hands{i}.jpg", tag_ids=[b.id])
    return a, b


@pytest.fixture
def history(repo):
    return FlakyHistory(repo)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_session(repo, history, clock, recorder):
    created = []

    def factory():
        timer = SpyTimer(clock)
        session = PracticeSession(history, PhotoSelector(repo, random.Random(0)),
                                  timer=timer, **recorder.callbacks())
        created.append(session)
        return session

    yield factory
    for s in created:
        s.dispose()


def run_out(session, clock):
    """Let the current drawing or break phase elapse."""
    clock.advance(session.timer.remaining + 0.001)
    session.timer._on_timeout()


class TestNaturalCompletion:
    def test_two_exercises_with_break(self, repo, history, tags, make_session, clock, recorder):
        a, b = tags
        plan = repo.create_plan("Warm-up", [(a.id, 5), (b.id, 3)])
        session = make_session()

        session.start(plan)
        assert session.state == SessionState.DRAWING
        assert session.exercise_info == "Exercise 1 of 2"
        assert session.current_photo.id in {p.id for p in repo.list_photos(a.id)}

        run_out(session, clock)
        assert session.state == SessionState.BREAK
        assert session.break_seconds_remaining == BREAK_DURATION_SECONDS

        clock.advance(10.5)
        session.timer._on_timeout()
        assert session.break_seconds_remaining == 20

        run_out(session, clock)
        assert session.state == SessionState.DRAWING
        assert session.exercise_info == "Exercise 2 of 2"
        assert session.current_photo.id in {p.id for p in repo.list_photos(b.id)}

        run_out(session, clock)
        assert session.state == SessionState.COMPLETE
        assert session.timer.starts == [5, BREAK_DURATION_SECONDS, 3]
        assert recorder.states == [
            SessionState.INITIALIZING, SessionState.DRAWING, SessionState.BREAK,
            SessionState.DRAWING, SessionState.COMPLETE,
        ]
        assert recorder.finished == [session.session_id]

        stored = history.get_session_with_results(session.session_id)
        assert stored.is_completed
        assert stored.completed_at is not None
        assert [r.sort_order for r in stored.results] == [0, 1]
        assert [r.exercise_id for r in stored.results] == [e.id for e in plan.exercises]
        assert not any(r.was_skipped for r in stored.results)

    def test_no_break_after_last_exercise(self, repo, tags, make_session, clock):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 2)])
        session = make_session()
        session.start(plan)
        run_out(session, clock)
        assert session.state == SessionState.COMPLETE
        assert session.timer.starts == [2]

    def test_exercises_run_in_sort_order(self, repo, tags, make_session, clock):
        a, b = tags
        plan = repo.create_plan("Mixed", [(b.id, 1), (a.id, 2)])
        session = make_session()
        session.start(plan)
        assert session.current_exercise.tag_id == b.id
        run_out(session, clock)
        run_out(session, clock)
        assert session.current_exercise.tag_id == a.id

    def test_progress_tracks_remaining(self, repo, tags, make_session, clock):
        a, _ = tags
        plan = repo.create_plan("Ten", [(a.id, 10)])
        session = make_session()
        session.start(plan)
        clock.advance(2.5)
        session.timer._on_timeout()
        assert session.progress == pytest.approx(0.25)

    def test_zero_length_exercise_keeps_progress_at_zero(self, repo, tags, make_session, clock):
        a, _ = tags
        plan = repo.create_plan("Instant", [(a.id, 0), (a.id, 5)])
        session = make_session()
        session.start(plan)
        session.timer._on_timeout()
        assert session.progress == 0.0
        assert session.state == SessionState.BREAK


class TestEndSession:
    def test_end_after_first_exercise_records_one_result(self, repo, history, tags,
                                                         make_session, clock):
        a, b = tags
        plan = repo.create_plan("Warm-up", [(a.id, 5), (b.id, 3)])
        session = make_session()
        session.start(plan)
        run_out(session, clock)
        assert session.state == SessionState.BREAK

        session.end_session()
        assert session.state == SessionState.COMPLETE
        assert not session.timer.is_running

        stored = history.get_session_with_results(session.session_id)
        assert len(stored.results) == 1
        assert stored.results[0].exercise_id == plan.exercises[0].id

    def test_end_twice_is_harmless(self, repo, history, tags, make_session, clock, recorder):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 2)])
        session = make_session()
        session.start(plan)
        run_out(session, clock)
        first = history.get_session_with_results(session.session_id).completed_at

        session.end_session()
        session.end_session()

        assert history.get_session_with_results(session.session_id).completed_at == first
        assert recorder.finished == [session.session_id]

    def test_end_during_drawing_records_nothing_for_current(self, repo, history, tags,
                                                            make_session):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 60)])
        session = make_session()
        session.start(plan)
        session.end_session()
        assert history.get_session_with_results(session.session_id).results == []

    def test_stale_tick_after_end_is_ignored(self, repo, tags, make_session, clock, recorder):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 60)])
        session = make_session()
        session.start(plan)
        session.end_session()
        ticks_before = len(recorder.ticks)
        clock.advance(120)
        session.timer._on_timeout()
        assert len(recorder.ticks) == ticks_before
        assert session.state == SessionState.COMPLETE

    def test_end_before_start_raises(self, make_session):
        with pytest.raises(SessionStateError):
            make_session().end_session()


class TestEmptyInputs:
    def test_empty_tag_runs_without_photo(self, repo, history, make_session, clock, recorder):
        empty = repo.create_tag("Empty")
        plan = repo.create_plan("Nothing", [(empty.id, 2)])
        session = make_session()
        session.start(plan)
        assert session.state == SessionState.DRAWING
        assert session.current_photo is None
        assert recorder.photos == [None]

        run_out(session, clock)
        assert session.state == SessionState.COMPLETE
        results = history.get_session_with_results(session.session_id).results
        assert len(results) == 1
        assert results[0].reference_photo_id is None

    def test_zero_exercise_plan_completes_immediately(self, repo, history, make_session,
                                                      recorder):
        plan = repo.create_plan("Blank", [])
        session = make_session()
        session.start(plan)
        assert session.state == SessionState.COMPLETE
        assert session.timer.starts == []
        assert recorder.finished == [session.session_id]
        assert history.get_session_with_results(session.session_id).results == []


class TestSkip:
    def test_skips_add_results_without_restarting_timer(self, repo, history, tags,
                                                        make_session, clock):
        a, _ = tags
        plan = repo.create_plan("Long", [(a.id, 60)])
        session = make_session()
        session.start(plan)

        shown = [session.current_photo.id]
        for _ in range(3):
            clock.advance(5)
            result = session.skip()
            assert result.was_skipped
            shown.append(session.current_photo.id)

        # each skip draws a different photo than the one on screen
        assert all(x != y for x, y in zip(shown, shown[1:]))
        assert session.timer.starts == [60]
        assert session.timer.is_running

        clock.advance(5)
        session.timer._on_timeout()
        assert session.timer.remaining == pytest.approx(40)

        run_out(session, clock)
        results = history.get_session_with_results(session.session_id).results
        assert len(results) == 4
        assert [r.sort_order for r in results] == [0, 1, 2, 3]
        assert [r.was_skipped for r in results] == [True, True, True, False]
        assert {r.exercise_id for r in results} == {plan.exercises[0].id}
        assert [r.reference_photo_id for r in results] == shown

    def test_sort_order_continues_across_exercises(self, repo, history, tags,
                                                   make_session, clock):
        a, b = tags
        plan = repo.create_plan("Two", [(a.id, 5), (b.id, 5)])
        session = make_session()
        session.start(plan)
        session.skip()
        run_out(session, clock)
        run_out(session, clock)
        session.skip()
        run_out(session, clock)
        results = history.get_session_with_results(session.session_id).results
        assert [r.sort_order for r in results] == [0, 1, 2, 3]

    def test_skip_with_single_photo_keeps_it(self, repo, make_session):
        tag = repo.create_tag("Solo")
        photo = repo.add_photo("/ref/solo.jpg", "solo.jpg", tag_ids=[tag.id])
        plan = repo.create_plan("Solo", [(tag.id, 30)])
        session = make_session()
        session.start(plan)
        session.skip()
        assert session.current_photo.id == photo.id

    def test_skip_ignored_during_break(self, repo, history, tags, make_session, clock):
        a, b = tags
        plan = repo.create_plan("Two", [(a.id, 5), (b.id, 5)])
        session = make_session()
        session.start(plan)
        run_out(session, clock)
        assert session.skip() is None
        assert len(history.get_session_with_results(session.session_id).results) == 1

    def test_skip_ignored_when_idle(self, make_session):
        assert make_session().skip() is None

    def test_skip_from_photo_observer_is_ignored(self, repo, history, tags, make_session):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 30)])
        session = make_session()
        session.start(plan)

        nested = []
        session.on_photo_changed = lambda photo: nested.append(session.skip())
        outer = session.skip()

        assert outer is not None
        assert nested == [None]
        results = history.get_session_with_results(session.session_id).results
        assert [r.sort_order for r in results] == [0]


class TestPause:
    def test_toggle_pause_freezes_countdown(self, repo, tags, make_session, clock, recorder):
        a, _ = tags
        plan = repo.create_plan("Ten", [(a.id, 10)])
        session = make_session()
        session.start(plan)
        clock.advance(3)
        session.toggle_pause()
        assert session.is_paused
        assert recorder.paused == [True]

        clock.advance(100)
        session.timer._on_timeout()
        assert session.state == SessionState.DRAWING

        session.toggle_pause()
        assert not session.is_paused
        assert recorder.paused == [True, False]
        clock.advance(1)
        session.timer._on_timeout()
        assert session.timer.remaining == pytest.approx(6)

    def test_pause_allowed_in_break(self, repo, tags, make_session, clock):
        a, b = tags
        plan = repo.create_plan("Two", [(a.id, 5), (b.id, 5)])
        session = make_session()
        session.start(plan)
        run_out(session, clock)
        session.toggle_pause()
        assert session.is_paused
        assert session.timer.is_paused

    def test_next_exercise_starts_unpaused(self, repo, tags, make_session, clock):
        a, b = tags
        plan = repo.create_plan("Two", [(a.id, 5), (b.id, 5)])
        session = make_session()
        session.start(plan)
        run_out(session, clock)
        session.toggle_pause()
        session.toggle_pause()
        run_out(session, clock)
        assert session.state == SessionState.DRAWING
        assert not session.is_paused

    def test_pause_ignored_when_idle(self, make_session, recorder):
        make_session().toggle_pause()
        assert recorder.paused == []


class TestLifecycle:
    def test_start_twice_raises(self, repo, tags, make_session):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 30)])
        session = make_session()
        session.start(plan)
        with pytest.raises(SessionStateError):
            session.start(plan)

    def test_actions_from_state_observer_are_ignored_mid_start(self, repo, history, tags,
                                                                make_session):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 30)])
        session = make_session()

        def interrupt(state):
            if state == SessionState.DRAWING:
                session.end_session()
                session.toggle_pause()

        session.on_state_changed = interrupt
        session.start(plan)

        assert session.state == SessionState.DRAWING
        assert session.timer.is_running
        assert not session.is_paused
        assert not history.get_session_with_results(session.session_id).is_completed

        # once the transition is over, ending works
        session.on_state_changed = None
        session.end_session()
        assert session.state == SessionState.COMPLETE

    def test_dispose_stops_timer_and_detaches(self, repo, tags, make_session, clock, recorder):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 30)])
        session = make_session()
        session.start(plan)
        session.dispose()
        assert not session.timer.is_running
        assert session.on_tick is None
        ticks_before = len(recorder.ticks)
        clock.advance(60)
        session.timer._on_timeout()
        assert len(recorder.ticks) == ticks_before


class TestFailures:
    def test_record_failure_on_elapse_reports_and_halts(self, repo, history, tags,
                                                        make_session, clock, recorder):
        a, b = tags
        plan = repo.create_plan("Two", [(a.id, 5), (b.id, 5)])
        session = make_session()
        session.start(plan)
        history.fail_record = True

        run_out(session, clock)

        assert recorder.errors == ["disk full"]
        assert session.last_error == "disk full"
        assert session.state == SessionState.DRAWING
        assert not session.timer.is_running
        assert session.skip() is None

    def test_end_after_failure_completes(self, repo, history, tags, make_session, clock):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 5)])
        session = make_session()
        session.start(plan)
        history.fail_record = True
        run_out(session, clock)

        session.end_session()
        assert session.state == SessionState.COMPLETE
        assert session.last_error is None

    def test_skip_failure_raises_to_caller(self, repo, history, tags, make_session, recorder):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 30)])
        session = make_session()
        session.start(plan)
        history.fail_record = True
        with pytest.raises(PersistenceError):
            session.skip()
        assert recorder.errors == ["disk full"]
        assert not session.timer.is_running

    def test_start_failure_returns_to_idle(self, repo, history, tags, make_session, recorder):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 30)])
        session = make_session()
        history.fail_start = True
        with pytest.raises(PersistenceError):
            session.start(plan)
        assert session.state == SessionState.IDLE
        assert recorder.errors == ["disk full"]
        assert session.timer.starts == []

    def test_start_retry_after_failure_accepts_actions(self, repo, history, tags,
                                                       make_session, recorder):
        a, _ = tags
        plan = repo.create_plan("One", [(a.id, 30)])
        session = make_session()
        history.fail_start = True
        with pytest.raises(PersistenceError):
            session.start(plan)

        history.fail_start = False
        session.start(plan)
        assert session.state == SessionState.DRAWING
        assert session.last_error is None

        assert session.skip() is not None
        session.toggle_pause()
        assert session.is_paused
        assert session.timer.is_paused
