"""Tests for the page-scoped learn session."""

import random

from learnpath.classroom import AttemptState, CourseLearnSession
from learnpath.config import Settings

from factories import (
    ProgressServer,
    attempt_payload,
    curriculum_payload,
    envelope,
    error_envelope,
    progress_payload,
)


def _session(client, timers, clock, wall_clock, user_id="user-1"):
    settings = Settings(progress_debounce_seconds=1.5, optimistic_ttl_seconds=5)
    return CourseLearnSession(
        client,
        "course-1",
        user_id=user_id,
        settings=settings,
        timer_factory=timers,
        start_timers=False,
        clock=clock,
        now=wall_clock,
        rng=random.Random(1),
    )


class TestOpen:
    """Test loading on open."""

    def test_open_loads_both(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        ProgressServer(backend, progress_payload(positions={"l1": 80}))
        session = _session(client, timers, clock, wall_clock)

        session.open()

        assert session.mounted
        assert session.error is None
        assert session.course_title == "Testing 101"
        assert session.selected_lesson.id == "l1"
        assert session.player_position == 80
        assert session.tracker.final_assessment_id == "final-1"
        assert session.tracker.optimistic_ttl == 5
        assert session.reporter.delay == 1.5

    def test_curriculum_error_blocks_page(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", error_envelope("boom"), status=500)
        ProgressServer(backend, progress_payload())
        session = _session(client, timers, clock, wall_clock)

        session.open()

        assert session.error == "Failed to fetch curriculum"
        assert session.selected_lesson is None

        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        session.retry()
        assert session.error is None
        assert session.selected_lesson.id == "l1"

    def test_progress_failure_is_not_blocking(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        server = ProgressServer(backend, progress_payload())
        server.fail_get = True
        session = _session(client, timers, clock, wall_clock)

        session.open()

        assert session.error is None
        assert session.tracker.error == "Failed to fetch progress"
        assert session.player_position == 0

    def test_user_from_settings(self, client, timers, clock, wall_clock):
        settings = Settings(user_id="settings-user")
        session = CourseLearnSession(client, "course-1", settings=settings, timer_factory=timers)
        assert session.tracker.user_id == "settings-user"


class TestLifecycle:
    def test_close_flushes_and_unmounts(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        server = ProgressServer(backend, progress_payload())
        session = _session(client, timers, clock, wall_clock)
        session.open()
        session.player.on_progress("l1", 61)

        session.close()

        assert server.positions == {"l1": 61}
        assert not session.mounted

    def test_late_responses_dropped_after_close(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        ProgressServer(backend, progress_payload())
        session = _session(client, timers, clock, wall_clock)
        session.open()
        session.close()

        payload = curriculum_payload()
        payload["courseTitle"] = "Changed"
        backend.on("GET", "/api/courses", envelope(payload))
        session.load_curriculum()
        assert session.course_title == "Testing 101"

        assert session.load_progress() is False


class TestSelection:
    def test_select_applies_resume_position(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        ProgressServer(backend, progress_payload(positions={"l1": 80, "l2": 12}))
        session = _session(client, timers, clock, wall_clock)
        session.open()

        assert session.select_lesson("l2")
        assert session.player_position == 12
        assert session.next_lesson()
        assert session.player_position == 0
        assert session.previous_lesson()
        assert session.player_position == 12
        assert not session.select_lesson("nope")

    def test_switching_lessons_mid_playback_flushes(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        server = ProgressServer(backend, progress_payload())
        session = _session(client, timers, clock, wall_clock)
        session.open()
        session.player.on_progress("l1", 40)

        session.select_lesson("l2")

        assert server.positions == {"l1": 40}

    def test_lesson_view(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        ProgressServer(backend, progress_payload(positions={"l1": 80}))
        session = _session(client, timers, clock, wall_clock)
        assert session.lesson_view() is None

        session.open()
        assert session.lesson_view().start_position == 80


class TestAssessments:
    """Test the assessment flow through the session."""

    def test_lesson_quiz_knows_its_lesson(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        ProgressServer(backend, progress_payload())
        session = _session(client, timers, clock, wall_clock)
        session.open()

        quiz = session.loader.lesson("l3").quiz
        assert session.start_assessment(quiz)
        assert session.controller.lesson_id == "l3"

        final = session.loader.curriculum.final_assessment
        session.controller.cancel()
        session.start_assessment(final)
        assert session.controller.lesson_id is None

    def test_continue_after_results(self, backend, client, timers, clock, wall_clock):
        backend.on("GET", "/api/courses", envelope(curriculum_payload()))
        ProgressServer(backend, progress_payload())
        backend.on("POST", "/api/assessment-attempts", envelope({"attempt": attempt_payload()}))
        session = _session(client, timers, clock, wall_clock)
        session.open()
        session.select_lesson("l3")

        assert not session.after_assessment()

        session.start_assessment(session.loader.lesson("l3").quiz)
        session.controller.confirm_start()
        session.controller.set_answer("q1", "4")
        session.controller.set_answer("q2", "True")
        session.controller.submit()
        assert session.controller.state == AttemptState.REVIEWING
        assert session.tracker.is_completed("l3")

        assert session.after_assessment()
        assert session.controller.state == AttemptState.IDLE
        assert session.selected_lesson.id == "l4"
