"""Tests for lesson sequencing and selection."""

import pytest

from learnpath.classroom import (
    AssessmentAttemptController,
    AttemptState,
    CurriculumLoader,
    LessonMark,
    Navigator,
    PositionReporter,
    ProgressTracker,
)
from learnpath.schemas import Assessment

from factories import ProgressServer, curriculum_payload, envelope, lesson_quiz_payload, progress_payload


@pytest.fixture
def course(backend, client, clock, timers):
    backend.on("GET", "/api/courses", envelope(curriculum_payload()))
    server = ProgressServer(backend, progress_payload(completed=("l2",)))
    loader = CurriculumLoader(client, "course-1")
    loader.load()
    tracker = ProgressTracker(client, "user-1", "course-1", clock=clock)
    tracker.refresh()
    reporter = PositionReporter(tracker.send_progress_update, timer_factory=timers)
    controller = AssessmentAttemptController(client, tracker, timer_factory=timers, start_timer=False)
    navigator = Navigator(loader, tracker, reporter, controller)
    return navigator, reporter, controller, server


class TestOrdering:
    """Test next/previous over the flattened curriculum."""

    def test_initial_selection(self, course):
        navigator, *_ = course
        assert navigator.selected_lesson_id == "l1"
        assert navigator.selected_module_id == "m1"
        assert navigator.expanded_modules == {"m1"}
        assert navigator.total_lessons == 4

    def test_next_crosses_module_boundary(self, course):
        navigator, *_ = course
        assert navigator.get_next_lesson_id("l3") == "l4"
        assert navigator.get_previous_lesson_id("l4") == "l3"

    def test_ends_of_course(self, course):
        navigator, *_ = course
        assert navigator.get_previous_lesson_id("l1") is None
        assert navigator.get_next_lesson_id("l4") is None
        assert navigator.previous_lesson() is None

    def test_unknown_lesson(self, course):
        navigator, *_ = course
        assert navigator.get_next_lesson_id("nope") is None
        assert navigator.get_lesson_position("nope") == (0, 4)

    def test_position(self, course):
        navigator, *_ = course
        assert navigator.get_lesson_position() == (1, 4)
        assert navigator.get_lesson_position("l3") == (3, 4)

    def test_go_next_and_previous(self, course):
        navigator, *_ = course
        assert navigator.go_next()
        assert navigator.selected_lesson_id == "l2"
        assert navigator.next_lesson().id == "l3"
        assert navigator.go_previous()
        assert navigator.selected_lesson_id == "l1"
        assert not navigator.go_previous()


class TestSelection:
    """Test selection side effects."""

    def test_select_resolves_module_and_expands(self, course):
        navigator, *_ = course
        assert navigator.select("l4")
        assert navigator.selected_module_id == "m2"
        assert navigator.expanded_modules == {"m1", "m2"}
        assert navigator.consume_scroll_request() is True
        assert navigator.consume_scroll_request() is False

    def test_select_unknown_lesson(self, course):
        navigator, *_ = course
        assert not navigator.select("nope")
        assert navigator.selected_lesson_id == "l1"

    def test_select_flushes_pending_position(self, course):
        navigator, reporter, _, server = course
        reporter.report("l1", 130)
        reporter.report("l1", 131)

        navigator.select("l2")

        assert server.positions == {"l1": 131}
        assert not reporter.has_pending

    def test_select_resets_assessment(self, course):
        navigator, _, controller, _ = course
        controller.start(Assessment.model_validate(lesson_quiz_payload()), lesson_id="l3")
        assert controller.state == AttemptState.CONFIRMING

        navigator.select("l3")
        assert controller.state == AttemptState.IDLE

    def test_toggle_module(self, course):
        navigator, *_ = course
        navigator.toggle_module("m1")
        assert "m1" not in navigator.expanded_modules
        navigator.toggle_module("m1")
        assert "m1" in navigator.expanded_modules


class TestTree:
    def test_marks(self, course):
        navigator, *_ = course
        assert navigator.get_lesson_mark("l1") == LessonMark.CURRENT
        assert navigator.get_lesson_mark("l2") == LessonMark.COMPLETED
        assert navigator.get_lesson_mark("l3") == LessonMark.AVAILABLE
        assert navigator.get_status_indicator("l1") == "→"
        assert navigator.get_status_indicator("l2") == "✓"
        assert navigator.get_status_indicator("l4") == "○"

    def test_navigation_tree(self, course):
        navigator, *_ = course
        tree = navigator.get_navigation_tree()
        assert [m.module.id for m in tree] == ["m1", "m2"]
        assert tree[0].completed_count == 1
        assert tree[0].total_count == 3
        assert tree[0].expanded
        assert not tree[1].expanded
        assert tree[0].lessons[0].is_current

    def test_empty_before_load(self, client, clock):
        loader = CurriculumLoader(client, "course-1")
        tracker = ProgressTracker(client, "user-1", "course-1", clock=clock)
        navigator = Navigator(loader, tracker)
        assert navigator.get_navigation_tree() == []
        assert navigator.selected_lesson is None
        assert navigator.total_lessons == 0
