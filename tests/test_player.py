"""Tests for the lesson player shell."""

import pytest

from learnpath.classroom import (
    CurriculumLoader,
    LessonPlayerShell,
    PositionReporter,
    ProgressTracker,
    format_video_url,
)
from learnpath.schemas import ContentType

from factories import ProgressServer, curriculum_payload, envelope, progress_payload


@pytest.fixture
def player(backend, client, clock, timers):
    backend.on("GET", "/api/courses", envelope(curriculum_payload()))
    server = ProgressServer(backend, progress_payload(completed=("l2",), positions={"l1": 95}))
    loader = CurriculumLoader(client, "course-1")
    loader.load()
    tracker = ProgressTracker(client, "user-1", "course-1", clock=clock)
    tracker.refresh()
    reporter = PositionReporter(tracker.send_progress_update, timer_factory=timers)
    return LessonPlayerShell(tracker, reporter), loader, reporter, server


class TestFormatVideoUrl:
    def test_adds_scheme(self):
        assert format_video_url("youtube.com/watch?v=abc") == "https://youtube.com/watch?v=abc"

    def test_keeps_scheme(self):
        assert format_video_url("http://cdn.example/v.mp4") == "http://cdn.example/v.mp4"

    def test_blank(self):
        assert format_video_url(None) is None
        assert format_video_url("   ") is None


class TestViews:
    """Test per-content-type presentation."""

    def test_video(self, player):
        shell, loader, *_ = player
        view = shell.view(loader.lesson("l1"))
        assert view.content_type == ContentType.VIDEO
        assert view.video_url == "https://youtube.com/watch?v=abc"
        assert view.start_position == 95
        assert view.duration == 300
        assert view.has_content
        assert view.can_mark_complete

    def test_article_html(self, player):
        shell, loader, *_ = player
        view = shell.view(loader.lesson("l2"))
        assert view.article_html == "<p>Hello</p>"
        assert view.is_completed
        assert not view.can_mark_complete

    def test_article_plain_description(self, player):
        shell, loader, *_ = player
        view = shell.view(loader.lesson("l4"))
        assert view.article_html is None
        assert view.article_text == "Plain text body"
        assert view.has_content

    def test_quiz(self, player):
        shell, loader, *_ = player
        view = shell.view(loader.lesson("l3"))
        assert view.content_type == ContentType.QUIZ
        assert view.quiz.id == "quiz-1"


class TestPlayback:
    def test_progress_ticks_are_debounced(self, player, timers):
        shell, _, reporter, server = player
        for second in range(100, 105):
            shell.on_progress("l1", second)
        assert server.positions == {}

        timers.last.fire()
        assert server.positions == {"l1": 104}

    def test_end_of_stream_flushes_and_completes(self, player, backend):
        shell, _, reporter, server = player
        shell.on_progress("l1", 299.6)

        assert shell.on_ended("l1")

        assert server.positions == {"l1": 299}
        assert shell.tracker.is_completed("l1")
        assert len(backend.calls("POST", "/api/progress")) == 1

    def test_mark_complete_is_noop_when_done(self, player, backend):
        shell, *_ = player
        assert not shell.mark_complete("l2")
        assert backend.calls("POST", "/api/progress") == []

        assert shell.mark_complete("l4")
        assert not shell.can_mark_complete("l4")
