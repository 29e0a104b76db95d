"""
LessonPlayerShell - Decide how the selected lesson is presented.

Provides:
- Per-content-type view (video, article, quiz)
- Watch-position telemetry through the debounced reporter
- Mark-complete that is a no-op once the lesson is complete
"""

import logging
from dataclasses import dataclass
from typing import Optional

from learnpath.schemas import Assessment, ContentType, Lesson

from .debounce import PositionReporter
from .progress import ProgressTracker

logger = logging.getLogger(__name__)


def format_video_url(url: Optional[str]) -> Optional[str]:
    """Normalize a stored video URL; a missing scheme defaults to https."""
    if not url:
        return None
    clean = url.strip()
    if not clean:
        return None
    if clean.lower() == "youtube .com":
        return "https://youtube.com"
    if not clean.startswith(("http://", "https://")):
        clean = f"https://{clean}"
    return clean


@dataclass
class LessonView:
    """Everything the page needs to render one lesson."""
    lesson: Lesson
    content_type: ContentType
    video_url: Optional[str] = None
    start_position: int = 0
    duration: Optional[int] = None
    article_html: Optional[str] = None
    article_text: Optional[str] = None
    quiz: Optional[Assessment] = None
    is_completed: bool = False

    @property
    def can_mark_complete(self) -> bool:
        return not self.is_completed

    @property
    def has_content(self) -> bool:
        if self.content_type == ContentType.VIDEO:
            return self.video_url is not None
        if self.content_type == ContentType.ARTICLE:
            return bool(self.article_html or self.article_text)
        return self.quiz is not None


class LessonPlayerShell:
    """Present lessons and report playback back to the tracker."""

    def __init__(self, tracker: ProgressTracker, reporter: PositionReporter):
        self.tracker = tracker
        self.reporter = reporter

    def view(self, lesson: Lesson) -> LessonView:
        is_completed = self.tracker.is_completed(lesson.id)
        content_type = lesson.content_type

        if content_type == ContentType.VIDEO:
            return LessonView(
                lesson=lesson,
                content_type=content_type,
                video_url=format_video_url(lesson.video_url),
                start_position=self.tracker.resume_position(lesson.id),
                duration=lesson.video_duration,
                quiz=lesson.quiz,
                is_completed=is_completed,
            )

        if content_type == ContentType.ARTICLE:
            return LessonView(
                lesson=lesson,
                content_type=content_type,
                article_html=lesson.article_content or None,
                article_text=None if lesson.article_content else lesson.description,
                quiz=lesson.quiz,
                is_completed=is_completed,
            )

        # QUIZ and ASSESSMENT lessons delegate to the attempt controller
        return LessonView(
            lesson=lesson,
            content_type=content_type,
            quiz=lesson.quiz,
            is_completed=is_completed,
        )

    def can_mark_complete(self, lesson_id: str) -> bool:
        return not self.tracker.is_completed(lesson_id)

    def on_progress(self, lesson_id: str, seconds: float):
        """Playback tick from the video player."""
        self.reporter.report(lesson_id, seconds)

    def on_ended(self, lesson_id: str) -> bool:
        """End of stream: persist the final position and complete the lesson."""
        self.reporter.flush()
        return self.mark_complete(lesson_id)

    def mark_complete(self, lesson_id: str) -> bool:
        """
        Mark the lesson complete.

        Returns:
            False if it was already complete (nothing sent)
        """
        if not self.can_mark_complete(lesson_id):
            return False
        logger.info(f"Marking lesson {lesson_id} complete")
        return self.tracker.mark_lesson_complete(lesson_id)
