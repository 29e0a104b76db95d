"""
CourseLearnSession - Page-scoped state for learning one course.

Provides:
- Composition of loader, progress tracker, position reporter, attempt
  controller, navigator and player shell
- Independent curriculum and progress loads, dropped once the page closes
- Resume position for the selected lesson
- Flush of pending playback telemetry on close
"""

import logging
import random
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from learnpath.config import Settings, get_settings
from learnpath.schemas import Assessment, Lesson

from .api import ApiClient
from .attempts import AssessmentAttemptController, AttemptState
from .debounce import PositionReporter
from .loader import CurriculumLoader
from .navigator import Navigator
from .player import LessonPlayerShell, LessonView
from .progress import ProgressTracker

logger = logging.getLogger(__name__)


class CourseLearnSession:
    """
    Everything one open learn page holds.

    Responses that arrive after ``close()`` are discarded by the loader and
    tracker through the ``mounted`` flag.
    """

    def __init__(
        self,
        client: ApiClient,
        course_id: str,
        user_id: Optional[str] = None,
        settings: Optional[Settings] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
        start_timers: bool = True,
        clock: Callable[[], float] = time.monotonic,
        now: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize session.

        Args:
            client: ApiClient shared by all components
            course_id: Course to learn
            user_id: Learner (default: settings.user_id)
            settings: Runtime settings (default: get_settings())
            timer_factory: threading.Timer-compatible factory for debounce and countdown
            start_timers: Start the countdown when an attempt begins
            clock: Monotonic clock for the optimistic overlay
            now: Wall clock for attempt timestamps
            rng: Random source for question shuffling
        """
        self.settings = settings or get_settings()
        self.client = client
        self.course_id = course_id
        self.user_id = user_id if user_id is not None else self.settings.user_id
        self.mounted = False
        self.player_position = 0

        self.loader = CurriculumLoader(client, course_id, is_active=lambda: self.mounted)
        self.tracker = ProgressTracker(
            client,
            self.user_id,
            course_id,
            optimistic_ttl=self.settings.optimistic_ttl_seconds,
            clock=clock,
            is_active=lambda: self.mounted,
        )
        self.reporter = PositionReporter(
            self.tracker.send_progress_update,
            delay=self.settings.progress_debounce_seconds,
            timer_factory=timer_factory,
        )

        controller_kwargs = {"clock": now} if now else {}
        self.controller = AssessmentAttemptController(
            client,
            self.tracker,
            rng=rng,
            timer_factory=timer_factory,
            start_timer=start_timers,
            **controller_kwargs,
        )
        self.navigator = Navigator(self.loader, self.tracker, self.reporter, self.controller)
        self.player = LessonPlayerShell(self.tracker, self.reporter)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self):
        """Mount the page and load curriculum and progress."""
        self.mounted = True
        logger.info(f"Opening course {self.course_id} for user {self.user_id}")
        self.load_curriculum()
        self.load_progress()

    def load_curriculum(self) -> bool:
        curriculum = self.loader.load()
        if curriculum is None:
            return False
        self.tracker.final_assessment_id = (
            curriculum.final_assessment.id if curriculum.final_assessment else None
        )
        self.navigator.refresh()
        self._apply_resume_position()
        return True

    def load_progress(self) -> bool:
        if self.tracker.refresh() is None:
            return False
        self._apply_resume_position()
        return True

    def retry(self):
        """Reload after a blocking load error."""
        self.open()

    def close(self):
        """Unmount: send any pending position and drop the assessment view."""
        self.reporter.flush()
        self.controller.reset()
        self.mounted = False
        logger.info(f"Closed course {self.course_id}")

    @property
    def error(self) -> Optional[str]:
        """Blocking page error (curriculum load failure)."""
        return self.loader.error

    @property
    def course_title(self) -> str:
        curriculum = self.loader.curriculum
        return curriculum.course_title if curriculum else ""

    # -------------------------------------------------------------------------
    # Lesson selection
    # -------------------------------------------------------------------------

    @property
    def selected_lesson(self) -> Optional[Lesson]:
        return self.navigator.selected_lesson

    def lesson_view(self) -> Optional[LessonView]:
        lesson = self.selected_lesson
        return self.player.view(lesson) if lesson else None

    def select_lesson(self, lesson_id: str) -> bool:
        if not self.navigator.select(lesson_id):
            return False
        self._apply_resume_position()
        return True

    def next_lesson(self) -> bool:
        if not self.navigator.go_next():
            return False
        self._apply_resume_position()
        return True

    def previous_lesson(self) -> bool:
        if not self.navigator.go_previous():
            return False
        self._apply_resume_position()
        return True

    def _apply_resume_position(self):
        lesson_id = self.navigator.selected_lesson_id
        self.player_position = self.tracker.resume_position(lesson_id) if lesson_id else 0

    # -------------------------------------------------------------------------
    # Assessments
    # -------------------------------------------------------------------------

    def start_assessment(self, assessment: Assessment) -> bool:
        """Open the start confirmation; lesson quizzes remember their lesson."""
        lesson = None
        if self.loader.curriculum:
            lesson = self.loader.curriculum.lesson_for_quiz(assessment.id)
        return self.controller.start(assessment, lesson_id=lesson.id if lesson else None)

    def after_assessment(self) -> bool:
        """Leave the results screen and continue with the next lesson."""
        if self.controller.state != AttemptState.REVIEWING:
            return False
        self.controller.reset()
        if self.navigator.go_next():
            self._apply_resume_position()
        return True
