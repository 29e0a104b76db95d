"""
ProgressTracker - Track a learner's progress through a course.

Progress is owned by the backend; this tracker holds the last fetched copy
plus a short-lived optimistic overlay for lessons marked complete locally:
- Lesson completion status and watch position
- Aggregate course progress and certificate eligibility
- Previous attempts per assessment
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from pydantic import ValidationError

from learnpath.config import DEFAULT_OPTIMISTIC_TTL_SECONDS
from learnpath.errors import ApiError
from learnpath.schemas import (
    AttemptStatus,
    FinalAssessmentStatus,
    LessonProgress,
    ModuleAssessmentStatus,
    OverlayState,
    ProgressResponse,
    UserAssessmentAttempt,
)

from .api import ApiClient

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Attempt history sources
# -----------------------------------------------------------------------------

class AttemptHistory(Protocol):
    def attempts_for(self, assessment_id: str) -> list[UserAssessmentAttempt]:
        ...


class RecordedAttemptHistory:
    """Attempts listed by the backend in ``assessmentAttempts``."""

    def __init__(self, attempts: dict[str, list[UserAssessmentAttempt]]):
        self.attempts = attempts

    def attempts_for(self, assessment_id: str) -> list[UserAssessmentAttempt]:
        return list(self.attempts.get(assessment_id, []))


class DerivedAttemptHistory:
    """
    Legacy view for backends without an attempts map.

    Reconstructs at most one pseudo-attempt per assessment from the latest
    module/final assessment status.
    """

    def __init__(self, progress: Optional[ProgressResponse], final_assessment_id: Optional[str] = None):
        self.progress = progress
        self.final_assessment_id = final_assessment_id

    def attempts_for(self, assessment_id: str) -> list[UserAssessmentAttempt]:
        if not self.progress:
            return []

        final_status = self.progress.final_assessment_status
        final_ids = {self.final_assessment_id, final_status.id if final_status else None} - {None}
        if assessment_id in final_ids:
            if final_status and final_status.attempted:
                return [_synthesize_attempt(final_status)]
            return []

        for status in self.progress.module_assessment_status:
            if status.assessment_id == assessment_id:
                return [_synthesize_attempt(status)] if status.attempted else []

        return []


def _synthesize_attempt(status: ModuleAssessmentStatus | FinalAssessmentStatus) -> UserAssessmentAttempt:
    return UserAssessmentAttempt(
        id=status.latest_attempt_id or "",
        score=status.latest_score,
        percentage=status.latest_score,
        passed=status.passed,
        status=AttemptStatus.COMPLETED.value,
        started_at=datetime.now(timezone.utc),
        time_spent=0,
    )


def select_attempt_history(
    progress: Optional[ProgressResponse],
    final_assessment_id: Optional[str] = None,
) -> AttemptHistory:
    """Pick the attempt source the progress payload supports."""
    if progress is not None and progress.assessment_attempts is not None:
        return RecordedAttemptHistory(progress.assessment_attempts)
    return DerivedAttemptHistory(progress, final_assessment_id)


# -----------------------------------------------------------------------------
# Optimistic overlay
# -----------------------------------------------------------------------------

@dataclass
class OverlayEntry:
    state: OverlayState
    applied_at: float           # tracker clock
    completed_at: datetime


class ProgressTracker:
    """
    Fetch and patch a learner's progress for one course.

    Mutation failures are logged and surfaced on ``error``; they never raise.
    """

    def __init__(
        self,
        client: ApiClient,
        user_id: Optional[str],
        course_id: str,
        optimistic_ttl: float = DEFAULT_OPTIMISTIC_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        is_active: Callable[[], bool] = lambda: True,
    ):
        """
        Initialize progress tracker.

        Args:
            client: ApiClient for progress routes
            user_id: Learner identifier (None disables all requests)
            course_id: Course being studied
            optimistic_ttl: Seconds a local completion patch survives without
                an authoritative refresh
            clock: Monotonic clock (tests inject a fake)
            is_active: Checked before applying a fetched response
        """
        self.client = client
        self.user_id = user_id
        self.course_id = course_id
        self.optimistic_ttl = optimistic_ttl
        self._clock = clock
        self.is_active = is_active
        self.progress: Optional[ProgressResponse] = None
        self.error: Optional[str] = None
        self.final_assessment_id: Optional[str] = None
        self._overlay: dict[str, OverlayEntry] = {}

    @property
    def enrollment_id(self) -> Optional[str]:
        return self.progress.enrollment_id if self.progress else None

    # -------------------------------------------------------------------------
    # Fetch
    # -------------------------------------------------------------------------

    def refresh(self) -> Optional[ProgressResponse]:
        """
        Fetch aggregate and per-lesson progress.

        Returns:
            The new ProgressResponse, or None on failure (previous copy kept)
        """
        if not self.user_id:
            return None

        try:
            data = self.client.get_progress(self.user_id, self.course_id)
            if not data:
                raise ApiError("Progress unavailable", endpoint="/api/progress")
            progress = ProgressResponse.model_validate(data)
        except (ApiError, ValidationError) as e:
            logger.warning(f"Progress fetch failed for course {self.course_id}: {e}")
            self.error = "Failed to fetch progress"
            return None

        if not self.is_active():
            logger.debug(f"Discarding progress for course {self.course_id}: page closed")
            return None

        self.progress = progress
        self.error = None
        self._resolve_overlay()
        return progress

    def _resolve_overlay(self):
        """Settle optimistic patches against freshly fetched progress."""
        for lesson_id, entry in list(self._overlay.items()):
            if entry.state != OverlayState.OPTIMISTIC:
                del self._overlay[lesson_id]
            elif self._server_completed(lesson_id):
                entry.state = OverlayState.CONFIRMED
            else:
                logger.info(f"Completion of lesson {lesson_id} not confirmed by server, reverting")
                entry.state = OverlayState.REVERTED

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def _server_completed(self, lesson_id: str) -> bool:
        entry = self.progress.entry(lesson_id) if self.progress else None
        if not entry:
            return False
        return entry.is_complete or bool(entry.progress and entry.progress.is_completed)

    def overlay_state(self, lesson_id: str) -> Optional[OverlayState]:
        """Overlay tag for a lesson, expiring stale optimistic patches."""
        entry = self._overlay.get(lesson_id)
        if not entry:
            return None
        if entry.state == OverlayState.OPTIMISTIC and self._clock() - entry.applied_at > self.optimistic_ttl:
            logger.info(f"Optimistic completion of lesson {lesson_id} expired unconfirmed")
            entry.state = OverlayState.REVERTED
        return entry.state

    def progress_for(self, lesson_id: str) -> Optional[LessonProgress]:
        """Merged progress view for a lesson, or None if nothing is known."""
        state = self.overlay_state(lesson_id)
        entry = self.progress.entry(lesson_id) if self.progress else None
        record = entry.progress if entry else None

        if state == OverlayState.OPTIMISTIC:
            overlay = self._overlay[lesson_id]
            return LessonProgress(
                lesson_id=lesson_id,
                lesson_title=entry.title if entry else "",
                is_completed=True,
                completed_at=overlay.completed_at,
                last_watched_position=record.last_watched_position if record else 0,
                watch_duration=record.watch_duration if record else 0,
                percentage_watched=record.video_percentage_watched if record else 100,
                state=state,
            )

        if not entry or (record is None and not entry.is_complete):
            return None

        return LessonProgress(
            lesson_id=lesson_id,
            lesson_title=entry.title,
            is_completed=self._server_completed(lesson_id),
            completed_at=record.completed_at if record else None,
            last_watched_position=record.last_watched_position if record else 0,
            watch_duration=record.watch_duration if record else 0,
            percentage_watched=record.video_percentage_watched if record else 0,
            state=state or OverlayState.CONFIRMED,
        )

    def is_completed(self, lesson_id: str) -> bool:
        lesson_progress = self.progress_for(lesson_id)
        return bool(lesson_progress and lesson_progress.is_completed)

    def resume_position(self, lesson_id: str) -> int:
        """Last watched position in seconds (0 if unknown)."""
        lesson_progress = self.progress_for(lesson_id)
        return lesson_progress.last_watched_position if lesson_progress else 0

    def previous_attempts_for(self, assessment_id: str) -> list[UserAssessmentAttempt]:
        history = select_attempt_history(self.progress, self.final_assessment_id)
        return history.attempts_for(assessment_id)

    def summary(self) -> dict:
        """
        Course-level progress for display.

        While optimistic patches are pending, lesson counts and the overall
        percentage are recomputed locally from the merged view.
        """
        if not self.progress:
            return {
                "overall_progress": 0,
                "completed_lessons": 0,
                "total_lessons": 0,
                "completed_assessments": 0,
                "total_assessments": 0,
                "certificate_eligible": False,
            }

        progress = self.progress
        overall = progress.overall_progress
        completed_lessons = progress.completed_lessons
        pending = [
            lid for lid in list(self._overlay)
            if self.overlay_state(lid) == OverlayState.OPTIMISTIC
        ]
        if pending and progress.lessons_progress:
            completed_lessons = sum(1 for e in progress.lessons_progress if self.is_completed(e.id))
            overall = round(completed_lessons / len(progress.lessons_progress) * 100)

        return {
            "overall_progress": overall,
            "completed_lessons": completed_lessons,
            "total_lessons": progress.total_lessons or len(progress.lessons_progress),
            "completed_assessments": progress.completed_assessments,
            "total_assessments": progress.total_assessments,
            "certificate_eligible": progress.certificate_eligible,
        }

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def mark_lesson_complete(self, lesson_id: str) -> bool:
        """
        Mark a lesson complete: patch locally, POST, then re-fetch.

        Returns:
            False if the lesson was already complete (no request made)
        """
        if not self.user_id or self.is_completed(lesson_id):
            return False

        self._overlay[lesson_id] = OverlayEntry(
            state=OverlayState.OPTIMISTIC,
            applied_at=self._clock(),
            completed_at=datetime.now(timezone.utc),
        )

        try:
            self.client.mark_lesson_complete(self.user_id, lesson_id)
        except ApiError as e:
            logger.error(f"Failed to mark lesson {lesson_id} complete: {e}")
            self.error = "Failed to mark lesson complete"
            return True

        self.refresh()
        return True

    def send_progress_update(self, lesson_id: str, position: float):
        """Persist the last watched position of a lesson."""
        if not self.user_id:
            return
        try:
            self.client.update_lesson_position(self.user_id, lesson_id, position)
        except ApiError as e:
            logger.error(f"Failed to save position for lesson {lesson_id}: {e}")
            self.error = "Failed to save playback position"
