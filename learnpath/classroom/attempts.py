"""
AssessmentAttemptController - Lifecycle of a single assessment attempt.

States:
    IDLE -> CONFIRMING -> IN_PROGRESS -> REVIEWING
                 ^                          |
                 +------ retake ------------+

Only the first of a manual submit and a time-up submit completes the
IN_PROGRESS -> REVIEWING transition; later calls are no-ops.
"""

import logging
import random
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import ValidationError

from learnpath.errors import ApiError
from learnpath.schemas import (
    Assessment,
    AssessmentAttempt,
    AssessmentLevel,
    AssessmentResult,
    UserAssessmentAttempt,
)

from .api import ApiClient
from .progress import ProgressTracker
from .scoring import is_answered, score_assessment
from .timer import AssessmentTimer

logger = logging.getLogger(__name__)


class AttemptState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    IN_PROGRESS = "in_progress"
    REVIEWING = "reviewing"


@dataclass
class StartDialogInfo:
    """What the start confirmation shows before an attempt is created."""
    assessment: Assessment
    previous_attempts: list[UserAssessmentAttempt]
    best_attempt: Optional[UserAssessmentAttempt]
    attempts_left: Optional[int]     # None when unlimited
    available: bool
    unavailable_reason: Optional[str]

    @property
    def is_retake(self) -> bool:
        return bool(self.previous_attempts)

    @property
    def can_start(self) -> bool:
        if not self.available:
            return False
        return self.attempts_left is None or self.attempts_left > 0


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _iso(value: datetime) -> str:
    return _utc(value).isoformat().replace("+00:00", "Z")


class AssessmentAttemptController:
    """Drive one learner through start, answering, scoring and review."""

    def __init__(
        self,
        client: ApiClient,
        tracker: ProgressTracker,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        rng: Optional[random.Random] = None,
        timer_factory: Optional[Callable[..., Any]] = None,
        start_timer: bool = True,
    ):
        """
        Initialize controller.

        Args:
            client: ApiClient for attempt routes
            tracker: ProgressTracker used for enrollment, history and refreshes
            clock: Wall clock returning aware datetimes
            rng: Random source for question shuffling
            timer_factory: threading.Timer-compatible factory for the countdown
            start_timer: Start the countdown thread when an attempt begins
        """
        self.client = client
        self.tracker = tracker
        self._clock = clock
        self._rng = rng or random.Random()
        self._timer_factory = timer_factory
        self._start_timer = start_timer
        self._lock = threading.Lock()
        # bumped on every reset so an in-flight submit can tell it was abandoned
        self._generation = 0
        self._clear()

    def _clear(self):
        self.state = AttemptState.IDLE
        self.pending: Optional[Assessment] = None
        self.assessment: Optional[Assessment] = None
        self.lesson_id: Optional[str] = None
        self.attempt: Optional[AssessmentAttempt] = None
        self.answers: dict[str, Any] = {}
        self.result: Optional[AssessmentResult] = None
        self.server_result: Optional[dict] = None
        self.timer: Optional[AssessmentTimer] = None
        self.error: Optional[str] = None
        self._started_at: Optional[datetime] = None
        self._submitting = False

    # -------------------------------------------------------------------------
    # Confirmation
    # -------------------------------------------------------------------------

    def start(self, assessment: Assessment, lesson_id: Optional[str] = None) -> bool:
        """
        Open the start confirmation for an assessment. No attempt is created yet.

        Args:
            assessment: Assessment to take
            lesson_id: Lesson the quiz belongs to (completed on a passing lesson quiz)

        Returns:
            False while another attempt is in progress
        """
        with self._lock:
            if self.state == AttemptState.IN_PROGRESS:
                return False
            self._stop_timer()
            self._clear()
            self.state = AttemptState.CONFIRMING
            self.pending = assessment
            self.lesson_id = lesson_id
        return True

    def cancel(self):
        """Close the confirmation without starting."""
        if self.state == AttemptState.CONFIRMING:
            self.reset()

    def start_dialog(self) -> Optional[StartDialogInfo]:
        assessment = self.pending
        if self.state != AttemptState.CONFIRMING or assessment is None:
            return None

        previous = self.tracker.previous_attempts_for(assessment.id)
        best = max(previous, key=lambda a: a.percentage) if previous else None
        attempts_left = None
        if assessment.max_attempts is not None:
            attempts_left = max(assessment.max_attempts - len(previous), 0)
        reason = self._unavailable_reason(assessment)

        return StartDialogInfo(
            assessment=assessment,
            previous_attempts=previous,
            best_attempt=best,
            attempts_left=attempts_left,
            available=reason is None,
            unavailable_reason=reason,
        )

    def _unavailable_reason(self, assessment: Assessment) -> Optional[str]:
        now = _utc(self._clock())
        if assessment.available_from and now < _utc(assessment.available_from):
            return "Assessment not available yet"
        if assessment.available_until and now > _utc(assessment.available_until):
            return "Assessment deadline has passed"
        return None

    def confirm_start(self) -> bool:
        """
        Create the attempt on the server and begin answering.

        Returns:
            True if the attempt started; on failure ``error`` is set and the
            controller returns to IDLE
        """
        with self._lock:
            if self.state != AttemptState.CONFIRMING or self.pending is None:
                return False
            assessment = self.pending
            lesson_id = self.lesson_id

        enrollment_id = self.tracker.enrollment_id
        if not self.tracker.user_id or not enrollment_id:
            self._fail_start("Failed to start assessment: no active enrollment", lesson_id)
            return False

        started_at = self._clock()
        try:
            data = self.client.start_attempt(
                assessment.id,
                self.tracker.user_id,
                enrollment_id,
                started_at=_iso(started_at),
            )
            attempt_data = data.get("attempt")
            if not attempt_data or not attempt_data.get("id"):
                raise ApiError("Invalid response from server", endpoint="/api/assessment-attempts")
            attempt = AssessmentAttempt.model_validate(attempt_data)
        except (ApiError, ValidationError) as e:
            logger.error(f"Start of assessment {assessment.id} failed: {e}")
            message = e.message if isinstance(e, ApiError) else "Invalid response from server"
            self._fail_start(f"Failed to start assessment: {message}", lesson_id)
            return False

        questions = list(assessment.questions)
        if assessment.randomize_questions:
            self._rng.shuffle(questions)

        with self._lock:
            self.assessment = assessment.model_copy(update={"questions": questions})
            self.pending = None
            self.attempt = attempt
            # A returned in-progress attempt may carry answers to resume
            self.answers = dict(attempt.answers or {})
            self.result = None
            self.server_result = None
            self.error = None
            self._started_at = _utc(attempt.started_at) if attempt.started_at else _utc(started_at)
            self._submitting = False
            self.state = AttemptState.IN_PROGRESS

        logger.info(f"Started attempt {attempt.id} (#{attempt.attempt_number}) for assessment {assessment.id}")

        if assessment.time_limit:
            timer_kwargs = {"timer_factory": self._timer_factory} if self._timer_factory else {}
            self.timer = AssessmentTimer(assessment.time_limit, on_time_up=self.time_up, **timer_kwargs)
            if self._start_timer:
                self.timer.start()
        return True

    def _fail_start(self, message: str, lesson_id: Optional[str]):
        self.reset()
        self.lesson_id = lesson_id
        self.error = message

    # -------------------------------------------------------------------------
    # Answering
    # -------------------------------------------------------------------------

    def set_answer(self, question_id: str, value: Any) -> bool:
        """Record an answer locally. Ignored outside an attempt."""
        if self.state != AttemptState.IN_PROGRESS or not self.assessment:
            return False
        if self.assessment.question(question_id) is None:
            return False
        self.answers[question_id] = value
        return True

    def answered_count(self) -> int:
        if not self.assessment:
            return 0
        return sum(1 for q in self.assessment.questions if is_answered(self.answers.get(q.id)))

    def assessment_progress(self) -> dict:
        """Answered/total question counts for the progress bar."""
        total = len(self.assessment.questions) if self.assessment else 0
        answered = self.answered_count()
        return {
            "answered": answered,
            "total": total,
            "percentage": round(answered / total * 100) if total else 0,
        }

    def can_submit(self) -> bool:
        """Manual submission requires every question to be answered."""
        if self.state != AttemptState.IN_PROGRESS or not self.assessment:
            return False
        return self.answered_count() == len(self.assessment.questions)

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def submit(self) -> Optional[AssessmentResult]:
        """
        Score and submit the attempt.

        Returns:
            The result, or None if this call lost the submit race, the
            controller is not in progress, or the request failed
        """
        with self._lock:
            if self.state != AttemptState.IN_PROGRESS or self._submitting:
                return None
            self._submitting = True
            assessment = self.assessment
            attempt = self.attempt
            answers = dict(self.answers)
            started_at = self._started_at
            lesson_id = self.lesson_id
            generation = self._generation

        result = score_assessment(assessment, answers, attempt_id=attempt.id)
        now = _utc(self._clock())
        time_spent = max(int((now - started_at).total_seconds()), 0) if started_at else 0

        try:
            data = self.client.submit_attempt(
                attempt.id,
                answers=answers,
                score=result.score,
                percentage=result.percentage,
                passed=result.passed,
                time_spent=time_spent,
                completed_at=_iso(now),
            )
        except ApiError as e:
            logger.error(f"Submit of attempt {attempt.id} failed: {e}")
            with self._lock:
                if generation == self._generation:
                    self.error = f"Failed to submit assessment: {e.message}"
                    self._submitting = False
            return None

        logger.info(
            f"Submitted attempt {attempt.id}: {result.score}/{result.total_points} "
            f"({result.percentage}%) passed={result.passed}"
        )

        # The attempt is recorded server-side even if the view was dropped meanwhile
        self.tracker.refresh()
        if (
            result.passed
            and lesson_id
            and assessment.assessment_level == AssessmentLevel.LESSON_QUIZ
        ):
            self.tracker.mark_lesson_complete(lesson_id)

        with self._lock:
            if generation != self._generation:
                logger.info(f"Attempt {attempt.id} was reset during submit; not showing results")
                return None
            self._stop_timer()
            self._apply_server_response(data, result)
            self.result = result
            self.error = None
            self.state = AttemptState.REVIEWING
            self._submitting = False
        return result

    def time_up(self) -> Optional[AssessmentResult]:
        """Countdown expiry: submit whatever has been answered."""
        return self.submit()

    def _apply_server_response(self, data: dict, result: AssessmentResult):
        updated = data.get("attempt") if isinstance(data, dict) else None
        if updated:
            try:
                self.attempt = AssessmentAttempt.model_validate(updated)
            except ValidationError as e:
                logger.warning(f"Ignoring malformed attempt in submit response: {e}")

        # The client score is what gets recorded; a server score is kept for comparison only
        results = data.get("results") if isinstance(data, dict) else None
        if isinstance(results, dict):
            self.server_result = results
            if results.get("percentage") is not None and results.get("percentage") != result.percentage:
                logger.warning(
                    f"Server scored attempt {result.attempt_id} at {results.get('percentage')}%, "
                    f"client at {result.percentage}%"
                )

    # -------------------------------------------------------------------------
    # Retake / reset
    # -------------------------------------------------------------------------

    def can_retake(self) -> bool:
        assessment = self.assessment or self.pending
        if not assessment or not assessment.allow_retake:
            return False
        if assessment.max_attempts is None:
            return True
        return len(self.tracker.previous_attempts_for(assessment.id)) < assessment.max_attempts

    def retake(self) -> bool:
        """Return to the start confirmation for the same assessment."""
        if self.state != AttemptState.REVIEWING or not self.can_retake():
            return False
        assessment = self.assessment
        if assessment.randomize_questions:
            # restore authoring order before the next shuffle
            assessment = assessment.model_copy(
                update={"questions": sorted(assessment.questions, key=lambda q: q.sort_order)}
            )
        return self.start(assessment, lesson_id=self.lesson_id)

    def reset(self):
        """Drop any assessment view and return to IDLE."""
        with self._lock:
            self._generation += 1
            self._stop_timer()
            self._clear()

    def _stop_timer(self):
        if self.timer is not None:
            self.timer.stop()
