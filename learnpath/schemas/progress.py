"""
Progress tracking schemas for learnpath.

Defines Pydantic models for:
- The aggregate course progress response
- Per-lesson progress records and the merged lookup view
- Module/final assessment status used for attempt history fallback
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from .assessment import UserAssessmentAttempt
from .base import WireModel


class OverlayState(str, Enum):
    """Provenance of a lesson's completion flag in the merged view."""
    CONFIRMED = "confirmed"     # authoritative, from the last progress fetch
    OPTIMISTIC = "optimistic"   # patched locally, awaiting confirmation
    REVERTED = "reverted"       # optimistic patch not confirmed, dropped


class LessonProgressRecord(WireModel):
    lesson_id: str
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    last_watched_position: int = 0  # seconds
    watch_duration: int = 0         # seconds
    video_percentage_watched: float = 0

    @field_validator("last_watched_position", "watch_duration", mode="before")
    @classmethod
    def _null_seconds(cls, value: Any) -> Any:
        return int(value or 0)

    @field_validator("video_percentage_watched", mode="before")
    @classmethod
    def _null_percentage(cls, value: Any) -> Any:
        return value or 0


class LessonProgressEntry(WireModel):
    id: str
    title: str = ""
    module_id: Optional[str] = None
    module_title: Optional[str] = None
    content_type: Optional[str] = None
    has_quiz: Any = None
    quiz_required: bool = False
    progress: Optional[LessonProgressRecord] = None
    is_complete: bool = False
    completion_rules: Any = None
    quiz_result: Any = None


class ModuleAssessmentStatus(WireModel):
    module_id: Optional[str] = None
    module_title: Optional[str] = None
    assessment_id: Optional[str] = None
    assessment_title: Optional[str] = None
    has_assessment: bool = False
    assessment_required: bool = False
    minimum_passing_score: Optional[float] = None
    passed: bool = False
    attempted: bool = False
    latest_score: float = 0
    latest_attempt_id: Optional[str] = None


class FinalAssessmentStatus(WireModel):
    id: Optional[str] = None
    title: Optional[str] = None
    passing_score: Optional[float] = None
    is_required: bool = False
    passed: bool = False
    attempted: bool = False
    latest_score: float = 0
    latest_attempt_id: Optional[str] = None


class ProgressResponse(WireModel):
    enrollment_id: Optional[str] = None
    course_id: Optional[str] = None
    overall_progress: float = 0
    completed_lessons: int = 0
    total_lessons: int = 0
    completed_assessments: int = 0
    total_assessments: int = 0
    status: Optional[str] = None
    completed_at: Optional[datetime] = None
    overall_score: Optional[float] = None
    certificate_eligible: bool = False
    lessons_progress: list[LessonProgressEntry] = []
    module_assessment_status: list[ModuleAssessmentStatus] = []
    final_assessment_status: Optional[FinalAssessmentStatus] = None
    # Absent on older backends; attempt history then falls back to status fields
    assessment_attempts: Optional[dict[str, list[UserAssessmentAttempt]]] = None

    @field_validator("lessons_progress", "module_assessment_status", mode="before")
    @classmethod
    def _null_lists(cls, value: Any) -> Any:
        return value or []

    def entry(self, lesson_id: str) -> Optional[LessonProgressEntry]:
        for entry in self.lessons_progress:
            if entry.id == lesson_id:
                return entry
        return None


class LessonProgress(WireModel):
    """Flattened per-lesson view served by ``ProgressTracker.progress_for``."""
    lesson_id: str
    lesson_title: str = ""
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    last_watched_position: int = 0
    watch_duration: int = 0
    percentage_watched: float = 0
    state: OverlayState = OverlayState.CONFIRMED
