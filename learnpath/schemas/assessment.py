"""
Assessment schemas for learnpath.

Defines Pydantic models for:
- Assessments and their questions
- Attempts (server-side record and history rows)
- Scored results with per-question review
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from .base import WireModel


class AssessmentLevel(str, Enum):
    LESSON_QUIZ = "LESSON_QUIZ"
    MODULE_ASSESSMENT = "MODULE_ASSESSMENT"
    COURSE_FINAL = "COURSE_FINAL"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"
    ESSAY = "ESSAY"


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class AttemptStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ABANDONED = "ABANDONED"


TRUE_FALSE_OPTIONS = ["True", "False"]


# -----------------------------------------------------------------------------
# Assessment definition
# -----------------------------------------------------------------------------

class AssessmentQuestion(WireModel):
    id: str
    question_text: str
    question_type: QuestionType
    difficulty: Difficulty = Difficulty.MEDIUM
    options: list[str] = []          # MULTIPLE_CHOICE only
    correct_answer: str = ""
    explanation: Optional[str] = None
    points: float = 1
    negative_points: float = 0
    sort_order: int = 0

    @field_validator("options", mode="before")
    @classmethod
    def _option_labels(cls, value: Any) -> list[str]:
        # Options arrive either as plain strings or as {text|label|value} objects
        if not value:
            return []
        labels = []
        for option in value:
            if isinstance(option, dict):
                option = option.get("text") or option.get("label") or option.get("value") or ""
            labels.append(str(option))
        return labels

    @field_validator("points", mode="before")
    @classmethod
    def _default_points(cls, value: Any) -> Any:
        # The backend counts a missing or zero weight as one point
        return value or 1

    @field_validator("negative_points", mode="before")
    @classmethod
    def _default_negative(cls, value: Any) -> Any:
        return value or 0

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _stringify_answer(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "True" if value else "False"
        return str(value)

    @property
    def choices(self) -> list[str]:
        """Selectable options for choice questions, empty for free text."""
        if self.question_type == QuestionType.TRUE_FALSE:
            return list(TRUE_FALSE_OPTIONS)
        if self.question_type == QuestionType.MULTIPLE_CHOICE:
            return list(self.options)
        return []


class Assessment(WireModel):
    id: str
    title: str
    description: Optional[str] = None
    assessment_level: AssessmentLevel = AssessmentLevel.LESSON_QUIZ
    passing_score: float = 60
    max_attempts: Optional[int] = None
    time_limit: Optional[int] = None   # minutes
    duration: Optional[int] = None
    is_required: bool = False
    show_correct_answers: bool = False
    allow_retake: bool = False
    randomize_questions: bool = False
    negative_points: float = 0
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None
    questions: list[AssessmentQuestion] = []

    @field_validator("negative_points", mode="before")
    @classmethod
    def _default_negative(cls, value: Any) -> Any:
        return value or 0

    @field_validator("max_attempts", "time_limit", mode="before")
    @classmethod
    def _zero_is_unset(cls, value: Any) -> Any:
        return value or None

    @property
    def total_points(self) -> float:
        return sum(q.points for q in self.questions)

    def question(self, question_id: str) -> Optional[AssessmentQuestion]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


# -----------------------------------------------------------------------------
# Attempts
# -----------------------------------------------------------------------------

class AssessmentAttempt(WireModel):
    """Attempt record as created and finalized by the backend."""
    id: str
    assessment_id: Optional[str] = None
    user_id: Optional[str] = None
    enrollment_id: Optional[str] = None
    attempt_number: int = 1
    status: AttemptStatus = AttemptStatus.IN_PROGRESS
    answers: Optional[dict[str, Any]] = None
    score: float = 0
    percentage: float = 0
    passed: bool = False
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    time_spent: int = 0
    review_allowed: bool = True


class UserAssessmentAttempt(WireModel):
    """A prior attempt as listed in the start dialog."""
    id: str = ""
    score: float = 0
    percentage: float = 0
    passed: bool = False
    status: str = AttemptStatus.COMPLETED.value
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    time_spent: int = 0


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

class QuestionReview(WireModel):
    question_id: str
    question_type: QuestionType
    user_answer: Optional[str] = None
    correct_answer: str = ""
    is_correct: bool = False
    points_earned: float = 0
    max_points: float = 1
    explanation: Optional[str] = None


class AssessmentResult(WireModel):
    score: float
    total_points: float
    percentage: int
    passed: bool
    passing_score: float
    correct_answers: int
    total_questions: int
    attempt_id: Optional[str] = None
    review: list[QuestionReview] = Field(default_factory=list)
