"""
learnpath Classroom - Runtime components behind the course learn page.

This module provides:
- ApiClient: HTTP access to the platform API
- CurriculumLoader: Load a course's module/lesson tree
- ProgressTracker: Track learner progress with an optimistic overlay
- PositionReporter: Debounced watch-position updates
- AssessmentAttemptController: Start, answer, submit and review attempts
- Navigator: Lesson sequencing and selection
- LessonPlayerShell: Per-content-type lesson presentation
- CourseLearnSession: One open learn page
"""

from .api import (
    ApiClient,
    ResourceCache,
    utc_now_iso,
)

from .loader import CurriculumLoader

from .progress import (
    ProgressTracker,
    AttemptHistory,
    RecordedAttemptHistory,
    DerivedAttemptHistory,
    select_attempt_history,
)

from .debounce import PositionReporter

from .scoring import (
    is_answered,
    score_question,
    score_assessment,
    percentage_of,
)

from .timer import (
    AssessmentTimer,
    format_time,
    WARNING_SECONDS,
    CRITICAL_SECONDS,
)

from .attempts import (
    AssessmentAttemptController,
    AttemptState,
    StartDialogInfo,
)

from .navigator import (
    Navigator,
    LessonMark,
    NavigationLesson,
    NavigationModule,
)

from .player import (
    LessonPlayerShell,
    LessonView,
    format_video_url,
)

from .session import CourseLearnSession

__all__ = [
    # API
    "ApiClient",
    "ResourceCache",
    "utc_now_iso",
    # Loader
    "CurriculumLoader",
    # Progress
    "ProgressTracker",
    "AttemptHistory",
    "RecordedAttemptHistory",
    "DerivedAttemptHistory",
    "select_attempt_history",
    "PositionReporter",
    # Assessments
    "is_answered",
    "score_question",
    "score_assessment",
    "percentage_of",
    "AssessmentTimer",
    "format_time",
    "WARNING_SECONDS",
    "CRITICAL_SECONDS",
    "AssessmentAttemptController",
    "AttemptState",
    "StartDialogInfo",
    # Navigator
    "Navigator",
    "LessonMark",
    "NavigationLesson",
    "NavigationModule",
    # Player
    "LessonPlayerShell",
    "LessonView",
    "format_video_url",
    # Session
    "CourseLearnSession",
]
