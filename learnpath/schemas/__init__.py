"""
learnpath Schemas - Pydantic models for the learner console.

This module exports all schema classes for:
- Curriculum: modules, lessons, content types
- Assessment: questions, attempts, scored results
- Progress: course progress response, lesson progress, overlay state
"""

from .base import WireModel

# Assessment schemas
from .assessment import (
    AssessmentLevel,
    QuestionType,
    Difficulty,
    AttemptStatus,
    AssessmentQuestion,
    Assessment,
    AssessmentAttempt,
    UserAssessmentAttempt,
    QuestionReview,
    AssessmentResult,
    TRUE_FALSE_OPTIONS,
)

# Curriculum schemas
from .curriculum import (
    ContentType,
    Lesson,
    CurriculumModule,
    Curriculum,
)

# Progress schemas
from .progress import (
    OverlayState,
    LessonProgressRecord,
    LessonProgressEntry,
    ModuleAssessmentStatus,
    FinalAssessmentStatus,
    ProgressResponse,
    LessonProgress,
)

__all__ = [
    'WireModel',
    # Assessment
    'AssessmentLevel',
    'QuestionType',
    'Difficulty',
    'AttemptStatus',
    'AssessmentQuestion',
    'Assessment',
    'AssessmentAttempt',
    'UserAssessmentAttempt',
    'QuestionReview',
    'AssessmentResult',
    'TRUE_FALSE_OPTIONS',
    # Curriculum
    'ContentType',
    'Lesson',
    'CurriculumModule',
    'Curriculum',
    # Progress
    'OverlayState',
    'LessonProgressRecord',
    'LessonProgressEntry',
    'ModuleAssessmentStatus',
    'FinalAssessmentStatus',
    'ProgressResponse',
    'LessonProgress',
]
