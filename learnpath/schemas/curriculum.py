"""
Curriculum schemas for learnpath.

Defines Pydantic models for a course's learning tree:
- Lessons (video, article, quiz)
- Modules with optional module assessment
- Curriculum with optional final assessment
"""

from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from .assessment import Assessment
from .base import WireModel


class ContentType(str, Enum):
    VIDEO = "VIDEO"
    ARTICLE = "ARTICLE"
    QUIZ = "QUIZ"
    ASSESSMENT = "ASSESSMENT"


class Lesson(WireModel):
    id: str
    title: str
    description: Optional[str] = None
    content_type: ContentType = ContentType.ARTICLE
    video_url: Optional[str] = None
    video_duration: Optional[int] = None  # seconds
    article_content: Optional[str] = None
    sort_order: int = 0
    is_free: bool = False
    quiz: Optional[Assessment] = None


class CurriculumModule(WireModel):
    id: str
    title: str
    description: Optional[str] = None
    sort_order: int = 0
    lessons: list[Lesson] = []
    module_assessment: Optional[Assessment] = None

    @field_validator("lessons", mode="before")
    @classmethod
    def _null_lessons(cls, value: Any) -> Any:
        return value or []


class Curriculum(WireModel):
    """
    Ordered module/lesson tree of a course.

    Module order and lesson order are the order received from the backend
    and drive next/previous navigation.
    """
    modules: list[CurriculumModule]
    course_title: str = "Untitled Course"
    final_assessment: Optional[Assessment] = None

    @field_validator("course_title", mode="before")
    @classmethod
    def _default_title(cls, value: Any) -> Any:
        return value or "Untitled Course"

    def all_lessons(self) -> list[Lesson]:
        """Lessons of every module, flattened in curriculum order."""
        return [lesson for module in self.modules for lesson in module.lessons]

    def find_lesson(self, lesson_id: str) -> Optional[Lesson]:
        for lesson in self.all_lessons():
            if lesson.id == lesson_id:
                return lesson
        return None

    def module_of(self, lesson_id: str) -> Optional[CurriculumModule]:
        for module in self.modules:
            if any(lesson.id == lesson_id for lesson in module.lessons):
                return module
        return None

    def assessments(self) -> list[Assessment]:
        """Every assessment reachable from the tree, lesson quizzes first per module."""
        found = []
        for module in self.modules:
            found.extend(lesson.quiz for lesson in module.lessons if lesson.quiz)
            if module.module_assessment:
                found.append(module.module_assessment)
        if self.final_assessment:
            found.append(self.final_assessment)
        return found

    def find_assessment(self, assessment_id: str) -> Optional[Assessment]:
        for assessment in self.assessments():
            if assessment.id == assessment_id:
                return assessment
        return None

    def lesson_for_quiz(self, assessment_id: str) -> Optional[Lesson]:
        """Lesson whose attached quiz is the given assessment."""
        for lesson in self.all_lessons():
            if lesson.quiz and lesson.quiz.id == assessment_id:
                return lesson
        return None
