"""
CurriculumLoader - Load a course's module/lesson/assessment tree.

Provides:
- One-shot curriculum fetch with wholesale replacement
- Initial lesson/module selection
- Lesson and module lookups for the page
"""

import logging
from typing import Callable, Optional

from pydantic import ValidationError

from learnpath.errors import ApiError, CurriculumLoadError
from learnpath.schemas import Curriculum, CurriculumModule, Lesson

from .api import ApiClient

logger = logging.getLogger(__name__)


class CurriculumLoader:
    """
    Fetch and hold the curriculum of a single course.

    Failures never raise to the caller: ``error`` carries a user-visible
    message and ``curriculum`` is left empty.
    """

    def __init__(
        self,
        client: ApiClient,
        course_id: str,
        is_active: Callable[[], bool] = lambda: True,
    ):
        """
        Initialize loader.

        Args:
            client: ApiClient used for the fetch
            course_id: Course whose curriculum to load
            is_active: Checked before applying a response; a page that has
                gone away discards late results
        """
        self.client = client
        self.course_id = course_id
        self.is_active = is_active
        self.curriculum: Optional[Curriculum] = None
        self.error: Optional[str] = None
        self.initial_lesson_id: Optional[str] = None
        self.initial_module_id: Optional[str] = None

    def load(self) -> Optional[Curriculum]:
        """
        Fetch the curriculum, replacing any previously loaded tree.

        Returns:
            The loaded Curriculum, or None on failure (see ``error``)
        """
        try:
            curriculum = self._fetch()
        except CurriculumLoadError as e:
            if not self.is_active():
                return None
            logger.warning(f"Curriculum load failed for course {self.course_id}: {e}")
            self._reset()
            self.error = str(e)
            return None

        if not self.is_active():
            logger.debug(f"Discarding curriculum for course {self.course_id}: page closed")
            return None

        self._reset()
        self.curriculum = curriculum
        first_module = curriculum.modules[0]
        if first_module.lessons:
            self.initial_lesson_id = first_module.lessons[0].id
            self.initial_module_id = first_module.id

        logger.info(
            f"Loaded curriculum for course {self.course_id}: "
            f"{len(curriculum.modules)} modules, {len(curriculum.all_lessons())} lessons"
        )
        return curriculum

    def _reset(self):
        self.curriculum = None
        self.error = None
        self.initial_lesson_id = None
        self.initial_module_id = None

    def _fetch(self) -> Curriculum:
        try:
            data = self.client.get_curriculum(self.course_id)
        except ApiError as e:
            raise CurriculumLoadError("Failed to fetch curriculum") from e

        if not data.get("modules"):
            raise CurriculumLoadError("No curriculum found for this course")

        try:
            return Curriculum(
                modules=data["modules"],
                course_title=data.get("courseTitle"),
                final_assessment=data.get("finalAssessment"),
            )
        except ValidationError as e:
            raise CurriculumLoadError("Failed to load course content") from e

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self.curriculum is not None

    def all_lessons(self) -> list[Lesson]:
        if not self.curriculum:
            return []
        return self.curriculum.all_lessons()

    def lesson(self, lesson_id: Optional[str]) -> Optional[Lesson]:
        if not self.curriculum or not lesson_id:
            return None
        return self.curriculum.find_lesson(lesson_id)

    def module_of(self, lesson_id: str) -> Optional[CurriculumModule]:
        if not self.curriculum:
            return None
        return self.curriculum.module_of(lesson_id)
