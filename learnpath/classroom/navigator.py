"""
Navigator - Lesson selection and sequencing for the learn page.

Provides:
- Next/previous lesson navigation over the flattened curriculum
- Selection side effects (flush pending position, reset assessment view)
- Curriculum tree with completion indicators for the sidebar
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from learnpath.schemas import CurriculumModule, Lesson

from .attempts import AssessmentAttemptController
from .debounce import PositionReporter
from .loader import CurriculumLoader
from .progress import ProgressTracker

logger = logging.getLogger(__name__)


class LessonMark(str, Enum):
    """Lesson status for sidebar display."""
    COMPLETED = "completed"
    CURRENT = "current"
    AVAILABLE = "available"


@dataclass
class NavigationLesson:
    """Lesson with navigation metadata."""
    lesson: Lesson
    mark: LessonMark
    is_current: bool


@dataclass
class NavigationModule:
    """Module with lessons and navigation metadata."""
    module: CurriculumModule
    lessons: list[NavigationLesson]
    completed_count: int
    total_count: int
    expanded: bool


class Navigator:
    """
    Track the selected lesson and derive ordering from the curriculum.

    Nothing here is persisted; selection lives for the page session only.
    """

    def __init__(
        self,
        loader: CurriculumLoader,
        progress: ProgressTracker,
        reporter: Optional[PositionReporter] = None,
        controller: Optional[AssessmentAttemptController] = None,
    ):
        """
        Initialize navigator.

        Args:
            loader: CurriculumLoader holding the course tree
            progress: ProgressTracker for completion marks
            reporter: PositionReporter flushed when leaving a lesson
            controller: Attempt controller reset when selecting a lesson
        """
        self.loader = loader
        self.progress = progress
        self.reporter = reporter
        self.controller = controller
        self.selected_lesson_id: Optional[str] = None
        self.selected_module_id: Optional[str] = None
        self.expanded_modules: set[str] = set()
        self.scroll_to_top = False
        self._lesson_order: list[str] = []
        self._lesson_index: dict[str, int] = {}
        self.refresh()

    def refresh(self):
        """Rebuild lesson ordering after the curriculum (re)loads."""
        self._lesson_order = [lesson.id for lesson in self.loader.all_lessons()]
        self._lesson_index = {lid: idx for idx, lid in enumerate(self._lesson_order)}

        if self.selected_lesson_id not in self._lesson_index:
            self.selected_lesson_id = self.loader.initial_lesson_id
            self.selected_module_id = self.loader.initial_module_id

        curriculum = self.loader.curriculum
        if curriculum and curriculum.modules and not self.expanded_modules:
            self.expanded_modules = {curriculum.modules[0].id}

    @property
    def total_lessons(self) -> int:
        return len(self._lesson_order)

    @property
    def selected_lesson(self) -> Optional[Lesson]:
        return self.loader.lesson(self.selected_lesson_id)

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def get_next_lesson_id(self, current_id: Optional[str] = None) -> Optional[str]:
        """ID of the lesson after ``current_id`` (default: the selected one)."""
        current_id = current_id or self.selected_lesson_id
        if current_id not in self._lesson_index:
            return None
        idx = self._lesson_index[current_id]
        if idx + 1 >= len(self._lesson_order):
            return None
        return self._lesson_order[idx + 1]

    def get_previous_lesson_id(self, current_id: Optional[str] = None) -> Optional[str]:
        """ID of the lesson before ``current_id`` (default: the selected one)."""
        current_id = current_id or self.selected_lesson_id
        if current_id not in self._lesson_index:
            return None
        idx = self._lesson_index[current_id]
        if idx <= 0:
            return None
        return self._lesson_order[idx - 1]

    def next_lesson(self) -> Optional[Lesson]:
        return self.loader.lesson(self.get_next_lesson_id())

    def previous_lesson(self) -> Optional[Lesson]:
        return self.loader.lesson(self.get_previous_lesson_id())

    def get_lesson_position(self, lesson_id: Optional[str] = None) -> tuple[int, int]:
        """
        Get lesson position as (current, total).

        Returns (0, total) if lesson not found.
        """
        lesson_id = lesson_id or self.selected_lesson_id
        if lesson_id not in self._lesson_index:
            return (0, len(self._lesson_order))
        return (self._lesson_index[lesson_id] + 1, len(self._lesson_order))

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select(self, lesson_id: str, module_id: Optional[str] = None) -> bool:
        """
        Make a lesson the active one.

        Flushes the previous lesson's pending position update, drops any
        assessment view, and asks the page to scroll to the top.

        Returns:
            False if the lesson is not part of the curriculum
        """
        if lesson_id not in self._lesson_index:
            return False

        if self.reporter is not None:
            self.reporter.flush()
        if self.controller is not None:
            self.controller.reset()

        if module_id is None:
            module = self.loader.module_of(lesson_id)
            module_id = module.id if module else None

        self.selected_lesson_id = lesson_id
        self.selected_module_id = module_id
        if module_id:
            self.expanded_modules.add(module_id)
        self.scroll_to_top = True
        logger.debug(f"Selected lesson {lesson_id} (module {module_id})")
        return True

    def go_next(self) -> bool:
        next_id = self.get_next_lesson_id()
        return self.select(next_id) if next_id else False

    def go_previous(self) -> bool:
        prev_id = self.get_previous_lesson_id()
        return self.select(prev_id) if prev_id else False

    def toggle_module(self, module_id: str):
        if module_id in self.expanded_modules:
            self.expanded_modules.discard(module_id)
        else:
            self.expanded_modules.add(module_id)

    def consume_scroll_request(self) -> bool:
        """Return and clear the scroll-to-top flag."""
        requested = self.scroll_to_top
        self.scroll_to_top = False
        return requested

    # -------------------------------------------------------------------------
    # Curriculum Tree
    # -------------------------------------------------------------------------

    def get_lesson_mark(self, lesson_id: str) -> LessonMark:
        if self.progress.is_completed(lesson_id):
            return LessonMark.COMPLETED
        if lesson_id == self.selected_lesson_id:
            return LessonMark.CURRENT
        return LessonMark.AVAILABLE

    def get_status_indicator(self, lesson_id: str) -> str:
        """
        Get status indicator for sidebar display.

        Returns:
            ✓ for completed
            → for current
            ○ for everything else
        """
        mark = self.get_lesson_mark(lesson_id)
        if mark == LessonMark.COMPLETED:
            return "✓"
        if mark == LessonMark.CURRENT:
            return "→"
        return "○"

    def get_navigation_tree(self) -> list[NavigationModule]:
        """Modules with their lessons annotated for the sidebar."""
        curriculum = self.loader.curriculum
        if not curriculum:
            return []

        tree = []
        for module in curriculum.modules:
            nav_lessons = []
            completed_count = 0
            for lesson in module.lessons:
                mark = self.get_lesson_mark(lesson.id)
                if mark == LessonMark.COMPLETED:
                    completed_count += 1
                nav_lessons.append(NavigationLesson(
                    lesson=lesson,
                    mark=mark,
                    is_current=lesson.id == self.selected_lesson_id,
                ))

            tree.append(NavigationModule(
                module=module,
                lessons=nav_lessons,
                completed_count=completed_count,
                total_count=len(module.lessons),
                expanded=module.id in self.expanded_modules,
            ))

        return tree
