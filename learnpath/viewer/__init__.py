"""
learnpath Viewer - Rendering components for the learn page.

This module provides:
- Lesson header, article and placeholder rendering
- Sidebar progress rendering
- Assessment start dialog, question, timer and results rendering
"""

from .lesson import (
    get_lesson_css,
    render_lesson_header,
    render_article,
    render_placeholder,
    render_video_placeholder,
    render_progress_summary,
    module_label,
    CONTENT_TYPE_LABELS,
)

from .quiz import (
    get_quiz_css,
    render_start_dialog,
    render_question,
    render_timer,
    render_score,
    render_review_item,
    render_review,
    LEVEL_LABELS,
)

__all__ = [
    # Lesson rendering
    "get_lesson_css",
    "render_lesson_header",
    "render_article",
    "render_placeholder",
    "render_video_placeholder",
    "render_progress_summary",
    "module_label",
    "CONTENT_TYPE_LABELS",
    # Quiz
    "get_quiz_css",
    "render_start_dialog",
    "render_question",
    "render_timer",
    "render_score",
    "render_review_item",
    "render_review",
    "LEVEL_LABELS",
]
