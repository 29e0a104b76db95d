"""
Lesson renderer - Generate HTML for the learn page's lesson area.

Features:
- Lesson header with module, position and completion badge
- Article body (stored HTML or plain description)
- Placeholders for lessons without playable content
- Sidebar progress summary
"""

import html
from typing import Optional

from learnpath.classroom import LessonView, NavigationModule
from learnpath.schemas import ContentType


CONTENT_TYPE_LABELS = {
    ContentType.VIDEO: "Video",
    ContentType.ARTICLE: "Article",
    ContentType.QUIZ: "Quiz",
    ContentType.ASSESSMENT: "Assessment",
}


def get_lesson_css() -> str:
    """Get CSS styles for lesson display."""
    return """
    <style>
    .lesson-header {
        margin-bottom: 1em;
    }
    .lesson-module {
        font-size: 0.85em;
        color: #666;
        text-transform: uppercase;
        letter-spacing: 0.05em;
    }
    .lesson-title {
        font-size: 1.6em;
        font-weight: 600;
        color: #222;
        margin: 0.2em 0;
    }
    .lesson-meta {
        display: flex;
        gap: 0.8em;
        align-items: center;
        font-size: 0.9em;
        color: #666;
    }
    .lesson-badge {
        border-radius: 12px;
        padding: 0.1em 0.7em;
        font-size: 0.85em;
        background: #eceff1;
        color: #455A64;
    }
    .lesson-badge-completed {
        background: #e8f5e9;
        color: #388E3C;
    }
    .lesson-article {
        line-height: 1.7;
        font-size: 1.05em;
        color: #333;
        margin: 1em 0;
    }
    .lesson-placeholder {
        background: #fafafa;
        border: 1px dashed #ccc;
        border-radius: 8px;
        padding: 2em;
        text-align: center;
        color: #888;
    }
    .course-progress {
        font-size: 0.9em;
        color: #444;
        line-height: 1.6;
    }
    .course-certificate {
        color: #388E3C;
        font-weight: 600;
    }
    </style>
    """


def render_lesson_header(
    view: LessonView,
    module_title: Optional[str] = None,
    position: Optional[tuple[int, int]] = None,
) -> str:
    """
    Render the lesson title block.

    Args:
        view: LessonView from the player shell
        module_title: Title of the lesson's module
        position: (current, total) lesson position

    Returns:
        HTML string for the header
    """
    parts = ['<div class="lesson-header">']
    if module_title:
        parts.append(f'<div class="lesson-module">{html.escape(module_title)}</div>')
    parts.append(f'<div class="lesson-title">{html.escape(view.lesson.title)}</div>')

    parts.append('<div class="lesson-meta">')
    parts.append(f'<span class="lesson-badge">{CONTENT_TYPE_LABELS[view.content_type]}</span>')
    if position and position[0]:
        parts.append(f'<span>Lesson {position[0]} of {position[1]}</span>')
    if view.is_completed:
        parts.append('<span class="lesson-badge lesson-badge-completed">✓ Completed</span>')
    parts.append('</div>')

    parts.append('</div>')
    return ''.join(parts)


def render_article(view: LessonView) -> str:
    """Render an article lesson; stored HTML is trusted, plain text is escaped."""
    if view.article_html:
        return f'<div class="lesson-article">{view.article_html}</div>'
    if view.article_text:
        text = html.escape(view.article_text).replace("\n", "<br>")
        return f'<div class="lesson-article">{text}</div>'
    return render_placeholder("No content available for this lesson.")


def render_placeholder(message: str) -> str:
    return f'<div class="lesson-placeholder">{html.escape(message)}</div>'


def render_video_placeholder(view: LessonView) -> str:
    """Shown instead of a player when a video lesson has no URL."""
    return render_placeholder(f'No video available for "{view.lesson.title}".')


def render_progress_summary(summary: dict) -> str:
    """
    Render the sidebar course progress block.

    Args:
        summary: Dict from ProgressTracker.summary()

    Returns:
        HTML string
    """
    parts = ['<div class="course-progress">']
    parts.append(
        f"<div><b>{summary['completed_lessons']}/{summary['total_lessons']}</b> lessons</div>"
    )
    if summary["total_assessments"]:
        parts.append(
            f"<div><b>{summary['completed_assessments']}/{summary['total_assessments']}</b> assessments</div>"
        )
    if summary["certificate_eligible"]:
        parts.append('<div class="course-certificate">Certificate available</div>')
    parts.append('</div>')
    return ''.join(parts)


def module_label(nav_module: NavigationModule) -> str:
    """Expander label for a sidebar module."""
    return f"**{nav_module.module.title}** ({nav_module.completed_count}/{nav_module.total_count})"
