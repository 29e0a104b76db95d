"""
Quiz renderer - Assessment start dialog, questions and results.

Provides:
- Start confirmation summary (limits, previous attempts, availability)
- Question rendering for the attempt form
- Timer display
- Score box and per-question review
"""

import html
from typing import Optional

from learnpath.classroom import AssessmentTimer, StartDialogInfo, format_time
from learnpath.schemas import (
    Assessment,
    AssessmentLevel,
    AssessmentQuestion,
    AssessmentResult,
    QuestionReview,
    QuestionType,
)


LEVEL_LABELS = {
    AssessmentLevel.LESSON_QUIZ: "Lesson Quiz",
    AssessmentLevel.MODULE_ASSESSMENT: "Module Assessment",
    AssessmentLevel.COURSE_FINAL: "Final Assessment",
}


def get_quiz_css() -> str:
    """Get CSS styles for quiz display."""
    return """
    <style>
    .quiz-container {
        background: #e3f2fd;
        border-radius: 12px;
        padding: 1.5em;
        margin: 1.5em 0;
        border-left: 4px solid #1976D2;
    }
    .quiz-header {
        display: flex;
        align-items: center;
        gap: 0.5em;
        margin-bottom: 1em;
    }
    .quiz-icon {
        font-size: 1.5em;
    }
    .quiz-title {
        font-weight: 600;
        color: #1565C0;
        font-size: 1.1em;
    }
    .quiz-points {
        margin-left: auto;
        font-size: 0.85em;
        color: #666;
    }
    .quiz-question {
        font-size: 1.05em;
        color: #333;
        margin-bottom: 1em;
        line-height: 1.6;
    }
    .quiz-facts {
        list-style: none;
        padding: 0;
        margin: 0.5em 0;
        color: #333;
    }
    .quiz-facts li {
        margin: 0.3em 0;
    }
    .quiz-warning {
        background: #fff3e0;
        padding: 0.8em 1em;
        border-radius: 8px;
        font-size: 0.95em;
        color: #e65100;
        margin: 1em 0;
    }
    .quiz-timer {
        font-family: monospace;
        font-size: 1.4em;
        font-weight: 600;
        color: #1565C0;
    }
    .quiz-timer-warning {
        color: #F57C00;
    }
    .quiz-timer-critical {
        color: #D32F2F;
    }
    .quiz-review {
        background: white;
        border: 1px solid #ddd;
        border-radius: 8px;
        padding: 1em;
        margin-top: 1em;
    }
    .quiz-review-correct {
        border-left: 4px solid #388E3C;
    }
    .quiz-review-wrong {
        border-left: 4px solid #D32F2F;
    }
    .quiz-answer-label {
        font-weight: 600;
        color: #388E3C;
        margin-bottom: 0.5em;
    }
    .quiz-answer-content {
        color: #333;
        line-height: 1.6;
    }
    .quiz-explanation {
        color: #555;
        font-size: 0.95em;
        margin-top: 0.5em;
    }
    .quiz-score-box {
        background: #e8f5e9;
        border-radius: 8px;
        padding: 1em;
        margin-top: 1.5em;
        text-align: center;
    }
    .quiz-score-box-failed {
        background: #ffebee;
    }
    .quiz-score-value {
        font-size: 2em;
        font-weight: 700;
        color: #388E3C;
    }
    .quiz-score-box-failed .quiz-score-value {
        color: #D32F2F;
    }
    .quiz-score-label {
        color: #666;
        font-size: 0.9em;
    }
    </style>
    """


def _points(value: float) -> str:
    return f"{value:g}"


def render_start_dialog(info: StartDialogInfo) -> str:
    """
    Render the confirmation shown before an attempt is created.

    Args:
        info: StartDialogInfo from the attempt controller

    Returns:
        HTML string for the dialog body
    """
    assessment = info.assessment
    parts = ['<div class="quiz-container">']

    parts.append('<div class="quiz-header">')
    parts.append('<span class="quiz-icon">?</span>')
    parts.append(f'<span class="quiz-title">{html.escape(assessment.title)}</span>')
    parts.append(f'<span class="quiz-points">{LEVEL_LABELS[assessment.assessment_level]}</span>')
    parts.append('</div>')

    if assessment.description:
        parts.append(f'<div class="quiz-question">{html.escape(assessment.description)}</div>')

    parts.append('<ul class="quiz-facts">')
    parts.append(f'<li>Questions: {len(assessment.questions)}</li>')
    parts.append(f'<li>Passing score: {_points(assessment.passing_score)}%</li>')
    if assessment.time_limit:
        parts.append(f'<li>Time limit: {assessment.time_limit} minutes</li>')
    if assessment.max_attempts is not None:
        parts.append(f'<li>Attempts left: {info.attempts_left} of {assessment.max_attempts}</li>')
    if info.previous_attempts:
        parts.append(f'<li>Previous attempts: {len(info.previous_attempts)}</li>')
    if info.best_attempt is not None:
        parts.append(f'<li>Best score: {_points(info.best_attempt.percentage)}%</li>')
    parts.append('</ul>')

    if info.unavailable_reason:
        parts.append(f'<div class="quiz-warning">{html.escape(info.unavailable_reason)}</div>')
    elif not info.can_start:
        parts.append('<div class="quiz-warning">No attempts left for this assessment.</div>')
    elif assessment.time_limit:
        parts.append('<div class="quiz-warning">The attempt is submitted automatically when time runs out.</div>')

    parts.append('</div>')
    return ''.join(parts)


def render_question(question: AssessmentQuestion, index: int) -> str:
    """Render the prompt of a question; the answer widget is drawn by the page."""
    parts = ['<div class="quiz-container">']

    parts.append('<div class="quiz-header">')
    parts.append(f'<span class="quiz-title">Question {index + 1}</span>')
    parts.append(f'<span class="quiz-points">{_points(question.points)} pt</span>')
    parts.append('</div>')

    parts.append(f'<div class="quiz-question">{html.escape(question.question_text)}</div>')

    parts.append('</div>')
    return ''.join(parts)


def render_timer(timer: Optional[AssessmentTimer]) -> str:
    if timer is None:
        return ""
    css = "quiz-timer"
    if timer.is_critical:
        css += " quiz-timer-critical"
    elif timer.is_warning:
        css += " quiz-timer-warning"
    paused = " (paused)" if timer.paused else ""
    return f'<div class="{css}">⏱ {format_time(timer.remaining)}{paused}</div>'


def render_score(result: AssessmentResult) -> str:
    """Render the score box of the results screen."""
    css = "quiz-score-box" if result.passed else "quiz-score-box quiz-score-box-failed"
    verdict = "Passed" if result.passed else f"Not passed (needs {_points(result.passing_score)}%)"
    return f"""
    <div class="{css}">
        <div class="quiz-score-value">{result.percentage}%</div>
        <div class="quiz-score-label">{result.correct_answers} of {result.total_questions} correct · {_points(result.score)}/{_points(result.total_points)} points</div>
        <div class="quiz-score-label">{verdict}</div>
    </div>
    """


def render_review_item(
    review: QuestionReview,
    question: Optional[AssessmentQuestion],
    index: int,
    show_correct_answer: bool = False,
) -> str:
    """
    Render one reviewed question.

    Args:
        review: Scored question
        question: Question definition (for the prompt)
        index: Position in the attempt
        show_correct_answer: Reveal the expected answer and explanation

    Returns:
        HTML string
    """
    css = "quiz-review quiz-review-correct" if review.is_correct else "quiz-review quiz-review-wrong"
    parts = [f'<div class="{css}">']

    prompt = question.question_text if question else review.question_id
    mark = "✓" if review.is_correct else "✗"
    parts.append(f'<div class="quiz-question">{mark} {index + 1}. {html.escape(prompt)}</div>')
    parts.append(
        f'<div class="quiz-answer-content">Your answer: {html.escape(review.user_answer or "(no answer)")}</div>'
    )
    parts.append(
        f'<div class="quiz-answer-content">Points: {_points(review.points_earned)}/{_points(review.max_points)}</div>'
    )

    if show_correct_answer and review.question_type != QuestionType.ESSAY:
        parts.append('<div class="quiz-answer-label">Correct answer:</div>')
        parts.append(f'<div class="quiz-answer-content">{html.escape(review.correct_answer)}</div>')
    if show_correct_answer and review.explanation:
        parts.append(f'<div class="quiz-explanation">{html.escape(review.explanation)}</div>')

    parts.append('</div>')
    return ''.join(parts)


def render_review(result: AssessmentResult, assessment: Assessment) -> str:
    """Render every reviewed question of a result."""
    if not result.review:
        return ""
    parts = []
    for idx, review in enumerate(result.review):
        parts.append(render_review_item(
            review,
            assessment.question(review.question_id),
            idx,
            show_correct_answer=assessment.show_correct_answers,
        ))
    return ''.join(parts)
