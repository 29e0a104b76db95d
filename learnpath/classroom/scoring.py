"""
Assessment scoring.

Scores an answer set against an assessment's questions:
- MULTIPLE_CHOICE: exact match, wrong answers may cost negative points
- TRUE_FALSE: trimmed, case-insensitive match (stored as "true"/"false"), same penalty
- SHORT_ANSWER: trimmed, case-insensitive match
- ESSAY: any non-empty answer earns full points (no manual grading here)
"""

from typing import Any, Mapping, Optional

from learnpath.schemas import (
    Assessment,
    AssessmentQuestion,
    AssessmentResult,
    QuestionReview,
    QuestionType,
)


def is_answered(value: Any) -> bool:
    """An answer counts once it is neither missing nor blank."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def _matches(question: AssessmentQuestion, user_answer: str) -> bool:
    if question.question_type == QuestionType.TRUE_FALSE:
        return user_answer.strip().lower() == question.correct_answer.strip().lower()
    return user_answer == question.correct_answer


def score_question(question: AssessmentQuestion, answer: Any) -> QuestionReview:
    """Score a single answer."""
    user_answer = None if answer is None else str(answer)
    is_correct = False
    earned: float = 0

    if is_answered(answer):
        if question.question_type in (QuestionType.MULTIPLE_CHOICE, QuestionType.TRUE_FALSE):
            if _matches(question, user_answer):
                is_correct = True
                earned = question.points
            elif question.negative_points:
                earned = -question.negative_points
        elif question.question_type == QuestionType.SHORT_ANSWER:
            if user_answer.strip().lower() == question.correct_answer.strip().lower():
                is_correct = True
                earned = question.points
        elif question.question_type == QuestionType.ESSAY:
            is_correct = True
            earned = question.points

    return QuestionReview(
        question_id=question.id,
        question_type=question.question_type,
        user_answer=user_answer,
        correct_answer=question.correct_answer,
        is_correct=is_correct,
        points_earned=earned,
        max_points=question.points,
        explanation=question.explanation,
    )


def percentage_of(score: float, total_points: float) -> int:
    if total_points <= 0:
        return 0
    return round(score / total_points * 100)


def score_assessment(
    assessment: Assessment,
    answers: Mapping[str, Any],
    attempt_id: Optional[str] = None,
) -> AssessmentResult:
    """
    Score an answer set.

    Args:
        assessment: Assessment with its questions
        answers: Mapping of question id to submitted answer
        attempt_id: Attempt the result belongs to

    Returns:
        AssessmentResult with score, percentage, pass flag and per-question review
    """
    review = [score_question(q, answers.get(q.id)) for q in assessment.questions]
    score = sum(r.points_earned for r in review)
    total_points = sum(r.max_points for r in review)
    percentage = percentage_of(score, total_points)

    return AssessmentResult(
        score=score,
        total_points=total_points,
        percentage=percentage,
        passed=percentage >= assessment.passing_score,
        passing_score=assessment.passing_score,
        correct_answers=sum(1 for r in review if r.is_correct),
        total_questions=len(review),
        attempt_id=attempt_id,
        review=review,
    )
