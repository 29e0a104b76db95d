"""Tests for client-side assessment scoring."""

from learnpath.classroom import is_answered, percentage_of, score_assessment, score_question
from learnpath.schemas import Assessment, AssessmentQuestion


def _question(qid, qtype, correct="", points=1, negative=0, options=None):
    return AssessmentQuestion(
        id=qid,
        question_text=f"Question {qid}",
        question_type=qtype,
        correct_answer=correct,
        points=points,
        negative_points=negative,
        options=options or [],
    )


def _assessment(questions, passing_score=60):
    return Assessment(id="a", title="Quiz", passing_score=passing_score, questions=questions)


class TestIsAnswered:
    def test_blank_values(self):
        assert not is_answered(None)
        assert not is_answered("")
        assert not is_answered("   ")

    def test_values(self):
        assert is_answered("x")
        assert is_answered(0)


class TestScoreQuestion:
    """Test per-type question scoring."""

    def test_multiple_choice_exact_match(self):
        q = _question("q1", "MULTIPLE_CHOICE", correct="4", points=2, options=["3", "4"])
        review = score_question(q, "4")
        assert review.is_correct
        assert review.points_earned == 2
        assert review.max_points == 2

    def test_multiple_choice_is_case_sensitive(self):
        q = _question("q1", "MULTIPLE_CHOICE", correct="Four")
        assert not score_question(q, "four").is_correct

    def test_wrong_answer_costs_negative_points(self):
        q = _question("q1", "MULTIPLE_CHOICE", correct="4", negative=0.5)
        review = score_question(q, "3")
        assert not review.is_correct
        assert review.points_earned == -0.5

    def test_unanswered_costs_nothing(self):
        q = _question("q1", "MULTIPLE_CHOICE", correct="4", negative=0.5)
        review = score_question(q, None)
        assert review.points_earned == 0
        assert review.user_answer is None

    def test_true_false(self):
        q = _question("q1", "TRUE_FALSE", correct=True)
        assert score_question(q, "True").is_correct
        assert not score_question(q, "False").is_correct

    def test_true_false_lowercase_stored_answer(self):
        q = _question("q1", "TRUE_FALSE", correct="true", negative=1)
        review = score_question(q, q.choices[0])
        assert review.is_correct
        assert review.points_earned == 1

        wrong = score_question(q, q.choices[1])
        assert not wrong.is_correct
        assert wrong.points_earned == -1

    def test_short_answer_trimmed_case_insensitive(self):
        q = _question("q1", "SHORT_ANSWER", correct="Paris")
        review = score_question(q, " paris ")
        assert review.is_correct
        assert review.points_earned == 1

    def test_short_answer_wrong_has_no_penalty(self):
        q = _question("q1", "SHORT_ANSWER", correct="Paris", negative=1)
        assert score_question(q, "Lyon").points_earned == 0

    def test_essay_any_text_earns_full_points(self):
        q = _question("q1", "ESSAY", points=5)
        review = score_question(q, "Anything at all")
        assert review.is_correct
        assert review.points_earned == 5

    def test_blank_essay_earns_nothing(self):
        q = _question("q1", "ESSAY", points=5)
        assert score_question(q, "   ").points_earned == 0


class TestScoreAssessment:
    """Test aggregate scoring."""

    def test_half_right_passes_at_fifty(self):
        assessment = _assessment([
            _question("q1", "MULTIPLE_CHOICE", correct="a"),
            _question("q2", "MULTIPLE_CHOICE", correct="b"),
        ], passing_score=50)
        result = score_assessment(assessment, {"q1": "a", "q2": "a"})
        assert result.score == 1
        assert result.total_points == 2
        assert result.percentage == 50
        assert result.passed is True
        assert result.correct_answers == 1
        assert result.total_questions == 2

    def test_below_passing_score(self):
        assessment = _assessment([
            _question("q1", "MULTIPLE_CHOICE", correct="a"),
            _question("q2", "MULTIPLE_CHOICE", correct="b"),
            _question("q3", "MULTIPLE_CHOICE", correct="c"),
        ], passing_score=50)
        result = score_assessment(assessment, {"q1": "a"})
        assert result.percentage == 33
        assert result.passed is False

    def test_percentage_rounds(self):
        assessment = _assessment([
            _question("q1", "MULTIPLE_CHOICE", correct="a"),
            _question("q2", "MULTIPLE_CHOICE", correct="a"),
            _question("q3", "MULTIPLE_CHOICE", correct="a"),
        ])
        result = score_assessment(assessment, {"q1": "a", "q2": "a"})
        assert result.percentage == 67

    def test_no_questions(self):
        result = score_assessment(_assessment([]), {})
        assert result.percentage == 0
        assert result.total_points == 0
        assert result.passed is False

    def test_mixed_weights(self):
        assessment = _assessment([
            _question("q1", "SHORT_ANSWER", correct="Paris", points=2),
            _question("q2", "ESSAY", points=3),
        ], passing_score=70)
        result = score_assessment(assessment, {"q1": "paris", "q2": "Stubs and fakes"}, attempt_id="att-9")
        assert result.score == 5
        assert result.percentage == 100
        assert result.passed
        assert result.attempt_id == "att-9"
        assert [r.question_id for r in result.review] == ["q1", "q2"]

    def test_scoring_is_repeatable(self):
        assessment = _assessment([_question("q1", "MULTIPLE_CHOICE", correct="a")])
        answers = {"q1": "a"}
        assert score_assessment(assessment, answers) == score_assessment(assessment, answers)


class TestPercentageOf:
    def test_zero_total(self):
        assert percentage_of(3, 0) == 0

    def test_negative_score(self):
        assert percentage_of(-1, 4) == -25
