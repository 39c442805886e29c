import pytest

from exam_portal.config import settings
from exam_portal.schemas.exam_schemas import AnswerOption, Question
from exam_portal.services.scoring import (
    calculate_percentage,
    calculate_score,
    correct_count_from_score,
    get_grade,
    grade_attempt,
    is_passing,
    round_half_up,
)


def question_with_correct(question_id, correct_index=0):
    return Question(
        id=question_id,
        exam_id="e1",
        text=question_id,
        position=0,
        answer_options=[
            AnswerOption(
                id=f"{question_id}-opt{i}",
                question_id=question_id,
                text=str(i),
                is_correct=i == correct_index,
                option_letter="ABCD"[i],
            )
            for i in range(4)
        ],
    )


class TestRounding:
    @pytest.mark.parametrize("value,expected", [(12.5, 13), (0.5, 1), (2.5, 3), (66.66, 67), (74.4, 74)])
    def test_half_rounds_up(self, value, expected):
        assert round_half_up(value) == expected


class TestCalculateScore:
    def test_three_of_four(self):
        assert calculate_score(3, 4) == 75

    def test_zero_questions_scores_zero(self):
        assert calculate_score(0, 0) == 0

    def test_one_of_eight_rounds_half_up(self):
        assert calculate_score(1, 8) == 13

    def test_percentage_with_zero_total(self):
        assert calculate_percentage(5, 0) == 0
        assert calculate_percentage(2, 3) == 67


class TestGrades:
    @pytest.mark.parametrize("percentage,grade", [(100, "A"), (90, "A"), (89, "B"), (80, "B"), (75, "C"), (60, "D"), (59, "F"), (0, "F")])
    def test_boundaries(self, percentage, grade):
        assert get_grade(percentage) == grade

    def test_pass_mark(self):
        assert is_passing(60)
        assert not is_passing(59)
        assert is_passing(50, pass_mark=50)

    def test_default_pass_mark_follows_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "pass_mark", 70)
        assert not is_passing(65)
        assert is_passing(70)

    def test_correct_count_from_score(self):
        assert correct_count_from_score(75, 4) == 3
        assert correct_count_from_score(67, 3) == 2


class TestGradeAttempt:
    def test_three_correct_one_wrong(self):
        questions = [question_with_correct(f"q{i}") for i in range(4)]
        selections = {"q0": "q0-opt0", "q1": "q1-opt0", "q2": "q2-opt0", "q3": "q3-opt2"}

        graded = grade_attempt(questions, selections)

        assert graded.score == 75
        assert graded.correct_count == 3
        assert graded.total_questions == 4
        assert [a.is_correct for a in graded.answers] == [True, True, True, False]

    def test_unanswered_and_unknown_selections_are_wrong(self):
        questions = [question_with_correct("q0"), question_with_correct("q1")]

        graded = grade_attempt(questions, {"q1": "not-an-option"})

        assert graded.score == 0
        assert graded.answers[0].selected_option_id == ""
        assert graded.answers[1].selected_option_id == "not-an-option"
        assert not any(a.is_correct for a in graded.answers)

    def test_no_questions(self):
        graded = grade_attempt([], {})
        assert graded.score == 0
        assert graded.answers == []
