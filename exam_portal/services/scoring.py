# exam_portal/services/scoring.py
from typing import Dict, List, Optional, Sequence
from decimal import Decimal, ROUND_HALF_UP
from pydantic import BaseModel
from ..config import settings
from ..schemas.exam_schemas import Question

GRADE_BOUNDARIES = [
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
]

class GradedAnswer(BaseModel):
    question_id: str
    selected_option_id: str
    is_correct: bool

class GradedAttempt(BaseModel):
    score: int
    correct_count: int
    total_questions: int
    answers: List[GradedAnswer]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, unlike round()."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_score(correct_answers: int, total_questions: int) -> int:
    if total_questions == 0:
        return 0
    return round_half_up(correct_answers / total_questions * 100)


def calculate_percentage(score: float, total: float) -> int:
    if total == 0:
        return 0
    return round_half_up(score / total * 100)


def get_grade(percentage: float) -> str:
    for boundary, grade in GRADE_BOUNDARIES:
        if percentage >= boundary:
            return grade
    return "F"


def is_passing(score: float, pass_mark: Optional[int] = None) -> bool:
    if pass_mark is None:
        pass_mark = settings.pass_mark
    return score >= pass_mark


def correct_count_from_score(score: int, total_questions: int) -> int:
    """Recover the number of correct answers from a stored percentage score."""
    return round_half_up(score / 100 * total_questions)


def grade_attempt(questions: Sequence[Question], selections: Dict[str, str]) -> GradedAttempt:
    """Grade a submission against questions carrying their answer options.

    selections maps question id to the chosen option id. A missing or
    unknown selection counts as incorrect.
    """
    answers = []
    correct_count = 0

    for question in questions:
        selected_option_id = selections.get(question.id) or ""
        selected = next((o for o in question.answer_options if o.id == selected_option_id), None)
        is_correct = bool(selected and selected.is_correct)
        if is_correct:
            correct_count += 1
        answers.append(GradedAnswer(
            question_id=question.id,
            selected_option_id=selected_option_id,
            is_correct=is_correct
        ))

    return GradedAttempt(
        score=calculate_score(correct_count, len(questions)),
        correct_count=correct_count,
        total_questions=len(questions),
        answers=answers
    )
