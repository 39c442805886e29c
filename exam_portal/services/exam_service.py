# exam_portal/services/exam_service.py
from typing import Dict, List, Optional
from datetime import datetime, timezone
import logging
import uuid
from ..schemas.exam_schemas import (
    AnswerOption,
    Exam,
    ExamAttempt,
    ExamDraft,
    ExamResultDetail,
    ExamWithQuestions,
    OPTION_LETTERS,
    Question,
    ResultRow,
    Role,
    StudentAnswer,
    User,
)
from .errors import NotAuthenticatedError, PermissionDeniedError
from .record_store import RecordStore
from .scoring import calculate_percentage, get_grade, grade_attempt

logger = logging.getLogger(__name__)

class ExamService:
    def __init__(self, records: RecordStore):
        self.records = records

    @staticmethod
    def _require_role(user: Optional[User], role: Role) -> User:
        if not user:
            raise NotAuthenticatedError()
        if user.role != role:
            raise PermissionDeniedError(f"Only {role.value}s can do this")
        return user

    def _require_owner(self, exam_id: str, teacher: Optional[User]) -> Exam:
        teacher = self._require_role(teacher, Role.TEACHER)
        exam = self.records.require_exam(exam_id)
        if exam.created_by != teacher.id:
            raise PermissionDeniedError("You do not have permission to edit this exam")
        return exam

    def _build_questions(self, exam_id: str, draft: ExamDraft) -> List[Question]:
        """Turn draft questions into stored questions with derived ids.

        Draft questions that carry one of this exam's ids keep it; the others
        get the first `{exam_id}-q{n}` not used by a stored or kept question.
        """
        kept_ids = []
        for q in draft.questions:
            keep = bool(q.id and q.id.startswith(exam_id) and q.id not in kept_ids)
            kept_ids.append(q.id if keep else None)

        taken = {q.id for q in self.records.get_questions(exam_id)}
        taken.update(i for i in kept_ids if i)

        questions = []
        for index, q in enumerate(draft.questions):
            question_id = kept_ids[index]
            if not question_id:
                n = index
                while f"{exam_id}-q{n}" in taken:
                    n += 1
                question_id = f"{exam_id}-q{n}"
                taken.add(question_id)
            options = [
                AnswerOption(
                    id=f"{question_id}-opt{opt_index}",
                    question_id=question_id,
                    text=text,
                    is_correct=q.correct_answer == opt_index,
                    option_letter=OPTION_LETTERS[opt_index]
                )
                for opt_index, text in enumerate(q.options)
            ]
            questions.append(Question(
                id=question_id,
                exam_id=exam_id,
                text=q.text,
                position=index,
                answer_options=options
            ))
        return questions

    def _save_questions(self, questions: List[Question]) -> None:
        self.records.save_questions(questions)
        self.records.replace_answer_options(
            [question.id for question in questions],
            [option for question in questions for option in question.answer_options]
        )

    def create_exam(self, teacher: Optional[User], draft: ExamDraft) -> Exam:
        """Persist a new exam with its questions and answer options."""
        teacher = self._require_role(teacher, Role.TEACHER)
        exam_id = uuid.uuid4().hex
        exam = Exam(
            id=exam_id,
            title=draft.title,
            description=draft.description,
            created_by=teacher.id,
            questions_count=len(draft.questions),
            created_at=datetime.now(timezone.utc)
        )
        exam = self.records.save_exam(exam)
        self._save_questions(self._build_questions(exam_id, draft))

        logger.info(f"Teacher {teacher.id} created exam {exam_id} with {exam.questions_count} questions")
        return exam

    def update_exam(self, exam_id: str, teacher: Optional[User], draft: ExamDraft) -> Exam:
        """Replace an exam's content. Questions dropped from the draft are kept in storage."""
        existing = self._require_owner(exam_id, teacher)
        exam = Exam(
            id=exam_id,
            title=draft.title,
            description=draft.description,
            created_by=existing.created_by,
            questions_count=len(draft.questions),
            created_at=existing.created_at
        )
        exam = self.records.save_exam(exam)
        self._save_questions(self._build_questions(exam_id, draft))

        logger.info(f"Updated exam {exam_id}")
        return exam

    def delete_exam(self, exam_id: str, teacher: Optional[User]) -> None:
        self._require_owner(exam_id, teacher)
        self.records.delete_exam(exam_id)

    def load_exam(self, exam_id: str) -> ExamWithQuestions:
        """Exam with questions in position order and options in letter order."""
        exam = self.records.require_exam(exam_id)
        questions = []
        for q in sorted(self.records.get_questions(exam_id), key=lambda q: q.position):
            options = sorted(self.records.get_answer_options(q.id), key=lambda o: o.option_letter.value)
            questions.append(q.model_copy(update={"answer_options": options}))
        return ExamWithQuestions(**exam.model_dump(), questions=questions)

    def submit_attempt(
        self,
        exam_id: str,
        student: Optional[User],
        selections: Dict[str, str],
        started_at: Optional[datetime] = None
    ) -> ExamAttempt:
        """Grade a submission and store the attempt with one answer per question."""
        student = self._require_role(student, Role.STUDENT)
        exam = self.load_exam(exam_id)
        completed_at = datetime.now(timezone.utc)
        started_at = started_at or completed_at
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=timezone.utc)

        try:
            graded = grade_attempt(exam.questions, selections)

            attempt_id = f"{exam_id}-{student.id}-{uuid.uuid4().hex[:8]}"
            attempt = ExamAttempt(
                id=attempt_id,
                exam_id=exam_id,
                student_id=student.id,
                score=graded.score,
                total_questions=graded.total_questions,
                started_at=started_at,
                completed_at=completed_at,
                time_taken=max(0, int((completed_at - started_at).total_seconds()))
            )
            self.records.save_attempt(attempt)
            self.records.save_answers(
                StudentAnswer(id=f"{attempt_id}-ans{index}", attempt_id=attempt_id, **answer.model_dump())
                for index, answer in enumerate(graded.answers)
            )

            logger.info(f"Student {student.id} scored {attempt.score} on exam {exam_id}")
            return attempt

        except Exception as e:
            logger.error(f"Error submitting attempt for exam {exam_id}: {str(e)}")
            raise

    def get_result(self, attempt_id: str) -> ExamResultDetail:
        attempt = self.records.require_attempt(attempt_id)
        exam = self.records.get_exam(attempt.exam_id)
        answers = self.records.get_answers(attempt_id)

        rows = []
        for q in sorted(self.records.get_questions(attempt.exam_id), key=lambda q: q.position):
            answer = next((a for a in answers if a.question_id == q.id), None)
            options = self.records.get_answer_options(q.id)
            selected = next((o for o in options if answer and o.id == answer.selected_option_id), None)
            correct = next((o for o in options if o.is_correct), None)
            rows.append(ResultRow(
                question=q.text,
                user_answer=f"{selected.option_letter.value}. {selected.text}" if selected else "Not answered",
                correct_answer=f"{correct.option_letter.value}. {correct.text}" if correct else "Unknown",
                is_correct=bool(answer and answer.is_correct)
            ))

        correct_count = sum(1 for a in answers if a.is_correct)
        percentage = calculate_percentage(correct_count, attempt.total_questions)
        return ExamResultDetail(
            attempt=attempt,
            exam_title=exam.title if exam else "Unknown Exam",
            correct_count=correct_count,
            percentage=percentage,
            grade=get_grade(percentage),
            time_taken=attempt.time_taken or 0,
            results=rows
        )
