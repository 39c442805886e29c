# exam_portal/services/record_store.py
from typing import List, Optional, Type, TypeVar, Iterable
from datetime import datetime, timezone
import json
import logging
from pydantic import BaseModel
from ..database.local_storage import LocalStorage
from ..schemas.exam_schemas import Exam, Question, AnswerOption, ExamAttempt, StudentAnswer
from .errors import NotFoundError

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "EXAMS": "exams",
    "QUESTIONS": "questions",
    "ATTEMPTS": "attempts",
    "ANSWERS": "answers",
    "ANSWER_OPTIONS": "answer_options",
}

RecordT = TypeVar("RecordT", bound=BaseModel)

class RecordStore:
    """Entity collections stored as JSON lists, one storage key per type.

    Every call re-reads the collection from storage; every write serializes
    the whole collection back. Records keep insertion order.
    """

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def _load(self, key: str, model: Type[RecordT]) -> List[RecordT]:
        raw = self.storage.get_item(key)
        # Malformed blobs are not recovered; the decode error reaches the caller
        return [model.model_validate(item) for item in json.loads(raw or "[]")]

    def _write(self, key: str, records: Iterable[BaseModel]) -> None:
        payload = [record.model_dump(mode="json") for record in records]
        self.storage.set_item(key, json.dumps(payload))

    @staticmethod
    def _upsert(records: List[RecordT], record: RecordT) -> bool:
        """Replace by id or append. Returns True when an existing record was replaced."""
        for index, existing in enumerate(records):
            if existing.id == record.id:
                records[index] = record
                return True
        records.append(record)
        return False

    def _save_many(self, key: str, model: Type[RecordT], new_records: Iterable[RecordT]) -> None:
        records = self._load(key, model)
        for record in new_records:
            self._upsert(records, record)
        self._write(key, records)

    # Exams

    def get_exams(self, teacher_id: Optional[str] = None) -> List[Exam]:
        exams = self._load(STORAGE_KEYS["EXAMS"], Exam)
        if teacher_id:
            return [e for e in exams if e.created_by == teacher_id]
        return exams

    def get_exam(self, exam_id: str) -> Optional[Exam]:
        return next((e for e in self.get_exams() if e.id == exam_id), None)

    def require_exam(self, exam_id: str) -> Exam:
        exam = self.get_exam(exam_id)
        if not exam:
            raise NotFoundError("Exam not found")
        return exam

    def save_exam(self, exam: Exam) -> Exam:
        exams = self.get_exams()
        if any(e.id == exam.id for e in exams):
            exam = exam.model_copy(update={"updated_at": datetime.now(timezone.utc)})
        self._upsert(exams, exam)
        self._write(STORAGE_KEYS["EXAMS"], exams)
        logger.info(f"Saved exam {exam.id}")
        return exam

    def delete_exam(self, exam_id: str) -> None:
        """Remove an exam together with its questions and attempts.

        Answer options and student answers are left in place.
        """
        exams = [e for e in self.get_exams() if e.id != exam_id]
        self._write(STORAGE_KEYS["EXAMS"], exams)

        questions = [q for q in self.get_questions() if q.exam_id != exam_id]
        self._write(STORAGE_KEYS["QUESTIONS"], questions)

        attempts = [a for a in self.get_attempts() if a.exam_id != exam_id]
        self._write(STORAGE_KEYS["ATTEMPTS"], attempts)
        logger.info(f"Deleted exam {exam_id}")

    # Questions

    def get_questions(self, exam_id: Optional[str] = None) -> List[Question]:
        questions = self._load(STORAGE_KEYS["QUESTIONS"], Question)
        if exam_id:
            return [q for q in questions if q.exam_id == exam_id]
        return questions

    def save_questions(self, questions: Iterable[Question]) -> None:
        self._save_many(STORAGE_KEYS["QUESTIONS"], Question, questions)

    # Answer options

    def get_answer_options(self, question_id: Optional[str] = None) -> List[AnswerOption]:
        options = self._load(STORAGE_KEYS["ANSWER_OPTIONS"], AnswerOption)
        if question_id:
            return [o for o in options if o.question_id == question_id]
        return options

    def save_answer_options(self, options: Iterable[AnswerOption]) -> None:
        self._save_many(STORAGE_KEYS["ANSWER_OPTIONS"], AnswerOption, options)

    def replace_answer_options(self, question_ids: Iterable[str], options: Iterable[AnswerOption]) -> None:
        """Drop every stored option of the given questions, then store the new set."""
        question_ids = set(question_ids)
        kept = [o for o in self.get_answer_options() if o.question_id not in question_ids]
        kept.extend(options)
        self._write(STORAGE_KEYS["ANSWER_OPTIONS"], kept)

    # Attempts

    def get_attempts(self, exam_id: Optional[str] = None) -> List[ExamAttempt]:
        attempts = self._load(STORAGE_KEYS["ATTEMPTS"], ExamAttempt)
        if exam_id:
            return [a for a in attempts if a.exam_id == exam_id]
        return attempts

    def get_attempt(self, attempt_id: str) -> Optional[ExamAttempt]:
        return next((a for a in self.get_attempts() if a.id == attempt_id), None)

    def require_attempt(self, attempt_id: str) -> ExamAttempt:
        attempt = self.get_attempt(attempt_id)
        if not attempt:
            raise NotFoundError("Result not found")
        return attempt

    def save_attempt(self, attempt: ExamAttempt) -> None:
        attempts = self.get_attempts()
        self._upsert(attempts, attempt)
        self._write(STORAGE_KEYS["ATTEMPTS"], attempts)

    # Student answers

    def get_answers(self, attempt_id: Optional[str] = None) -> List[StudentAnswer]:
        answers = self._load(STORAGE_KEYS["ANSWERS"], StudentAnswer)
        if attempt_id:
            return [a for a in answers if a.attempt_id == attempt_id]
        return answers

    def save_answer(self, answer: StudentAnswer) -> None:
        answers = self.get_answers()
        self._upsert(answers, answer)
        self._write(STORAGE_KEYS["ANSWERS"], answers)

    def save_answers(self, answers: Iterable[StudentAnswer]) -> None:
        self._save_many(STORAGE_KEYS["ANSWERS"], StudentAnswer, answers)

    def get_total_students(self) -> int:
        return len({a.student_id for a in self.get_attempts()})
